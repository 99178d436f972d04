"""
Identifier generation for injected package content.

Random ids are drawn from a configurable range and rejected while the
target buffer already contains them. The random source is injectable so
tests can run deterministically.
"""

from __future__ import annotations

import random
from typing import Optional, Tuple
import logging

from ..config import TemplateConfig, DEFAULT_CONFIG
from ..exceptions import IdentifierCollisionError

logger = logging.getLogger(__name__)


class IdGenerator:
    """Generate-and-verify ids for VML shapes and package relationships."""

    def __init__(self, rng: Optional[random.Random] = None,
                 config: Optional[TemplateConfig] = None,
                 max_attempts: Optional[int] = None):
        self.config = config or DEFAULT_CONFIG
        self.rng = rng or random.Random()
        self.max_attempts = max_attempts or self.config.max_id_attempts

    def xml_id(self, haystack: str) -> str:
        """Shape id (e.g. "_x0000_i4821") not present in the main part buffer."""
        return self.generate(self.config.xml_id_prefix, self.config.xml_id_range, haystack)

    def relationship_id(self, haystack: str) -> str:
        """Relationship id (e.g. "rId137") not present in the relationship manifest."""
        return self.generate(self.config.rels_id_prefix, self.config.rels_id_range, haystack)

    def generate(self, prefix: str, id_range: Tuple[int, int], haystack: str) -> str:
        low, high = id_range
        for attempt in range(1, self.max_attempts + 1):
            candidate = f"{prefix}{self.rng.randint(low, high)}"
            if candidate not in haystack:
                return candidate
            logger.debug(f"Id {candidate} already used (attempt {attempt})")

        raise IdentifierCollisionError(
            f"No free identifier with prefix '{prefix}'",
            f"{self.max_attempts} attempts in range {low}-{high}",
        )
