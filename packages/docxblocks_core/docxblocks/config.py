"""
Configuration for docxblocks template processing.

Centralizes part names, identifier ranges and other defaults used by the
template processors. Values can be overridden by:
1. Passing a TemplateConfig to the processor constructor
2. A JSON file loaded with load_config() (CLI --config)
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields, asdict
from pathlib import Path
from typing import Any, Dict, Tuple, Union

from .exceptions import ConfigError


@dataclass(frozen=True)
class TemplateConfig:
    """Default configuration values for template processing."""

    # === Package parts ===
    main_part_name: str = "word/document.xml"
    rels_part_name: str = "word/_rels/document.xml.rels"
    content_types_part_name: str = "[Content_Types].xml"
    media_folder: str = "word/media/"

    # === Identifier generation ===
    xml_id_prefix: str = "_x0000_i"
    xml_id_range: Tuple[int, int] = (1000, 9999)
    rels_id_prefix: str = "rId"
    rels_id_range: Tuple[int, int] = (50, 1000)
    max_id_attempts: int = 100

    # === Substitution ===
    output_escaping: bool = False  # XML-escape values passed to set_value()
    default_image_title: str = "Image"

    def __post_init__(self) -> None:
        for name in ("xml_id_range", "rels_id_range"):
            low, high = getattr(self, name)
            if low > high:
                raise ConfigError(f"Invalid {name}", f"{low} > {high}")
        if self.max_id_attempts < 1:
            raise ConfigError("max_id_attempts must be at least 1")
        if not self.media_folder.endswith("/"):
            raise ConfigError("media_folder must end with '/'", self.media_folder)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TemplateConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError("Unknown configuration keys", ", ".join(unknown))

        values = dict(data)
        for name in ("xml_id_range", "rels_id_range"):
            if name in values:
                try:
                    low, high = values[name]
                    values[name] = (int(low), int(high))
                except (TypeError, ValueError) as e:
                    raise ConfigError(f"{name} must be a pair of integers", str(e)) from e
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config(path: Union[str, Path]) -> TemplateConfig:
    """Load a TemplateConfig from a JSON file."""
    config_path = Path(path)
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f) or {}
    except OSError as e:
        raise ConfigError(f"Cannot read config file {config_path}", str(e)) from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in config file {config_path}", str(e)) from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a JSON object")
    return TemplateConfig.from_dict(data)


# Global default config instance
DEFAULT_CONFIG = TemplateConfig()
