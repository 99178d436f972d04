"""
Utils module for docxblocks.

Logging setup and XML string helpers shared by the parsers and engines.
"""

from .logger import get_logger, setup_logging
from .xml_utils import (
    NAMESPACES,
    W_NS,
    IMAGE_RELATIONSHIP_TYPE,
    MACRO_PATTERN,
    ensure_macro,
    escape_xml,
    escape_attribute,
    fix_broken_macros,
    format_number,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "NAMESPACES",
    "W_NS",
    "IMAGE_RELATIONSHIP_TYPE",
    "MACRO_PATTERN",
    "ensure_macro",
    "escape_xml",
    "escape_attribute",
    "fix_broken_macros",
    "format_number",
]
