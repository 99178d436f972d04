"""
docxblocks - DOCX template processing beyond placeholder replacement.

Features:
- ${name} placeholder substitution in the main part, headers and footers
- Block cloning: repeat the paragraphs between ${name} and ${/name}
- Row splicing: repeat one paragraph per value
- Image injection with bounding-box scaling and package registration
- Wingdings check marks

Quick Start:
    from docxblocks import TemplateProcessor

    template = TemplateProcessor("invoice.docx")
    template.clone_block("item", 3)
    template.set_value("item#1", "First")
    template.set_image("logo", "logo.png", max_width=120, max_height=60)
    template.save_as("out.docx")
"""

__version__ = "0.3.0"

from .exceptions import (
    DocxBlocksError,
    PackageError,
    TemplateVariableNotFound,
    TemplateStructureError,
    UnsupportedImageError,
    IdentifierCollisionError,
    ConfigError,
)
from .config import TemplateConfig, DEFAULT_CONFIG, load_config
from .engine import BaseTemplateProcessor, TemplateProcessor, BlockMatch, IdGenerator
from .media import ImageDescriptor, scale_dimensions
from .parser import PackageReader, RelationshipsParser

__all__ = [
    "__version__",
    "DocxBlocksError",
    "PackageError",
    "TemplateVariableNotFound",
    "TemplateStructureError",
    "UnsupportedImageError",
    "IdentifierCollisionError",
    "ConfigError",
    "TemplateConfig",
    "DEFAULT_CONFIG",
    "load_config",
    "BaseTemplateProcessor",
    "TemplateProcessor",
    "BlockMatch",
    "IdGenerator",
    "ImageDescriptor",
    "scale_dimensions",
    "PackageReader",
    "RelationshipsParser",
]
