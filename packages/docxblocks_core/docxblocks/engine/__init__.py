"""
Engine module for DOCX template processing.

Scalar substitution, block cloning, row splicing, image injection and the
identifier generator they share.
"""

from .template_base import BaseTemplateProcessor
from .template_processor import TemplateProcessor
from .block_locator import BlockMatch, LocatedBlock, locate_block
from .id_generator import IdGenerator

__all__ = [
    "BaseTemplateProcessor",
    "TemplateProcessor",
    "BlockMatch",
    "LocatedBlock",
    "locate_block",
    "IdGenerator",
]
