"""
Parser module for DOCX packages.

Reads the ZIP container and the package manifests (content types and
relationships) that the template processors keep in sync.
"""

from .package_reader import PackageReader
from .relationships_parser import RelationshipsParser

__all__ = [
    "PackageReader",
    "RelationshipsParser",
]
