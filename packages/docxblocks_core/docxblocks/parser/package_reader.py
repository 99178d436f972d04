"""
Package reader for DOCX files.

Handles DOCX archive opening, part access, content types and relationships.
"""

import zipfile
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, List, Optional, Union
import logging

from ..exceptions import PackageError
from ..utils.xml_utils import NAMESPACES
from .relationships_parser import RelationshipsParser

logger = logging.getLogger(__name__)


class PackageReader:
    """
    Reads and manages DOCX package contents.

    All parts are loaded into memory when the package is opened, so the
    reader can be closed right away while its content stays available.
    """

    def __init__(self, docx_path: Union[str, Path]):
        """
        Initialize package reader.

        Args:
            docx_path: Path to DOCX file

        Raises:
            PackageError: If the file does not exist or is not a ZIP archive
        """
        self.docx_path = Path(docx_path)

        self._zip_file: Optional[zipfile.ZipFile] = None
        self._parts: Dict[str, bytes] = {}
        self._compression: Dict[str, int] = {}
        self._content_types: Dict[str, str] = {}
        self._relationships: Dict[str, Dict[str, Dict[str, str]]] = {}
        self._closed: bool = False

        self._open_package()
        try:
            self._load_parts()
            self._parse_content_types()
            self._parse_relationships()
        except BaseException:
            self.close()
            raise

    @property
    def zip_file(self) -> Optional[zipfile.ZipFile]:
        """Get ZIP file object (None once closed)."""
        return None if self._closed else self._zip_file

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def content_types(self) -> Dict[str, str]:
        return self._content_types

    @property
    def relationships(self) -> Dict[str, Dict[str, Dict[str, str]]]:
        return self._relationships

    def _open_package(self):
        """Open DOCX package as ZIP file."""
        if not self.docx_path.exists():
            raise PackageError("DOCX file not found", str(self.docx_path))
        try:
            self._zip_file = zipfile.ZipFile(self.docx_path, 'r')
        except zipfile.BadZipFile as e:
            raise PackageError("Not a DOCX (ZIP) package", str(self.docx_path)) from e
        logger.info(f"Opened DOCX package: {self.docx_path}")

    def _load_parts(self):
        """Read every archive entry, keeping archive order."""
        for file_info in self._zip_file.infolist():
            if file_info.is_dir():
                continue
            self._parts[file_info.filename] = self._zip_file.read(file_info.filename)
            self._compression[file_info.filename] = file_info.compress_type
        logger.debug(f"Loaded {len(self._parts)} parts from {self.docx_path}")

    def _parse_content_types(self):
        """Parse [Content_Types].xml to understand file types."""
        content_types_xml = self.get_xml_if_exists("[Content_Types].xml")
        if not content_types_xml:
            logger.warning(f"No [Content_Types].xml in {self.docx_path}")
            return

        try:
            root = ET.fromstring(content_types_xml)
        except ET.ParseError as e:
            raise PackageError("Invalid [Content_Types].xml", str(e)) from e

        ns = NAMESPACES['ct']
        for override in root.findall(f"{{{ns}}}Override"):
            part_name = override.get("PartName", "")
            content_type = override.get("ContentType", "")
            if part_name and content_type:
                self._content_types[part_name] = content_type

        for default in root.findall(f"{{{ns}}}Default"):
            extension = default.get("Extension", "")
            content_type = default.get("ContentType", "")
            if extension and content_type:
                self._content_types[f"*.{extension.lower()}"] = content_type

        logger.debug(f"Parsed {len(self._content_types)} content types")

    def _parse_relationships(self):
        """Parse every .rels part, keyed by rels part name."""
        parser = RelationshipsParser()
        for part_name in self._parts:
            if part_name.endswith('.rels'):
                self._relationships[part_name] = parser.parse_relationships(
                    self.get_xml_content(part_name)
                )
        logger.debug(f"Parsed {len(self._relationships)} relationship files")

    def get_part_names(self) -> List[str]:
        """Get all part names in archive order."""
        return list(self._parts)

    def has_part(self, part_name: str) -> bool:
        return part_name in self._parts

    def get_parts(self) -> Dict[str, bytes]:
        """Get a copy of all parts (name -> raw bytes) in archive order."""
        return dict(self._parts)

    def get_compression(self, part_name: str) -> int:
        return self._compression.get(part_name, zipfile.ZIP_DEFLATED)

    def get_xml_content(self, part_name: str) -> str:
        """
        Get XML content for a given part name.

        Args:
            part_name: Name of the part to retrieve

        Returns:
            XML content as string

        Raises:
            KeyError: If the part does not exist
        """
        if part_name not in self._parts:
            raise KeyError(f"Part not found: {part_name}")
        return self._parts[part_name].decode('utf-8')

    def get_xml_if_exists(self, part_name: str) -> Optional[str]:
        """Get XML content if it exists (returns None instead of raising KeyError)."""
        try:
            return self.get_xml_content(part_name)
        except KeyError:
            return None

    def get_binary_content(self, part_name: str) -> Optional[bytes]:
        """Get binary content for a given part name, or None if not found."""
        content = self._parts.get(part_name)
        if content is None:
            logger.warning(f"Part not found: {part_name}")
        return content

    def get_media_files(self) -> List[str]:
        """Get list of all media files in the document."""
        return [name for name in self._parts if name.startswith('word/media/')]

    def get_content_types(self) -> Dict[str, str]:
        """Get content types mapping."""
        return self._content_types.copy()

    def get_relationships(self, rels_part: str = "word/_rels/document.xml.rels") -> Dict[str, Dict[str, str]]:
        """
        Get relationships stored in a .rels part.

        Args:
            rels_part: Name of the .rels part

        Returns:
            Dictionary of relationships keyed by relationship id
        """
        return self._relationships.get(rels_part, {})

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        """Close the package reader."""
        if self._zip_file and not self._closed:
            self._zip_file.close()
            logger.debug(f"Package reader closed: {self.docx_path}")
        self._closed = True
