"""
Base template processor - scalar ${name} substitution on a DOCX package.

Loads the package through PackageReader, keeps the main document part and
the header/footer parts as string buffers, and writes a new archive on
save. TemplateProcessor builds block, row and image operations on top.
"""

from __future__ import annotations

import re
import tempfile
import zipfile
from pathlib import Path
from typing import Dict, List, Optional, Union
import logging

from ..config import TemplateConfig, DEFAULT_CONFIG
from ..exceptions import PackageError
from ..parser.package_reader import PackageReader
from ..utils.xml_utils import MACRO_PATTERN, ensure_macro, escape_xml, fix_broken_macros

logger = logging.getLogger(__name__)

HEADER_PART = re.compile(r'^word/header\d*\.xml$')
FOOTER_PART = re.compile(r'^word/footer\d*\.xml$')


class BaseTemplateProcessor:
    """

    Template engine for ${name} placeholders in a DOCX package.

    All archive entries are read into memory in the constructor and the
    archive is closed before it returns. Buffers are written back by save().

    """

    def __init__(self, document_template: Union[str, Path], config: Optional[TemplateConfig] = None):
        """

        Opens a DOCX template.

        Args:
        document_template: Path to the .docx template
        config: Processing configuration (DEFAULT_CONFIG if None)

        Raises:
        PackageError: If the template is missing, not a ZIP, or lacks the main part

        """
        self.config = config or DEFAULT_CONFIG
        self.template_path = Path(document_template)

        with PackageReader(self.template_path) as reader:
            self._parts: Dict[str, bytes] = reader.get_parts()
            self._compression: Dict[str, int] = {
                name: reader.get_compression(name) for name in self._parts
            }

        main_name = self.config.main_part_name
        if main_name not in self._parts:
            raise PackageError("Main document part not found", f"{main_name} in {self.template_path}")

        self.main_part: str = fix_broken_macros(self._read_text(main_name))
        self.headers: Dict[str, str] = {
            name: fix_broken_macros(self._read_text(name))
            for name in self._parts if HEADER_PART.match(name)
        }
        self.footers: Dict[str, str] = {
            name: fix_broken_macros(self._read_text(name))
            for name in self._parts if FOOTER_PART.match(name)
        }
        logger.debug(
            f"Template {self.template_path.name}: {len(self._parts)} parts, "
            f"{len(self.headers)} headers, {len(self.footers)} footers"
        )

    def _read_text(self, entry_name: str) -> str:
        return self._parts[entry_name].decode('utf-8')

    # --- archive access -------------------------------------------------

    def get_entry(self, entry_name: str) -> bytes:
        """Raw bytes of an archive entry as currently staged."""
        if entry_name not in self._parts:
            raise KeyError(f"Part not found: {entry_name}")
        return self._parts[entry_name]

    def has_entry(self, entry_name: str) -> bool:
        return entry_name in self._parts

    def add_file(self, source_path: Union[str, Path], entry_name: str) -> None:
        """Embed a file's bytes under entry_name."""
        with open(source_path, 'rb') as f:
            self._parts[entry_name] = f.read()
        logger.debug(f"Added file {source_path} as {entry_name}")

    def add_from_string(self, entry_name: str, content: Union[str, bytes]) -> None:
        """Stage content for entry_name (replaces an existing entry)."""
        if isinstance(content, str):
            content = content.encode('utf-8')
        self._parts[entry_name] = content

    # --- scalar substitution --------------------------------------------

    def set_value(self, search: str, replace: object, limit: Optional[int] = None) -> None:
        """

        Replaces a ${search} placeholder in headers, main part and footers.

        Args:
        search: Variable name, with or without ${ }
        replace: Replacement value (str() is applied)
        limit: Maximum replacements per part (all if None)

        """
        value = str(replace)
        if self.config.output_escaping:
            value = escape_xml(value)
        self._replace(ensure_macro(search), value, limit)

    def _replace(self, macro: str, value: str, limit: Optional[int] = None) -> None:
        count = -1 if limit is None else limit
        self.headers = {name: xml.replace(macro, value, count) for name, xml in self.headers.items()}
        self.main_part = self.main_part.replace(macro, value, count)
        self.footers = {name: xml.replace(macro, value, count) for name, xml in self.footers.items()}

    def get_variables(self) -> List[str]:
        """Placeholder names in document order, each listed once."""
        found: List[str] = []
        for xml in [*self.headers.values(), self.main_part, *self.footers.values()]:
            for match in MACRO_PATTERN.finditer(xml):
                name = match.group(1)
                if name not in found:
                    found.append(name)
        return found

    # --- output ---------------------------------------------------------

    def _stage_buffers(self) -> None:
        self.add_from_string(self.config.main_part_name, self.main_part)
        for name, xml in {**self.headers, **self.footers}.items():
            self.add_from_string(name, xml)

    def save(self, output_path: Optional[Union[str, Path]] = None) -> Path:
        """

        Writes the processed document.

        Args:
        output_path: Target .docx path; a new temporary file if None

        Returns:
        Path of the written document

        """
        if output_path is None:
            with tempfile.NamedTemporaryFile(prefix="docxblocks_", suffix=".docx", delete=False) as tmp:
                output_path = tmp.name
        output_path = Path(output_path)

        self._stage_buffers()
        with zipfile.ZipFile(output_path, 'w', zipfile.ZIP_DEFLATED) as zip_file:
            for entry_name, content in self._parts.items():
                compress_type = self._compression.get(entry_name, zipfile.ZIP_DEFLATED)
                zip_file.writestr(entry_name, content, compress_type=compress_type)

        logger.info(f"Saved document: {output_path}")
        return output_path

    def save_as(self, file_name: Union[str, Path]) -> Path:
        return self.save(file_name)
