"""
Template processor - block cloning, image injection and row splicing.

Extends the base engine with operations that work on the raw serialized
main part and keep the relationship and content-type manifests consistent
with it.
"""

from __future__ import annotations

import random
import re
from pathlib import Path
from typing import Any, Optional, Sequence, Union
import logging

from ..config import TemplateConfig
from ..exceptions import PackageError, TemplateStructureError, TemplateVariableNotFound
from ..media.image_descriptor import (
    ImageDescriptor,
    infer_extension,
    mime_type_for,
    read_image_size,
    scale_dimensions,
)
from ..utils.xml_utils import ensure_macro
from .block_locator import BlockMatch, locate_block, suffix_macros
from .id_generator import IdGenerator
from .template_base import BaseTemplateProcessor

logger = logging.getLogger(__name__)

EMPTY_RELATIONSHIPS = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
    '<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships"></Relationships>'
)

# <w:t><w:pict> left behind when an image fragment replaces a whole w:t body
PICT_OPEN_IN_TEXT = re.compile(r'<w:t(?:\s[^>]*)?><w:pict>')
PICT_CLOSE_IN_TEXT = '</w:pict></w:t>'


class TemplateProcessor(BaseTemplateProcessor):
    """

    DOCX template processor with block, image and row operations.

    Not thread-safe: use one processor per document.

    """

    # Wingdings symbols: empty box and crossed box
    SIGN_BLOCK = '<w:sym w:font="Wingdings" w:char="F06F"/>'
    SIGN_EX = '<w:sym w:font="Wingdings 2" w:char="00D0"/>'

    def __init__(self, document_template: Union[str, Path],
                 config: Optional[TemplateConfig] = None,
                 rng: Optional[random.Random] = None):
        """

        Opens a DOCX template.

        Args:
        document_template: Path to the .docx template
        config: Processing configuration
        rng: Random source for id generation (a fresh Random if None)

        """
        super().__init__(document_template, config)
        self.ids = IdGenerator(rng=rng, config=self.config)

        rels = self._parts.get(self.config.rels_part_name)
        if rels is None:
            logger.warning(f"{self.config.rels_part_name} missing, starting an empty manifest")
            self.document_rels = EMPTY_RELATIONSHIPS
        else:
            self.document_rels = rels.decode('utf-8')

        content_types = self._parts.get(self.config.content_types_part_name)
        if content_types is None:
            raise PackageError("Content types part not found", self.config.content_types_part_name)
        self.content_types = content_types.decode('utf-8')

    # --- blocks ---------------------------------------------------------

    def clone_block(self, block_name: str, clones: int = 1, replace: bool = True) -> Optional[str]:
        """

        Repeats the paragraphs between ${block_name} and ${/block_name}.

        Each copy i gets its placeholders renamed ${x} -> ${x#i}; the marker
        paragraphs themselves are dropped.

        Args:
        block_name: Block name
        clones: Number of copies
        replace: Write the copies into the document (False only returns the block)

        Returns:
        Block body before renaming, or None if the block was not found

        """
        located = locate_block(self.main_part, block_name)
        if located is None:
            return None

        body = located.match.body
        if replace:
            cloned = ''.join(suffix_macros(body, i) for i in range(1, clones + 1))
            self.main_part = located.replace(cloned)
            logger.debug(f"Block '{block_name}' cloned {clones} time(s)")
        return body

    def get_block(self, block_name: str) -> Optional[BlockMatch]:
        """Begin paragraph, body and end paragraph of a block, without changing the document."""
        located = locate_block(self.main_part, block_name)
        return located.match if located else None

    def delete_block(self, block_name: str) -> bool:
        """Removes a block together with its marker paragraphs."""
        return self.clone_block(block_name, 0) is not None

    # --- rows -----------------------------------------------------------

    def set_value_break_line(self, search: str, clones: Union[Any, Sequence[Any]]) -> None:
        """

        Repeats the paragraph holding a placeholder, once per value.

        Args:
        search: Variable name, with or without ${ }
        clones: Value or list of values; one paragraph is written per value

        Raises:
        TemplateVariableNotFound: If the placeholder is not in the document
        TemplateStructureError: If the enclosing paragraph can not be found

        """
        if not isinstance(clones, (list, tuple)):
            clones = [clones]
        search = ensure_macro(search)

        tag_pos = self.main_part.find(search)
        if tag_pos == -1:
            raise TemplateVariableNotFound(search)

        row_start = self._find_paragraph_start(tag_pos)
        row_end = self._find_paragraph_end(tag_pos)
        xml_row = self.main_part[row_start:row_end]

        rows = ''.join(
            xml_row.replace(search, str(clone).replace('&', '&amp;'))
            for clone in clones
        )
        self.main_part = self.main_part[:row_start] + rows + self.main_part[row_end:]

    def _find_paragraph_start(self, offset: int) -> int:
        """Start of the nearest paragraph opening at or before offset."""
        row_start = max(
            self.main_part.rfind('<w:p ', 0, offset),
            self.main_part.rfind('<w:p>', 0, offset),
        )
        if row_start == -1:
            raise TemplateStructureError('Can not find the start position of the paragraph to clone')
        return row_start

    def _find_paragraph_end(self, offset: int) -> int:
        """End (exclusive) of the nearest paragraph closing at or after offset."""
        row_end = self.main_part.find('</w:p>', offset)
        if row_end == -1:
            raise TemplateStructureError('Can not find the end position of the paragraph to clone')
        return row_end + len('</w:p>')

    # --- check marks ----------------------------------------------------

    def set_checkbox(self, search: str, checked: bool = True) -> None:
        """Replaces a placeholder with an empty or crossed Wingdings box."""
        symbol = self.SIGN_EX if checked else self.SIGN_BLOCK
        self._replace(ensure_macro(search), '</w:t>' + symbol + '<w:t xml:space="preserve">')

    # --- images ---------------------------------------------------------

    def get_image_properties(
        self,
        file_path: Union[str, Path],
        name: Optional[str] = None,
        extension: Optional[str] = None,
        mime_type: Optional[str] = None,
        max_width: Optional[float] = None,
        max_height: Optional[float] = None,
    ) -> ImageDescriptor:
        """

        Builds the descriptor of an image to inject.

        Args:
        file_path: JPEG, GIF or PNG file
        name: Shape title
        extension: Overrides the file suffix
        mime_type: Overrides the MIME type derived from the extension
        max_width: Bounding box width (points)
        max_height: Bounding box height (points)

        Raises:
        UnsupportedImageError: Unknown extension or unreadable image
        IdentifierCollisionError: No free shape or relationship id

        """
        extension = (extension or infer_extension(file_path)).lstrip('.').lower()
        width, height = read_image_size(file_path, extension)
        width, height = scale_dimensions(width, height, max_width, max_height)

        return ImageDescriptor(
            source=Path(file_path),
            extension=extension,
            mime_type=mime_type or mime_type_for(extension),
            width=width,
            height=height,
            xml_id=self.ids.xml_id(self.main_part),
            rels_id=self.ids.relationship_id(self.document_rels),
            title=name or self.config.default_image_title,
        )

    def set_image(
        self,
        block_name: str,
        file_path: Union[str, Path],
        name: Optional[str] = None,
        extension: Optional[str] = None,
        mime_type: Optional[str] = None,
        max_width: Optional[float] = None,
        max_height: Optional[float] = None,
    ) -> None:
        """

        Replaces a placeholder with an image.

        The image is stored as word/media/image<rId>.<ext>, registered in the
        relationship manifest and, for a new extension, in the content types.

        When ${block_name} is not in the main part the call is skipped: a
        warning is logged, no exception is raised and nothing is stored or
        registered (the image file is not even read).

        """
        macro = ensure_macro(block_name)
        if macro not in self.main_part:
            logger.warning(f"Image placeholder {macro} not found, image {file_path} skipped")
            return

        image = self.get_image_properties(file_path, name, extension, mime_type, max_width, max_height)

        self.add_file(file_path, self.config.media_folder + image.media)
        self.main_part = self.main_part.replace(macro, image.xml_image)
        self.document_rels = self.document_rels.replace(
            '</Relationships>', image.xml_rel + '</Relationships>'
        )
        if not self._has_default_content_type(image.extension):
            self.content_types = self.content_types.replace('</Types>', image.xml_type + '</Types>')
        logger.debug(
            f"Image {image.media} ({image.width:g}x{image.height:g}pt) set for {macro}"
        )

    def _has_default_content_type(self, extension: str) -> bool:
        pattern = r'<Default\s[^>]*Extension="%s"' % re.escape(extension)
        return re.search(pattern, self.content_types, re.IGNORECASE) is not None

    # --- output ---------------------------------------------------------

    def save(self, output_path: Optional[Union[str, Path]] = None) -> Path:
        """Unwraps images from text runs, flushes the manifests and writes the document."""
        self.main_part = PICT_OPEN_IN_TEXT.sub('<w:pict>', self.main_part)
        self.main_part = self.main_part.replace(PICT_CLOSE_IN_TEXT, '</w:pict>')

        self.add_from_string(self.config.rels_part_name, self.document_rels)
        self.add_from_string(self.config.content_types_part_name, self.content_types)
        return super().save(output_path)
