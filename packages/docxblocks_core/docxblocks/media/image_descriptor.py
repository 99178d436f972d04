"""
Image descriptors for template image injection.

Probes raster images with Pillow, applies the bounding-box scaling policy
and builds the three XML fragments that have to be spliced into the main
part, the relationship manifest and the content-types manifest.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple, Union
import logging

from PIL import Image as PILImage, UnidentifiedImageError

from ..exceptions import UnsupportedImageError
from ..utils.xml_utils import IMAGE_RELATIONSHIP_TYPE, escape_attribute, format_number

logger = logging.getLogger(__name__)

# extension -> MIME type
IMAGE_MIME_TYPES: Dict[str, str] = {
    'jpg': 'image/jpeg',
    'jpeg': 'image/jpeg',
    'gif': 'image/gif',
    'png': 'image/png',
}

# extension -> Pillow format name
PIL_FORMATS: Dict[str, str] = {
    'jpg': 'JPEG',
    'jpeg': 'JPEG',
    'gif': 'GIF',
    'png': 'PNG',
}

VML_IMAGE_TEMPLATE = (
    '<w:pict><v:shape id="{xml_id}" type="#_x0000_t75" style="width:{width}pt;height:{height}pt">'
    '<v:imagedata r:id="{rels_id}" o:title="{title}"/></v:shape></w:pict>'
)
RELATIONSHIP_TEMPLATE = '<Relationship Id="{rels_id}" Type="{type}" Target="media/{media}"/>'
CONTENT_TYPE_TEMPLATE = '<Default Extension="{extension}" ContentType="{mime_type}"/>'


@dataclass
class ImageDescriptor:
    """Everything needed to splice one image into a DOCX package."""
    source: Path
    extension: str
    mime_type: str
    width: float
    height: float
    xml_id: str
    rels_id: str
    title: str = "Image"

    @property
    def media(self) -> str:
        """Archive filename under the media folder."""
        return f"image{self.rels_id}.{self.extension}"

    @property
    def xml_image(self) -> str:
        return VML_IMAGE_TEMPLATE.format(
            xml_id=self.xml_id,
            width=format_number(self.width),
            height=format_number(self.height),
            rels_id=self.rels_id,
            title=escape_attribute(self.title),
        )

    @property
    def xml_rel(self) -> str:
        return RELATIONSHIP_TEMPLATE.format(
            rels_id=self.rels_id,
            type=IMAGE_RELATIONSHIP_TYPE,
            media=self.media,
        )

    @property
    def xml_type(self) -> str:
        return CONTENT_TYPE_TEMPLATE.format(extension=self.extension, mime_type=self.mime_type)


def infer_extension(file_path: Union[str, Path]) -> str:
    """Lower-case suffix without the dot ('' when there is none)."""
    return Path(file_path).suffix.lstrip('.').lower()


def mime_type_for(extension: str) -> str:
    """MIME type for a supported extension ('' when unsupported)."""
    return IMAGE_MIME_TYPES.get(extension.lower(), '')


def read_image_size(file_path: Union[str, Path], extension: str) -> Tuple[int, int]:
    """
    Decode an image and return its native pixel size.

    Args:
        file_path: Image file
        extension: Declared extension, decides which format is accepted

    Returns:
        (width, height) in pixels

    Raises:
        UnsupportedImageError: Unknown extension or unreadable image
    """
    expected = PIL_FORMATS.get(extension.lower())
    if expected is None:
        raise UnsupportedImageError(
            f"Unsupported image extension '{extension}'",
            f"supported: {', '.join(sorted(IMAGE_MIME_TYPES))}",
        )

    try:
        with PILImage.open(file_path) as img:
            size = img.size
            actual = img.format
    except FileNotFoundError as e:
        raise UnsupportedImageError("Image file not found", str(file_path)) from e
    except (UnidentifiedImageError, OSError) as e:
        raise UnsupportedImageError("Unsupported or unreadable image", str(file_path)) from e

    if actual != expected:
        raise UnsupportedImageError(
            "Unsupported or unreadable image",
            f"{file_path} is {actual}, expected {expected} for .{extension}",
        )
    logger.debug(f"Image {file_path}: {size[0]}x{size[1]} px ({actual})")
    return size


def scale_dimensions(
    width: float,
    height: float,
    max_width: Optional[float] = None,
    max_height: Optional[float] = None,
) -> Tuple[float, float]:
    """
    Fit an image into a bounding box along its dominant axis.

    Scaling only happens when both bounds are given and the larger of the
    two dimensions overflows its own bound. Square images and images whose
    overflowing axis is the smaller one are left as they are.
    """
    if not (max_width and max_height):
        return width, height

    if width > max_width and width > height:
        ratio = width / max_width
    elif height > max_height and height > width:
        ratio = height / max_height
    else:
        ratio = 1
    return width / ratio, height / ratio
