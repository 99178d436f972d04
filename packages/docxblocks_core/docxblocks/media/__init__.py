"""
Media module for image injection.

Image probing, scaling and the XML fragments that register an image in a
DOCX package.
"""

from .image_descriptor import (
    ImageDescriptor,
    IMAGE_MIME_TYPES,
    infer_extension,
    mime_type_for,
    read_image_size,
    scale_dimensions,
)

__all__ = [
    "ImageDescriptor",
    "IMAGE_MIME_TYPES",
    "infer_extension",
    "mime_type_for",
    "read_image_size",
    "scale_dimensions",
]
