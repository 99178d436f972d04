"""Custom exceptions for docxblocks."""

from typing import Optional


class DocxBlocksError(Exception):
    """Base exception for docxblocks errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class PackageError(DocxBlocksError):
    """Exception raised when the DOCX archive is missing, unreadable or incomplete."""

    pass


class TemplateVariableNotFound(DocxBlocksError):
    """Exception raised when a placeholder is not present in the document."""

    def __init__(self, variable: str, details: Optional[str] = None):
        super().__init__(
            f"Template variable {variable} not found or variable contains markup",
            details,
        )
        self.variable = variable


class TemplateStructureError(DocxBlocksError):
    """Exception raised when paragraph boundaries cannot be located."""

    pass


class UnsupportedImageError(DocxBlocksError):
    """Exception raised for unrecognized or undecodable images."""

    pass


class IdentifierCollisionError(DocxBlocksError):
    """Exception raised when no free identifier could be generated."""

    pass


class ConfigError(DocxBlocksError):
    """Exception raised for invalid configuration."""

    pass
