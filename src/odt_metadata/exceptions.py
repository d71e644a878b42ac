"""Custom exceptions for archive, document and metadata operations."""

from pathlib import Path


class OdtMetadataError(Exception):
    """Base exception for all odt-metadata errors."""

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


class ArchiveError(OdtMetadataError):
    """Raised when an archive cannot be read, written or safely extracted."""

    def __init__(self, message: str, path: Path | str | None = None, *args, **kwargs):
        self.path = path
        super().__init__(message, *args, **kwargs)


class DocumentError(OdtMetadataError):
    """Base exception for failures loading or saving an XML document."""

    def __init__(self, message: str, path: Path | str | None = None, *args, **kwargs):
        self.path = path
        super().__init__(message, *args, **kwargs)


class DocumentIOError(DocumentError):
    """Raised when an XML document cannot be read from or written to disk."""

    pass


class DocumentParseError(DocumentError):
    """Raised when an XML document is not well-formed."""

    def __init__(
        self,
        message: str,
        path: Path | str | None = None,
        line: int | None = None,
        *args,
        **kwargs,
    ):
        self.line = line
        super().__init__(message, path, *args, **kwargs)


class StructuralError(OdtMetadataError):
    """Raised when a write needs the metadata container and it is missing."""

    def __init__(self, message: str, tag: str | None = None, *args, **kwargs):
        self.tag = tag
        super().__init__(message, *args, **kwargs)


class MissingPartError(OdtMetadataError):
    """Raised when an expected part is absent from an unpacked document."""

    def __init__(self, message: str, path: Path | str | None = None, *args, **kwargs):
        self.path = path
        super().__init__(message, *args, **kwargs)


class InvalidValueError(OdtMetadataError):
    """Raised when a field value cannot be stored as XML text."""

    def __init__(self, message: str, tag: str | None = None, *args, **kwargs):
        self.tag = tag
        super().__init__(message, *args, **kwargs)
