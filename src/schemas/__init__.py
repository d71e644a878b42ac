"""Schema definitions for odt-metadata."""

from .archive import ArchiveEntry
from .config import EditorConfig
from .fields import FIELDS, DocumentMetadata, FieldDescriptor, MetadataUpdate, get_field

__all__ = [
    "ArchiveEntry",
    "EditorConfig",
    "FIELDS",
    "DocumentMetadata",
    "FieldDescriptor",
    "MetadataUpdate",
    "get_field",
]
