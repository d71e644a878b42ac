"""XML document handling and metadata field mapping."""

from .document import ParsedDocument
from .mapper import SEPARATOR, MetadataFieldMapper

__all__ = [
    "ParsedDocument",
    "MetadataFieldMapper",
    "SEPARATOR",
]
