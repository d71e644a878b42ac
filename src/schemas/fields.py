"""Metadata field schemas.

ODT metadata lives in ``meta.xml`` under a single ``office:meta`` container.
Each logical field maps onto that tree in one of three ways:

- text content of a uniquely named element (title, author, ...)
- text content of repeated sibling elements (keywords)
- an attribute of a matching element (statistics counts, hyperlink targets)

FIELDS is the fixed table describing every supported field.
"""

from typing import Literal

from pydantic import BaseModel

META = "office:meta"
STATISTICS = "meta:document-statistic"
HYPERLINK = "text:a"
HYPERLINK_TARGET = "xlink:href"


class FieldDescriptor(BaseModel):
    """Describes where a logical metadata field lives in the XML tree.

    Attributes:
        name: Logical field name
        tag: Qualified name of the element holding the value
        attribute: Qualified attribute name when the value is an attribute
        multiplicity: "single" or "multi" (repeated sibling elements)
        writable: Whether the field can be changed through the mapper
    """

    name: str
    tag: str
    attribute: str | None = None
    multiplicity: Literal["single", "multi"] = "single"
    writable: bool = False

    model_config = {"frozen": True}


def _statistic(name: str, attribute: str) -> FieldDescriptor:
    return FieldDescriptor(name=name, tag=STATISTICS, attribute=attribute)


FIELDS: tuple[FieldDescriptor, ...] = (
    FieldDescriptor(name="title", tag="dc:title", writable=True),
    FieldDescriptor(name="description", tag="dc:description", writable=True),
    FieldDescriptor(name="subject", tag="dc:subject", writable=True),
    FieldDescriptor(
        name="keywords", tag="meta:keyword", multiplicity="multi", writable=True
    ),
    FieldDescriptor(name="author", tag="meta:initial-creator", writable=True),
    FieldDescriptor(name="creation_date", tag="meta:creation-date"),
    _statistic("table_count", "meta:table-count"),
    _statistic("image_count", "meta:image-count"),
    _statistic("page_count", "meta:page-count"),
    _statistic("paragraph_count", "meta:paragraph-count"),
    _statistic("word_count", "meta:word-count"),
    _statistic("character_count", "meta:character-count"),
    _statistic(
        "non_whitespace_character_count", "meta:non-whitespace-character-count"
    ),
    FieldDescriptor(
        name="hyperlinks",
        tag=HYPERLINK,
        attribute=HYPERLINK_TARGET,
        multiplicity="multi",
    ),
)

_FIELDS_BY_NAME = {field.name: field for field in FIELDS}


def get_field(name: str) -> FieldDescriptor:
    """Look up a field descriptor by logical name.

    Raises:
        KeyError: If no field has that name
    """
    try:
        return _FIELDS_BY_NAME[name]
    except KeyError:
        raise KeyError(f"Unknown metadata field: {name}") from None


class DocumentMetadata(BaseModel):
    """Snapshot of every metadata field of one document.

    Values are the mapper's string renderings: multi-valued fields are
    joined with ", " and missing fields read as "".
    """

    title: str = ""
    description: str = ""
    subject: str = ""
    keywords: str = ""
    author: str = ""
    creation_date: str = ""
    table_count: str = ""
    image_count: str = ""
    page_count: str = ""
    paragraph_count: str = ""
    word_count: str = ""
    character_count: str = ""
    non_whitespace_character_count: str = ""
    hyperlinks: str = ""


class MetadataUpdate(BaseModel):
    """Requested changes to the writable fields.

    None means "leave the field alone"; an empty string is a real write.
    Keywords are given comma-joined.
    """

    title: str | None = None
    description: str | None = None
    subject: str | None = None
    author: str | None = None
    keywords: str | None = None

    def is_empty(self) -> bool:
        """True when no field would be written."""
        return all(value is None for value in self.model_dump().values())
