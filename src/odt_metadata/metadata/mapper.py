"""Metadata field mapper.

Maps the fixed table of logical metadata fields onto a ParsedDocument's tree.
The mapper keeps no copies: every read walks the tree again and every write
mutates it in place, so changes made elsewhere between calls are visible.
"""

import logging
import re
from datetime import datetime

from odt_metadata.exceptions import StructuralError
from schemas.fields import (
    FIELDS,
    HYPERLINK,
    HYPERLINK_TARGET,
    META,
    STATISTICS,
    DocumentMetadata,
    MetadataUpdate,
    get_field,
)

from .document import ParsedDocument, check_text, detach, set_text_content, text_content

logger = logging.getLogger(__name__)

SEPARATOR = ", "
CREATION_DATE_FORMAT = "%d/%m/%Y %H:%M"

TITLE = "dc:title"
DESCRIPTION = "dc:description"
SUBJECT = "dc:subject"
KEYWORD = "meta:keyword"
AUTHOR = "meta:initial-creator"
CREATION_DATE = "meta:creation-date"

# ISO-8601 local date-time: seconds and up to nine fractional digits optional
_LOCAL_DATE_TIME = re.compile(
    r"([0-9]{4})-([0-9]{2})-([0-9]{2})T([0-9]{2}):([0-9]{2})"
    r"(?::([0-9]{2})(?:\.([0-9]{1,9}))?)?"
)


def parse_local_datetime(value: str) -> datetime:
    """Parse an ISO-8601 local date-time such as ``2023-05-01T10:00:00``.

    Fractions beyond microseconds are truncated. Offsets are not accepted.

    Raises:
        ValueError: If value is not a valid local date-time
    """
    match = _LOCAL_DATE_TIME.fullmatch(value)
    if match is None:
        raise ValueError(f"Not an ISO-8601 local date-time: {value!r}")
    year, month, day, hour, minute, second, fraction = match.groups()
    microsecond = int((fraction or "0")[:6].ljust(6, "0"))
    return datetime(
        int(year),
        int(month),
        int(day),
        int(hour),
        int(minute),
        int(second or 0),
        microsecond,
    )


def split_keywords(value: str) -> list[str]:
    """Split a comma-joined value into tokens, untrimmed.

    A value without a comma is a single token, even when empty. Otherwise
    trailing empty tokens are dropped.
    """
    tokens = value.split(",")
    if len(tokens) == 1:
        return tokens
    while tokens and tokens[-1] == "":
        tokens.pop()
    return tokens


class MetadataFieldMapper:
    """Typed get/set access to the metadata fields of one document.

    The mapper is a view over ``document``'s tree and must not outlive it.
    It is not reentrant and not thread-safe.

    Setters return the mapper so writes can be chained.
    """

    def __init__(self, document: ParsedDocument):
        self.document = document

    def read_single(self, tag: str) -> str:
        """Text content of every ``tag`` element, joined with ", "."""
        return SEPARATOR.join(
            text_content(element) for element in self.document.find_all(tag)
        )

    def read_attribute(self, tag: str, attribute: str) -> str:
        """Values of ``attribute`` on every ``tag`` element, joined with ", ".

        Elements without the attribute are skipped entirely, so the number
        of joined values can be smaller than the number of elements.
        """
        name = self.document.qname(attribute)
        values = [
            element.get(name)
            for element in self.document.find_all(tag)
            if element.get(name) is not None
        ]
        return SEPARATOR.join(values)

    def write_single(self, tag: str, value: str | None) -> "MetadataFieldMapper":
        """Overwrite the first ``tag`` element, or create it under the container.

        None leaves the document untouched; an empty string is a real write.

        Raises:
            StructuralError: If the element must be created and the metadata
                container element is absent
            InvalidValueError: If value is not XML-compatible
        """
        if value is None:
            return self
        element = self.document.find_first(tag)
        if element is not None:
            set_text_content(element, value)
            logger.debug(f"Updated {tag}")
            return self
        self.document.create_element(self._container(tag), tag, value)
        logger.debug(f"Created {tag}")
        return self

    def write_multi_valued(self, tag: str, value: str | None) -> "MetadataFieldMapper":
        """Replace every ``tag`` element with one element per comma-split token.

        Raises:
            StructuralError: If the metadata container element is absent
            InvalidValueError: If any token is not XML-compatible
        """
        if value is None:
            return self
        container = self._container(tag)
        tokens = split_keywords(value)
        for token in tokens:
            check_text(token, tag)
        self.remove_all(tag)
        for token in tokens:
            self.document.create_element(container, tag, token)
        logger.debug(f"Wrote {len(tokens)} {tag} elements")
        return self

    def remove_all(self, tag: str) -> "MetadataFieldMapper":
        """Detach every ``tag`` element from its parent.

        Raises:
            StructuralError: If ``tag`` names the document root
        """
        while True:
            element = self.document.find_first(tag)
            if element is None:
                return self
            if element.getparent() is None:
                raise StructuralError(f"Cannot remove the document root {tag}", tag=tag)
            detach(element)

    def _container(self, tag: str):
        container = self.document.find_first(META)
        if container is None:
            raise StructuralError(
                f"Cannot write {tag}: document has no {META} element", tag=META
            )
        return container

    def get_title(self) -> str:
        return self.read_single(TITLE)

    def set_title(self, title: str | None) -> "MetadataFieldMapper":
        return self.write_single(TITLE, title)

    def get_description(self) -> str:
        return self.read_single(DESCRIPTION)

    def set_description(self, description: str | None) -> "MetadataFieldMapper":
        return self.write_single(DESCRIPTION, description)

    def get_subject(self) -> str:
        return self.read_single(SUBJECT)

    def set_subject(self, subject: str | None) -> "MetadataFieldMapper":
        return self.write_single(SUBJECT, subject)

    def get_keywords(self) -> str:
        return self.read_single(KEYWORD)

    def set_keywords(self, keywords: str | None) -> "MetadataFieldMapper":
        return self.write_multi_valued(KEYWORD, keywords)

    def get_author(self) -> str:
        return self.read_single(AUTHOR)

    def set_author(self, author: str | None) -> "MetadataFieldMapper":
        return self.write_single(AUTHOR, author)

    def get_creation_date(self) -> str:
        """Creation date as ``dd/MM/yyyy HH:mm``, or the raw text if unparseable."""
        raw = self.read_single(CREATION_DATE)
        try:
            return parse_local_datetime(raw).strftime(CREATION_DATE_FORMAT)
        except ValueError:
            logger.debug(f"Creation date {raw!r} is not a local date-time")
            return raw

    def get_table_count(self) -> str:
        return self.read_attribute(STATISTICS, "meta:table-count")

    def get_image_count(self) -> str:
        return self.read_attribute(STATISTICS, "meta:image-count")

    def get_page_count(self) -> str:
        return self.read_attribute(STATISTICS, "meta:page-count")

    def get_paragraph_count(self) -> str:
        return self.read_attribute(STATISTICS, "meta:paragraph-count")

    def get_word_count(self) -> str:
        return self.read_attribute(STATISTICS, "meta:word-count")

    def get_character_count(self) -> str:
        return self.read_attribute(STATISTICS, "meta:character-count")

    def get_non_whitespace_character_count(self) -> str:
        return self.read_attribute(STATISTICS, "meta:non-whitespace-character-count")

    def get_hyperlinks(self) -> str:
        """Targets of every hyperlink, for a mapper built over ``content.xml``."""
        return self.read_attribute(HYPERLINK, HYPERLINK_TARGET)

    def read_field(self, name: str) -> str:
        """Read any field of the fixed table by logical name.

        Raises:
            KeyError: If no field has that name
        """
        if name == "creation_date":
            return self.get_creation_date()
        field = get_field(name)
        if field.attribute is not None:
            return self.read_attribute(field.tag, field.attribute)
        return self.read_single(field.tag)

    def snapshot(self) -> DocumentMetadata:
        """Read every field of the fixed table at once."""
        return DocumentMetadata(**{field.name: self.read_field(field.name) for field in FIELDS})

    def apply(self, update: MetadataUpdate) -> "MetadataFieldMapper":
        """Perform every non-None write in update."""
        self.set_title(update.title)
        self.set_description(update.description)
        self.set_subject(update.subject)
        self.set_author(update.author)
        self.set_keywords(update.keywords)
        return self
