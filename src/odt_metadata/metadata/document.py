"""Parsed XML document backing a metadata edit session.

A ParsedDocument owns one lxml tree loaded from a single file. The field
mapper holds a reference to it and mutates the tree in place; the document
serializes the result back to disk.

ODF parts name elements with prefixes (``office:meta``, ``dc:title``). Those
names are resolved against the document's own namespace declarations and,
failing that, against the standard OpenDocument namespaces.
"""

import logging
from pathlib import Path

from lxml import etree

from odt_metadata.exceptions import DocumentIOError, DocumentParseError, InvalidValueError

logger = logging.getLogger(__name__)

ODF_NAMESPACES = {
    "office": "urn:oasis:names:tc:opendocument:xmlns:office:1.0",
    "meta": "urn:oasis:names:tc:opendocument:xmlns:meta:1.0",
    "text": "urn:oasis:names:tc:opendocument:xmlns:text:1.0",
    "table": "urn:oasis:names:tc:opendocument:xmlns:table:1.0",
    "draw": "urn:oasis:names:tc:opendocument:xmlns:drawing:1.0",
    "style": "urn:oasis:names:tc:opendocument:xmlns:style:1.0",
    "dc": "http://purl.org/dc/elements/1.1/",
    "xlink": "http://www.w3.org/1999/xlink",
}


class ParsedDocument:
    """An owned, mutable XML tree loaded from one file.

    Not safe to share between threads: the tree is mutated in place without
    locking.
    """

    def __init__(self, tree: etree._ElementTree, path: Path | None = None):
        self._tree = tree
        self.path = Path(path) if path is not None else None

    @classmethod
    def load(cls, path: Path) -> "ParsedDocument":
        """Parse an XML file into a document.

        Args:
            path: File to parse

        Returns:
            The parsed document

        Raises:
            DocumentIOError: If the file cannot be read
            DocumentParseError: If the file is not well-formed XML
        """
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as e:
            logger.error(f"Failed to read {path}: {e}")
            raise DocumentIOError(f"Failed to read {path}: {e}", path=path) from e

        parser = etree.XMLParser(resolve_entities=False)
        try:
            root = etree.fromstring(data, parser)
        except etree.XMLSyntaxError as e:
            logger.error(f"Failed to parse {path}: {e}")
            raise DocumentParseError(
                f"Failed to parse {path}: {e}", path=path, line=e.lineno
            ) from e

        logger.info(f"Loaded {path}")
        return cls(etree.ElementTree(root), path)

    @property
    def tree(self) -> etree._ElementTree:
        return self._tree

    def replace_tree(self, tree: etree._ElementTree) -> None:
        self._tree = tree

    @property
    def root(self) -> etree._Element:
        return self._tree.getroot()

    def qname(self, name: str) -> str:
        """Resolve a prefixed name like ``dc:title`` to Clark notation.

        Unprefixed names and names already in ``{uri}local`` form are
        returned unchanged. An unknown prefix raises KeyError.
        """
        if name.startswith("{") or ":" not in name:
            return name
        prefix, local = name.split(":", 1)
        uri = self.root.nsmap.get(prefix) or ODF_NAMESPACES.get(prefix)
        if uri is None:
            raise KeyError(f"Unknown namespace prefix: {prefix}")
        return f"{{{uri}}}{local}"

    def find_all(self, name: str) -> list[etree._Element]:
        """All elements named ``name`` in document order, root included."""
        return list(self.root.iter(self.qname(name)))

    def find_first(self, name: str) -> etree._Element | None:
        return next(self.root.iter(self.qname(name)), None)

    def create_element(self, parent: etree._Element, name: str, text: str) -> etree._Element:
        """Append a new ``name`` element holding ``text`` to parent.

        Raises:
            InvalidValueError: If text is not XML-compatible
        """
        check_text(text, name)
        element = etree.SubElement(parent, self.qname(name))
        element.text = text
        return element

    def to_bytes(self) -> bytes:
        return etree.tostring(self._tree, xml_declaration=True, encoding="UTF-8")

    def save(self, path: Path | None = None) -> Path:
        """Serialize the tree to path, or back to the file it was loaded from.

        Raises:
            DocumentIOError: If there is nowhere to write or the write fails
        """
        target = Path(path) if path is not None else self.path
        if target is None:
            raise DocumentIOError("Document has no source path to save to")
        try:
            target.write_bytes(self.to_bytes())
        except OSError as e:
            logger.error(f"Failed to write {target}: {e}")
            raise DocumentIOError(f"Failed to write {target}: {e}", path=target) from e
        logger.info(f"Saved {target}")
        return target


def text_content(element: etree._Element) -> str:
    """Concatenated text of element and its descendant elements.

    Comments and processing instructions contribute nothing.
    """
    parts = [element.text or ""]
    for child in element:
        if isinstance(child.tag, str):
            parts.append(text_content(child))
        parts.append(child.tail or "")
    return "".join(parts)


def set_text_content(element: etree._Element, value: str) -> None:
    """Replace every child of element with a single text node.

    Raises:
        InvalidValueError: If value is not XML-compatible
    """
    check_text(value, element.tag)
    for child in list(element):
        element.remove(child)
    element.text = value


def check_text(value: str, tag: str | None = None) -> None:
    """Refuse text lxml cannot store, such as NULL bytes or control characters."""
    try:
        etree.Element("value").text = value
    except ValueError as e:
        raise InvalidValueError(f"Invalid value for {tag}: {e}", tag=tag) from e


def detach(element: etree._Element) -> None:
    """Remove element from its parent, keeping its trailing text in place."""
    parent = element.getparent()
    if parent is None:
        raise ValueError("Cannot detach the document root")
    tail = element.tail
    previous = element.getprevious()
    parent.remove(element)
    if tail:
        if previous is not None:
            previous.tail = (previous.tail or "") + tail
        else:
            parent.text = (parent.text or "") + tail
