"""Pytest fixtures for odt-metadata tests."""

import zipfile

import pytest

META_XML = """<?xml version="1.0" encoding="UTF-8"?>
<office:document-meta xmlns:office="urn:oasis:names:tc:opendocument:xmlns:office:1.0" xmlns:meta="urn:oasis:names:tc:opendocument:xmlns:meta:1.0" xmlns:dc="http://purl.org/dc/elements/1.1/" xmlns:xlink="http://www.w3.org/1999/xlink" office:version="1.3">
  <office:meta>
    <meta:creation-date>2023-05-01T10:00:00.123456789</meta:creation-date>
    <dc:title>Annual Report</dc:title>
    <dc:description>Figures for the year</dc:description>
    <dc:subject>Finance</dc:subject>
    <meta:keyword>budget</meta:keyword>
    <meta:keyword>audit</meta:keyword>
    <meta:initial-creator>Alex Martin</meta:initial-creator>
    <meta:document-statistic meta:table-count="2" meta:image-count="1" meta:object-count="0" meta:page-count="5" meta:paragraph-count="40" meta:word-count="1200" meta:character-count="7000" meta:non-whitespace-character-count="5800"/>
  </office:meta>
</office:document-meta>
"""

CONTENT_XML = """<?xml version="1.0" encoding="UTF-8"?>
<office:document-content xmlns:office="urn:oasis:names:tc:opendocument:xmlns:office:1.0" xmlns:text="urn:oasis:names:tc:opendocument:xmlns:text:1.0" xmlns:xlink="http://www.w3.org/1999/xlink" office:version="1.3">
  <office:body>
    <office:text>
      <text:p>See <text:a xlink:type="simple" xlink:href="https://example.org/">the site</text:a>.</text:p>
      <text:p>And <text:a xlink:type="simple" xlink:href="https://example.com/docs">the docs</text:a>.</text:p>
    </office:text>
  </office:body>
</office:document-content>
"""

MIMETYPE = "application/vnd.oasis.opendocument.text"

MANIFEST_XML = """<?xml version="1.0" encoding="UTF-8"?>
<manifest:manifest xmlns:manifest="urn:oasis:names:tc:opendocument:xmlns:manifest:1.0" manifest:version="1.3">
  <manifest:file-entry manifest:full-path="/" manifest:media-type="application/vnd.oasis.opendocument.text"/>
  <manifest:file-entry manifest:full-path="meta.xml" manifest:media-type="text/xml"/>
  <manifest:file-entry manifest:full-path="content.xml" manifest:media-type="text/xml"/>
</manifest:manifest>
"""

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + bytes(range(256)) * 8


@pytest.fixture
def meta_xml():
    """Sample meta.xml text with every supported field."""
    return META_XML


@pytest.fixture
def content_xml():
    """Sample content.xml text with two hyperlinks."""
    return CONTENT_XML


@pytest.fixture
def meta_path(tmp_path, meta_xml):
    """meta.xml written to disk."""
    path = tmp_path / "meta.xml"
    path.write_text(meta_xml, encoding="utf-8")
    return path


@pytest.fixture
def odt_tree(tmp_path, meta_xml, content_xml):
    """An unpacked ODT staging tree, including an empty directory and binary data."""
    root = tmp_path / "tree"
    (root / "META-INF").mkdir(parents=True)
    (root / "Pictures").mkdir()
    (root / "Configurations2" / "toolbar").mkdir(parents=True)
    (root / "mimetype").write_text(MIMETYPE)
    (root / "META-INF" / "manifest.xml").write_text(MANIFEST_XML)
    (root / "meta.xml").write_text(meta_xml, encoding="utf-8")
    (root / "content.xml").write_text(content_xml, encoding="utf-8")
    (root / "Pictures" / "logo.png").write_bytes(PNG_BYTES)
    return root


@pytest.fixture
def odt_file(tmp_path, meta_xml, content_xml):
    """A packed ODT built directly with zipfile."""
    path = tmp_path / "sample.odt"
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("mimetype", MIMETYPE, compress_type=zipfile.ZIP_STORED)
        zf.writestr("META-INF/manifest.xml", MANIFEST_XML, compress_type=zipfile.ZIP_DEFLATED)
        zf.writestr("meta.xml", meta_xml, compress_type=zipfile.ZIP_DEFLATED)
        zf.writestr("content.xml", content_xml, compress_type=zipfile.ZIP_DEFLATED)
        zf.writestr("Configurations2/", b"")
        zf.writestr("Pictures/logo.png", PNG_BYTES)
    return path
