"""Metadata edit sessions over ODT files.

A session unpacks an ODT into a staging directory, loads its metadata part,
and exposes a field mapper over it. Saving serializes the metadata part and
packs the staging directory back into an ODT.
"""

import logging
import shutil
import tempfile
from pathlib import Path

from odt_metadata.archive import pack, unpack
from odt_metadata.exceptions import MissingPartError
from odt_metadata.metadata import MetadataFieldMapper, ParsedDocument
from schemas.config import EditorConfig
from schemas.fields import DocumentMetadata, MetadataUpdate

logger = logging.getLogger(__name__)


class MetadataSession:
    """Edit the metadata of one ODT file.

    Use as a context manager; the staging directory is removed on exit
    unless ``config.keep_staging`` is set.

    Example:
        with MetadataSession(Path("report.odt")) as session:
            session.mapper.set_title("Quarterly report")
            session.save()
    """

    def __init__(self, path: Path, config: EditorConfig | None = None):
        self.path = Path(path)
        self.config = config or EditorConfig()
        self.staging_path: Path | None = None
        self._document: ParsedDocument | None = None
        self._content: ParsedDocument | None = None

    def __enter__(self) -> "MetadataSession":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def open(self) -> None:
        """Unpack the ODT and load its metadata part.

        Raises:
            ArchiveError: If the ODT cannot be unpacked
            MissingPartError: If the ODT has no metadata part
            DocumentError: If the metadata part cannot be read or parsed
        """
        staging_parent = self.config.staging_dir
        if staging_parent is not None:
            Path(staging_parent).mkdir(parents=True, exist_ok=True)
        self.staging_path = Path(
            tempfile.mkdtemp(prefix="odt-metadata-", dir=staging_parent)
        )
        logger.debug(f"Staging {self.path} in {self.staging_path}")
        try:
            unpack(self.path, self.staging_path, self.config.buffer_size)
            self._document = ParsedDocument.load(self._part(self.config.metadata_path))
        except Exception:
            self.close()
            raise

    def close(self) -> None:
        """Discard the loaded documents and the staging directory."""
        self._document = None
        self._content = None
        if self.staging_path is None:
            return
        if self.config.keep_staging:
            logger.info(f"Keeping staging directory {self.staging_path}")
        else:
            shutil.rmtree(self.staging_path, ignore_errors=True)
        self.staging_path = None

    @property
    def document(self) -> ParsedDocument:
        if self._document is None:
            raise RuntimeError("Session is not open")
        return self._document

    @property
    def mapper(self) -> MetadataFieldMapper:
        return MetadataFieldMapper(self.document)

    def has_part(self, relative_path: str) -> bool:
        return self.staging_path is not None and (self.staging_path / relative_path).is_file()

    def hyperlinks(self) -> str:
        """Hyperlink targets from the content part, loaded on first use.

        Raises:
            MissingPartError: If the ODT has no content part
        """
        if self._content is None:
            self._content = ParsedDocument.load(self._part(self.config.content_path))
        return MetadataFieldMapper(self._content).get_hyperlinks()

    def snapshot(self) -> DocumentMetadata:
        """Every field, hyperlinks included when the content part exists."""
        metadata = self.mapper.snapshot()
        if self.has_part(self.config.content_path):
            metadata = metadata.model_copy(update={"hyperlinks": self.hyperlinks()})
        return metadata

    def save(self, output: Path | None = None) -> Path:
        """Write the metadata part and repack the ODT.

        Args:
            output: Destination ODT (defaults to the source file)

        Returns:
            Path of the written ODT
        """
        target = Path(output) if output is not None else self.path
        self.document.save()
        target.parent.mkdir(parents=True, exist_ok=True)
        pack(self.staging_path, target, self.config.buffer_size)
        logger.info(f"Saved metadata to {target}")
        return target

    def _part(self, relative_path: str) -> Path:
        if self.staging_path is None:
            raise RuntimeError("Session is not open")
        part = self.staging_path / relative_path
        if not part.is_file():
            raise MissingPartError(f"{self.path} has no {relative_path}", path=part)
        return part


def read_metadata(path: Path, config: EditorConfig | None = None) -> DocumentMetadata:
    """Read every metadata field of an ODT file."""
    with MetadataSession(path, config) as session:
        return session.snapshot()


def edit_metadata(
    path: Path,
    update: MetadataUpdate,
    output: Path | None = None,
    config: EditorConfig | None = None,
) -> DocumentMetadata:
    """Apply update to an ODT file and return the resulting metadata.

    Args:
        path: ODT file to edit
        update: Fields to write (None fields are left alone)
        output: Destination ODT (defaults to overwriting path)
        config: Editor settings

    Returns:
        Metadata as written
    """
    with MetadataSession(path, config) as session:
        session.mapper.apply(update)
        session.save(output)
        return session.snapshot()
