"""Streaming zip codec.

Decomposes a zip archive into a directory tree and rebuilds an archive from a
directory tree. Entry payloads are copied through a fixed-size buffer, so
memory use stays bounded by the buffer size whatever the entry size.
"""

import logging
import shutil
import zipfile
from pathlib import Path, PurePosixPath

from odt_metadata.exceptions import ArchiveError
from schemas.archive import ArchiveEntry
from schemas.config import DEFAULT_BUFFER_SIZE

logger = logging.getLogger(__name__)

MIMETYPE_ENTRY = "mimetype"


def unpack(
    archive_path: Path,
    output_dir: Path,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
) -> list[ArchiveEntry]:
    """Extract every entry of an archive under output_dir.

    Directory entries become empty directories, file entries become files
    with the exact payload bytes. Missing parent directories are created on
    demand. Partially written output is left in place on failure.

    Args:
        archive_path: Path to an existing zip archive
        output_dir: Directory to extract into (created if absent)
        buffer_size: Copy buffer size in bytes

    Returns:
        Entries extracted, in archive order

    Raises:
        ArchiveError: If the archive is unreadable or the output unwritable
    """
    archive_path = Path(archive_path)
    output_dir = Path(output_dir)
    logger.info(f"Unpacking {archive_path} into {output_dir}")

    entries: list[ArchiveEntry] = []
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(archive_path, "r") as zf:
            for info in zf.infolist():
                entry = _entry_from_info(info)
                target = _resolve_target(output_dir, entry.path, archive_path)
                if entry.is_directory:
                    target.mkdir(parents=True, exist_ok=True)
                else:
                    target.parent.mkdir(parents=True, exist_ok=True)
                    with zf.open(info, "r") as src, target.open("wb") as dst:
                        shutil.copyfileobj(src, dst, buffer_size)
                entries.append(entry)
                logger.debug(f"Extracted {info.filename}")
    except ArchiveError:
        raise
    except (OSError, zipfile.BadZipFile, zipfile.LargeZipFile) as e:
        logger.error(f"Failed to unpack {archive_path}: {e}")
        raise ArchiveError(f"Failed to unpack {archive_path}: {e}", path=archive_path) from e

    logger.info(f"Unpacked {len(entries)} entries from {archive_path}")
    return entries


def pack(
    source_dir: Path,
    archive_path: Path,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
) -> list[ArchiveEntry]:
    """Build an archive from every file and directory under source_dir.

    Entry names are the paths relative to source_dir. Directories are stored
    as empty entries with a trailing '/'. A top-level ``mimetype`` file is
    written first and uncompressed, as OpenDocument readers expect; all other
    files are deflated. An empty source_dir yields a valid empty archive.
    Symlinked directories are skipped with a warning.

    Args:
        source_dir: Root directory to enumerate recursively
        archive_path: Destination archive (overwritten if it exists)
        buffer_size: Copy buffer size in bytes

    Returns:
        Entries written, in archive order

    Raises:
        ArchiveError: If the source is unreadable or the archive unwritable
    """
    source_dir = Path(source_dir)
    archive_path = Path(archive_path)
    logger.info(f"Packing {source_dir} into {archive_path}")

    if not source_dir.is_dir():
        raise ArchiveError(f"Source directory not found: {source_dir}", path=source_dir)

    entries: list[ArchiveEntry] = []
    try:
        nodes = _ordered_nodes(source_dir)
        with zipfile.ZipFile(archive_path, "w", zipfile.ZIP_DEFLATED) as zf:
            for node in nodes:
                rel_path = node.relative_to(source_dir).as_posix()
                entry = ArchiveEntry(path=rel_path, is_directory=node.is_dir())
                info = zipfile.ZipInfo.from_file(node, entry.arcname, strict_timestamps=False)
                if entry.is_directory:
                    zf.writestr(info, b"")
                    entries.append(entry)
                else:
                    if rel_path == MIMETYPE_ENTRY:
                        info.compress_type = zipfile.ZIP_STORED
                    else:
                        info.compress_type = zipfile.ZIP_DEFLATED
                    with node.open("rb") as src, zf.open(info, "w") as dst:
                        shutil.copyfileobj(src, dst, buffer_size)
                    entries.append(ArchiveEntry(path=rel_path, size=info.file_size))
                logger.debug(f"Added {info.filename}")
    except (OSError, zipfile.LargeZipFile) as e:
        logger.error(f"Failed to pack {source_dir}: {e}")
        raise ArchiveError(f"Failed to pack {source_dir}: {e}", path=archive_path) from e

    logger.info(f"Packed {len(entries)} entries into {archive_path}")
    return entries


def list_entries(archive_path: Path) -> list[ArchiveEntry]:
    """Read the archive's central directory without extracting anything.

    Raises:
        ArchiveError: If the archive is missing or not a zip file
    """
    archive_path = Path(archive_path)
    try:
        with zipfile.ZipFile(archive_path, "r") as zf:
            return [_entry_from_info(info) for info in zf.infolist()]
    except (OSError, zipfile.BadZipFile) as e:
        raise ArchiveError(f"Failed to read {archive_path}: {e}", path=archive_path) from e


def _entry_from_info(info: zipfile.ZipInfo) -> ArchiveEntry:
    if info.is_dir():
        return ArchiveEntry(path=info.filename.rstrip("/"), is_directory=True)
    return ArchiveEntry(path=info.filename, size=info.file_size)


def _resolve_target(output_dir: Path, entry_path: str, archive_path: Path) -> Path:
    """Map an entry path onto output_dir, refusing paths that escape it."""
    posix = PurePosixPath(entry_path.replace("\\", "/"))
    if posix.is_absolute() or ".." in posix.parts:
        raise ArchiveError(
            f"Unsafe entry path {entry_path!r} in {archive_path}", path=archive_path
        )
    return output_dir.joinpath(*posix.parts)


def _ordered_nodes(root: Path) -> list[Path]:
    """Sorted pre-order walk of root, mimetype first when present at top level."""
    nodes = _preorder(root)
    mimetype = root / MIMETYPE_ENTRY
    if mimetype.is_file():
        nodes.remove(mimetype)
        nodes.insert(0, mimetype)
    return nodes


def _preorder(directory: Path) -> list[Path]:
    nodes: list[Path] = []
    for child in sorted(directory.iterdir(), key=lambda p: p.name):
        if child.is_symlink() and child.is_dir():
            logger.warning(f"Skipping symlinked directory {child}")
            continue
        nodes.append(child)
        if child.is_dir():
            nodes.extend(_preorder(child))
    return nodes
