"""Tests for the archive codec."""

import shutil
import zipfile
from pathlib import Path
from unittest.mock import patch

import pytest

from odt_metadata.archive import list_entries, pack, unpack
from odt_metadata.exceptions import ArchiveError
from schemas.archive import ArchiveEntry


def _snapshot(root: Path) -> dict[str, bytes | None]:
    """Map each relative path under root to its bytes (None for directories)."""
    return {
        path.relative_to(root).as_posix(): None if path.is_dir() else path.read_bytes()
        for path in root.rglob("*")
    }


class TestUnpack:
    """Tests for extracting an archive into a directory tree."""

    def test_extracts_files_with_exact_bytes(self, odt_file, tmp_path):
        """Every file entry is written with its payload unchanged."""
        output = tmp_path / "out"

        unpack(odt_file, output)

        with zipfile.ZipFile(odt_file) as zf:
            for name in zf.namelist():
                if not name.endswith("/"):
                    assert (output / name).read_bytes() == zf.read(name)

    def test_directory_entries_become_empty_directories(self, odt_file, tmp_path):
        """An explicit directory entry produces an empty directory."""
        output = tmp_path / "out"

        unpack(odt_file, output)

        assert (output / "Configurations2").is_dir()
        assert list((output / "Configurations2").iterdir()) == []

    def test_creates_parents_without_directory_entries(self, tmp_path):
        """Parent directories are created for files with no preceding directory entry."""
        archive = tmp_path / "nested.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr("a/b/c.txt", b"deep")

        unpack(archive, tmp_path / "out")

        assert (tmp_path / "out" / "a" / "b" / "c.txt").read_bytes() == b"deep"

    def test_creates_output_directory_with_intermediate_segments(self, odt_file, tmp_path):
        """A missing output directory is created, intermediate segments included."""
        output = tmp_path / "x" / "y" / "z"

        unpack(odt_file, output)

        assert (output / "meta.xml").is_file()

    def test_returns_entries_in_archive_order(self, odt_file, tmp_path):
        """unpack reports each entry it processed."""
        entries = unpack(odt_file, tmp_path / "out")

        assert entries[0] == ArchiveEntry(path="mimetype", size=39)
        assert ArchiveEntry(path="Configurations2", is_directory=True) in entries
        assert len(entries) == 6

    def test_copies_through_bounded_buffer(self, odt_file, tmp_path):
        """Payloads are streamed with the requested buffer size."""
        with patch(
            "odt_metadata.archive.codec.shutil.copyfileobj",
            wraps=shutil.copyfileobj,
        ) as copy:
            unpack(odt_file, tmp_path / "out", buffer_size=16)

        assert copy.call_count == 5
        assert all(call.args[2] == 16 for call in copy.call_args_list)

    def test_missing_archive_raises(self, tmp_path):
        """A missing archive fails with ArchiveError."""
        with pytest.raises(ArchiveError) as exc_info:
            unpack(tmp_path / "missing.odt", tmp_path / "out")

        assert exc_info.value.path == tmp_path / "missing.odt"

    def test_invalid_archive_raises(self, tmp_path):
        """A file that is not a zip archive fails with ArchiveError."""
        archive = tmp_path / "broken.odt"
        archive.write_bytes(b"definitely not a zip file")

        with pytest.raises(ArchiveError):
            unpack(archive, tmp_path / "out")

    def test_unwritable_output_raises(self, odt_file, tmp_path):
        """An output path blocked by a regular file fails with ArchiveError."""
        blocker = tmp_path / "blocker"
        blocker.write_text("in the way")

        with pytest.raises(ArchiveError):
            unpack(odt_file, blocker / "out")

    def test_rejects_entries_escaping_output(self, tmp_path):
        """Entries with '..' segments are refused."""
        archive = tmp_path / "evil.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr("../evil.txt", b"x")

        with pytest.raises(ArchiveError, match="Unsafe entry path"):
            unpack(archive, tmp_path / "out")

        assert not (tmp_path / "evil.txt").exists()


class TestPack:
    """Tests for building an archive from a directory tree."""

    def test_entry_names_are_relative_to_root(self, odt_tree, tmp_path):
        """Entry names have the root prefix stripped and use '/' separators."""
        archive = tmp_path / "out.odt"

        pack(odt_tree, archive)

        with zipfile.ZipFile(archive) as zf:
            names = zf.namelist()
        assert "Pictures/logo.png" in names
        assert "META-INF/manifest.xml" in names
        assert not any(name.startswith("/") for name in names)

    def test_directories_have_trailing_separator(self, odt_tree, tmp_path):
        """Directory entries are stored with a trailing '/' and no payload."""
        archive = tmp_path / "out.odt"

        pack(odt_tree, archive)

        with zipfile.ZipFile(archive) as zf:
            info = zf.getinfo("Configurations2/toolbar/")
            assert info.is_dir()
            assert zf.read(info) == b""

    def test_deterministic_preorder_with_mimetype_first(self, odt_tree, tmp_path):
        """mimetype comes first, then a sorted walk with directories before their contents."""
        entries = pack(odt_tree, tmp_path / "out.odt")

        assert [entry.path for entry in entries] == [
            "mimetype",
            "Configurations2",
            "Configurations2/toolbar",
            "META-INF",
            "META-INF/manifest.xml",
            "Pictures",
            "Pictures/logo.png",
            "content.xml",
            "meta.xml",
        ]

    def test_mimetype_is_stored_uncompressed(self, odt_tree, tmp_path):
        """mimetype is stored, other files are deflated."""
        archive = tmp_path / "out.odt"

        pack(odt_tree, archive)

        with zipfile.ZipFile(archive) as zf:
            assert zf.getinfo("mimetype").compress_type == zipfile.ZIP_STORED
            assert zf.getinfo("content.xml").compress_type == zipfile.ZIP_DEFLATED

    def test_empty_directory_gives_empty_archive(self, tmp_path):
        """Packing an empty directory is valid and yields zero entries."""
        source = tmp_path / "empty"
        source.mkdir()
        archive = tmp_path / "empty.zip"

        entries = pack(source, archive)

        assert entries == []
        assert zipfile.is_zipfile(archive)
        with zipfile.ZipFile(archive) as zf:
            assert zf.namelist() == []

        output = tmp_path / "out"
        assert unpack(archive, output) == []
        assert output.is_dir()
        assert list(output.iterdir()) == []

    def test_copies_through_bounded_buffer(self, odt_tree, tmp_path):
        """File payloads are streamed with the requested buffer size."""
        with patch(
            "odt_metadata.archive.codec.shutil.copyfileobj",
            wraps=shutil.copyfileobj,
        ) as copy:
            pack(odt_tree, tmp_path / "out.odt", buffer_size=64)

        assert copy.call_count == 5
        assert all(call.args[2] == 64 for call in copy.call_args_list)

    def test_skips_symlinked_directories_with_warning(self, odt_tree, tmp_path, caplog):
        """A symlinked directory is left out and reported."""
        (odt_tree / "Linked").symlink_to(odt_tree / "Pictures", target_is_directory=True)

        entries = pack(odt_tree, tmp_path / "out.odt")

        assert not any(entry.path.startswith("Linked") for entry in entries)
        assert "Skipping symlinked directory" in caplog.text

    def test_symlinked_file_is_packed_with_target_bytes(self, odt_tree, tmp_path):
        """A symlinked file is stored with the bytes it points to."""
        (odt_tree / "alias.xml").symlink_to(odt_tree / "meta.xml")
        archive = tmp_path / "out.odt"

        pack(odt_tree, archive)

        with zipfile.ZipFile(archive) as zf:
            assert zf.read("alias.xml") == (odt_tree / "meta.xml").read_bytes()

    def test_missing_source_raises(self, tmp_path):
        """A missing source directory fails with ArchiveError."""
        with pytest.raises(ArchiveError, match="Source directory not found"):
            pack(tmp_path / "missing", tmp_path / "out.zip")

    def test_unwritable_destination_raises(self, odt_tree, tmp_path):
        """A destination in a missing directory fails with ArchiveError."""
        with pytest.raises(ArchiveError):
            pack(odt_tree, tmp_path / "no" / "such" / "dir" / "out.odt")


class TestRoundTrip:
    """Tests for pack followed by unpack."""

    def test_tree_survives_round_trip(self, odt_tree, tmp_path):
        """Paths, directories and bytes are reproduced exactly."""
        archive = tmp_path / "round.odt"
        output = tmp_path / "round"

        pack(odt_tree, archive)
        unpack(archive, output)

        assert _snapshot(output) == _snapshot(odt_tree)

    def test_archive_survives_round_trip(self, odt_file, tmp_path):
        """Unpacking then repacking keeps every entry name and payload."""
        staging = tmp_path / "staging"
        rebuilt = tmp_path / "rebuilt.odt"

        unpack(odt_file, staging)
        pack(staging, rebuilt)

        with zipfile.ZipFile(odt_file) as original, zipfile.ZipFile(rebuilt) as copy:
            original_names = set(original.namelist())
            copy_names = set(copy.namelist())
            # implicit parent directories come back as explicit entries
            assert original_names <= copy_names
            assert copy_names - original_names == {"META-INF/", "Pictures/"}
            for name in original_names:
                assert original.read(name) == copy.read(name)


class TestListEntries:
    """Tests for reading the central directory."""

    def test_lists_without_extracting(self, odt_file, tmp_path):
        """list_entries reports files and directories."""
        entries = list_entries(odt_file)

        assert ArchiveEntry(path="Pictures/logo.png", size=2056) in entries
        assert [entry.path for entry in entries if entry.is_directory] == ["Configurations2"]

    def test_invalid_archive_raises(self, tmp_path):
        """A non-zip file fails with ArchiveError."""
        path = tmp_path / "bad.zip"
        path.write_text("nope")

        with pytest.raises(ArchiveError):
            list_entries(path)
