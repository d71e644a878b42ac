"""Command-line interface for odt-metadata."""

import argparse
import json
import logging
import sys
from pathlib import Path

from odt_metadata.archive import list_entries, pack, unpack
from odt_metadata.exceptions import OdtMetadataError
from odt_metadata.session import edit_metadata, read_metadata
from schemas.config import DEFAULT_BUFFER_SIZE, EditorConfig
from schemas.fields import DocumentMetadata, MetadataUpdate

FIELD_LABELS = {
    "title": "Title",
    "description": "Description",
    "subject": "Subject",
    "keywords": "Keywords",
    "author": "Author",
    "creation_date": "Creation date",
    "table_count": "Tables",
    "image_count": "Images",
    "page_count": "Pages",
    "paragraph_count": "Paragraphs",
    "word_count": "Words",
    "character_count": "Characters",
    "non_whitespace_character_count": "Non-whitespace characters",
    "hyperlinks": "Hyperlinks",
}


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def collect_odt_files(paths: list[Path]) -> list[Path]:
    """Expand directory arguments into the ODT files found beneath them."""
    files: list[Path] = []
    for path in paths:
        if path.is_dir():
            files.extend(sorted(path.rglob("*.odt")))
        else:
            files.append(path)
    return files


def format_metadata(path: Path, metadata: DocumentMetadata) -> str:
    lines = [str(path)]
    for name, value in metadata.model_dump().items():
        lines.append(f"  {FIELD_LABELS[name]}: {value}")
    return "\n".join(lines)


def show(args: argparse.Namespace) -> int:
    """Execute the show command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    files = collect_odt_files(args.files)
    if not files:
        logger.error("No ODT files found")
        return 1

    config = EditorConfig(buffer_size=args.buffer_size)
    results = {}
    failed = False
    for path in files:
        try:
            results[str(path)] = read_metadata(path, config)
        except OdtMetadataError as e:
            logger.error(f"Failed to read metadata from {path}: {e}")
            failed = True

    if args.json:
        print(json.dumps({path: m.model_dump() for path, m in results.items()}, indent=2))
    else:
        for path, metadata in results.items():
            print(format_metadata(Path(path), metadata))

    return 1 if failed else 0


def edit(args: argparse.Namespace) -> int:
    """Execute the edit command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    if not args.file.is_file():
        logger.error(f"ODT file not found: {args.file}")
        return 1

    update = MetadataUpdate(
        title=args.title,
        description=args.description,
        subject=args.subject,
        author=args.author,
        keywords=args.keywords,
    )
    if update.is_empty():
        logger.error("Nothing to change: give at least one field option")
        return 1

    config = EditorConfig(buffer_size=args.buffer_size)
    try:
        edit_metadata(args.file, update, args.output, config)
    except OdtMetadataError as e:
        logger.error(f"Failed to edit {args.file}: {e}")
        return 1

    logger.info(f"Updated metadata in {args.output or args.file}")
    return 0


def unpack_command(args: argparse.Namespace) -> int:
    """Execute the unpack command."""
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        entries = unpack(args.archive, args.output, args.buffer_size)
    except OdtMetadataError as e:
        logger.error(f"Failed to unpack {args.archive}: {e}")
        return 1

    logger.info(f"Extracted {len(entries)} entries to {args.output}")
    return 0


def pack_command(args: argparse.Namespace) -> int:
    """Execute the pack command."""
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    if not args.directory.is_dir():
        logger.error(f"Directory not found: {args.directory}")
        return 1

    try:
        entries = pack(args.directory, args.output, args.buffer_size)
    except OdtMetadataError as e:
        logger.error(f"Failed to pack {args.directory}: {e}")
        return 1

    logger.info(f"Packed {len(entries)} entries into {args.output}")
    return 0


def list_command(args: argparse.Namespace) -> int:
    """Execute the list command."""
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        entries = list_entries(args.archive)
    except OdtMetadataError as e:
        logger.error(f"Failed to list {args.archive}: {e}")
        return 1

    for entry in entries:
        print(entry.arcname if entry.is_directory else f"{entry.arcname}\t{entry.size}")
    return 0


def positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer: {value}")
    return number


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(
        prog="odt-metadata",
        description="Read and edit the metadata of OpenDocument text files",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--buffer-size",
        type=positive_int,
        default=DEFAULT_BUFFER_SIZE,
        help=f"Copy buffer size in bytes (default: {DEFAULT_BUFFER_SIZE})",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
    )

    show_parser = subparsers.add_parser(
        "show",
        help="Print the metadata of ODT files",
        description="Print every metadata field of each ODT file. Directories are searched recursively for *.odt files.",
    )
    show_parser.add_argument(
        "files",
        type=Path,
        nargs="+",
        help="ODT files or directories containing them",
    )
    show_parser.add_argument(
        "--json",
        action="store_true",
        help="Print metadata as JSON",
    )
    show_parser.set_defaults(func=show)

    edit_parser = subparsers.add_parser(
        "edit",
        help="Change the metadata of an ODT file",
        description="Write the given metadata fields into an ODT file. Fields not given are left unchanged; an empty value clears a field.",
    )
    edit_parser.add_argument(
        "file",
        type=Path,
        help="ODT file to edit",
    )
    edit_parser.add_argument("--title", help="New title")
    edit_parser.add_argument("--description", help="New description")
    edit_parser.add_argument("--subject", help="New subject")
    edit_parser.add_argument("--author", help="New initial creator")
    edit_parser.add_argument(
        "--keywords",
        help="New keywords, comma-separated (replaces all existing keywords)",
    )
    edit_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the edited ODT here instead of overwriting FILE",
    )
    edit_parser.set_defaults(func=edit)

    unpack_parser = subparsers.add_parser(
        "unpack",
        help="Extract an archive into a directory",
        description="Extract every entry of a zip archive (such as an ODT) into a directory tree.",
    )
    unpack_parser.add_argument(
        "archive",
        type=Path,
        help="Archive to extract",
    )
    unpack_parser.add_argument(
        "--output",
        type=Path,
        required=True,
        help="Directory to extract into",
    )
    unpack_parser.set_defaults(func=unpack_command)

    pack_parser = subparsers.add_parser(
        "pack",
        help="Build an archive from a directory",
        description="Build a zip archive (such as an ODT) from every file and directory under a directory.",
    )
    pack_parser.add_argument(
        "directory",
        type=Path,
        help="Directory to pack",
    )
    pack_parser.add_argument(
        "--output",
        type=Path,
        required=True,
        help="Archive to write",
    )
    pack_parser.set_defaults(func=pack_command)

    list_parser = subparsers.add_parser(
        "list",
        help="List the entries of an archive",
        description="Print every entry of a zip archive (such as an ODT) without extracting it. Directories end with '/'; files are followed by their size in bytes.",
    )
    list_parser.add_argument(
        "archive",
        type=Path,
        help="Archive to list",
    )
    list_parser.set_defaults(func=list_command)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
