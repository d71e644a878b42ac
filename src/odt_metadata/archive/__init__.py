"""Zip archive codec for staging document packages on disk."""

from .codec import list_entries, pack, unpack

__all__ = [
    "list_entries",
    "pack",
    "unpack",
]
