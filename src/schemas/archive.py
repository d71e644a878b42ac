"""Archive entry schema.

An archive entry is one logical item inside a zip container. Both directions
of the archive codec report the entries they processed with this model.
"""

from pydantic import BaseModel, Field


class ArchiveEntry(BaseModel):
    """A file or directory inside a zip-format archive.

    Attributes:
        path: Relative '/'-separated path with no leading separator
            (directories carry no trailing separator here)
        is_directory: True for directory entries
        size: Uncompressed payload size in bytes (0 for directories)
    """

    path: str
    is_directory: bool = False
    size: int = Field(default=0, ge=0)

    model_config = {"frozen": True}

    @property
    def arcname(self) -> str:
        """Name as stored in the zip central directory."""
        return f"{self.path}/" if self.is_directory else self.path
