"""Editor configuration schema."""

from pydantic import BaseModel, Field

DEFAULT_BUFFER_SIZE = 1024
DEFAULT_METADATA_PATH = "meta.xml"
DEFAULT_CONTENT_PATH = "content.xml"


class EditorConfig(BaseModel):
    """Settings for an ODT metadata edit session.

    Attributes:
        buffer_size: Size in bytes of the copy buffer used by the archive codec
        metadata_path: Relative path of the metadata part inside the archive
        content_path: Relative path of the content part (hyperlinks live there)
        staging_dir: Parent directory for staging trees (system temp if None)
        keep_staging: Leave the staging tree on disk after the session
    """

    buffer_size: int = Field(default=DEFAULT_BUFFER_SIZE, gt=0)
    metadata_path: str = DEFAULT_METADATA_PATH
    content_path: str = DEFAULT_CONTENT_PATH
    staging_dir: str | None = None
    keep_staging: bool = False
