"""Download result models."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict

from codl.models.enums import DownloadStatus, SkipReason


class DownloadResult(BaseModel):
    """Result of streaming one media file to disk.

    Attributes:
        status: The download status.
        path: Where the file was written (or already exists, when skipped).
        filename: Final, sanitized filename.
        source_url: URL the media was fetched from.
        bytes_written: Number of bytes written (0 when skipped).
        skip_reason: Why the download was skipped (if status is SKIPPED).
    """

    model_config = ConfigDict(frozen=True)

    status: DownloadStatus
    path: Path
    filename: str
    source_url: str
    bytes_written: int = 0
    skip_reason: SkipReason | None = None


class DownloadedMedia(BaseModel):
    """Media held in memory instead of written to disk."""

    model_config = ConfigDict(frozen=True)

    filename: str
    data: bytes

    def __len__(self) -> int:
        return len(self.data)
