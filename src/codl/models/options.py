"""Request options for the cobalt processing endpoint."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from codl.models.enums import (
    AudioBitrate,
    AudioFormat,
    DownloadMode,
    FilenameStyle,
    LocalProcessing,
    VideoQuality,
    YoutubeVideoCodec,
)


class ProcessOptions(BaseModel):
    """Options sent alongside the media URL.

    Every field is optional. Unset fields are left out of the request
    body so the instance applies its own defaults.

    Example:
        >>> opts = ProcessOptions(download_mode=DownloadMode.AUDIO)
        >>> opts.to_payload("https://youtu.be/dQw4w9WgXcQ")
        {'url': 'https://youtu.be/dQw4w9WgXcQ', 'downloadMode': 'audio'}
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    video_quality: VideoQuality | None = None
    audio_format: AudioFormat | None = None
    audio_bitrate: AudioBitrate | None = None
    filename_style: FilenameStyle | None = None
    download_mode: DownloadMode | None = None
    youtube_video_codec: YoutubeVideoCodec | None = None
    youtube_dub_lang: str | None = None
    subtitle_lang: str | None = None
    local_processing: LocalProcessing | None = None
    always_proxy: bool | None = None
    disable_metadata: bool | None = None
    tiktok_full_audio: bool | None = None
    tiktok_h265: bool | None = None
    twitter_gif: bool | None = None
    # The instance expects the acronym upper-cased
    youtube_hls: bool | None = Field(default=None, alias="youtubeHLS")

    def to_payload(self, url: str) -> dict[str, Any]:
        """Build the JSON request body for a media URL.

        Args:
            url: Link to the media to process.

        Returns:
            Request body with the ``url`` key and all set options.

        Raises:
            ValueError: If url is empty.
        """
        if not url or not url.strip():
            raise ValueError("url cannot be empty")

        payload: dict[str, Any] = {"url": url.strip()}
        payload.update(self.model_dump(mode="json", by_alias=True, exclude_none=True))
        return payload
