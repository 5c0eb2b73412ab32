"""Enumerations for cobalt request options and response tags.

Values are the exact strings used on the wire.
"""

from enum import StrEnum


class VideoQuality(StrEnum):
    """Maximum video height; ``max`` picks the best available."""

    MAX = "max"
    Q4320 = "4320"
    Q2160 = "2160"
    Q1440 = "1440"
    Q1080 = "1080"
    Q720 = "720"
    Q480 = "480"
    Q360 = "360"
    Q240 = "240"
    Q144 = "144"


class AudioFormat(StrEnum):
    """Audio container/codec; ``best`` keeps the source format when possible."""

    BEST = "best"
    MP3 = "mp3"
    OGG = "ogg"
    WAV = "wav"
    OPUS = "opus"


class AudioBitrate(StrEnum):
    """Audio bitrate in kbps (ignored when the audio is not re-encoded)."""

    B320 = "320"
    B256 = "256"
    B128 = "128"
    B96 = "96"
    B64 = "64"
    B8 = "8"


class FilenameStyle(StrEnum):
    """Naming scheme the instance uses for suggested filenames."""

    CLASSIC = "classic"
    PRETTY = "pretty"
    BASIC = "basic"
    NERDY = "nerdy"


class DownloadMode(StrEnum):
    """What to keep: both streams, audio only, or video only."""

    AUTO = "auto"
    AUDIO = "audio"
    MUTE = "mute"


class YoutubeVideoCodec(StrEnum):
    """Preferred YouTube video codec."""

    H264 = "h264"
    AV1 = "av1"
    VP9 = "vp9"


class LocalProcessing(StrEnum):
    """Whether the instance may hand merging/remuxing back to the client."""

    DISABLED = "disabled"
    PREFERRED = "preferred"
    FORCED = "forced"


class ResponseStatus(StrEnum):
    """The ``status`` tag of a processing response."""

    TUNNEL = "tunnel"
    REDIRECT = "redirect"
    PICKER = "picker"
    LOCAL_PROCESSING = "local-processing"
    ERROR = "error"


class PickerType(StrEnum):
    """Kind of media in a picker item."""

    PHOTO = "photo"
    VIDEO = "video"
    GIF = "gif"

    @property
    def default_extension(self) -> str:
        """File extension used when the media host gives no filename."""
        match self:
            case PickerType.PHOTO:
                return "jpg"
            case PickerType.VIDEO:
                return "mp4"
            case PickerType.GIF:
                return "gif"


class DownloadStatus(StrEnum):
    """Status of a download operation."""

    SUCCESS = "success"
    SKIPPED = "skipped"


class SkipReason(StrEnum):
    """Reason why a download was skipped."""

    FILE_EXISTS = "file_exists"

    @property
    def label(self) -> str:
        """Human-readable label for display."""
        match self:
            case SkipReason.FILE_EXISTS:
                return "file exists"
