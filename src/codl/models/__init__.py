"""Data models for codl.

Public API:
    ProcessOptions - Request options for the processing endpoint
    TunnelRedirectResponse, PickerResponse, LocalProcessingResponse - Replies
    ServerInfo - Instance information
    DownloadResult, DownloadedMedia - Download outcomes

Internal (not exported):
    responses.CobaltModel - Shared pydantic configuration
"""

from codl.models.enums import (
    AudioBitrate,
    AudioFormat,
    DownloadMode,
    DownloadStatus,
    FilenameStyle,
    LocalProcessing,
    PickerType,
    ResponseStatus,
    SkipReason,
    VideoQuality,
    YoutubeVideoCodec,
)
from codl.models.options import ProcessOptions
from codl.models.responses import (
    ErrorContext,
    ErrorInfo,
    LocalProcessingResponse,
    MediaResponse,
    PickerItem,
    PickerResponse,
    ServerInfo,
    TunnelRedirectResponse,
)
from codl.models.results import DownloadedMedia, DownloadResult

__all__ = [
    "AudioBitrate",
    "AudioFormat",
    "DownloadMode",
    "DownloadResult",
    "DownloadStatus",
    "DownloadedMedia",
    "ErrorContext",
    "ErrorInfo",
    "FilenameStyle",
    "LocalProcessing",
    "LocalProcessingResponse",
    "MediaResponse",
    "PickerItem",
    "PickerResponse",
    "PickerType",
    "ProcessOptions",
    "ResponseStatus",
    "ServerInfo",
    "SkipReason",
    "TunnelRedirectResponse",
    "VideoQuality",
    "YoutubeVideoCodec",
]
