"""codl - A client for cobalt, the media downloader.

This library talks to a cobalt instance over its HTTP API: it submits
media links, parses the typed responses (tunnel, redirect, picker,
local-processing or error) and streams the resulting files to disk.

Designed for use as a library in applications with a CLI for quick
downloads from the terminal.

Examples:
    Download a single file:
    ```python
    from pathlib import Path
    from codl import create_client

    with create_client("http://127.0.0.1:9000") as client:
        result = client.download(
            "https://twitter.com/i/status/1825427547108053062", Path(".")
        )
        print(f"saved to {result.path}")
    ```

    Inspect the response first:
    ```python
    from codl import DownloadMode, PickerResponse, ProcessOptions

    response = client.process(url, ProcessOptions(download_mode=DownloadMode.AUDIO))
    if isinstance(response, PickerResponse):
        results = client.download_all(response, Path("./media"))
    ```
"""

from codl.client import CobaltClient, MediaTarget, media_targets, resolve_media
from codl.config import DEFAULT_TIMEOUT, ClientConfig
from codl.exceptions import (
    AuthenticationError,
    BadResponseError,
    CobaltAPIError,
    CodlError,
    ContentUnavailableError,
    DownloadError,
    InvalidApiKeyError,
    RateLimitError,
    TransportError,
    UnsupportedLinkError,
)
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
    LocalProcessingResponse,
    MediaResponse,
    PickerItem,
    PickerResponse,
    ServerInfo,
    TunnelRedirectResponse,
)
from codl.models.results import DownloadedMedia, DownloadResult


def create_client(
    instance_url: str,
    api_key: str | None = None,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    ascii_filenames: bool = False,
) -> CobaltClient:
    """Create a client for a cobalt instance.

    This is the recommended way to create a client for library usage.

    Args:
        instance_url: Base URL of the cobalt instance.
        api_key: Optional API key for instances that require one.
        timeout: Request timeout in seconds.
        ascii_filenames: Transliterate unicode to ASCII in saved filenames.

    Returns:
        A configured CobaltClient instance.

    Raises:
        ValueError: If instance_url is empty or timeout is not positive.
        InvalidApiKeyError: If api_key cannot be sent as a header.

    Examples:
        ```python
        client = create_client(
            "http://127.0.0.1:9000",
            api_key="00000000-0000-0000-0000-000000000000",
        )
        ```
    """
    config = ClientConfig(
        instance_url=instance_url,
        api_key=api_key,
        timeout=timeout,
        ascii_filenames=ascii_filenames,
    )
    return CobaltClient(config)


__all__ = [
    "AudioBitrate",
    "AudioFormat",
    "AuthenticationError",
    "BadResponseError",
    "ClientConfig",
    "CobaltAPIError",
    "CobaltClient",
    "CodlError",
    "ContentUnavailableError",
    "DownloadError",
    "DownloadMode",
    "DownloadResult",
    "DownloadStatus",
    "DownloadedMedia",
    "FilenameStyle",
    "InvalidApiKeyError",
    "LocalProcessing",
    "LocalProcessingResponse",
    "MediaResponse",
    "MediaTarget",
    "PickerItem",
    "PickerResponse",
    "PickerType",
    "ProcessOptions",
    "RateLimitError",
    "ResponseStatus",
    "ServerInfo",
    "SkipReason",
    "TransportError",
    "TunnelRedirectResponse",
    "UnsupportedLinkError",
    "VideoQuality",
    "YoutubeVideoCodec",
    "create_client",
    "media_targets",
    "resolve_media",
]
