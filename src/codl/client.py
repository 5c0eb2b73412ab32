"""cobalt API client.

Wraps the cobalt HTTP API with consistent error handling, typed response
parsing and streaming downloads to disk.
"""

import logging
from collections.abc import Callable, Collection
from importlib.metadata import version
from pathlib import Path
from typing import Any, NamedTuple

import httpx

from codl.config import ClientConfig
from codl.exceptions import (
    BadResponseError,
    CobaltAPIError,
    DownloadError,
    InvalidApiKeyError,
    TransportError,
)
from codl.models.enums import DownloadStatus, SkipReason
from codl.models.options import ProcessOptions
from codl.models.responses import (
    LocalProcessingResponse,
    MediaResponse,
    PickerResponse,
    ServerInfo,
    TunnelRedirectResponse,
    parse_error_info,
    parse_process_response,
    parse_server_info,
)
from codl.models.results import DownloadedMedia, DownloadResult
from codl.utils.filename import (
    DEFAULT_FILENAME,
    filename_from_content_disposition,
    filename_from_url,
    resolve_filename,
    unique_filename,
)

logger = logging.getLogger(__name__)

# Get version from package metadata for User-Agent
_VERSION = version("codl")
USER_AGENT = f"codl/{_VERSION}"

ProgressCallback = Callable[[int, int | None], None]
"""Called with (bytes written so far, total bytes or None if unknown)."""


class MediaTarget(NamedTuple):
    """A downloadable file picked out of a cobalt response.

    Attributes:
        url: Where to fetch the media from.
        filename: Filename suggested by the instance, if any.
        fallback_filename: Name to use when neither the instance nor the
            media host suggests one.
    """

    url: str
    filename: str | None
    fallback_filename: str = DEFAULT_FILENAME


def resolve_media(response: MediaResponse, picker_index: int = 0) -> MediaTarget:
    """Pick the file to download from a processing response.

    Args:
        response: Parsed processing response.
        picker_index: Which item to take from a picker response (0-based).

    Returns:
        The media target.

    Raises:
        DownloadError: If the picker is empty, the index is out of range,
            or the response requires local processing.
    """
    match response:
        case TunnelRedirectResponse():
            return MediaTarget(response.url, response.filename)
        case PickerResponse():
            if not response.picker:
                raise DownloadError("picker response has no items")
            if not 0 <= picker_index < len(response.picker):
                raise DownloadError(
                    f"picker index {picker_index} out of range "
                    f"(response has {len(response.picker)} items)"
                )
            item = response.picker[picker_index]
            extension = item.media_type.default_extension
            fallback = f"{item.media_type}_{picker_index + 1}.{extension}"
            return MediaTarget(item.url, None, fallback)
        case LocalProcessingResponse():
            if response.job_type == "proxy" and len(response.tunnel) == 1:
                return MediaTarget(response.tunnel[0], response.output.filename)
            raise DownloadError(
                f"response needs local {response.job_type} processing, which codl "
                "does not do; retry with local processing disabled"
            )
    raise DownloadError(f"cannot download a {response.status} response")


def media_targets(response: MediaResponse) -> list[MediaTarget]:
    """List every downloadable file in a processing response.

    For a picker this is each item followed by the background audio, if
    any. Other responses yield a single target.

    Raises:
        DownloadError: Same conditions as resolve_media.
    """
    if not isinstance(response, PickerResponse):
        return [resolve_media(response)]

    targets = [resolve_media(response, i) for i in range(len(response.picker))]
    if not targets:
        raise DownloadError("picker response has no items")
    if response.audio:
        audio = MediaTarget(response.audio, response.audio_filename, "audio.mp3")
        targets.append(audio)
    return targets


def _build_api_headers(api_key: str | None) -> dict[str, str]:
    headers = {
        "Accept": "application/json",
        "Content-Type": "application/json",
        "User-Agent": USER_AGENT,
    }
    if api_key is not None:
        key = api_key.strip()
        if not key or not key.isascii() or not key.isprintable() or " " in key:
            raise InvalidApiKeyError("invalid api token")
        headers["Authorization"] = f"Api-Key {key}"
    return headers


def _content_length(response: httpx.Response) -> int | None:
    value = response.headers.get("content-length")
    if value and value.isdigit():
        return int(value)
    return None


class CobaltClient:
    """Client for a single cobalt instance.

    The API key is only sent to the instance itself, never to the media
    hosts that redirect responses point at.

    Example:
        >>> with CobaltClient(ClientConfig("http://127.0.0.1:9000")) as client:
        ...     result = client.download(
        ...         "https://twitter.com/i/status/1825427547108053062", Path(".")
        ...     )
        ...     print(result.path)
    """

    def __init__(
        self,
        config: ClientConfig,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Client configuration.
            http_client: Optional httpx client. Creates one if not provided.
                An injected client gets config.timeout applied and is not
                closed by close().

        Raises:
            InvalidApiKeyError: If the configured API key is not usable.
        """
        self._config = config
        self._url = config.instance_url.strip()
        self._api_headers = _build_api_headers(config.api_key)
        self._media_headers = {"User-Agent": USER_AGENT}
        if http_client is not None:
            http_client.timeout = config.timeout
            self._http = http_client
            self._owns_http = False
        else:
            self._http = httpx.Client(timeout=config.timeout, follow_redirects=True)
            self._owns_http = True

    @property
    def config(self) -> ClientConfig:
        return self._config

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "CobaltClient":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    # -- API ------------------------------------------------------------------

    def _send(self, method: str, json: dict[str, Any] | None = None) -> httpx.Response:
        try:
            response = self._http.request(
                method, self._url, json=json, headers=self._api_headers
            )
        except httpx.HTTPError as e:
            logger.warning("Request to cobalt instance %s failed: %s", self._url, e)
            raise TransportError(f"failed to reach cobalt instance: {e}") from e

        self._check_for_error(response)
        return response

    def _check_for_error(self, response: httpx.Response) -> None:
        if response.is_success:
            return

        try:
            data = response.json()
        except ValueError:
            data = None

        info = parse_error_info(data)
        if info is not None:
            logger.warning(
                "cobalt instance returned error %s (HTTP %d)",
                info.code,
                response.status_code,
            )
            raise CobaltAPIError.from_info(info)

        logger.warning(
            "Unexpected HTTP %d from cobalt instance", response.status_code
        )
        raise BadResponseError(
            f"bad response from cobalt instance (HTTP {response.status_code})"
        )

    @staticmethod
    def _decode_json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise BadResponseError("problem parsing response") from e

    def info(self) -> ServerInfo:
        """Get basic information about the cobalt instance.

        Returns:
            Parsed ServerInfo model.

        Raises:
            TransportError: If the instance cannot be reached.
            CobaltAPIError: If the instance reports an error.
            BadResponseError: If the reply cannot be parsed.
        """
        logger.debug("Fetching server info from %s", self._url)
        response = self._send("GET")
        return parse_server_info(self._decode_json(response))

    def process(self, url: str, options: ProcessOptions | None = None) -> MediaResponse:
        """Ask the instance to process a media URL.

        Args:
            url: Link to the media (tweet, video page, post...).
            options: Request options. Instance defaults apply if not provided.

        Returns:
            The tunnel/redirect, picker or local-processing response.

        Raises:
            ValueError: If url is empty.
            TransportError: If the instance cannot be reached.
            CobaltAPIError: If the instance reports an error.
            BadResponseError: If the reply cannot be parsed.
        """
        payload = (options or ProcessOptions()).to_payload(url)
        logger.debug("Processing %s", payload["url"])

        response = self._send("POST", json=payload)
        result = parse_process_response(self._decode_json(response))

        logger.debug("cobalt responded with status %s", result.status)
        return result

    # -- Downloads ------------------------------------------------------------

    def _skip_existing(
        self, path: Path, source_url: str, overwrite: bool
    ) -> DownloadResult | None:
        if overwrite or not path.exists():
            return None
        logger.info("Skipping existing file: %s", path)
        return DownloadResult(
            status=DownloadStatus.SKIPPED,
            path=path,
            filename=path.name,
            source_url=source_url,
            skip_reason=SkipReason.FILE_EXISTS,
        )

    def _resolve_name(
        self,
        response: httpx.Response,
        filename: str | None,
        fallback_filename: str,
        taken: Collection[str] = (),
    ) -> str:
        name = resolve_filename(
            filename,
            filename_from_content_disposition(
                response.headers.get("content-disposition")
            ),
            filename_from_url(str(response.url)),
            fallback=fallback_filename,
            ascii_filenames=self._config.ascii_filenames,
        )
        return self._unique_name(name, fallback_filename, taken)

    def _unique_name(
        self, name: str, fallback_filename: str, taken: Collection[str]
    ) -> str:
        if not taken:
            return name
        fallback = resolve_filename(
            fallback=fallback_filename, ascii_filenames=self._config.ascii_filenames
        )
        return unique_filename(name, taken, fallback=fallback)

    def download_file(
        self,
        media_url: str,
        output_dir: Path,
        filename: str | None = None,
        *,
        fallback_filename: str = DEFAULT_FILENAME,
        overwrite: bool = False,
        on_progress: ProgressCallback | None = None,
        taken: Collection[str] = (),
    ) -> DownloadResult:
        """Stream a media URL to a file in output_dir.

        The file is written to ``<name>.part`` and renamed once complete.

        Args:
            media_url: URL from a cobalt response.
            output_dir: Directory to save into (created if missing).
            filename: Preferred filename. Falls back to the Content-Disposition
                header, then the URL path, then fallback_filename.
            fallback_filename: Name used when nothing else is available.
            overwrite: Replace an existing file instead of skipping.
            on_progress: Optional callback for progress updates.
            taken: Filenames already used by other files of the same batch.
                A colliding name is replaced by fallback_filename, or
                numbered if that is taken too.

        Returns:
            DownloadResult describing the saved (or skipped) file.

        Raises:
            DownloadError: If the media host rejects the request, or the
                directory or file cannot be written.
            TransportError: If the media host cannot be reached.
        """
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DownloadError(f"cannot create {output_dir}: {e}") from e

        if filename:
            name = resolve_filename(
                filename,
                fallback=fallback_filename,
                ascii_filenames=self._config.ascii_filenames,
            )
            name = self._unique_name(name, fallback_filename, taken)
            if skipped := self._skip_existing(output_dir / name, media_url, overwrite):
                return skipped

        logger.debug("Downloading %s", media_url)
        try:
            with self._http.stream(
                "GET", media_url, headers=self._media_headers
            ) as response:
                if not response.is_success:
                    raise DownloadError(
                        f"failed to download {media_url}: HTTP {response.status_code}"
                    )
                name = self._resolve_name(
                    response, filename, fallback_filename, taken
                )
                path = output_dir / name
                if skipped := self._skip_existing(path, media_url, overwrite):
                    return skipped
                written = self._write_stream(response, path, on_progress)
        except httpx.HTTPError as e:
            logger.warning("Download of %s failed: %s", media_url, e)
            raise TransportError(f"failed to download {media_url}: {e}") from e

        logger.info("Saved %s (%d bytes)", path, written)
        return DownloadResult(
            status=DownloadStatus.SUCCESS,
            path=path,
            filename=name,
            source_url=media_url,
            bytes_written=written,
        )

    def _write_stream(
        self,
        response: httpx.Response,
        path: Path,
        on_progress: ProgressCallback | None,
    ) -> int:
        total = _content_length(response)
        part_path = path.with_name(f"{path.name}.part")
        written = 0
        completed = False
        try:
            with part_path.open("wb") as f:
                for chunk in response.iter_bytes(chunk_size=self._config.chunk_size):
                    f.write(chunk)
                    written += len(chunk)
                    if on_progress:
                        on_progress(written, total)
            part_path.replace(path)
            completed = True
        except OSError as e:
            raise DownloadError(f"failed to write {path}: {e}") from e
        finally:
            if not completed:
                part_path.unlink(missing_ok=True)
        return written

    def download(
        self,
        url: str,
        output_dir: Path,
        options: ProcessOptions | None = None,
        *,
        picker_index: int = 0,
        overwrite: bool = False,
        on_progress: ProgressCallback | None = None,
    ) -> DownloadResult:
        """Process a media URL and save the result to output_dir.

        For picker responses only one item is saved (the first by default).
        Use process() and download_all() to save every item.

        Args:
            url: Link to the media.
            output_dir: Directory to save into.
            options: Request options.
            picker_index: Which picker item to save.
            overwrite: Replace an existing file instead of skipping.
            on_progress: Optional callback for progress updates.

        Returns:
            DownloadResult describing the saved (or skipped) file.
        """
        target = resolve_media(self.process(url, options), picker_index)
        return self.download_file(
            target.url,
            output_dir,
            target.filename,
            fallback_filename=target.fallback_filename,
            overwrite=overwrite,
            on_progress=on_progress,
        )

    def download_all(
        self,
        response: MediaResponse,
        output_dir: Path,
        *,
        overwrite: bool = False,
    ) -> list[DownloadResult]:
        """Save every file referenced by a processing response.

        Args:
            response: Response from process().
            output_dir: Directory to save into.
            overwrite: Replace existing files instead of skipping.

        Returns:
            One DownloadResult per file, in response order. Items that
            resolve to the same filename are saved under distinct names.
        """
        results: list[DownloadResult] = []
        taken: set[str] = set()
        for target in media_targets(response):
            result = self.download_file(
                target.url,
                output_dir,
                target.filename,
                fallback_filename=target.fallback_filename,
                overwrite=overwrite,
                taken=taken,
            )
            taken.add(result.filename)
            results.append(result)
        return results

    def download_bytes(
        self,
        url: str,
        options: ProcessOptions | None = None,
        *,
        picker_index: int = 0,
    ) -> DownloadedMedia:
        """Process a media URL and return the file contents in memory.

        Args:
            url: Link to the media.
            options: Request options.
            picker_index: Which picker item to fetch.

        Returns:
            DownloadedMedia with the filename and raw bytes.
        """
        target = resolve_media(self.process(url, options), picker_index)

        logger.debug("Fetching %s", target.url)
        try:
            response = self._http.get(target.url, headers=self._media_headers)
        except httpx.HTTPError as e:
            raise TransportError(f"failed to download {target.url}: {e}") from e
        if not response.is_success:
            raise DownloadError(
                f"failed to download {target.url}: HTTP {response.status_code}"
            )

        return DownloadedMedia(
            filename=self._resolve_name(
                response, target.filename, target.fallback_filename
            ),
            data=response.content,
        )
