"""Models for parsing cobalt API responses.

The processing endpoint answers with a JSON object tagged by ``status``.
These models mirror those shapes; unknown keys are ignored so newer
instances that add fields keep working.
"""

from datetime import UTC, datetime
from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel

from codl.exceptions import BadResponseError, CobaltAPIError
from codl.models.enums import PickerType

__all__ = [
    "ErrorContext",
    "ErrorInfo",
    "ErrorResponse",
    "LocalProcessingAudio",
    "LocalProcessingOutput",
    "LocalProcessingResponse",
    "MediaResponse",
    "PickerItem",
    "PickerResponse",
    "ProcessResponse",
    "ServerInfo",
    "ServerInfoCobalt",
    "ServerInfoGit",
    "TunnelRedirectResponse",
    "parse_process_response",
    "parse_server_info",
]


class CobaltModel(BaseModel):
    """Base model for cobalt responses."""

    model_config = ConfigDict(
        extra="ignore",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class TunnelRedirectResponse(CobaltModel):
    """A single file, either proxied by the instance or linked directly."""

    status: Literal["tunnel", "redirect"]
    url: str
    filename: str


class PickerItem(CobaltModel):
    """One candidate media item in a picker response."""

    media_type: PickerType = Field(alias="type")
    url: str
    thumb: str | None = None


class PickerResponse(CobaltModel):
    """Several media items to choose from (e.g. a post with multiple photos).

    Attributes:
        audio: Optional background audio URL (slideshows).
        audio_filename: Suggested filename for the background audio.
        picker: Candidate items, in the order the service lists them.
    """

    status: Literal["picker"]
    audio: str | None = None
    audio_filename: str | None = None
    picker: list[PickerItem]


class LocalProcessingOutput(CobaltModel):
    """Description of the file the client is expected to produce."""

    mime_type: str = Field(alias="type")
    filename: str
    metadata: dict[str, str] | None = None
    subtitles: bool | None = None


class LocalProcessingAudio(CobaltModel):
    """Audio settings for a local-processing job."""

    copy_: bool = Field(default=False, alias="copy")
    format: str | None = None
    bitrate: str | None = None
    cover: bool | None = None
    crop_cover: bool | None = None


class LocalProcessingResponse(CobaltModel):
    """Instance returned raw tunnels and left the muxing to the client.

    Attributes:
        job_type: Processing the client must do (merge, mute, audio, gif,
            remux or proxy).
        service: Service the media came from.
        tunnel: Tunnel URLs for the input streams.
    """

    status: Literal["local-processing"]
    job_type: str = Field(alias="type")
    service: str
    tunnel: list[str]
    output: LocalProcessingOutput
    audio: LocalProcessingAudio | None = None
    is_hls: bool | None = Field(default=None, alias="isHLS")


class ErrorContext(CobaltModel):
    """Extra details attached to some errors."""

    service: str | None = None
    limit: float | None = None


class ErrorInfo(CobaltModel):
    """The ``error`` object of an error response."""

    code: str
    context: ErrorContext | None = None


class ErrorResponse(CobaltModel):
    status: Literal["error"]
    error: ErrorInfo


ProcessResponse = Annotated[
    TunnelRedirectResponse | PickerResponse | LocalProcessingResponse | ErrorResponse,
    Field(discriminator="status"),
]

# Responses that describe media; errors are raised instead of returned.
MediaResponse = TunnelRedirectResponse | PickerResponse | LocalProcessingResponse

_process_response_adapter: TypeAdapter[ProcessResponse] = TypeAdapter(ProcessResponse)


def parse_error_info(data: Any) -> ErrorInfo | None:
    """Extract the error object from an error response body.

    Returns:
        Parsed ErrorInfo, or None if the body is not a cobalt error.
    """
    if not isinstance(data, dict) or data.get("status") != "error":
        return None
    try:
        return ErrorResponse.model_validate(data).error
    except ValidationError:
        return None


def parse_process_response(data: Any) -> MediaResponse:
    """Parse a processing endpoint reply into a typed response.

    Args:
        data: Decoded JSON body.

    Returns:
        The matching response model.

    Raises:
        CobaltAPIError: If the instance reported an error.
        BadResponseError: If the body has an unknown status or a bad shape.
    """
    if not isinstance(data, dict):
        raise BadResponseError("bad response from cobalt instance: expected an object")

    try:
        response = _process_response_adapter.validate_python(data)
    except ValidationError as e:
        status = data.get("status")
        raise BadResponseError(
            f"bad response from cobalt instance (status={status!r})"
        ) from e

    if isinstance(response, ErrorResponse):
        raise CobaltAPIError.from_info(response.error)
    return response


class ServerInfoCobalt(CobaltModel):
    """Instance details.

    Attributes:
        version: cobalt version string.
        url: Public URL of the instance.
        start_time: When the instance started.
        duration_limit: Maximum media duration in seconds.
        services: Services this instance can process.
    """

    version: str
    url: str
    start_time: datetime
    duration_limit: int
    services: list[str]

    @field_validator("start_time", mode="before")
    @classmethod
    def _parse_start_time(cls, v: Any) -> Any:
        # Sent as milliseconds since the epoch, usually as a string
        if isinstance(v, str) and v.isdigit():
            v = int(v)
        if isinstance(v, int | float) and not isinstance(v, bool):
            return datetime.fromtimestamp(v / 1000, tz=UTC)
        return v


class ServerInfoGit(CobaltModel):
    commit: str
    branch: str
    remote: str


class ServerInfo(CobaltModel):
    """Reply of the instance root endpoint."""

    cobalt: ServerInfoCobalt
    git: ServerInfoGit | None = None


def parse_server_info(data: Any) -> ServerInfo:
    """Parse the instance root endpoint reply.

    Raises:
        BadResponseError: If the body does not look like server info.
    """
    try:
        return ServerInfo.model_validate(data)
    except ValidationError as e:
        raise BadResponseError("bad server info from cobalt instance") from e
