"""Tests for response parsing."""

from datetime import UTC, datetime
from typing import Any

import pytest
from codl.exceptions import (
    BadResponseError,
    CobaltAPIError,
    ContentUnavailableError,
    RateLimitError,
)
from codl.models.enums import PickerType
from codl.models.responses import (
    LocalProcessingResponse,
    PickerResponse,
    TunnelRedirectResponse,
    parse_error_info,
    parse_process_response,
    parse_server_info,
)


class TestParseProcessResponse:
    """Tests for parse_process_response."""

    @pytest.mark.parametrize("fixture_name", ["tunnel_data", "redirect_data"])
    def test_tunnel_and_redirect(
        self, fixture_name: str, request: pytest.FixtureRequest
    ) -> None:
        """Tunnel and redirect replies share one model."""
        data = request.getfixturevalue(fixture_name)
        response = parse_process_response(data)

        assert isinstance(response, TunnelRedirectResponse)
        assert response.status == data["status"]
        assert response.url == data["url"]
        assert response.filename == "twitter_1825427547108053062.mp4"

    def test_picker(self, picker_data: dict[str, Any]) -> None:
        """Picker items should be parsed in order with their media type."""
        response = parse_process_response(picker_data)

        assert isinstance(response, PickerResponse)
        assert response.audio_filename == "tiktok_user_7301_audio.mp3"
        assert [item.media_type for item in response.picker] == [
            PickerType.PHOTO,
            PickerType.PHOTO,
        ]
        assert response.picker[0].thumb is not None
        assert response.picker[1].thumb is None

    def test_picker_without_audio(self) -> None:
        """Background audio is optional."""
        response = parse_process_response(
            {"status": "picker", "picker": [{"type": "video", "url": "https://a/b"}]}
        )
        assert isinstance(response, PickerResponse)
        assert response.audio is None
        assert response.audio_filename is None

    def test_local_processing(self, local_processing_data: dict[str, Any]) -> None:
        """Local-processing jobs should expose their tunnels and output."""
        response = parse_process_response(local_processing_data)

        assert isinstance(response, LocalProcessingResponse)
        assert response.job_type == "merge"
        assert len(response.tunnel) == 2
        assert response.output.mime_type == "video/mp4"
        assert response.output.metadata == {"title": "Never Gonna Give You Up"}
        assert response.audio is not None
        assert response.audio.copy_ is True
        assert response.is_hls is False

    def test_ignores_unknown_fields(self, tunnel_data: dict[str, Any]) -> None:
        """Fields added by newer instances should not break parsing."""
        response = parse_process_response({**tunnel_data, "newField": 1})
        assert isinstance(response, TunnelRedirectResponse)

    def test_error_raises_mapped_exception(self) -> None:
        """An error reply should raise the matching exception."""
        data = {
            "status": "error",
            "error": {"code": "error.api.rate_exceeded", "context": {"limit": 20}},
        }
        with pytest.raises(RateLimitError) as exc_info:
            parse_process_response(data)
        assert exc_info.value.code == "error.api.rate_exceeded"
        assert exc_info.value.limit == 20

    def test_error_with_service_context(self) -> None:
        """The service from the error context should be exposed."""
        data = {
            "status": "error",
            "error": {
                "code": "error.api.content.video.unavailable",
                "context": {"service": "youtube"},
            },
        }
        with pytest.raises(ContentUnavailableError) as exc_info:
            parse_process_response(data)
        assert exc_info.value.service == "youtube"

    @pytest.mark.parametrize(
        "data",
        [
            {"status": "stream", "url": "https://a/b"},
            {"url": "https://a/b", "filename": "b.mp4"},
            {"status": "tunnel", "url": "https://a/b"},
            {"status": "picker"},
            {"status": "error", "error": {}},
            ["status", "tunnel"],
            None,
        ],
        ids=[
            "unknown_status",
            "missing_status",
            "missing_filename",
            "missing_picker",
            "error_without_code",
            "not_an_object",
            "null",
        ],
    )
    def test_bad_shapes_raise_bad_response(self, data: Any) -> None:
        """Unrecognized replies should raise BadResponseError."""
        with pytest.raises(BadResponseError):
            parse_process_response(data)

    def test_error_is_not_bad_response(self) -> None:
        """A well-formed error is a CobaltAPIError, not a BadResponseError."""
        data = {"status": "error", "error": {"code": "error.api.fetch.fail"}}
        with pytest.raises(CobaltAPIError) as exc_info:
            parse_process_response(data)
        assert not isinstance(exc_info.value, BadResponseError)
        assert type(exc_info.value) is CobaltAPIError


class TestParseErrorInfo:
    """Tests for parse_error_info."""

    def test_returns_error_object(self) -> None:
        """Should extract the code from an error body."""
        info = parse_error_info(
            {"status": "error", "error": {"code": "error.api.auth.key.invalid"}}
        )
        assert info is not None
        assert info.code == "error.api.auth.key.invalid"
        assert info.context is None

    @pytest.mark.parametrize(
        "data",
        [
            None,
            "Bad Gateway",
            {"status": "tunnel"},
            {"status": "error"},
            {"status": "error", "error": "nope"},
        ],
    )
    def test_returns_none_for_non_errors(self, data: Any) -> None:
        """Anything that is not a cobalt error body should give None."""
        assert parse_error_info(data) is None


class TestParseServerInfo:
    """Tests for parse_server_info."""

    def test_parses_instance_info(self, server_info_data: dict[str, Any]) -> None:
        """Should parse cobalt and git sections."""
        info = parse_server_info(server_info_data)

        assert info.cobalt.version == "10.5.4"
        assert info.cobalt.duration_limit == 10800
        assert "youtube" in info.cobalt.services
        assert info.git is not None
        assert info.git.branch == "main"

    def test_start_time_is_milliseconds(
        self, server_info_data: dict[str, Any]
    ) -> None:
        """startTime is a millisecond timestamp sent as a string."""
        info = parse_server_info(server_info_data)
        assert info.cobalt.start_time == datetime(2024, 12, 1, 18, 33, tzinfo=UTC)

    def test_start_time_as_number(self, server_info_data: dict[str, Any]) -> None:
        """A numeric startTime should be accepted too."""
        server_info_data["cobalt"]["startTime"] = 1733077980000
        info = parse_server_info(server_info_data)
        assert info.cobalt.start_time.year == 2024

    def test_git_is_optional(self, server_info_data: dict[str, Any]) -> None:
        """Instances built without git metadata omit the git section."""
        del server_info_data["git"]
        assert parse_server_info(server_info_data).git is None

    def test_missing_cobalt_section_raises(self) -> None:
        """A body without the cobalt section is not server info."""
        with pytest.raises(BadResponseError):
            parse_server_info({"git": {}})
