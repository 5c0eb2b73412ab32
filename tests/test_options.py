"""Tests for request options."""

import pytest
from codl.models.enums import (
    AudioFormat,
    DownloadMode,
    FilenameStyle,
    LocalProcessing,
    VideoQuality,
)
from codl.models.options import ProcessOptions
from pydantic import ValidationError


class TestToPayload:
    """Tests for ProcessOptions.to_payload."""

    def test_default_options_send_only_url(self) -> None:
        """Unset options should be left out of the body."""
        payload = ProcessOptions().to_payload("https://youtu.be/dQw4w9WgXcQ")
        assert payload == {"url": "https://youtu.be/dQw4w9WgXcQ"}

    def test_keys_are_camel_case(self) -> None:
        """Options should be serialized with the instance's camelCase keys."""
        options = ProcessOptions(
            video_quality=VideoQuality.Q720,
            audio_format=AudioFormat.MP3,
            filename_style=FilenameStyle.PRETTY,
            download_mode=DownloadMode.AUDIO,
            youtube_dub_lang="en",
            disable_metadata=True,
            tiktok_h265=False,
        )

        payload = options.to_payload("https://youtu.be/dQw4w9WgXcQ")

        assert payload == {
            "url": "https://youtu.be/dQw4w9WgXcQ",
            "videoQuality": "720",
            "audioFormat": "mp3",
            "filenameStyle": "pretty",
            "downloadMode": "audio",
            "youtubeDubLang": "en",
            "disableMetadata": True,
            "tiktokH265": False,
        }

    def test_youtube_hls_uses_upper_case_acronym(self) -> None:
        """The HLS flag should be sent as youtubeHLS."""
        payload = ProcessOptions(youtube_hls=True).to_payload("https://youtu.be/x")
        assert payload["youtubeHLS"] is True
        assert "youtubeHls" not in payload

    def test_local_processing_value(self) -> None:
        """Enum options should be sent as their wire strings."""
        options = ProcessOptions(local_processing=LocalProcessing.DISABLED)
        assert options.to_payload("https://x.test/1")["localProcessing"] == "disabled"

    def test_url_is_stripped(self) -> None:
        """Surrounding whitespace in the URL should be removed."""
        payload = ProcessOptions().to_payload("  https://youtu.be/x \n")
        assert payload["url"] == "https://youtu.be/x"

    @pytest.mark.parametrize("url", ["", "   "])
    def test_empty_url_raises(self, url: str) -> None:
        """An empty URL cannot be processed."""
        with pytest.raises(ValueError, match="url cannot be empty"):
            ProcessOptions().to_payload(url)


class TestValidation:
    """Tests for option validation."""

    def test_accepts_wire_strings(self) -> None:
        """Plain strings should be coerced to the matching enum."""
        options = ProcessOptions(video_quality="1080", download_mode="mute")
        assert options.video_quality == VideoQuality.Q1080
        assert options.download_mode == DownloadMode.MUTE

    def test_accepts_camel_case_keys(self) -> None:
        """Options can be built from an existing request body."""
        options = ProcessOptions.model_validate(
            {"videoQuality": "480", "youtubeHLS": True}
        )
        assert options.video_quality == VideoQuality.Q480
        assert options.youtube_hls is True

    def test_rejects_unknown_quality(self) -> None:
        """Values outside the enumeration should fail validation."""
        with pytest.raises(ValidationError):
            ProcessOptions(video_quality="1081")

    def test_rejects_unknown_option(self) -> None:
        """Misspelled options should not be silently dropped."""
        with pytest.raises(ValidationError):
            ProcessOptions(video_qualty="720")  # type: ignore[call-arg]

    def test_is_frozen(self) -> None:
        """Options should be immutable."""
        options = ProcessOptions()
        with pytest.raises(ValidationError):
            options.always_proxy = True  # type: ignore[misc]
