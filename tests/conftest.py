"""Test fixtures and configuration."""

import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest
from codl.client import CobaltClient
from codl.config import ClientConfig

INSTANCE_URL = "http://cobalt.test/"
MEDIA_URL = "https://twitter.com/i/status/1825427547108053062"

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Isolate tests from .env files and shell configuration."""
    for key in list(os.environ.keys()):
        if key.startswith("CODL_") or key in ("INSTANCE_URL", "AUTH_TOKEN"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def make_client() -> Callable[..., CobaltClient]:
    """Factory for clients backed by an httpx mock transport."""

    def _make(handler: Handler, **config: Any) -> CobaltClient:
        config.setdefault("instance_url", INSTANCE_URL)
        http_client = httpx.Client(transport=httpx.MockTransport(handler))
        return CobaltClient(ClientConfig(**config), http_client=http_client)

    return _make


@pytest.fixture
def tunnel_data() -> dict[str, Any]:
    """A tunnel response as sent by the instance."""
    return {
        "status": "tunnel",
        "url": "http://cobalt.test/tunnel?id=abc123&exp=1&sig=x&sec=y&iv=z",
        "filename": "twitter_1825427547108053062.mp4",
    }


@pytest.fixture
def redirect_data() -> dict[str, Any]:
    """A redirect response pointing at the media host."""
    return {
        "status": "redirect",
        "url": "https://video.twimg.com/ext_tw_video/1825427/pu/vid/720x1280/clip.mp4",
        "filename": "twitter_1825427547108053062.mp4",
    }


@pytest.fixture
def picker_data() -> dict[str, Any]:
    """A picker response with two photos and background audio."""
    return {
        "status": "picker",
        "audio": "http://cobalt.test/tunnel?id=audio1",
        "audioFilename": "tiktok_user_7301_audio.mp3",
        "picker": [
            {
                "type": "photo",
                "url": "https://media.test/photo/first.jpeg",
                "thumb": "https://media.test/photo/first_thumb.jpeg",
            },
            {"type": "photo", "url": "https://media.test/photo/second"},
        ],
    }


@pytest.fixture
def local_processing_data() -> dict[str, Any]:
    """A local-processing merge job."""
    return {
        "status": "local-processing",
        "type": "merge",
        "service": "youtube",
        "tunnel": [
            "http://cobalt.test/tunnel?id=video",
            "http://cobalt.test/tunnel?id=audio",
        ],
        "output": {
            "type": "video/mp4",
            "filename": "youtube_dQw4w9WgXcQ_1920x1080_h264.mp4",
            "metadata": {"title": "Never Gonna Give You Up"},
        },
        "audio": {"copy": True, "format": "m4a", "bitrate": "128"},
        "isHLS": False,
    }


@pytest.fixture
def server_info_data() -> dict[str, Any]:
    """Reply of the instance root endpoint."""
    return {
        "cobalt": {
            "version": "10.5.4",
            "url": "http://cobalt.test/",
            "startTime": "1733077980000",
            "durationLimit": 10800,
            "services": ["bilibili", "instagram", "tiktok", "twitter", "youtube"],
        },
        "git": {
            "commit": "b1f3ce2bd5e2e2ffc8ba83e3eb58e58c93d4e8b2",
            "branch": "main",
            "remote": "imputnet/cobalt",
        },
    }
