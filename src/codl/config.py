"""Configuration for codl."""

from dataclasses import dataclass

DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class ClientConfig:
    """Cobalt client configuration.

    Attributes:
        instance_url: Base URL of the cobalt instance (the API root).
        api_key: Optional API key, sent as ``Authorization: Api-Key <key>``.
        timeout: Request timeout in seconds, for both API calls and downloads.
        chunk_size: Read size in bytes when streaming media to disk.
        ascii_filenames: Transliterate unicode to ASCII in saved filenames.
    """

    instance_url: str
    api_key: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    chunk_size: int = 64 * 1024
    ascii_filenames: bool = False

    def __post_init__(self) -> None:
        if not self.instance_url or not self.instance_url.strip():
            raise ValueError("instance_url cannot be empty")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
