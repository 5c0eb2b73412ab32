"""CLI settings using pydantic-settings."""

from typing import Annotated, Literal

from pydantic import AliasChoices, BeforeValidator, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from codl.config import DEFAULT_TIMEOUT, ClientConfig

LogLevel = Annotated[
    Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
    BeforeValidator(lambda v: v.upper() if isinstance(v, str) else v),
]


class Settings(BaseSettings):
    """Environment-driven defaults for the CLI.

    Variables use the ``CODL_`` prefix. ``INSTANCE_URL`` and ``AUTH_TOKEN``
    are also read so existing shell setups keep working.
    """

    model_config = SettingsConfigDict(
        env_prefix="CODL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    instance_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("CODL_INSTANCE_URL", "INSTANCE_URL"),
        description="cobalt instance URL",
    )
    api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("CODL_API_KEY", "AUTH_TOKEN"),
        description="cobalt API key",
    )
    timeout: float = Field(
        default=DEFAULT_TIMEOUT, gt=0, description="Request timeout in seconds"
    )
    ascii_filenames: bool = Field(
        default=False, description="Transliterate unicode to ASCII in filenames"
    )
    log_level: LogLevel = Field(default="WARNING", description="Log level")

    def client_config(self) -> ClientConfig:
        """Build a client configuration from these settings.

        Raises:
            ValueError: If no instance URL is configured.
        """
        if not self.instance_url:
            raise ValueError("no cobalt instance URL configured")
        return ClientConfig(
            instance_url=self.instance_url,
            api_key=self.api_key or None,
            timeout=self.timeout,
            ascii_filenames=self.ascii_filenames,
        )
