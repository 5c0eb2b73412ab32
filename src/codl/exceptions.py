"""Custom exceptions for codl.

All exceptions include an HTTP status_code attribute for easy
integration with web frameworks like FastAPI.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from codl.models.responses import ErrorContext, ErrorInfo


class CodlError(Exception):
    """Base exception for codl.

    Attributes:
        status_code: HTTP status code for API error responses.
    """

    status_code: int = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidApiKeyError(CodlError):
    """API key cannot be sent to the instance.

    Raised when the key is empty or contains characters that are not
    valid in an HTTP header value.
    """

    status_code: int = 400  # Bad Request


class BadResponseError(CodlError):
    """The cobalt instance returned something codl cannot interpret.

    Raised for non-JSON bodies, unknown response statuses, missing fields,
    and failed requests that carry no cobalt error body.
    """

    status_code: int = 502  # Bad Gateway (upstream failure)


class TransportError(CodlError):
    """Network failure while talking to the instance or a media host."""

    status_code: int = 503  # Service Unavailable


class DownloadError(CodlError):
    """Failed to download media referenced by a cobalt response.

    Raised when the media host rejects the request, when a picker
    index is out of range, or when the response needs local processing.
    """

    status_code: int = 500  # Internal Server Error


class CobaltAPIError(CodlError):
    """The cobalt instance reported an error.

    Attributes:
        code: Cobalt error code, e.g. ``error.api.link.invalid``.
        service: Service the error relates to, when the instance reports one.
        limit: Numeric limit that was exceeded, when the instance reports one.
    """

    status_code: int = 502  # Bad Gateway (upstream failure)

    def __init__(
        self,
        code: str,
        context: ErrorContext | None = None,
        message: str | None = None,
    ) -> None:
        self.code = code
        self.context = context
        super().__init__(message or f"cobalt error {code}")

    @property
    def service(self) -> str | None:
        return self.context.service if self.context else None

    @property
    def limit(self) -> float | None:
        return self.context.limit if self.context else None

    @classmethod
    def from_info(cls, info: ErrorInfo) -> CobaltAPIError:
        """Build the most specific exception for a cobalt error object.

        Args:
            info: Parsed ``error`` object from a cobalt response.

        Returns:
            An instance of the matching CobaltAPIError subclass.
        """
        error_cls = _error_class_for_code(info.code)
        return error_cls(info.code, info.context)


class AuthenticationError(CobaltAPIError):
    """API key missing, invalid, or not accepted by the instance."""

    status_code: int = 401  # Unauthorized


class RateLimitError(CobaltAPIError):
    """Too many requests were made to the instance."""

    status_code: int = 429  # Too Many Requests


class UnsupportedLinkError(CobaltAPIError):
    """The link is invalid or belongs to a service the instance does not support."""

    status_code: int = 400  # Bad Request


class ContentUnavailableError(CobaltAPIError):
    """The media exists but cannot be fetched (private, deleted, region locked...)."""

    status_code: int = 404  # Not Found


_UNSUPPORTED_CODES = frozenset(
    {
        "error.api.service.unsupported",
        "error.api.service.disabled",
    }
)


def _error_class_for_code(code: str) -> type[CobaltAPIError]:
    if code.startswith("error.api.auth."):
        return AuthenticationError
    if code == "error.api.rate_exceeded":
        return RateLimitError
    if code.startswith("error.api.link.") or code in _UNSUPPORTED_CODES:
        return UnsupportedLinkError
    if code.startswith("error.api.content."):
        return ContentUnavailableError
    return CobaltAPIError
