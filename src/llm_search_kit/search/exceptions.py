"""Exceptions raised by the search engine.

Every error crossing the public ``SearchManager.search`` boundary is a
:class:`SearchError` carrying a machine-readable :class:`ErrorCode`; raw
transport exceptions are wrapped, never re-raised unmodified.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Machine-readable error codes."""

    INVALID_REQUEST = "INVALID_REQUEST"
    UNKNOWN_PROVIDER = "UNKNOWN_PROVIDER"
    PROVIDER_DISABLED = "PROVIDER_DISABLED"
    PROVIDER_FETCH_ERROR = "PROVIDER_FETCH_ERROR"
    PROVIDER_RESPONSE_ERROR = "PROVIDER_RESPONSE_ERROR"
    MALFORMED_HTML = "MALFORMED_HTML"
    TIMEOUT = "TIMEOUT"
    ALL_PROVIDERS_FAILED = "ALL_PROVIDERS_FAILED"


class SearchError(Exception):
    """Base exception for search-related errors."""

    code: ErrorCode = ErrorCode.PROVIDER_FETCH_ERROR

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        original_error: BaseException | None = None,
    ) -> None:
        """Initialize search error.

        Args:
            message: Error message
            provider: Provider the error relates to
            original_error: Underlying exception, if any
        """
        self.message = message
        self.provider = provider
        self.original_error = original_error
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Return the structured ``{message, code, originalError?}`` form."""
        data: dict[str, Any] = {"message": self.message, "code": self.code.value}
        if self.original_error is not None:
            data["originalError"] = _describe(self.original_error)
        return data


def _describe(exc: BaseException) -> Any:
    if isinstance(exc, SearchError):
        return exc.to_dict()
    return f"{type(exc).__name__}: {exc}"


class InvalidRequestError(SearchError):
    """The query or the search options are invalid."""

    code = ErrorCode.INVALID_REQUEST


class UnknownProviderError(SearchError):
    """The requested provider id is not registered."""

    code = ErrorCode.UNKNOWN_PROVIDER

    def __init__(self, provider: str) -> None:
        super().__init__(f"Unknown search provider: {provider!r}", provider=provider)


class ProviderDisabledError(SearchError):
    """The provider exists but is disabled."""

    code = ErrorCode.PROVIDER_DISABLED

    def __init__(self, provider: str, experimental: bool = False) -> None:
        self.experimental = experimental
        reason = "is experimental and not enabled" if experimental else "has been disabled"
        super().__init__(f"Search provider {provider!r} {reason}", provider=provider)


class ProviderFetchError(SearchError):
    """Network or HTTP failure while reaching a provider."""

    code = ErrorCode.PROVIDER_FETCH_ERROR

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        original_error: BaseException | None = None,
        status_code: int | None = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(message, provider=provider, original_error=original_error)


class ProviderResponseError(SearchError):
    """The provider explicitly reported an error (or served a challenge page)."""

    code = ErrorCode.PROVIDER_RESPONSE_ERROR

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        detail: Any = None,
    ) -> None:
        self.detail = detail
        super().__init__(message, provider=provider)


class MalformedHtmlError(SearchError):
    """A scraped payload was empty or could not be parsed."""

    code = ErrorCode.MALFORMED_HTML


class SearchTimeoutError(SearchError):
    """The whole search call exceeded the caller-supplied timeout."""

    code = ErrorCode.TIMEOUT


class AllProvidersFailedError(SearchError):
    """Both the requested provider and its fallback failed."""

    code = ErrorCode.ALL_PROVIDERS_FAILED

    def __init__(self, primary_error: SearchError, fallback_error: SearchError) -> None:
        self.primary_error = primary_error
        self.fallback_error = fallback_error
        super().__init__(
            f"All search providers failed: {primary_error.provider}: {primary_error.message}; "
            f"{fallback_error.provider}: {fallback_error.message}",
            provider=fallback_error.provider,
            original_error=fallback_error,
        )

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["originalError"] = {
            "primary": self.primary_error.to_dict(),
            "fallback": self.fallback_error.to_dict(),
        }
        return data
