"""
Structured error types for AddressIQ.

Every failure inside the aggregation pipeline is one of a small, typed set of
errors. Provider adapters raise :class:`ProviderError` carrying an
:class:`ErrorKind`; the engine turns those into entries of the composite
record's ``errors`` map. Only the address resolver is allowed to abort a
request, via :class:`AddressNotFoundError` or :class:`AddressResolutionError`.

Manifesto:
    - **Soft by default:** A provider error describes one field, never the request
    - **Typed kinds:** ``ErrorKind`` is the stable vocabulary recorded per source
    - **Rich context:** Errors carry source, URL and HTTP status for logging
    - **Error chaining:** The transport exception is preserved as ``__cause__``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                      AddressIQError                          │
        │          (category, retryable, context, cause)               │
        ├─────────────────────────────────────────────────────────────┤
        │                                                              │
        │  ProviderError          AddressError          ConfigError    │
        │  (kind, source,         (hard failure)        (CONFIG)       │
        │   status)                   │                                │
        │                         AddressNotFoundError   CacheError    │
        │                         AddressResolutionError (CACHE)       │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> err = ProviderError(ErrorKind.NON_SUCCESS_STATUS, "weather", status=500)
    >>> str(err)
    'API returned status 500'
    >>> err.retryable
    True

Tags:
    errors, exceptions, soft-failure, providers, addressiq

Doc-Types:
    api-reference
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Outcome classification recorded for a failed provider call."""

    CONFIG_MISSING = "ConfigMissing"  # Adapter disabled by configuration
    TRANSPORT = "Transport"  # Connection refused, reset, DNS
    NON_SUCCESS_STATUS = "NonSuccessStatus"  # Any status outside 2xx not mapped below
    DECODE = "Decode"  # Body did not match the expected schema
    TIMEOUT = "Timeout"  # Request deadline reached
    CANCELLED = "Cancelled"  # Caller went away; logged on stream disconnect, never raised
    NOT_FOUND = "NotFound"  # Semantic "no data for this point"
    UNAUTHORISED = "Unauthorised"  # 401 / 403
    UPSTREAM_RATE_LIMITED = "UpstreamRateLimited"  # 429


class ErrorCategory(str, Enum):
    """Coarse routing categories for logging and the HTTP façade."""

    PROVIDER = "PROVIDER"
    ADDRESS = "ADDRESS"
    CONFIG = "CONFIG"
    CACHE = "CACHE"
    VALIDATION = "VALIDATION"
    INTERNAL = "INTERNAL"


_RETRYABLE_KINDS = frozenset(
    {
        ErrorKind.TRANSPORT,
        ErrorKind.TIMEOUT,
        ErrorKind.UPSTREAM_RATE_LIMITED,
    }
)


@dataclass
class ErrorContext:
    """Structured metadata attached to an error for logging."""

    source: str | None = None
    url: str | None = None
    http_status: int | None = None
    postcode: str | None = None
    house_number: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["source", "url", "http_status", "postcode", "house_number"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class AddressIQError(Exception):
    """Base exception for all AddressIQ errors."""

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> AddressIQError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ProviderError(ErrorKind.DECODE, "weather").with_context(
                url="https://api.open-meteo.com/v1/forecast"
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# PROVIDER ERRORS (soft)
# =============================================================================


class ProviderError(AddressIQError):
    """
    A single provider adapter failed.

    The message is what ends up in the composite record's ``errors`` map, so
    it is short and human readable. ``kind`` is the machine-readable outcome.
    For ``NonSuccessStatus`` the status code is always part of the message.
    """

    default_category = ErrorCategory.PROVIDER

    def __init__(
        self,
        kind: ErrorKind,
        source: str,
        message: str | None = None,
        *,
        status: int | None = None,
        cause: Exception | None = None,
    ):
        if message is None:
            message = _default_message(kind, status)
        retryable = kind in _RETRYABLE_KINDS or (
            kind is ErrorKind.NON_SUCCESS_STATUS and status is not None and status >= 500
        )
        super().__init__(
            message,
            retryable=retryable,
            context=ErrorContext(source=source, http_status=status),
            cause=cause,
        )
        self.kind = kind
        self.source = source
        self.status = status

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["kind"] = self.kind.value
        return result


def _default_message(kind: ErrorKind, status: int | None) -> str:
    if status is not None:
        return f"API returned status {status}"
    return {
        ErrorKind.CONFIG_MISSING: "source not configured",
        ErrorKind.TRANSPORT: "request failed",
        ErrorKind.NON_SUCCESS_STATUS: "API returned non-success status",
        ErrorKind.DECODE: "failed to decode response",
        ErrorKind.TIMEOUT: "Timeout",
        ErrorKind.CANCELLED: "Cancelled",
        ErrorKind.NOT_FOUND: "no data found",
        ErrorKind.UNAUTHORISED: "unauthorised",
        ErrorKind.UPSTREAM_RATE_LIMITED: "rate limited by upstream",
    }[kind]


# =============================================================================
# ADDRESS ERRORS (hard)
# =============================================================================


class AddressError(AddressIQError):
    """The address resolver failed; the request has no answer."""

    default_category = ErrorCategory.ADDRESS


class AddressNotFoundError(AddressError):
    """No address document exists for the given postcode and house number."""

    def __init__(self, postcode: str, house_number: str):
        super().__init__(
            f"no address found for {postcode} {house_number}",
            context=ErrorContext(source="address", postcode=postcode, house_number=house_number),
        )
        self.postcode = postcode
        self.house_number = house_number


class AddressResolutionError(AddressError):
    """The address service could not be reached or returned garbage."""

    def __init__(self, message: str, *, kind: ErrorKind, cause: Exception | None = None):
        super().__init__(
            message,
            retryable=kind in _RETRYABLE_KINDS,
            context=ErrorContext(source="address"),
            cause=cause,
        )
        self.kind = kind


# =============================================================================
# CONFIG / CACHE / INPUT ERRORS
# =============================================================================


class ConfigError(AddressIQError):
    """Invalid or missing configuration."""

    default_category = ErrorCategory.CONFIG


class CacheError(AddressIQError):
    """A cache backend failed. Reads and writes swallow it; a flush raises it."""

    default_category = ErrorCategory.CACHE
    default_retryable = True


class InvalidInputError(AddressIQError):
    """A request parameter is missing or malformed."""

    default_category = ErrorCategory.VALIDATION


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, AddressIQError):
        return error.retryable
    return isinstance(error, (ConnectionError, OSError))


def error_kind(error: Exception) -> ErrorKind | None:
    """Return the provider outcome kind carried by ``error``, if any."""
    return getattr(error, "kind", None)


__all__ = [
    "AddressError",
    "AddressIQError",
    "AddressNotFoundError",
    "AddressResolutionError",
    "CacheError",
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "ErrorKind",
    "InvalidInputError",
    "ProviderError",
    "error_kind",
    "is_retryable",
]
