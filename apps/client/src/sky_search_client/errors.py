"""Error taxonomy shared by the gateway, the flight client and the session."""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    """Machine-readable category attached to every client error."""

    RATE_LIMITED = "RATE_LIMITED"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    BAD_REQUEST = "BAD_REQUEST"
    NETWORK_UNAVAILABLE = "NETWORK_UNAVAILABLE"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    PROVIDER_REPORTED_FAILURE = "PROVIDER_REPORTED_FAILURE"
    EMPTY_PAYLOAD = "EMPTY_PAYLOAD"
    MALFORMED_PAYLOAD = "MALFORMED_PAYLOAD"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    CONFIGURATION_MISSING = "CONFIGURATION_MISSING"
    AUTH_FAILED = "AUTH_FAILED"


class SkySearchError(Exception):
    """Base class for every error raised by this package."""

    kind: ErrorKind = ErrorKind.PROVIDER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class GatewayError(SkySearchError):
    """Transport or HTTP-level failure talking to the provider."""

    def __init__(
        self, kind: ErrorKind, message: str, *, status_code: int | None = None
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code


class ProviderReportedFailure(SkySearchError):
    """The provider answered 2xx but reported ``status: false``."""

    kind = ErrorKind.PROVIDER_REPORTED_FAILURE


class EmptyPayload(SkySearchError):
    """The provider reported success without a ``data`` payload."""

    kind = ErrorKind.EMPTY_PAYLOAD


class MalformedPayload(SkySearchError):
    """The payload does not match the documented response shape."""

    kind = ErrorKind.MALFORMED_PAYLOAD


class InvalidArgument(SkySearchError):
    kind = ErrorKind.INVALID_ARGUMENT


class ConfigurationMissing(SkySearchError):
    """A required startup setting is absent.  Never converted to a result."""

    kind = ErrorKind.CONFIGURATION_MISSING


class AuthenticationError(SkySearchError):
    kind = ErrorKind.AUTH_FAILED
