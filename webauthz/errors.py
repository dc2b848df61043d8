"""Error types for the webauthz client runtime.

Every error carries an explicit ``kind`` so callers can branch on it
instead of matching messages. Host applications typically map
``NOT_FOUND`` and ``ACCESS_DENIED`` to a 4xx response and the
authorization-server family to a retry-later condition.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Coarse failure categories exposed to callers."""

    NOT_FOUND = "not_found"
    ACCESS_DENIED = "access_denied"
    INVALID_REQUEST = "invalid_request"
    EXCHANGE_FAILED = "exchange_failed"
    DISCOVERY_FAILED = "discovery_failed"
    REGISTRATION_FAILED = "registration_failed"
    STORAGE_ERROR = "storage_error"


class WebauthzError(Exception):
    """Base exception for webauthz errors."""

    kind: ErrorKind

    def __init__(self, message: str | None = None):
        super().__init__(message or self.kind.value.replace("_", " "))


class NotFoundError(WebauthzError):
    """Raised for an unknown client_state or a client_id that does not match."""

    kind = ErrorKind.NOT_FOUND


class AccessDeniedError(WebauthzError):
    """Raised when the caller may not use the request or the server refused access."""

    kind = ErrorKind.ACCESS_DENIED


class InvalidRequestError(WebauthzError):
    """Raised when an exchange has neither a grant token nor a usable refresh token."""

    kind = ErrorKind.INVALID_REQUEST


class StorageError(WebauthzError):
    """Raised when the store reports a failed write."""

    kind = ErrorKind.STORAGE_ERROR


class AuthorizationServerError(WebauthzError):
    """Base exception for failures talking to the authorization server."""

    kind = ErrorKind.EXCHANGE_FAILED


class ExchangeFailedError(AuthorizationServerError):
    """Raised when a grant or refresh exchange fails in transport."""

    kind = ErrorKind.EXCHANGE_FAILED


class DiscoveryFailedError(AuthorizationServerError):
    """Raised when the discovery document cannot be fetched or stored."""

    kind = ErrorKind.DISCOVERY_FAILED


class RegistrationFailedError(AuthorizationServerError):
    """Raised when client registration cannot be completed or stored."""

    kind = ErrorKind.REGISTRATION_FAILED
