"""Webauthz - client runtime for challenge-driven delegated authorization.

This package provides:
- Parsing of webauthz Bearer challenges
- Discovery and client registration, cached in a pluggable store
- Access request creation and tracking
- Grant and refresh token exchange
- Access token lookup by hierarchical path with transparent refresh
"""

__version__ = "0.1.0"

from .auth import WebauthzAuth
from .challenge import parse_bearer_params, parse_challenge
from .client import WebauthzClient
from .config import StoreSettings, WebauthzSettings
from .context import WebauthzContext
from .discovery import get_configuration, get_registration
from .errors import (
    AccessDeniedError,
    AuthorizationServerError,
    DiscoveryFailedError,
    ErrorKind,
    ExchangeFailedError,
    InvalidRequestError,
    NotFoundError,
    RegistrationFailedError,
    StorageError,
    WebauthzError,
)
from .exchanger import exchange
from .models import (
    AccessRequest,
    AccessRequestInfo,
    AccessRequestStatus,
    AccessToken,
    Challenge,
    Configuration,
    ExchangeResult,
    Registration,
)
from .negotiation import create_access_request, get_access_request
from .resolver import get_access_token
from .storage import InMemoryStore, JsonFileStore, WebauthzStore

__all__ = [
    "WebauthzClient",
    "WebauthzContext",
    "WebauthzSettings",
    "StoreSettings",
    "WebauthzAuth",
    # Operations
    "parse_challenge",
    "parse_bearer_params",
    "get_configuration",
    "get_registration",
    "create_access_request",
    "get_access_request",
    "exchange",
    "get_access_token",
    # Models
    "Challenge",
    "Configuration",
    "Registration",
    "AccessRequest",
    "AccessRequestInfo",
    "AccessRequestStatus",
    "AccessToken",
    "ExchangeResult",
    # Storage
    "WebauthzStore",
    "InMemoryStore",
    "JsonFileStore",
    # Errors
    "ErrorKind",
    "WebauthzError",
    "NotFoundError",
    "AccessDeniedError",
    "InvalidRequestError",
    "StorageError",
    "AuthorizationServerError",
    "ExchangeFailedError",
    "DiscoveryFailedError",
    "RegistrationFailedError",
]
