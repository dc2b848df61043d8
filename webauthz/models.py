"""Data models for the webauthz client runtime.

Timestamps named ``*_not_after`` are absolute epoch seconds. ``None``
means the value never expires.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def is_expired(not_after: float | None, now: float) -> bool:
    """Check an expiry timestamp.

    A value is still valid at the exact ``not_after`` instant; only
    ``now > not_after`` counts as expired.
    """
    return not_after is not None and now > not_after


class Challenge(BaseModel):
    """A webauthz challenge parsed from a ``WWW-Authenticate`` header."""

    resource_uri: str
    webauthz_discovery_uri: str
    realm: str | None = None
    scope: str | None = None
    path: str | None = None
    user_id: str | None = None


class Configuration(BaseModel):
    """Authorization server metadata from the discovery document."""

    model_config = ConfigDict(extra="allow")

    webauthz_register_uri: str
    webauthz_request_uri: str
    webauthz_exchange_uri: str


class Registration(BaseModel):
    """Client registration issued by the authorization server.

    ``client_token`` authenticates exchange calls and must never be shown
    to end users.
    """

    model_config = ConfigDict(extra="allow")

    client_id: str
    client_token: str = Field(..., repr=False)


class AccessRequestStatus(str, Enum):
    REDIRECT = "redirect"
    GRANTED = "granted"
    DENIED = "denied"


class AccessRequest(BaseModel):
    """Stored state of one access negotiation, keyed by client_state."""

    resource_uri: str
    webauthz_discovery_uri: str
    user_id: str
    access_request_uri: str
    realm: str | None = None
    scope: str | None = None
    path: str | None = None
    context: Any = None
    status: AccessRequestStatus = AccessRequestStatus.REDIRECT
    refresh_token: str | None = Field(None, repr=False)
    refresh_token_not_after: float | None = None


class AccessRequestInfo(BaseModel):
    """Public view of an access request. Never includes the refresh token."""

    client_state: str
    resource_uri: str
    webauthz_discovery_uri: str
    user_id: str
    access_request_uri: str
    status: AccessRequestStatus
    realm: str | None = None
    scope: str | None = None
    path: str | None = None
    context: Any = None

    @classmethod
    def from_record(cls, client_state: str, record: AccessRequest) -> "AccessRequestInfo":
        return cls(
            client_state=client_state,
            **record.model_dump(exclude={"refresh_token", "refresh_token_not_after"}),
        )


class AccessToken(BaseModel):
    """An access token usable for one (user_id, origin, path).

    The refresh token value lives on the owning AccessRequest; this record
    only flags whether one exists.
    """

    user_id: str
    origin: str
    path: str
    access_token: str = Field(..., repr=False)
    access_token_not_after: float | None = None
    refresh_token_exists: bool = False
    refresh_token_not_after: float | None = None
    client_id: str
    client_state: str
    realm: str | None = None
    scope: str | None = None

    def is_access_token_expired(self, now: float) -> bool:
        return is_expired(self.access_token_not_after, now)

    def can_refresh(self, now: float) -> bool:
        """Check if a live refresh token backs this access token."""
        return self.refresh_token_exists and not is_expired(self.refresh_token_not_after, now)


class ExchangeResult(BaseModel):
    """Result of a successful grant or refresh exchange."""

    resource_uri: str
    status: AccessRequestStatus
    access_token: str = Field(..., repr=False)
