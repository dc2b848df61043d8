"""Storage interface for the webauthz client runtime.

Any backend (SQL, key-value, document store) can be used by implementing
this protocol. Writes return ``True`` on success and ``False`` on failure;
reads return the record or ``None``.
"""

from typing import Protocol

from ..models import AccessRequest, AccessToken, Configuration, Registration


class WebauthzStore(Protocol):
    """Protocol for webauthz storage backends."""

    async def store_configuration(self, discovery_uri: str, configuration: Configuration) -> bool:
        """Store the discovery document for an authorization server."""
        ...

    async def fetch_configuration(self, discovery_uri: str) -> Configuration | None:
        """Get a stored discovery document."""
        ...

    async def store_registration(self, register_uri: str, registration: Registration) -> bool:
        """Store this application's registration with an authorization server."""
        ...

    async def fetch_registration(self, register_uri: str) -> Registration | None:
        """Get a stored registration."""
        ...

    async def create_access_request(self, client_state: str, record: AccessRequest) -> bool:
        """Create an access request. Must fail if client_state already exists."""
        ...

    async def fetch_access_request(self, client_state: str) -> AccessRequest | None:
        """Get an access request."""
        ...

    async def edit_access_request(self, client_state: str, record: AccessRequest) -> bool:
        """Replace an access request. Must fail if client_state does not exist."""
        ...

    async def create_access_token(self, token_id: str, record: AccessToken) -> bool:
        """Create an access token record."""
        ...

    async def fetch_access_token(
        self, user_id: str, origin: str, path_list: list[str]
    ) -> AccessToken | None:
        """Find the access token for the first path in ``path_list`` that has one.

        When several records share a path, the most recently created wins.
        """
        ...
