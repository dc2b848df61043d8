"""In-memory storage backend.

Useful for tests and single-process applications. Nothing survives a
restart.
"""

import logging
from collections.abc import Iterable

from ..models import AccessRequest, AccessToken, Configuration, Registration

logger = logging.getLogger(__name__)


class InMemoryStore:
    """Dict-backed implementation of ``WebauthzStore``."""

    def __init__(self) -> None:
        self.configurations: dict[str, Configuration] = {}
        self.registrations: dict[str, Registration] = {}
        self.access_requests: dict[str, AccessRequest] = {}
        # Insertion ordered, so later records are newer
        self.access_tokens: dict[str, AccessToken] = {}

    async def store_configuration(self, discovery_uri: str, configuration: Configuration) -> bool:
        self.configurations[discovery_uri] = configuration.model_copy()
        return True

    async def fetch_configuration(self, discovery_uri: str) -> Configuration | None:
        configuration = self.configurations.get(discovery_uri)
        return configuration.model_copy() if configuration else None

    async def store_registration(self, register_uri: str, registration: Registration) -> bool:
        self.registrations[register_uri] = registration.model_copy()
        return True

    async def fetch_registration(self, register_uri: str) -> Registration | None:
        registration = self.registrations.get(register_uri)
        return registration.model_copy() if registration else None

    async def create_access_request(self, client_state: str, record: AccessRequest) -> bool:
        if client_state in self.access_requests:
            logger.warning(f"Access request {client_state} already exists")
            return False
        self.access_requests[client_state] = record.model_copy(deep=True)
        return True

    async def fetch_access_request(self, client_state: str) -> AccessRequest | None:
        record = self.access_requests.get(client_state)
        return record.model_copy(deep=True) if record else None

    async def edit_access_request(self, client_state: str, record: AccessRequest) -> bool:
        if client_state not in self.access_requests:
            logger.warning(f"Access request {client_state} not found")
            return False
        self.access_requests[client_state] = record.model_copy(deep=True)
        return True

    async def create_access_token(self, token_id: str, record: AccessToken) -> bool:
        if token_id in self.access_tokens:
            logger.warning(f"Access token {token_id} already exists")
            return False
        self.access_tokens[token_id] = record.model_copy()
        return True

    async def fetch_access_token(
        self, user_id: str, origin: str, path_list: list[str]
    ) -> AccessToken | None:
        return find_access_token(self.access_tokens.values(), user_id, origin, path_list)


def find_access_token(
    records: Iterable[AccessToken], user_id: str, origin: str, path_list: list[str]
) -> AccessToken | None:
    """Pick the newest record at the first path in ``path_list`` that has one.

    ``records`` must be ordered oldest first.
    """
    by_path: dict[str, AccessToken] = {}
    for record in records:
        if record.user_id == user_id and record.origin == origin:
            by_path[record.path] = record

    for path in path_list:
        if path in by_path:
            return by_path[path].model_copy()
    return None
