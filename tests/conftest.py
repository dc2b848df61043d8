"""Pytest configuration and fixtures for webauthz tests."""

import logging
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from webauthz.config import WebauthzSettings
from webauthz.context import WebauthzContext
from webauthz.models import (
    AccessRequest,
    AccessRequestStatus,
    AccessToken,
    Configuration,
    Registration,
)
from webauthz.storage.memory_store import InMemoryStore

DISCOVERY_URI = "https://auth.example.com/webauthz.json"
REGISTER_URI = "https://auth.example.com/webauthz/register"
REQUEST_URI = "https://auth.example.com/webauthz/request?lang=en"
EXCHANGE_URI = "https://auth.example.com/webauthz/exchange"
RESOURCE_URI = "https://resource.example.com/api/contact/1234"
RESOURCE_ORIGIN = "https://resource.example.com"
CLIENT_ID = "client-abc"
CLIENT_TOKEN = "client-token-secret"
USER_ID = "sparky"
NOW = 1_700_000_000.0


class FakeClock:
    """Controllable clock returning epoch seconds."""

    def __init__(self, now: float = NOW):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings(temp_dir: Path) -> WebauthzSettings:
    """Settings with a grant redirect URI and a temporary storage path."""
    return WebauthzSettings(
        client_name="Webauthz Test Application",
        grant_redirect_uri="https://app.example.com/webauthz/grant",
        storage_path=temp_dir / "store",
    )


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def mock_http() -> AsyncMock:
    """Create a mock httpx.AsyncClient."""
    mock_client = AsyncMock(spec=httpx.AsyncClient)
    mock_client.get = AsyncMock()
    mock_client.post = AsyncMock()
    return mock_client


@pytest.fixture
def ctx(
    store: InMemoryStore,
    settings: WebauthzSettings,
    mock_http: AsyncMock,
    clock: FakeClock,
) -> WebauthzContext:
    return WebauthzContext(store=store, settings=settings, http=mock_http, clock=clock)


@pytest.fixture
def configuration() -> Configuration:
    return Configuration(
        webauthz_register_uri=REGISTER_URI,
        webauthz_request_uri=REQUEST_URI,
        webauthz_exchange_uri=EXCHANGE_URI,
    )


@pytest.fixture
def registration() -> Registration:
    return Registration(client_id=CLIENT_ID, client_token=CLIENT_TOKEN)


@pytest.fixture
def seeded_store(
    store: InMemoryStore, configuration: Configuration, registration: Registration
) -> InMemoryStore:
    """Store that already holds the configuration and registration."""
    store.configurations[DISCOVERY_URI] = configuration
    store.registrations[REGISTER_URI] = registration
    return store


@pytest.fixture
def make_response() -> Callable[..., MagicMock]:
    """Factory for mock httpx responses."""

    def _make(json_data: Any = None, status_code: int = 200, reason: str = "OK") -> MagicMock:
        response = MagicMock()
        response.status_code = status_code
        response.reason_phrase = reason
        response.json.return_value = json_data
        if status_code >= 400:
            response.raise_for_status.side_effect = httpx.HTTPStatusError(
                f"{status_code} {reason}", request=MagicMock(), response=response
            )
        else:
            response.raise_for_status = MagicMock()
        return response

    return _make


@pytest.fixture
def make_access_request(seeded_store: InMemoryStore) -> Callable[..., AccessRequest]:
    """Factory that puts an access request straight into the store."""

    def _make(
        client_state: str = "state-1",
        user_id: str = USER_ID,
        status: AccessRequestStatus = AccessRequestStatus.REDIRECT,
        refresh_token: str | None = None,
        refresh_token_not_after: float | None = None,
        path: str | None = "/api",
    ) -> AccessRequest:
        record = AccessRequest(
            resource_uri=RESOURCE_URI,
            realm="example",
            scope="read",
            path=path,
            webauthz_discovery_uri=DISCOVERY_URI,
            user_id=user_id,
            context={"method": "GET"},
            access_request_uri=f"{REQUEST_URI}&client_id={CLIENT_ID}&client_state={client_state}",
            status=status,
            refresh_token=refresh_token,
            refresh_token_not_after=refresh_token_not_after,
        )
        seeded_store.access_requests[client_state] = record
        return record

    return _make


@pytest.fixture
def make_access_token(seeded_store: InMemoryStore) -> Callable[..., AccessToken]:
    """Factory that puts an access token record straight into the store."""

    counter = {"n": 0}

    def _make(
        access_token: str = "access-1",
        path: str = "/api",
        origin: str = RESOURCE_ORIGIN,
        user_id: str = USER_ID,
        access_token_not_after: float | None = None,
        refresh_token_exists: bool = False,
        refresh_token_not_after: float | None = None,
        client_state: str = "state-1",
    ) -> AccessToken:
        counter["n"] += 1
        record = AccessToken(
            user_id=user_id,
            origin=origin,
            path=path,
            access_token=access_token,
            access_token_not_after=access_token_not_after,
            refresh_token_exists=refresh_token_exists,
            refresh_token_not_after=refresh_token_not_after,
            client_id=CLIENT_ID,
            client_state=client_state,
        )
        seeded_store.access_tokens[f"token-{counter['n']}"] = record
        return record

    return _make


@pytest.fixture(autouse=True)
def restore_webauthz_logger():
    """Undo handler and level changes made by setup_logging."""
    logger = logging.getLogger("webauthz")
    handlers = list(logger.handlers)
    level = logger.level
    yield
    logger.handlers = handlers
    logger.setLevel(level)
