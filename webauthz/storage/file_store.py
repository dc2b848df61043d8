"""File-based storage backend with encryption support.

All records live in a single JSON document so the store can be inspected
and copied easily. Registrations and refresh tokens are credentials, so
the file is written with owner-only permissions and can be encrypted at
rest with Fernet.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from cryptography.fernet import Fernet, InvalidToken

from ..models import AccessRequest, AccessToken, Configuration, Registration
from .memory_store import find_access_token

logger = logging.getLogger(__name__)

STORE_FILENAME = "webauthz.json"

_SECTIONS = ("configurations", "registrations", "access_requests", "access_tokens")


class JsonFileStore:
    """
    JSON file implementation of ``WebauthzStore``.

    Every write rewrites the whole file. That is fine for the handful of
    authorization servers and users a client application deals with; use
    a database-backed store for anything larger.
    """

    def __init__(self, storage_path: Path, encryption_key: str | None = None):
        """
        Initialize file store.

        Args:
            storage_path: Directory holding the store file
            encryption_key: Optional encryption key (base64-encoded Fernet key)
        """
        self.storage_path = Path(storage_path)
        self.storage_path.mkdir(parents=True, exist_ok=True)
        self.store_file = self.storage_path / STORE_FILENAME

        self.cipher: Fernet | None = None
        if encryption_key:
            try:
                self.cipher = Fernet(encryption_key.encode())
                logger.info("Store encryption enabled")
            except Exception as e:
                logger.warning(
                    f"Failed to initialize encryption: {e}. Store will be written unencrypted."
                )
        else:
            logger.warning("No encryption key provided. Store will be written unencrypted.")

        self.data: dict[str, dict[str, Any]] = {section: {} for section in _SECTIONS}
        self._load()

    def _load(self) -> None:
        """Load the store file if it exists."""
        if not self.store_file.exists():
            return

        with open(self.store_file, "rb") as f:
            raw = f.read()

        if self.cipher:
            try:
                raw = self.cipher.decrypt(raw)
            except InvalidToken as e:
                raise ValueError(f"Cannot decrypt {self.store_file}: wrong encryption key?") from e

        loaded = json.loads(raw.decode())
        for section in _SECTIONS:
            self.data[section] = loaded.get(section, {})
        logger.debug(f"Loaded store from {self.store_file}")

    def _save(self) -> bool:
        """Write the store file with owner-only permissions."""
        try:
            data = json.dumps(self.data, indent=2).encode()
            if self.cipher:
                data = self.cipher.encrypt(data)

            fd = os.open(self.store_file, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            return True

        except OSError as e:
            logger.error(f"Failed to write store file {self.store_file}: {e}")
            return False

    def _put(self, section: str, key: str, doc: dict[str, Any]) -> bool:
        """Set one entry and write the file, restoring the entry if the write fails."""
        entries = self.data[section]
        previous = entries.get(key)
        entries[key] = doc
        if self._save():
            return True

        if previous is None:
            del entries[key]
        else:
            entries[key] = previous
        return False

    async def store_configuration(self, discovery_uri: str, configuration: Configuration) -> bool:
        return self._put("configurations", discovery_uri, configuration.model_dump(mode="json"))

    async def fetch_configuration(self, discovery_uri: str) -> Configuration | None:
        doc = self.data["configurations"].get(discovery_uri)
        return Configuration.model_validate(doc) if doc else None

    async def store_registration(self, register_uri: str, registration: Registration) -> bool:
        return self._put("registrations", register_uri, registration.model_dump(mode="json"))

    async def fetch_registration(self, register_uri: str) -> Registration | None:
        doc = self.data["registrations"].get(register_uri)
        return Registration.model_validate(doc) if doc else None

    async def create_access_request(self, client_state: str, record: AccessRequest) -> bool:
        if client_state in self.data["access_requests"]:
            logger.warning(f"Access request {client_state} already exists")
            return False
        return self._put("access_requests", client_state, record.model_dump(mode="json"))

    async def fetch_access_request(self, client_state: str) -> AccessRequest | None:
        doc = self.data["access_requests"].get(client_state)
        return AccessRequest.model_validate(doc) if doc else None

    async def edit_access_request(self, client_state: str, record: AccessRequest) -> bool:
        if client_state not in self.data["access_requests"]:
            logger.warning(f"Access request {client_state} not found")
            return False
        return self._put("access_requests", client_state, record.model_dump(mode="json"))

    async def create_access_token(self, token_id: str, record: AccessToken) -> bool:
        if token_id in self.data["access_tokens"]:
            logger.warning(f"Access token {token_id} already exists")
            return False
        return self._put("access_tokens", token_id, record.model_dump(mode="json"))

    async def fetch_access_token(
        self, user_id: str, origin: str, path_list: list[str]
    ) -> AccessToken | None:
        return find_access_token(self.list_access_tokens(), user_id, origin, path_list)

    def list_access_tokens(self) -> list[AccessToken]:
        """All access token records, oldest first."""
        return [AccessToken.model_validate(doc) for doc in self.data["access_tokens"].values()]

    @staticmethod
    def generate_encryption_key() -> str:
        """Generate a new Fernet encryption key."""
        return Fernet.generate_key().decode()
