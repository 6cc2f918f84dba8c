"""Durable key-value storage for SDK state, optionally Fernet-encrypted."""

from __future__ import annotations

import json
from pathlib import Path

import structlog
from cryptography.fernet import Fernet, InvalidToken

logger = structlog.get_logger()

# Fixed storage keys.
APP_ID = "appId"
API_KEY = "apiKey"
TOKEN = "token"
TOKEN_IDENTIFIER = "tokenIdentifier"


class CredentialStore:
    """Persist SDK credentials and token state.

    Values live in a JSON file when ``path`` is given, otherwise in memory
    for the lifetime of the process. With an ``encryption_key`` every value
    is encrypted with Fernet before it is written.
    """

    def __init__(self, path: str | Path | None = None, encryption_key: str = "") -> None:
        self.path = Path(path) if path else None
        self.fernet = Fernet(encryption_key.encode()) if encryption_key else None
        self._values: dict[str, str] = self._load()

    def _encrypt(self, value: str) -> str:
        if self.fernet is None:
            return value
        return self.fernet.encrypt(value.encode()).decode()

    def _decrypt(self, token: str) -> str | None:
        if self.fernet is None:
            return token
        try:
            return self.fernet.decrypt(token.encode()).decode()
        except InvalidToken:
            logger.warning("credential_decrypt_failed")
            return None

    def _load(self) -> dict[str, str]:
        if self.path is None or not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("credential_store_unreadable", path=str(self.path))
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _flush(self) -> None:
        if self.path is None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self._values), encoding="utf-8")
        except OSError:
            logger.warning("credential_store_write_failed", path=str(self.path), exc_info=True)

    def get(self, key: str) -> str | None:
        """Decrypt and return a single value, or None."""
        stored = self._values.get(key)
        if stored is None:
            return None
        return self._decrypt(stored)

    def set(self, key: str, value: str) -> None:
        """Encrypt and upsert a value."""
        self._values[key] = self._encrypt(value)
        self._flush()

    def set_many(self, values: dict[str, str]) -> None:
        """Encrypt and upsert multiple values with a single write."""
        for key, value in values.items():
            self._values[key] = self._encrypt(value)
        self._flush()

    def delete(self, key: str) -> bool:
        """Delete one key. Returns whether it existed."""
        existed = self._values.pop(key, None) is not None
        if existed:
            self._flush()
        return existed

    def keys(self) -> list[str]:
        return sorted(self._values)
