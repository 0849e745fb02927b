# Token Store — persisted Auth record in a file-backed key-value store.
# Created: 2026-10-02

from __future__ import annotations

import asyncio
import json
import logging
import os
import stat
from pathlib import Path

from pydantic import ValidationError

from clientlib.auth.models import Auth
from clientlib.config import get_config_dir
from clientlib.errors import ErrMessage, ErrTypes, Failure, Ok, Result

logger = logging.getLogger(__name__)

AUTH_KEY = "auth"


def _get_preferences_path() -> Path:
    return get_config_dir() / "preferences.json"


class PreferenceStore:
    """String key-value store persisted as a single JSON file.

    The file is chmod 0600 (owner-only read/write). Reads and writes run in
    a worker thread so callers on the event loop never block on disk I/O.
    """

    def __init__(self, path: Path | None = None):
        self._path = path
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path if self._path is not None else _get_preferences_path()

    def _read_all(self) -> dict[str, str]:
        path = self.path
        if not path.exists():
            return {}
        try:
            data = json.loads(path.read_text())
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Failed to read preferences from %s: %s", path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring malformed preferences file %s", path)
            return {}
        return data

    def _write_all(self, data: dict[str, str]) -> None:
        path = self.path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2))
        os.chmod(path, stat.S_IRUSR | stat.S_IWUSR)

    async def get(self, key: str) -> str | None:
        data = await asyncio.to_thread(self._read_all)
        value = data.get(key)
        return value if isinstance(value, str) else None

    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._read_all)
            data[key] = value
            await asyncio.to_thread(self._write_all, data)

    async def remove(self, key: str) -> bool:
        async with self._lock:
            data = await asyncio.to_thread(self._read_all)
            if key not in data:
                return False
            del data[key]
            await asyncio.to_thread(self._write_all, data)
            return True


class TokenStore:
    """Reads and writes the current :class:`Auth` under a fixed key."""

    def __init__(self, preferences: PreferenceStore | None = None):
        self.preferences = preferences or PreferenceStore()

    async def load(self) -> Auth | None:
        """Return the stored token record, or None if missing or unreadable."""
        raw = await self.preferences.get(AUTH_KEY)
        if raw is None:
            return None
        try:
            auth = Auth.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Stored auth record is malformed: %s", e.error_count())
            return None
        logger.debug("Loaded auth from storage (session %s)", auth.session_state)
        return auth

    async def save(self, auth: Auth) -> None:
        await self.preferences.set(AUTH_KEY, auth.to_json())
        logger.info("Saved auth tokens")

    async def delete(self) -> bool:
        deleted = await self.preferences.remove(AUTH_KEY)
        if deleted:
            logger.info("Deleted auth tokens")
        return deleted

    async def get_auth(self) -> Result[Auth, ErrMessage]:
        auth = await self.load()
        if auth is None:
            return Failure(ErrMessage.of(ErrTypes.NOT_AUTHENTICATED))
        return Ok(auth)
