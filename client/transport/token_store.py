from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from config import settings

logger = logging.getLogger(__name__)


class TokenStore(Protocol):
    def get(self) -> str | None: ...

    def set(self, token: str) -> None: ...

    def clear(self) -> bool: ...


class MemoryTokenStore:
    """Keeps the bearer token in process memory only."""

    def __init__(self, token: str | None = None) -> None:
        self._token = token or None

    def get(self) -> str | None:
        return self._token

    def set(self, token: str) -> None:
        if not token:
            raise ValueError("token must be a non-empty string")
        self._token = token

    def clear(self) -> bool:
        had_token = self._token is not None
        self._token = None
        return had_token


class FileTokenStore:
    """Durable token storage: a small JSON document holding a single key.

    Survives process restarts so a session can be restored without asking for
    credentials again. A missing, unreadable or malformed file reads as "no
    token".
    """

    def __init__(self, path: Path | None = None, key: str | None = None) -> None:
        self.path = Path(path) if path is not None else settings.token_path
        self.key = key or settings.TOKEN_STORAGE_KEY
        self._token = self._load()

    def _load(self) -> str | None:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable token file %s: %s", self.path, exc)
            return None
        if not isinstance(data, dict):
            return None
        token = data.get(self.key)
        if isinstance(token, str) and token.strip():
            return token
        return None

    def _write(self, payload: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=str(self.path.parent), prefix=".token-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle)
            os.replace(tmp_name, self.path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get(self) -> str | None:
        return self._token

    def set(self, token: str) -> None:
        if not token:
            raise ValueError("token must be a non-empty string")
        self._write({self.key: token})
        self._token = token

    def clear(self) -> bool:
        had_token = self._token is not None
        self._token = None
        if self.path.exists():
            self.path.unlink(missing_ok=True)
        return had_token
