"""Persisted secrets (client ids/secrets, refresh tokens)."""

import getpass
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from sp2yt.core.models import AuthError

logger = logging.getLogger(__name__)


class CredentialStore(Protocol):
    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...
    def delete(self, key: str) -> None: ...
    def prompt_for_secret(self, key: str, message: str, is_sensitive: bool = False) -> str: ...


def need(store: CredentialStore, key: str, message: str, is_sensitive: bool = False) -> str:
    """Return a stored value, prompting for it and persisting it if absent."""
    value = store.get(key)
    if value:
        return value
    value = store.prompt_for_secret(key, message, is_sensitive)
    store.set(key, value)
    return value


class JsonFileCredentialStore:
    """Key/value secrets in a single owner-readable JSON file."""

    def __init__(self, path: Path):
        self._file = path
        self._values: dict[str, str] = {}
        self._load()

    def _load(self) -> None:
        if not self._file.exists():
            return
        try:
            data = json.loads(self._file.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise AuthError(f"Credential store unreadable ({self._file}): {e}") from e
        self._values = {k: v for k, v in data.items() if isinstance(v, str)}
        logger.debug(f"Loaded {len(self._values)} stored credentials")

    def _save(self) -> None:
        self._file.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(dir=self._file.parent, prefix=".credentials_", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._values, f, indent=2)
            os.chmod(temp_path, 0o600)
            os.replace(temp_path, self._file)
        except Exception:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise

    def get(self, key: str) -> str | None:
        return self._values.get(key) or None

    def set(self, key: str, value: str) -> None:
        self._values[key] = value
        self._save()

    def delete(self, key: str) -> None:
        if self._values.pop(key, None) is not None:
            self._save()
            logger.info(f"Removed stored credential '{key}'")

    def prompt_for_secret(self, key: str, message: str, is_sensitive: bool = False) -> str:
        try:
            if is_sensitive:
                value = getpass.getpass(f"{message}: ")
            else:
                value = input(f"{message}: ")
        except (EOFError, KeyboardInterrupt) as e:
            raise AuthError("Setup cancelled.") from e
        value = value.strip()
        if not value:
            raise AuthError("Setup cancelled.")
        return value
