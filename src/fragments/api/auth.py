"""HTTP Basic authentication against a plain ``email:password`` credentials file."""

from __future__ import annotations

import hashlib
import logging
import secrets
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


def hash_owner(email: str) -> str:
    """Owner ids are the SHA-256 of the email so raw addresses never reach storage."""
    return hashlib.sha256(email.strip().lower().encode("utf-8")).hexdigest()


class Authenticator(Protocol):
    def authenticate(self, username: str, password: str) -> str | None: ...


class BasicAuthenticator:
    def __init__(self, users: dict[str, str]) -> None:
        self._users = users

    @classmethod
    def from_file(cls, path: str | Path) -> BasicAuthenticator:
        users: dict[str, str] = {}
        file_path = Path(path)
        if not file_path.exists():
            logger.warning("Basic auth file %s not found; no users can sign in", file_path)
            return cls(users)
        for line in file_path.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            email, sep, password = line.partition(":")
            if not sep:
                logger.warning("Skipping malformed line in %s", file_path)
                continue
            users[email.strip()] = password
        return cls(users)

    def authenticate(self, username: str, password: str) -> str | None:
        expected = self._users.get(username)
        if expected is None or not secrets.compare_digest(expected.encode(), password.encode()):
            return None
        return hash_owner(username)
