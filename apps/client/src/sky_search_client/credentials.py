"""Local mock authentication: registered users and the current session.

There is no auth backend.  Users, the session token and the signed-in user
live in a small key-value store (a JSON file by default).  Passwords are
kept as bcrypt hashes and session tokens are HS256 JWTs.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import re
import threading
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Protocol

import bcrypt
import jwt
from pydantic import ValidationError

from sky_search_client.config import ClientSettings, settings
from sky_search_client.errors import AuthenticationError
from sky_search_core.schemas import AuthResponse, LoginParams, RegisterParams, User

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

USERS_KEY = "mock_users"
TOKEN_KEY = "auth_token"
USER_DATA_KEY = "user_data"

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_MIN_PASSWORD_LENGTH = 6
# bcrypt only looks at the first 72 bytes and newer releases reject longer input
_MAX_PASSWORD_BYTES = 72


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemoryStore:
    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore:
    """Key-value store persisted as one JSON object on disk."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._lock = threading.Lock()

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open(encoding="utf-8") as fh:
                data = json.load(fh)
        except ValueError as exc:
            msg = f"Credential store {self._path} is corrupted"
            raise AuthenticationError(msg) from exc
        if not isinstance(data, dict):
            msg = f"Credential store {self._path} is corrupted"
            raise AuthenticationError(msg)
        return data

    def _dump(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as fh:
            json.dump(data, fh)
        os.replace(tmp, self._path)

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._load()
            data[key] = value
            self._dump(data)

    def delete(self, key: str) -> None:
        with self._lock:
            data = self._load()
            if data.pop(key, None) is not None:
                self._dump(data)


def _is_valid_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(email))


class CredentialStore:
    """Register / login / logout against a :class:`KeyValueStore`.

    All public methods are coroutines; storage and hashing run in a worker
    thread via :func:`asyncio.to_thread`.
    """

    def __init__(
        self,
        storage: KeyValueStore,
        *,
        secret: str | None = None,
        algorithm: str | None = None,
    ) -> None:
        self._storage = storage
        self._secret = secret or settings.auth_secret
        self._algorithm = algorithm or settings.auth_algorithm

    @classmethod
    def from_settings(cls, cfg: ClientSettings | None = None) -> CredentialStore:
        cfg = cfg or settings
        return cls(
            JsonFileStore(cfg.credentials_path),
            secret=cfg.auth_secret,
            algorithm=cfg.auth_algorithm,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def register(self, params: RegisterParams) -> AuthResponse:
        return await asyncio.to_thread(self._register, params)

    async def login(self, params: LoginParams) -> AuthResponse:
        return await asyncio.to_thread(self._login, params)

    async def logout(self) -> None:
        await asyncio.to_thread(self._logout)

    async def get_current_user(self) -> User | None:
        return await asyncio.to_thread(self._current_user)

    async def is_authenticated(self) -> bool:
        return await self.get_current_user() is not None

    async def get_auth_token(self) -> str | None:
        return await asyncio.to_thread(self._storage.get, TOKEN_KEY)

    # ------------------------------------------------------------------
    # Blocking implementation
    # ------------------------------------------------------------------

    def _register(self, params: RegisterParams) -> AuthResponse:
        if not (params.email and params.password and params.first_name and params.last_name):
            raise AuthenticationError("All fields are required")
        if not _is_valid_email(params.email):
            raise AuthenticationError("Invalid email format")
        if len(params.password) < _MIN_PASSWORD_LENGTH:
            raise AuthenticationError("Password must be at least 6 characters long")
        if len(params.password.encode()) > _MAX_PASSWORD_BYTES:
            raise AuthenticationError("Password must be at most 72 bytes long")

        records = self._load_users()
        email = params.email.lower()
        if any(r["email"].lower() == email for r in records):
            raise AuthenticationError("User with this email already exists")

        user = User(
            id=uuid.uuid4().hex,
            email=email,
            first_name=params.first_name,
            last_name=params.last_name,
        )
        hashed = bcrypt.hashpw(params.password.encode(), bcrypt.gensalt()).decode()
        records.append({**user.model_dump(by_alias=True), "passwordHash": hashed})
        self._storage.set(USERS_KEY, json.dumps(records))

        logger.info("Registered user %s", user.id)
        return self._start_session(user)

    def _login(self, params: LoginParams) -> AuthResponse:
        if not params.email or not params.password:
            raise AuthenticationError("Email and password are required")
        if not _is_valid_email(params.email):
            raise AuthenticationError("Invalid email format")

        email = params.email.lower()
        record = next(
            (r for r in self._load_users() if r["email"].lower() == email), None
        )
        if (
            record is None
            or len(params.password.encode()) > _MAX_PASSWORD_BYTES
            or not bcrypt.checkpw(
                params.password.encode(), record["passwordHash"].encode()
            )
        ):
            raise AuthenticationError("Invalid email or password")

        user = User.model_validate(record)
        logger.info("User %s signed in", user.id)
        return self._start_session(user)

    def _logout(self) -> None:
        self._storage.delete(TOKEN_KEY)
        self._storage.delete(USER_DATA_KEY)

    def _current_user(self) -> User | None:
        token = self._storage.get(TOKEN_KEY)
        raw_user = self._storage.get(USER_DATA_KEY)
        if not token or not raw_user:
            return None
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
            user = User.model_validate_json(raw_user)
        except (jwt.InvalidTokenError, ValidationError) as exc:
            logger.warning("Ignoring stored session: %s", exc)
            return None
        if payload.get("sub") != user.id:
            logger.warning("Ignoring stored session: token subject mismatch")
            return None
        return user

    def _start_session(self, user: User) -> AuthResponse:
        token = jwt.encode(
            {"sub": user.id, "iat": datetime.now(UTC)},
            self._secret,
            algorithm=self._algorithm,
        )
        self._storage.set(TOKEN_KEY, token)
        self._storage.set(USER_DATA_KEY, user.model_dump_json(by_alias=True))
        return AuthResponse(user=user, token=token)

    def _load_users(self) -> list[dict[str, str]]:
        raw = self._storage.get(USERS_KEY)
        if not raw:
            return []
        try:
            records = json.loads(raw)
        except ValueError as exc:
            msg = "Stored user records are corrupted"
            raise AuthenticationError(msg) from exc
        if not isinstance(records, list):
            msg = "Stored user records are corrupted"
            raise AuthenticationError(msg)
        return records
