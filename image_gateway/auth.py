"""Caller authentication: time-bounded bearer tokens and an in-memory user store."""

from __future__ import annotations

import asyncio
import time
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import bcrypt
import jwt

from .errors import (
    Forbidden,
    InvalidCredentials,
    InvalidRequest,
    TokenExpired,
    Unauthorized,
    UserExists,
)

TOKEN_ALGORITHM = "HS256"
BCRYPT_ROUNDS = 10
# bcrypt only looks at the first 72 bytes of a password.
MAX_PASSWORD_BYTES = 72


class TokenAuthority:
    """Issues and verifies HS256 JSON Web Tokens carrying ``sub`` and ``exp``."""

    def __init__(self, secret: str, ttl: int = 3600, clock: Callable[[], float] = time.time) -> None:
        if not secret:
            raise ValueError("token secret must not be empty")
        self._secret = secret
        self._ttl = ttl
        self._clock = clock

    def issue(self, subject: str, **claims: Any) -> str:
        payload = dict(claims, sub=subject, exp=int(self._clock()) + self._ttl)
        return jwt.encode(payload, self._secret, algorithm=TOKEN_ALGORITHM)

    def verify(self, token: Optional[str]) -> Dict[str, Any]:
        """Return the token's claims; raises if it is missing, forged or expired."""

        if not token:
            raise Unauthorized("Missing bearer token")
        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[TOKEN_ALGORITHM],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpired("Token expired") from exc
        except jwt.InvalidTokenError as exc:
            raise Forbidden("Invalid token") from exc


def bearer_token(header: Optional[str]) -> Optional[str]:
    """Extract the credential from an ``Authorization: Bearer <token>`` header."""

    if not header:
        return None
    parts = header.split(" ", 1)
    if len(parts) != 2 or not parts[1].strip():
        return None
    return parts[1].strip()


@dataclass(frozen=True)
class User:
    id: str
    username: str


@dataclass(frozen=True)
class _StoredUser:
    user: User
    password_hash: bytes


class UserStore:
    """Keeps registered users for the lifetime of the process.

    bcrypt runs in a worker thread so hashing never stalls the event loop;
    lookups and inserts happen on the loop itself.
    """

    def __init__(self, rounds: int = BCRYPT_ROUNDS) -> None:
        self._users: Dict[str, _StoredUser] = {}
        self._rounds = rounds

    def _hash(self, password: bytes) -> bytes:
        return bcrypt.hashpw(password, bcrypt.gensalt(rounds=self._rounds))

    async def register(self, username: str, password: str) -> User:
        if username in self._users:
            raise UserExists("Username already exists")
        secret = password.encode("utf-8")
        if len(secret) > MAX_PASSWORD_BYTES:
            raise InvalidRequest(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        password_hash = await asyncio.to_thread(self._hash, secret)
        # Another registration may have claimed the name while hashing.
        if username in self._users:
            raise UserExists("Username already exists")
        user = User(id=uuid.uuid4().hex, username=username)
        self._users[username] = _StoredUser(user, password_hash)
        return user

    async def authenticate(self, username: str, password: str) -> User:
        stored = self._users.get(username)
        secret = password.encode("utf-8")
        if stored is None or len(secret) > MAX_PASSWORD_BYTES:
            raise InvalidCredentials("Invalid credentials")
        if not await asyncio.to_thread(bcrypt.checkpw, secret, stored.password_hash):
            raise InvalidCredentials("Invalid credentials")
        return stored.user
