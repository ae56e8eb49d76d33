"""Player sessions: signed tokens and the store that holds each player's data."""

import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Any
from uuid import uuid4

import redis.asyncio as redis
from redis.exceptions import RedisError
from fastapi import HTTPException
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from config import config

logger = logging.getLogger(__name__)


class SessionSigner:
    """Issue and check tamper-proof session tokens."""

    def __init__(self, secret_key: str | None = None) -> None:
        self._serializer = URLSafeTimedSerializer(secret_key or config.security.secret_key)

    def sign(self, session_id: str) -> str:
        return self._serializer.dumps(session_id)

    def unsign(self, token: str, max_age: int | None = None) -> str | None:
        """
        Recover the session ID from ``token``.

        Returns None for forged, malformed or expired tokens. ``max_age``
        defaults to the session lifetime.
        """
        try:
            return self._serializer.loads(token, max_age=max_age or config.session_ttl)
        except (BadSignature, SignatureExpired):
            return None


_session_signer: SessionSigner | None = None


def get_session_signer() -> SessionSigner:
    """Get or create the session signer."""
    global _session_signer
    if _session_signer is None:
        _session_signer = SessionSigner()
    return _session_signer


class SessionStore(ABC):
    """Per-session JSON documents keyed by session token."""

    @abstractmethod
    async def get(self, session_id: str) -> dict[str, Any] | None:
        """Return the session's data, or None if it is unknown or expired."""

    @abstractmethod
    async def set(self, session_id: str, data: dict[str, Any], ttl: int | None = None) -> None:
        """Replace the session's data and restart its lifetime."""


class InMemorySessionStore(SessionStore):
    """Process-local store for development and tests."""

    def __init__(self) -> None:
        # session_id -> (JSON text, expiry as epoch seconds)
        self._sessions: dict[str, tuple[str, float]] = {}

    async def get(self, session_id: str) -> dict[str, Any] | None:
        entry = self._sessions.get(session_id)
        if entry is None:
            return None

        payload, expires_at = entry
        if expires_at < time.time():
            del self._sessions[session_id]
            return None
        return json.loads(payload)

    async def set(self, session_id: str, data: dict[str, Any], ttl: int | None = None) -> None:
        expires_at = time.time() + (ttl or config.session_ttl)
        self._sessions[session_id] = (json.dumps(data), expires_at)


class RedisSessionStore(SessionStore):
    """Sessions kept in Redis as JSON strings that expire on their own."""

    KEY_PREFIX = "blackjack:session:"

    def __init__(self, redis_client: redis.Redis) -> None:
        self._redis = redis_client

    async def get(self, session_id: str) -> dict[str, Any] | None:
        raw = await self._redis.get(self.KEY_PREFIX + session_id)
        return None if raw is None else json.loads(raw)

    async def set(self, session_id: str, data: dict[str, Any], ttl: int | None = None) -> None:
        await self._redis.setex(
            self.KEY_PREFIX + session_id,
            ttl or config.session_ttl,
            json.dumps(data),
        )


_session_store: SessionStore | None = None


async def get_session_store() -> SessionStore:
    """
    Return the process-wide store, choosing a backend on first use.

    ``STORAGE_BACKEND`` picks it: ``memory``, ``redis`` (fail if Redis is
    down), or ``auto`` (Redis when it answers a PING, memory otherwise).
    """
    global _session_store
    if _session_store is not None:
        return _session_store

    backend = config.redis.backend
    if backend != "memory":
        client = redis.from_url(config.redis.url)
        try:
            await client.ping()
        except (RedisError, OSError):
            if backend == "redis":
                raise
            logger.warning(
                "Redis unreachable at %s:%s, using in-memory sessions",
                config.redis.host,
                config.redis.port,
            )
        else:
            logger.info("Using Redis session store at %s:%s", config.redis.host, config.redis.port)
            _session_store = RedisSessionStore(client)
            return _session_store

    _session_store = InMemorySessionStore()
    return _session_store


def set_session_store(store: SessionStore | None) -> None:
    """Install a specific store, or clear it so the next call chooses again."""
    global _session_store
    _session_store = store


async def create_session() -> str:
    """Start an empty session and return its signed token."""
    token = get_session_signer().sign(str(uuid4()))
    store = await get_session_store()
    await store.set(token, {})
    return token


def extract_session_id(token: str) -> str | None:
    """Return the raw session ID inside ``token``, or None if it does not verify."""
    return get_session_signer().unsign(token)


def require_session(token: str | None) -> str:
    """
    Validate the ``X-Session-ID`` header value.

    Returns:
        The token itself, which is also the storage key

    Raises:
        HTTPException: 401 if the token is missing or its signature is bad
    """
    if not token or extract_session_id(token) is None:
        raise HTTPException(status_code=401, detail="Invalid or missing session")
    return token
