"""Redis-backed persistence for product editor sessions."""

from __future__ import annotations

import logging
import uuid

import redis.asyncio as redis

from src.config import settings
from src.models.editor import EditorState

logger = logging.getLogger(__name__)

_redis_client: redis.Redis | None = None


def get_redis_client() -> redis.Redis:
    """Return a singleton Redis client for the current process."""

    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
        )
    return _redis_client


class EditorSessionStore:
    """Wrapper responsible for persisting editor state in Redis."""

    def __init__(self, client: redis.Redis):
        self._client = client
        self._prefix = settings.ADMIN_SESSION_KEY_PREFIX
        self._ttl = settings.ADMIN_SESSION_TTL_SECONDS

    def _key(self, session_id: str) -> str:
        return f"{self._prefix}{session_id}"

    async def create(self, state: EditorState | None = None) -> str:
        session_id = str(uuid.uuid4())
        await self.save(session_id, state or EditorState())
        logger.info("Opened editor session %s", session_id)
        return session_id

    async def save(self, session_id: str, state: EditorState) -> None:
        await self._client.set(
            self._key(session_id), state.model_dump_json(), ex=self._ttl
        )

    async def fetch(self, session_id: str) -> EditorState | None:
        raw = await self._client.get(self._key(session_id))
        if not raw:
            return None
        return EditorState.model_validate_json(raw)

    async def discard(self, session_id: str) -> bool:
        removed = await self._client.delete(self._key(session_id))
        return bool(removed)
