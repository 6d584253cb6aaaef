"""Conversation state store.

Keeps one pending ``ChatState`` per chat. A state is written when the user
picks a menu entry and consumed (fetched and removed in one step) by the
next text message from that chat. States expire after a configurable TTL so
abandoned flows clear themselves.

The store also keeps the media URLs behind the send-to-chat buttons of a
result card under a random token, with the same TTL. Unlike states these
are read without being removed, so a button can be pressed again.

Two backends are provided:
- ``MemoryStateStore`` for single-process deployments (long polling)
- ``RedisStateStore`` for webhook and serverless deployments

Store failures never reach the user: writes are dropped and reads degrade to
``ChatMode.NONE``, both with a logged warning.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Protocol

import redis.asyncio as redis
from pydantic import ValidationError
from redis.exceptions import RedisError

from ..config import StateConfig
from ..models import ChatMode, ChatState, MediaKind, SocialPlatform, StoredMedia

logger = logging.getLogger(__name__)


class StateStore(Protocol):
    """Interface shared by all state store backends."""

    async def connect(self) -> bool:
        """Prepare the backend, returns False if it is unavailable."""
        ...

    async def set_state(
        self, chat_id: int, mode: ChatMode, platform: SocialPlatform | None = None
    ) -> None:
        """Upsert the pending state of a chat."""
        ...

    async def consume_state(self, chat_id: int) -> ChatState:
        """Atomically fetch and delete the state of a chat.

        Returns a ``ChatMode.NONE`` state when nothing is pending.
        """
        ...

    async def clear_state(self, chat_id: int) -> None:
        """Drop any pending state of a chat."""
        ...

    async def save_media(self, chat_id: int, urls: dict[MediaKind, str]) -> str | None:
        """Keep the media URLs of a result card.

        Returns:
            Short token for callback data, None if the URLs could not be stored.
        """
        ...

    async def load_media(self, token: str) -> StoredMedia | None:
        """Look up stored media URLs, None if unknown or expired."""
        ...

    async def close(self) -> None:
        """Release backend resources."""
        ...


def new_media_token() -> str:
    """Random token short enough for Telegram callback data."""
    return secrets.token_urlsafe(8)


def _new_media(chat_id: int, urls: dict[MediaKind, str], ttl_seconds: int) -> StoredMedia:
    return StoredMedia(
        chat_id=chat_id,
        urls=urls,
        expires_at=datetime.now(timezone.utc) + timedelta(seconds=ttl_seconds),
    )


def _new_state(
    chat_id: int, mode: ChatMode, platform: SocialPlatform | None, ttl_seconds: int
) -> ChatState:
    now = datetime.now(timezone.utc)
    return ChatState(
        chat_id=chat_id,
        mode=mode,
        platform=platform,
        updated_at=now,
        expires_at=now + timedelta(seconds=ttl_seconds),
    )


class MemoryStateStore:
    """In-process state store.

    Only valid while every update of a chat is handled by the same process.
    Consumption is a single ``dict.pop`` with no await in between, so two
    concurrent handlers on the event loop can never both see the same state.
    """

    def __init__(self, ttl_seconds: int = 900):
        self.ttl_seconds = ttl_seconds
        self._states: dict[int, ChatState] = {}
        self._media: dict[str, StoredMedia] = {}

    async def connect(self) -> bool:
        return True

    async def set_state(
        self, chat_id: int, mode: ChatMode, platform: SocialPlatform | None = None
    ) -> None:
        self._purge_expired()
        if mode is ChatMode.NONE:
            self._states.pop(chat_id, None)
            return
        self._states[chat_id] = _new_state(chat_id, mode, platform, self.ttl_seconds)
        logger.debug(f"State for chat {chat_id} set to {mode.value}")

    async def consume_state(self, chat_id: int) -> ChatState:
        state = self._states.pop(chat_id, None)
        if state is None:
            return ChatState(chat_id=chat_id)
        if state.is_expired():
            logger.debug(f"State for chat {chat_id} expired")
            return ChatState(chat_id=chat_id)
        return state

    async def clear_state(self, chat_id: int) -> None:
        self._states.pop(chat_id, None)

    async def save_media(self, chat_id: int, urls: dict[MediaKind, str]) -> str | None:
        self._purge_expired()
        token = new_media_token()
        self._media[token] = _new_media(chat_id, urls, self.ttl_seconds)
        return token

    async def load_media(self, token: str) -> StoredMedia | None:
        media = self._media.get(token)
        if media is None or media.is_expired():
            return None
        return media

    async def close(self) -> None:
        self._states.clear()
        self._media.clear()

    def _purge_expired(self) -> None:
        now = datetime.now(timezone.utc)
        expired = [chat_id for chat_id, state in self._states.items() if state.is_expired(now)]
        for chat_id in expired:
            del self._states[chat_id]
        stale = [token for token, media in self._media.items() if media.is_expired(now)]
        for token in stale:
            del self._media[token]

    def __len__(self) -> int:
        return len(self._states)


class RedisStateStore:
    """Redis-backed state store for multi-process deployments.

    Uses ``SET .. EX`` so Redis expires abandoned states on its own and
    ``GETDEL`` so fetch-and-delete is a single server-side operation.
    """

    def __init__(self, config: StateConfig, client: "redis.Redis | None" = None):
        """Initialize the store.

        Args:
            config: State store settings with the Redis URL and TTL.
            client: Pre-built Redis client, created from the URL if omitted.
        """
        self.config = config
        self._redis = client
        self._connected = False

    def _get_client(self) -> "redis.Redis":
        if self._redis is None:
            self._redis = redis.from_url(
                self.config.redis_url or "redis://localhost:6379",
                decode_responses=True,
                retry_on_timeout=True,
                health_check_interval=30,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
        return self._redis

    def _key(self, chat_id: int) -> str:
        return f"{self.config.key_prefix}:{chat_id}"

    def _media_key(self, token: str) -> str:
        return f"{self.config.key_prefix}:media:{token}"

    async def connect(self) -> bool:
        """Ping Redis.

        Returns:
            True if Redis answered, False otherwise.
        """
        try:
            await self._get_client().ping()
            self._connected = True
            logger.info("Connected to Redis state store")
        except RedisError as e:
            self._connected = False
            logger.warning(f"Redis state store unavailable, running stateless: {e}")
        return self._connected

    async def set_state(
        self, chat_id: int, mode: ChatMode, platform: SocialPlatform | None = None
    ) -> None:
        if mode is ChatMode.NONE:
            await self.clear_state(chat_id)
            return

        state = _new_state(chat_id, mode, platform, self.config.ttl_seconds)
        try:
            await self._get_client().set(
                self._key(chat_id), state.model_dump_json(), ex=self.config.ttl_seconds
            )
            logger.debug(f"State for chat {chat_id} set to {mode.value}")
        except RedisError as e:
            logger.warning(f"Failed to store state for chat {chat_id}: {e}")

    async def consume_state(self, chat_id: int) -> ChatState:
        try:
            raw = await self._get_client().getdel(self._key(chat_id))
        except RedisError as e:
            logger.warning(f"Failed to read state for chat {chat_id}: {e}")
            return ChatState(chat_id=chat_id)

        if not raw:
            return ChatState(chat_id=chat_id)

        try:
            state = ChatState.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable state for chat {chat_id}: {e}")
            return ChatState(chat_id=chat_id)

        if state.is_expired():
            return ChatState(chat_id=chat_id)
        return state

    async def clear_state(self, chat_id: int) -> None:
        try:
            await self._get_client().delete(self._key(chat_id))
        except RedisError as e:
            logger.warning(f"Failed to clear state for chat {chat_id}: {e}")

    async def save_media(self, chat_id: int, urls: dict[MediaKind, str]) -> str | None:
        token = new_media_token()
        media = _new_media(chat_id, urls, self.config.ttl_seconds)
        try:
            await self._get_client().set(
                self._media_key(token), media.model_dump_json(), ex=self.config.ttl_seconds
            )
        except RedisError as e:
            logger.warning(f"Failed to store media for chat {chat_id}: {e}")
            return None
        return token

    async def load_media(self, token: str) -> StoredMedia | None:
        try:
            raw = await self._get_client().get(self._media_key(token))
        except RedisError as e:
            logger.warning(f"Failed to read media {token}: {e}")
            return None

        if not raw:
            return None

        try:
            media = StoredMedia.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable media {token}: {e}")
            return None

        return None if media.is_expired() else media

    async def close(self) -> None:
        """Close the Redis connection."""
        if self._redis is None:
            return
        try:
            await self._redis.aclose()
            logger.info("Redis state store closed")
        except RedisError as e:
            logger.warning(f"Error closing Redis: {e}")
        finally:
            self._connected = False
            self._redis = None


def create_state_store(config: StateConfig) -> StateStore:
    """Pick the state store backend for the given settings.

    Args:
        config: State store settings.

    Returns:
        RedisStateStore when a Redis URL is configured, MemoryStateStore otherwise.
    """
    if config.redis_url:
        logger.info("Using Redis state store")
        return RedisStateStore(config)

    logger.info("REDIS_URL not set, using in-process state store")
    return MemoryStateStore(ttl_seconds=config.ttl_seconds)
