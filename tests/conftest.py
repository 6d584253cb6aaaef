"""Global test configuration and fixtures.

Provides shared fixtures for all test levels including environment setup,
mocked upstream HTTP sessions, an in-memory state store wired into the DI
container and a replier that records outgoing messages.
"""

import os
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from dependency_injector import providers

from app.core.container import container
from app.models import OutgoingMessage
from app.services.state_store import MemoryStateStore

from .mocks import make_upstream_session

TEST_BOT_TOKEN = os.getenv("TEST_BOT_TOKEN", "123456:test_bot_token_placeholder")
TEST_CHAT_ID = 4242


@pytest.fixture(autouse=True)
def test_environment():
    """Setup test environment variables for all tests."""
    test_env = {
        "BOT_TOKEN": TEST_BOT_TOKEN,
        "LOG_LEVEL": "DEBUG",
    }

    original_env = {}
    for key, value in test_env.items():
        original_env[key] = os.environ.get(key)
        os.environ[key] = value

    yield

    for key, original_value in original_env.items():
        if original_value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = original_value


class RecordingReplier:
    """Replier that keeps every message instead of sending it."""

    def __init__(self) -> None:
        self.messages: list[OutgoingMessage] = []

    async def send(self, message: OutgoingMessage) -> None:
        self.messages.append(message)

    @property
    def texts(self) -> list[str]:
        return [message.text for message in self.messages]


@pytest.fixture
def replier() -> RecordingReplier:
    return RecordingReplier()


@pytest.fixture
def memory_store() -> MemoryStateStore:
    return MemoryStateStore(ttl_seconds=900)


@pytest.fixture
def wired_store(memory_store):
    """Route the container's state store to an in-memory instance."""
    with container.state_store.override(providers.Object(memory_store)):
        yield memory_store


@pytest.fixture
def upstream_session():
    """Factory fixture for mocked upstream sessions."""
    return make_upstream_session


@pytest.fixture
def terabox_success_payload() -> dict[str, Any]:
    return {"status": "success", "media_url": "https://x/a.mp4", "title": "T"}


@pytest.fixture
def social_video_payload() -> dict[str, Any]:
    return {
        "statusCode": 200,
        "title": "T",
        "medias": [{"type": "video", "url": "https://x/v.mp4", "resolution": "720p"}],
    }


@pytest.fixture
def mock_telegram_context():
    """Mock bot context with an async Telegram bot."""
    context = MagicMock()
    context.bot = MagicMock()
    context.bot.send_message = AsyncMock()
    context.bot.send_photo = AsyncMock()
    context.bot.send_video = AsyncMock()
    context.bot.send_audio = AsyncMock()
    context.bot.send_document = AsyncMock()
    return context
