"""Typed structures shared across bot components."""

from __future__ import annotations

from enum import Enum
from typing import Protocol, TypedDict

from ..models import ChatMode, MediaResult, OutgoingMessage


class Outcome(str, Enum):
    """How a text message was handled by the link pipeline."""

    START_OVER = "start_over"
    INVALID_LINK = "invalid_link"
    NOT_FOUND = "not_found"
    NO_DOWNLOAD_OPTION = "no_download_option"
    UPSTREAM_ERROR = "upstream_error"
    DELIVERED = "delivered"


class PipelineOutcome(TypedDict, total=False):
    """Result of a single pipeline run, used for logging and tests."""

    outcome: Outcome
    chat_id: int
    mode: ChatMode
    source: str | None
    media: MediaResult | None
    error: str | None
    processing_time_ms: int


class Replier(Protocol):
    """Sends outgoing messages to a single chat."""

    async def send(self, message: OutgoingMessage) -> None:
        ...
