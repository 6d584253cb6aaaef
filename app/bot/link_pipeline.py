"""Link resolution pipeline.

Takes a chat's text message together with the mode consumed from the state
store, dispatches the link to the matching upstream API and renders the
result. The pipeline talks to the chat only through a ``Replier`` so the
same logic serves polling, webhook and serverless deployments.
"""

import logging
from collections.abc import Callable
from datetime import datetime

import aiohttp

from ..models import ChatMode, MediaResult
from ..scrapers import UpstreamRegistry
from ..services.state_store import StateStore
from .response_formatter import ResponseFormatter
from .types import Outcome, PipelineOutcome, Replier
from .url_processor import URLProcessor, url_processor
from .utils import create_session

logger = logging.getLogger(__name__)

REJECTED_INPUT = frozenset({Outcome.START_OVER, Outcome.INVALID_LINK})


class LinkPipeline:
    """Resolves user links through the upstream download APIs.

    Responsibilities:
    - Reject messages without a pending mode or without an HTTP(S) link
    - Announce processing before the upstream call
    - Translate every upstream failure into one apology message
    - Render successful results as a caption with download buttons
    - Keep the media URLs for the send-to-chat buttons when a store is given
    """

    def __init__(
        self,
        registry: UpstreamRegistry,
        formatter: ResponseFormatter,
        processor: URLProcessor | None = None,
        session_factory: Callable[[], aiohttp.ClientSession] = create_session,
        media_store: StateStore | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            registry: Upstream clients keyed by chat mode.
            formatter: Builds outgoing messages.
            processor: URL validator, defaults to the shared instance.
            session_factory: Creates the HTTP session for one request.
            media_store: Keeps media URLs behind the send-to-chat buttons,
                no such buttons are offered without it.
        """
        self.registry = registry
        self.formatter = formatter
        self.processor = processor or url_processor
        self.session_factory = session_factory
        self.media_store = media_store

    async def process(
        self, chat_id: int, text: str | None, mode: ChatMode, replier: Replier
    ) -> PipelineOutcome:
        """Handle one text message of a chat.

        Args:
            chat_id: Chat the message came from.
            text: Raw message text.
            mode: Mode consumed from the state store for this chat.
            replier: Delivers messages back to the chat.

        Returns:
            Summary of what was sent to the user.
        """
        start_time = datetime.now()
        result: PipelineOutcome = {
            "chat_id": chat_id,
            "mode": mode,
            "source": None,
            "media": None,
            "error": None,
        }

        client = self.registry.get_client_for_mode(mode)
        if mode is ChatMode.NONE or client is None:
            await replier.send(self.formatter.format_start_over())
            return self._finish(result, Outcome.START_OVER, start_time)

        url = self.processor.normalize(text)
        if not self.processor.is_http_url(url):
            await replier.send(self.formatter.format_invalid_link())
            return self._finish(result, Outcome.INVALID_LINK, start_time)

        source = client.get_source_name()
        result["source"] = source

        await replier.send(self.formatter.format_processing(source))

        try:
            async with self.session_factory() as session:
                media = await client.resolve(url, session)
        except Exception as e:
            result["error"] = str(e) or type(e).__name__
            logger.error(f"{source} API error for chat {chat_id}: {result['error']}")
            await replier.send(self.formatter.format_upstream_error())
            return self._finish(result, Outcome.UPSTREAM_ERROR, start_time)

        if media is None:
            await replier.send(self.formatter.format_not_found(source))
            return self._finish(result, Outcome.NOT_FOUND, start_time)

        result["media"] = media
        token = await self._store_media(chat_id, media)
        message = self.formatter.format_media_response(media, media_token=token)
        await replier.send(message)

        if not message.url_buttons:
            return self._finish(result, Outcome.NO_DOWNLOAD_OPTION, start_time)
        return self._finish(result, Outcome.DELIVERED, start_time)

    async def _store_media(self, chat_id: int, media: MediaResult) -> str | None:
        if self.media_store is None:
            return None
        urls = media.direct_media()
        if not urls:
            return None
        return await self.media_store.save_media(chat_id, urls)

    @staticmethod
    def _finish(
        result: PipelineOutcome, outcome: Outcome, start_time: datetime
    ) -> PipelineOutcome:
        result["outcome"] = outcome
        result["processing_time_ms"] = int((datetime.now() - start_time).total_seconds() * 1000)
        # Rejected user input stays out of the regular log
        level = logging.DEBUG if outcome in REJECTED_INPUT else logging.INFO
        logger.log(
            level,
            f"Chat {result['chat_id']}: {outcome.value} "
            f"(source={result.get('source')}, {result['processing_time_ms']}ms)"
        )
        return result
