"""Integration tests for the bot handlers.

Drive the handlers with mocked Telegram updates against an in-memory state
store and a link pipeline whose upstream HTTP session is mocked.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from dependency_injector import providers
from telegram import Message
from telegram.error import BadRequest, TelegramError

from app.bot import handlers
from app.bot.link_pipeline import LinkPipeline
from app.bot.messages import (
    BUTTON_OPEN_MEDIA,
    MEDIA_EXPIRED_MESSAGE,
    MEDIA_SEND_FAILED_MESSAGE,
    NO_DOWNLOAD_OPTION_MESSAGE,
    SOCIAL_PROCESSING_MESSAGE,
    START_OVER_MESSAGE,
    TERABOX_PROCESSING_MESSAGE,
    WELCOME_MESSAGE,
)
from app.bot.response_formatter import ResponseFormatter
from app.config import UpstreamConfig
from app.core.container import container
from app.models import ChatMode, MediaKind, SocialPlatform
from app.scrapers import build_upstream_registry

from ..mocks import make_upstream_session

TEST_CHAT_ID = 4242


def _callback_update(data: str, origin_text: str | None = "menu") -> MagicMock:
    update = MagicMock()
    update.effective_chat.id = TEST_CHAT_ID
    update.callback_query.data = data
    update.callback_query.answer = AsyncMock()
    update.callback_query.edit_message_text = AsyncMock()
    origin = MagicMock(spec=Message)
    origin.text = origin_text
    update.callback_query.message = origin
    return update


def _text_update(text: str | None) -> MagicMock:
    update = MagicMock()
    update.effective_chat.id = TEST_CHAT_ID
    update.message.text = text
    return update


@pytest.fixture
def wired_pipeline(wired_store):
    """Route the container's pipeline to one using a mocked upstream session."""
    holder = {"session": make_upstream_session({})}
    pipeline = LinkPipeline(
        registry=build_upstream_registry(UpstreamConfig()),
        formatter=ResponseFormatter(),
        session_factory=lambda: holder["session"],
        media_store=wired_store,
    )
    with container.link_pipeline.override(providers.Object(pipeline)):
        yield holder


def _sent_texts(context) -> list[str]:
    texts = [call.kwargs["text"] for call in context.bot.send_message.await_args_list]
    texts += [call.kwargs["caption"] for call in context.bot.send_photo.await_args_list]
    return texts


class TestMenus:
    @pytest.mark.asyncio
    async def test_start_clears_state_and_shows_menu(
        self, wired_store, mock_telegram_context
    ) -> None:
        await wired_store.set_state(TEST_CHAT_ID, ChatMode.AWAIT_TERABOX_LINK)

        await handlers.start(_text_update("/start"), mock_telegram_context)

        assert len(wired_store) == 0
        kwargs = mock_telegram_context.bot.send_message.await_args.kwargs
        assert kwargs["text"] == WELCOME_MESSAGE
        assert len(kwargs["reply_markup"].inline_keyboard) == 2

    @pytest.mark.asyncio
    async def test_terabox_player_sets_mode(self, wired_store, mock_telegram_context) -> None:
        update = _callback_update("TERABOX_PLAYER")

        await handlers.terabox_player(update, mock_telegram_context)

        update.callback_query.answer.assert_awaited_once()
        update.callback_query.edit_message_text.assert_awaited_once()
        state = await wired_store.consume_state(TEST_CHAT_ID)
        assert state.mode is ChatMode.AWAIT_TERABOX_LINK

    @pytest.mark.asyncio
    async def test_social_downloader_shows_platforms_without_state(
        self, wired_store, mock_telegram_context
    ) -> None:
        update = _callback_update("SOCIAL_DOWNLOADER")

        await handlers.social_downloader(update, mock_telegram_context)

        markup = update.callback_query.edit_message_text.await_args.kwargs["reply_markup"]
        assert len(markup.inline_keyboard) == 3
        assert len(wired_store) == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("platform", list(SocialPlatform))
    async def test_social_platform_sets_mode_with_platform(
        self, wired_store, mock_telegram_context, platform
    ) -> None:
        update = _callback_update(f"SOCIAL_{platform.value}")

        await handlers.social_platform(update, mock_telegram_context)

        state = await wired_store.consume_state(TEST_CHAT_ID)
        assert state.mode is ChatMode.AWAIT_SOCIAL_LINK
        assert state.platform is platform

    @pytest.mark.asyncio
    async def test_back_to_main_under_photo_sends_new_message(
        self, wired_store, mock_telegram_context
    ) -> None:
        await wired_store.set_state(TEST_CHAT_ID, ChatMode.AWAIT_SOCIAL_LINK)
        update = _callback_update("BACK_TO_MAIN", origin_text=None)

        await handlers.back_to_main(update, mock_telegram_context)

        update.callback_query.edit_message_text.assert_not_called()
        assert _sent_texts(mock_telegram_context) == [WELCOME_MESSAGE]
        assert len(wired_store) == 0

    @pytest.mark.asyncio
    async def test_failed_edit_sends_new_message(self, wired_store, mock_telegram_context) -> None:
        update = _callback_update("BACK_TO_MAIN")
        update.callback_query.edit_message_text.side_effect = BadRequest("Message is not modified")

        await handlers.back_to_main(update, mock_telegram_context)

        assert _sent_texts(mock_telegram_context) == [WELCOME_MESSAGE]


class TestHandleLink:
    @pytest.mark.asyncio
    async def test_text_without_mode_asks_to_start_over(
        self, wired_store, wired_pipeline, mock_telegram_context
    ) -> None:
        await handlers.handle_link(_text_update("https://youtu.be/x"), mock_telegram_context)

        assert _sent_texts(mock_telegram_context) == [START_OVER_MESSAGE]
        wired_pipeline["session"].get.assert_not_called()

    @pytest.mark.asyncio
    async def test_terabox_flow_consumes_state_once(
        self, wired_store, wired_pipeline, mock_telegram_context, terabox_success_payload
    ) -> None:
        wired_pipeline["session"] = make_upstream_session(terabox_success_payload)
        await handlers.terabox_player(_callback_update("TERABOX_PLAYER"), mock_telegram_context)

        await handlers.handle_link(_text_update("https://terabox.com/s/1"), mock_telegram_context)
        await handlers.handle_link(_text_update("https://terabox.com/s/1"), mock_telegram_context)

        texts = _sent_texts(mock_telegram_context)
        assert texts[0] == TERABOX_PROCESSING_MESSAGE
        assert texts[2] == START_OVER_MESSAGE
        result_markup = mock_telegram_context.bot.send_message.await_args_list[1].kwargs[
            "reply_markup"
        ]
        urls = [button.url for button in result_markup.inline_keyboard[0]]
        assert urls == ["https://x/a.mp4", "https://x/a.mp4"]
        wired_pipeline["session"].get.assert_called_once()

    @pytest.mark.asyncio
    async def test_social_flow_with_thumbnail_sends_photo(
        self, wired_store, wired_pipeline, mock_telegram_context, social_video_payload
    ) -> None:
        wired_pipeline["session"] = make_upstream_session(
            {**social_video_payload, "thumbnail": "https://x/t.jpg"}
        )
        await handlers.social_platform(
            _callback_update("SOCIAL_INSTAGRAM"), mock_telegram_context
        )

        await handlers.handle_link(
            _text_update("https://instagram.com/reel/1"), mock_telegram_context
        )

        photo = mock_telegram_context.bot.send_photo.await_args.kwargs
        assert photo["photo"] == "https://x/t.jpg"
        buttons = [row[0] for row in photo["reply_markup"].inline_keyboard]
        assert buttons[0].text == "⬇️ Download Video (720p)"
        assert buttons[0].url == "https://x/v.mp4"
        assert mock_telegram_context.bot.send_message.await_args.kwargs["text"] == (
            SOCIAL_PROCESSING_MESSAGE
        )

    @pytest.mark.asyncio
    async def test_social_flow_without_medias(
        self, wired_store, wired_pipeline, mock_telegram_context
    ) -> None:
        wired_pipeline["session"] = make_upstream_session({"statusCode": 200, "medias": []})
        await wired_store.set_state(TEST_CHAT_ID, ChatMode.AWAIT_SOCIAL_LINK)

        await handlers.handle_link(_text_update("https://youtu.be/x"), mock_telegram_context)

        assert _sent_texts(mock_telegram_context)[-1] == NO_DOWNLOAD_OPTION_MESSAGE

    @pytest.mark.asyncio
    async def test_invalid_link_clears_pending_mode(
        self, wired_store, wired_pipeline, mock_telegram_context
    ) -> None:
        await wired_store.set_state(TEST_CHAT_ID, ChatMode.AWAIT_TERABOX_LINK)

        await handlers.handle_link(_text_update("not a link"), mock_telegram_context)

        assert len(wired_store) == 0
        wired_pipeline["session"].get.assert_not_called()


def _send_buttons(markup) -> dict[str, str]:
    """Callback data of the send-to-chat row keyed by button text."""
    return {
        button.text: button.callback_data
        for row in markup.inline_keyboard
        for button in row
        if button.callback_data and button.callback_data.startswith("SEND:")
    }


class TestSendMedia:
    @pytest.mark.asyncio
    async def test_terabox_card_buttons_send_video_and_file(
        self, wired_store, wired_pipeline, mock_telegram_context
    ) -> None:
        wired_pipeline["session"] = make_upstream_session(
            {"status": "success", "media_url": "https://x/a.mp4", "title": "T"}
        )
        await wired_store.set_state(TEST_CHAT_ID, ChatMode.AWAIT_TERABOX_LINK)
        await handlers.handle_link(_text_update("https://terabox.com/s/1"), mock_telegram_context)

        card = mock_telegram_context.bot.send_message.await_args.kwargs["reply_markup"]
        send_buttons = _send_buttons(card)
        assert len(send_buttons) == 2

        for data in send_buttons.values():
            update = _callback_update(data, origin_text=None)
            await handlers.send_media(update, mock_telegram_context)
            update.callback_query.answer.assert_awaited_once()

        video = mock_telegram_context.bot.send_video.await_args.kwargs
        assert video["chat_id"] == TEST_CHAT_ID
        assert video["video"] == "https://x/a.mp4"
        document = mock_telegram_context.bot.send_document.await_args.kwargs
        assert document["document"] == "https://x/a.mp4"

    @pytest.mark.asyncio
    async def test_social_audio_button_sends_audio(
        self, wired_store, mock_telegram_context
    ) -> None:
        token = await wired_store.save_media(TEST_CHAT_ID, {MediaKind.AUDIO: "https://x/a.m4a"})

        await handlers.send_media(
            _callback_update(f"SEND:{token}:AUDIO"), mock_telegram_context
        )

        audio = mock_telegram_context.bot.send_audio.await_args.kwargs
        assert audio["audio"] == "https://x/a.m4a"
        mock_telegram_context.bot.send_message.assert_not_called()

    @pytest.mark.asyncio
    async def test_rejected_file_falls_back_to_link(
        self, wired_store, mock_telegram_context
    ) -> None:
        token = await wired_store.save_media(TEST_CHAT_ID, {MediaKind.VIDEO: "https://x/big.mp4"})
        mock_telegram_context.bot.send_video.side_effect = TelegramError("file is too big")

        await handlers.send_media(
            _callback_update(f"SEND:{token}:VIDEO"), mock_telegram_context
        )

        kwargs = mock_telegram_context.bot.send_message.await_args.kwargs
        assert kwargs["text"] == MEDIA_SEND_FAILED_MESSAGE
        button = kwargs["reply_markup"].inline_keyboard[0][0]
        assert button.text == BUTTON_OPEN_MEDIA
        assert button.url == "https://x/big.mp4"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "owner, kind",
        [
            (TEST_CHAT_ID, "AUDIO"),
            (TEST_CHAT_ID + 1, "VIDEO"),
        ],
    )
    async def test_missing_media_reports_expiry(
        self, wired_store, mock_telegram_context, owner, kind
    ) -> None:
        token = await wired_store.save_media(owner, {MediaKind.VIDEO: "https://x/v.mp4"})

        await handlers.send_media(_callback_update(f"SEND:{token}:{kind}"), mock_telegram_context)

        assert _sent_texts(mock_telegram_context) == [MEDIA_EXPIRED_MESSAGE]
        mock_telegram_context.bot.send_video.assert_not_called()
        mock_telegram_context.bot.send_audio.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_token_reports_expiry(self, wired_store, mock_telegram_context) -> None:
        await handlers.send_media(
            _callback_update("SEND:gone:DOCUMENT"), mock_telegram_context
        )

        assert _sent_texts(mock_telegram_context) == [MEDIA_EXPIRED_MESSAGE]
        mock_telegram_context.bot.send_document.assert_not_called()


def test_register_handlers_adds_every_route() -> None:
    app = MagicMock()

    handlers.register_handlers(app)

    assert app.add_handler.call_count == 7
    app.add_error_handler.assert_called_once_with(handlers.on_error)
