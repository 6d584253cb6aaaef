"""Delivery of outgoing messages through the Telegram Bot API."""

import logging

from telegram import Bot, LinkPreviewOptions
from telegram.error import TelegramError

from ..models import MediaKind, OutgoingMessage
from .keyboards import to_markup

logger = logging.getLogger(__name__)


class TelegramReplier:
    """Sends ``OutgoingMessage`` objects to one chat.

    Delivery failures are logged and swallowed so the update is still
    acknowledged. A photo that Telegram rejects (for example an expired
    thumbnail) is replaced by a text message with the same keyboard.
    """

    def __init__(self, bot: Bot, chat_id: int):
        self.bot = bot
        self.chat_id = chat_id

    async def send(self, message: OutgoingMessage) -> None:
        reply_markup = to_markup(message.keyboard)

        if message.photo_url:
            try:
                await self.bot.send_photo(
                    chat_id=self.chat_id,
                    photo=message.photo_url,
                    caption=message.text,
                    parse_mode=message.parse_mode,
                    reply_markup=reply_markup,
                )
                return
            except TelegramError as e:
                logger.warning(f"Failed to send photo to chat {self.chat_id}, sending text: {e}")

        try:
            await self.bot.send_message(
                chat_id=self.chat_id,
                text=message.text,
                parse_mode=message.parse_mode,
                reply_markup=reply_markup,
                link_preview_options=LinkPreviewOptions(is_disabled=True),
            )
        except TelegramError as e:
            logger.error(f"Failed to deliver message to chat {self.chat_id}: {e}")

    async def send_media(self, kind: MediaKind, url: str) -> bool:
        """Have Telegram fetch a media URL and post it into the chat.

        Args:
            kind: Decides between a video, an audio track and a plain file.
            url: Remote file Telegram downloads by itself.

        Returns:
            True if Telegram accepted the file, False otherwise.
        """
        try:
            if kind is MediaKind.VIDEO:
                await self.bot.send_video(chat_id=self.chat_id, video=url, supports_streaming=True)
            elif kind is MediaKind.AUDIO:
                await self.bot.send_audio(chat_id=self.chat_id, audio=url)
            else:
                await self.bot.send_document(chat_id=self.chat_id, document=url)
        except TelegramError as e:
            logger.warning(f"Failed to send {kind.value.lower()} to chat {self.chat_id}: {e}")
            return False
        return True
