"""Response formatting for bot messages and user interactions.

Turns normalized media results and pipeline failures into transport-neutral
``OutgoingMessage`` objects with captions and inline keyboards.
"""

import logging

from telegram.constants import ParseMode
from telegram.helpers import escape_markdown

from ..models import InlineButton, MediaResult, OutgoingMessage
from .keyboards import back_to_main_button, main_menu, send_media_row, social_platform_menu
from .messages import (
    BUTTON_DOWNLOAD_VIDEO,
    BUTTON_OPEN_MEDIA,
    BUTTON_SOCIAL_AUDIO,
    BUTTON_SOCIAL_VIDEO,
    BUTTON_WATCH_VIDEO,
    INVALID_LINK_MESSAGE,
    MEDIA_EXPIRED_MESSAGE,
    MEDIA_SEND_FAILED_MESSAGE,
    NO_DOWNLOAD_OPTION_MESSAGE,
    SOCIAL_LINK_PROMPT,
    SOCIAL_NOT_FOUND_MESSAGE,
    SOCIAL_PLATFORM_PROMPT,
    SOCIAL_PROCESSING_MESSAGE,
    SOCIAL_RESULT_CAPTION,
    START_OVER_MESSAGE,
    TERABOX_LINK_PROMPT,
    TERABOX_NOT_FOUND_MESSAGE,
    TERABOX_PROCESSING_MESSAGE,
    TERABOX_RESULT_CAPTION,
    UNTITLED,
    UPSTREAM_APOLOGY_MESSAGE,
    WELCOME_MESSAGE,
)

logger = logging.getLogger(__name__)

# Telegram photo captions are limited to 1024 characters
MAX_TITLE_LENGTH = 700
MARKDOWN = ParseMode.MARKDOWN.value


def _markdown(text: str, keyboard: list[list[InlineButton]] | None = None) -> OutgoingMessage:
    return OutgoingMessage(text=text, keyboard=keyboard or [], parse_mode=MARKDOWN)


def _plain(text: str) -> OutgoingMessage:
    return OutgoingMessage(text=text)


class ResponseFormatter:
    """Formats bot responses for menus, media results and errors."""

    def format_title(self, title: str | None) -> str:
        """Shorten and Markdown-escape an upstream title."""
        title = (title or "").strip() or UNTITLED
        if len(title) > MAX_TITLE_LENGTH:
            title = title[: MAX_TITLE_LENGTH - 1] + "…"
        return escape_markdown(title, version=1)

    # Menus

    def format_main_menu(self) -> OutgoingMessage:
        return _markdown(WELCOME_MESSAGE, main_menu())

    def format_social_menu(self) -> OutgoingMessage:
        return OutgoingMessage(text=SOCIAL_PLATFORM_PROMPT, keyboard=social_platform_menu())

    def format_terabox_prompt(self) -> OutgoingMessage:
        return _markdown(TERABOX_LINK_PROMPT)

    def format_social_prompt(self, platform: str) -> OutgoingMessage:
        return _markdown(SOCIAL_LINK_PROMPT.format(platform=platform))

    # Validation and progress

    def format_start_over(self) -> OutgoingMessage:
        return _markdown(START_OVER_MESSAGE)

    def format_invalid_link(self) -> OutgoingMessage:
        return _plain(INVALID_LINK_MESSAGE)

    def format_processing(self, source: str) -> OutgoingMessage:
        if source == "terabox":
            return _plain(TERABOX_PROCESSING_MESSAGE)
        return _plain(SOCIAL_PROCESSING_MESSAGE)

    # Results

    def format_media_response(
        self, media: MediaResult, media_token: str | None = None
    ) -> OutgoingMessage:
        """Format the result card for a resolved link.

        Args:
            media: Normalized media result.
            media_token: Token of the stored media URLs. When given, a row of
                buttons that send the media into the chat is added.

        Returns:
            Photo/caption message with URL buttons and a back-to-menu action,
            or the "no downloadable option" message when nothing can be
            offered.
        """
        if media.source == "terabox":
            keyboard = self._terabox_keyboard(media)
            caption = TERABOX_RESULT_CAPTION
        else:
            keyboard = self._social_keyboard(media)
            caption = SOCIAL_RESULT_CAPTION

        if not keyboard:
            return self.format_no_download_option()

        if media_token:
            keyboard.append(send_media_row(media_token, list(media.direct_media())))
        keyboard.append([back_to_main_button()])
        return OutgoingMessage(
            text=caption.format(title=self.format_title(media.title)),
            photo_url=media.thumbnail_url,
            keyboard=keyboard,
            parse_mode=MARKDOWN,
        )

    def _terabox_keyboard(self, media: MediaResult) -> list[list[InlineButton]]:
        if not media.watch_url or not media.download_url:
            return []
        return [
            [
                InlineButton(text=BUTTON_WATCH_VIDEO, url=media.watch_url),
                InlineButton(text=BUTTON_DOWNLOAD_VIDEO, url=media.download_url),
            ]
        ]

    def _social_keyboard(self, media: MediaResult) -> list[list[InlineButton]]:
        keyboard: list[list[InlineButton]] = []
        if media.video_url:
            keyboard.append(
                [
                    InlineButton(
                        text=BUTTON_SOCIAL_VIDEO.format(label=media.video_label),
                        url=media.video_url,
                    )
                ]
            )
        if media.audio_url:
            keyboard.append(
                [
                    InlineButton(
                        text=BUTTON_SOCIAL_AUDIO.format(label=media.audio_label),
                        url=media.audio_url,
                    )
                ]
            )
        return keyboard

    def format_media_expired(self) -> OutgoingMessage:
        return _plain(MEDIA_EXPIRED_MESSAGE)

    def format_media_fallback(self, url: str) -> OutgoingMessage:
        """Offer the link itself when Telegram refuses to send the file."""
        return OutgoingMessage(
            text=MEDIA_SEND_FAILED_MESSAGE,
            keyboard=[[InlineButton(text=BUTTON_OPEN_MEDIA, url=url)]],
        )

    def format_not_found(self, source: str) -> OutgoingMessage:
        if source == "terabox":
            return _plain(TERABOX_NOT_FOUND_MESSAGE)
        return _plain(SOCIAL_NOT_FOUND_MESSAGE)

    def format_no_download_option(self) -> OutgoingMessage:
        return _plain(NO_DOWNLOAD_OPTION_MESSAGE)

    def format_upstream_error(self) -> OutgoingMessage:
        return _plain(UPSTREAM_APOLOGY_MESSAGE)


# Global formatter instance
response_formatter = ResponseFormatter()
