"""Menu keyboards and their conversion to Telegram markup."""

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from ..models import InlineButton, MediaKind, SocialPlatform
from .messages import (
    BUTTON_BACK_TO_MAIN,
    BUTTON_FACEBOOK,
    BUTTON_INSTAGRAM,
    BUTTON_OTHER,
    BUTTON_SEND_AUDIO,
    BUTTON_SEND_DOCUMENT,
    BUTTON_SEND_VIDEO,
    BUTTON_SOCIAL_DOWNLOADER,
    BUTTON_TERABOX_PLAYER,
    BUTTON_YOUTUBE,
    CB_BACK_TO_MAIN,
    CB_SEND_MEDIA_PREFIX,
    CB_SOCIAL_DOWNLOADER,
    CB_SOCIAL_PLATFORM_PREFIX,
    CB_TERABOX_PLAYER,
)

# Matches SOCIAL_INSTAGRAM etc. but not SOCIAL_DOWNLOADER
SOCIAL_PLATFORM_PATTERN = (
    f"^{CB_SOCIAL_PLATFORM_PREFIX}({'|'.join(platform.value for platform in SocialPlatform)})$"
)

SEND_MEDIA_PATTERN = (
    f"^{CB_SEND_MEDIA_PREFIX}:([A-Za-z0-9_-]+):({'|'.join(kind.value for kind in MediaKind)})$"
)

SEND_MEDIA_LABELS = {
    MediaKind.VIDEO: BUTTON_SEND_VIDEO,
    MediaKind.AUDIO: BUTTON_SEND_AUDIO,
    MediaKind.DOCUMENT: BUTTON_SEND_DOCUMENT,
}


def back_to_main_button() -> InlineButton:
    return InlineButton(text=BUTTON_BACK_TO_MAIN, callback_data=CB_BACK_TO_MAIN)


def main_menu() -> list[list[InlineButton]]:
    """Entry menu with the two services."""
    return [
        [InlineButton(text=BUTTON_SOCIAL_DOWNLOADER, callback_data=CB_SOCIAL_DOWNLOADER)],
        [InlineButton(text=BUTTON_TERABOX_PLAYER, callback_data=CB_TERABOX_PLAYER)],
    ]


def send_media_row(token: str, kinds: list[MediaKind]) -> list[InlineButton]:
    """Buttons that make the bot send the media itself instead of a link."""
    return [
        InlineButton(
            text=SEND_MEDIA_LABELS[kind],
            callback_data=f"{CB_SEND_MEDIA_PREFIX}:{token}:{kind.value}",
        )
        for kind in kinds
    ]


def parse_send_media(data: str) -> tuple[str, MediaKind]:
    """Split send-media callback data into its token and media kind."""
    _, token, kind = data.split(":")
    return token, MediaKind(kind)


def _platform_button(text: str, platform: SocialPlatform) -> InlineButton:
    return InlineButton(text=text, callback_data=f"{CB_SOCIAL_PLATFORM_PREFIX}{platform.value}")


def social_platform_menu() -> list[list[InlineButton]]:
    """Social submenu; every platform leads to the same downloader."""
    return [
        [
            _platform_button(BUTTON_INSTAGRAM, SocialPlatform.INSTAGRAM),
            _platform_button(BUTTON_FACEBOOK, SocialPlatform.FACEBOOK),
        ],
        [
            _platform_button(BUTTON_YOUTUBE, SocialPlatform.YOUTUBE),
            _platform_button(BUTTON_OTHER, SocialPlatform.OTHER),
        ],
        [back_to_main_button()],
    ]


def to_markup(keyboard: list[list[InlineButton]]) -> InlineKeyboardMarkup | None:
    """Convert neutral keyboard rows into python-telegram-bot markup.

    Args:
        keyboard: Rows of InlineButton models.

    Returns:
        InlineKeyboardMarkup, or None for an empty keyboard.
    """
    if not keyboard:
        return None

    return InlineKeyboardMarkup(
        [
            [
                InlineKeyboardButton(button.text, url=button.url)
                if button.url
                else InlineKeyboardButton(button.text, callback_data=button.callback_data)
                for button in row
            ]
            for row in keyboard
        ]
    )
