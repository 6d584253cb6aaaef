"""Telegram bot handlers.

Thin handlers that keep the conversation state and delegate link handling
to the shared link pipeline. Every transport (polling, webhook server,
serverless HTTP endpoint) registers the same handlers through
``register_handlers``.
"""

import logging

from telegram import Message, Update
from telegram.error import BadRequest
from telegram.ext import (
    Application,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from ..core.container import container
from ..models import ChatMode, OutgoingMessage, SocialPlatform
from .keyboards import SEND_MEDIA_PATTERN, SOCIAL_PLATFORM_PATTERN, parse_send_media, to_markup
from .messages import (
    CB_BACK_TO_MAIN,
    CB_SOCIAL_DOWNLOADER,
    CB_SOCIAL_PLATFORM_PREFIX,
    CB_TERABOX_PLAYER,
)
from .replier import TelegramReplier

logger = logging.getLogger(__name__)


async def start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start command.

    Clears any pending state and shows the main menu.

    Args:
        update: Telegram update object containing message data.
        context: Bot context for accessing application instance.
    """
    chat = update.effective_chat
    if not chat or not update.message:
        return

    await container.state_store().clear_state(chat.id)
    formatter = container.response_formatter()
    await TelegramReplier(context.bot, chat.id).send(formatter.format_main_menu())


async def social_downloader(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Show the social platform submenu."""
    if not update.callback_query:
        return

    await update.callback_query.answer()
    await _show_menu(update, context, container.response_formatter().format_social_menu())


async def terabox_player(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Expect a Terabox link as the next message."""
    chat = update.effective_chat
    if not update.callback_query or not chat:
        return

    await update.callback_query.answer()
    await container.state_store().set_state(chat.id, ChatMode.AWAIT_TERABOX_LINK)
    await _show_menu(update, context, container.response_formatter().format_terabox_prompt())


async def social_platform(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Expect a social media link as the next message.

    The chosen platform is kept with the state but the same downloader
    serves all of them.
    """
    query = update.callback_query
    chat = update.effective_chat
    if not query or not chat or not query.data:
        return

    await query.answer()
    platform = SocialPlatform(query.data.removeprefix(CB_SOCIAL_PLATFORM_PREFIX))
    await container.state_store().set_state(chat.id, ChatMode.AWAIT_SOCIAL_LINK, platform)
    await _show_menu(
        update, context, container.response_formatter().format_social_prompt(platform.value)
    )


async def back_to_main(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Clear pending state and return to the main menu."""
    chat = update.effective_chat
    if not update.callback_query or not chat:
        return

    await update.callback_query.answer()
    await container.state_store().clear_state(chat.id)
    await _show_menu(update, context, container.response_formatter().format_main_menu())


async def handle_link(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle free-text messages as candidate links.

    Consumes the pending state of the chat and hands the text to the link
    pipeline, which replies on its own.

    Args:
        update: Telegram update object containing message data.
        context: Bot context for accessing application instance.
    """
    chat = update.effective_chat
    if not chat or not update.message:
        return

    state = await container.state_store().consume_state(chat.id)
    if state.platform:
        logger.debug(f"Chat {chat.id} awaited a {state.platform.value} link")

    await container.link_pipeline().process(
        chat.id, update.message.text, state.mode, TelegramReplier(context.bot, chat.id)
    )


async def send_media(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Send the media behind a result card straight into the chat.

    The callback data carries a token of the stored URLs and the media kind.
    Unknown, expired or foreign tokens get an expiry notice. When Telegram
    cannot fetch the file the user gets its link instead.

    Args:
        update: Telegram update object containing the callback query.
        context: Bot context for accessing application instance.
    """
    query = update.callback_query
    chat = update.effective_chat
    if not query or not chat or not query.data:
        return

    await query.answer()
    token, kind = parse_send_media(query.data)
    formatter = container.response_formatter()
    replier = TelegramReplier(context.bot, chat.id)

    stored = await container.state_store().load_media(token)
    url = stored.urls.get(kind) if stored and stored.chat_id == chat.id else None
    if not url:
        await replier.send(formatter.format_media_expired())
        return

    if not await replier.send_media(kind, url):
        await replier.send(formatter.format_media_fallback(url))


async def on_error(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Log errors raised by handlers so the update is still acknowledged."""
    logger.error("Error while handling update %s", update, exc_info=context.error)


async def _show_menu(
    update: Update, context: ContextTypes.DEFAULT_TYPE, message: OutgoingMessage
) -> None:
    """Edit the menu message in place, or send a new one.

    Result cards are photo messages whose text cannot be edited, so pressing
    a menu button under one sends a fresh message instead.
    """
    query = update.callback_query
    chat = update.effective_chat
    if query is None or chat is None:
        return

    origin = query.message
    if isinstance(origin, Message) and origin.text:
        try:
            await query.edit_message_text(
                message.text,
                parse_mode=message.parse_mode,
                reply_markup=to_markup(message.keyboard),
            )
            return
        except BadRequest as e:
            logger.warning(f"Could not edit menu message in chat {chat.id}: {e}")

    await TelegramReplier(context.bot, chat.id).send(message)


def register_handlers(app: Application) -> None:
    """Register all bot handlers on an application.

    Args:
        app: python-telegram-bot application.
    """
    app.add_handler(CommandHandler("start", start))
    app.add_handler(CallbackQueryHandler(social_downloader, pattern=f"^{CB_SOCIAL_DOWNLOADER}$"))
    app.add_handler(CallbackQueryHandler(terabox_player, pattern=f"^{CB_TERABOX_PLAYER}$"))
    app.add_handler(CallbackQueryHandler(social_platform, pattern=SOCIAL_PLATFORM_PATTERN))
    app.add_handler(CallbackQueryHandler(back_to_main, pattern=f"^{CB_BACK_TO_MAIN}$"))
    app.add_handler(CallbackQueryHandler(send_media, pattern=SEND_MEDIA_PATTERN))
    app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handle_link))
    app.add_error_handler(on_error)
