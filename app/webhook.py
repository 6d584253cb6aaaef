"""HTTP webhook endpoint for serverless and single-process web deployments.

Exposes the bot as an aiohttp web application:

- ``POST <webhook_path>``: Telegram update envelope, answered with 200 once
  handled and 500 if handling failed
- ``<any> <webhook_path>?set_webhook=true``: register the public URL with
  Telegram
- ``GET /health``: liveness probe

Updates are passed to the same python-telegram-bot ``Application`` and
handlers used by the polling and webhook-server transports.
"""

import logging

from aiohttp import web
from telegram import Update
from telegram.error import TelegramError
from telegram.ext import Application

from .config import BotConfig, config
from .core.container import container

logger = logging.getLogger(__name__)

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"

APPLICATION_KEY = web.AppKey("application", Application)
BOT_CONFIG_KEY = web.AppKey("bot_config", BotConfig)


async def set_webhook(request: web.Request) -> web.Response:
    """Register the configured public URL with Telegram."""
    application = request.app[APPLICATION_KEY]
    bot_config = request.app[BOT_CONFIG_KEY]
    webhook_url = bot_config.webhook_url

    try:
        await application.bot.set_webhook(webhook_url, secret_token=bot_config.webhook_secret)
    except TelegramError as e:
        logger.error(f"Error setting webhook: {e}")
        return web.Response(status=500, text="Error setting webhook.")

    logger.info(f"Webhook set to: {webhook_url}")
    return web.Response(status=200, text="Webhook set successfully!")


async def handle_webhook(request: web.Request) -> web.Response:
    """Receive one Telegram update and run it through the bot handlers."""
    bot_config = request.app[BOT_CONFIG_KEY]

    if request.query.get("set_webhook") == "true" and bot_config.webhook_url:
        return await set_webhook(request)

    if request.method != "POST":
        return web.Response(status=405, text="Method Not Allowed")

    if bot_config.webhook_secret and (
        request.headers.get(SECRET_HEADER) != bot_config.webhook_secret
    ):
        logger.warning("Rejected webhook request with invalid secret token")
        return web.Response(status=403, text="Forbidden")

    try:
        payload = await request.json()
    except ValueError as e:
        logger.warning(f"Undecodable webhook body: {e}")
        return web.Response(status=400, text="Bad Request")

    if not isinstance(payload, dict):
        return web.Response(status=400, text="Bad Request")

    application = request.app[APPLICATION_KEY]
    try:
        update = Update.de_json(payload, application.bot)
        await application.process_update(update)
    except Exception as e:
        logger.error(f"Error handling update: {e}", exc_info=True)
        return web.Response(status=500, text="Internal Server Error")

    return web.Response(status=200, text="OK")


async def health(request: web.Request) -> web.Response:
    """Health check endpoint."""
    return web.json_response({"status": "ok"})


async def on_startup(app: web.Application) -> None:
    await app[APPLICATION_KEY].initialize()
    await container.state_store().connect()
    logger.info("Webhook application started")


async def on_cleanup(app: web.Application) -> None:
    await container.state_store().close()
    await app[APPLICATION_KEY].shutdown()
    logger.info("Webhook application stopped")


def create_web_app(application: Application, bot_config: BotConfig | None = None) -> web.Application:
    """Create the aiohttp application serving the webhook.

    Args:
        application: python-telegram-bot application with handlers registered.
        bot_config: Bot settings, defaults to the global configuration.

    Returns:
        Configured aiohttp web application.
    """
    bot_config = bot_config or config.bot

    app = web.Application()
    app[APPLICATION_KEY] = application
    app[BOT_CONFIG_KEY] = bot_config

    app.router.add_get("/health", health)
    app.router.add_route("*", bot_config.webhook_path, handle_webhook)

    app.on_startup.append(on_startup)
    app.on_cleanup.append(on_cleanup)

    return app
