"""Application entry point.

Main module that initializes and runs the Telegram bot application. Handles
three transports that share the same handlers: long polling (local
development), the python-telegram-bot webhook server (persistent hosts such
as Railway) and the aiohttp HTTP endpoint (serverless-style deployments).
"""

import logging

from aiohttp import web
from telegram.ext import Application

from .bot.handlers import register_handlers
from .config import config
from .core.container import container
from .webhook import create_web_app

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Configure root logging from the bot settings."""
    logging.basicConfig(
        format="%(asctime)s - %(levelname)s - %(message)s",
        level=getattr(logging, config.bot.log_level.upper(), logging.INFO),
    )
    # Bot token is part of every Telegram API URL
    logging.getLogger("httpx").setLevel(logging.WARNING)


async def initialize_resources() -> None:
    """Initialize application resources."""
    store = container.state_store()
    if await store.connect():
        logger.info("State store ready")
    else:
        logger.warning("State store unavailable, every message is treated as having no mode")


async def cleanup_resources() -> None:
    """Cleanup application resources."""
    await container.state_store().close()
    logger.info("State store closed")


def check_state_backend(transport: str) -> None:
    """Warn when a multi-process transport runs without a shared state store.

    Webhook and HTTP deployments may spread the updates of one chat over
    several processes, so the in-process store can lose pending modes.
    """
    if transport in ("webhook", "http") and not config.state.redis_url:
        logger.warning(
            f"REDIS_URL not set for the {transport} transport; pending link requests "
            "are kept in memory and are lost across processes or restarts"
        )


def build_application() -> Application:
    """Create the bot application with all handlers registered.

    Raises:
        RuntimeError: If BOT_TOKEN environment variable is not set.
    """
    if not config.bot.bot_token:
        raise RuntimeError("Set BOT_TOKEN environment variable")

    async def post_init(application: Application) -> None:
        await initialize_resources()

    async def post_shutdown(application: Application) -> None:
        await cleanup_resources()

    app = (
        Application.builder()
        .token(config.bot.bot_token)
        .post_init(post_init)
        .post_shutdown(post_shutdown)
        .build()
    )
    register_handlers(app)
    return app


def main() -> None:
    """Main application entry point.

    Builds the bot application and starts it with the configured transport.
    """
    configure_logging()
    app = build_application()
    transport = config.bot.resolved_transport
    check_state_backend(transport)

    if transport == "http":
        logger.info(f"Serving webhook endpoint {config.bot.webhook_path} on port {config.bot.port}")
        web.run_app(create_web_app(app), host=config.bot.listen_host, port=config.bot.port)
    elif transport == "webhook":
        webhook_url = config.bot.webhook_url
        if not webhook_url:
            raise RuntimeError("Webhook transport needs WEBHOOK_DOMAIN or a platform domain")
        logger.info(f"Starting webhook at {webhook_url}")
        app.run_webhook(
            listen=config.bot.listen_host,
            port=config.bot.port,
            url_path=config.bot.webhook_path.lstrip("/"),
            webhook_url=webhook_url,
            secret_token=config.bot.webhook_secret,
        )
    else:
        logger.warning("No public domain found; falling back to long-polling")
        app.run_polling(allowed_updates=["message", "callback_query"])


if __name__ == "__main__":
    main()
