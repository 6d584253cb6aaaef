"""Configuration management for the media relay bot.

Handles all application configuration including environment variables, the
optional YAML upstream file, and default settings. Provides structured
configuration classes for the bot transport, the upstream download APIs and
the conversation state store.
"""

import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_SOCIAL_ENDPOINT = "https://downloaderpro.xo.je/mesin/dwn.php/"
DEFAULT_TERABOX_ENDPOINT = "https://wadownloader.amitdas.site/api/TeraBox/main/"


def _env_is_set(name: str) -> bool:
    """Check whether a setting is given in the environment, in any letter case."""
    return any(key.upper() == name for key in os.environ)


class UpstreamConfig(BaseSettings):
    """Third-party download API settings.

    Attributes:
        social_endpoint: Generic social-media downloader endpoint.
        terabox_endpoint: Terabox link resolver endpoint.
        timeout: Total timeout for a single upstream call in seconds.
    """

    social_endpoint: str = Field(default=DEFAULT_SOCIAL_ENDPOINT, validation_alias="SOCIAL_API_URL")
    terabox_endpoint: str = Field(
        default=DEFAULT_TERABOX_ENDPOINT, validation_alias="TERABOX_API_URL"
    )
    timeout: float = Field(default=10.0, gt=0, validation_alias="UPSTREAM_TIMEOUT")


class StateConfig(BaseSettings):
    """Conversation state store settings.

    Attributes:
        redis_url: Redis connection URL, None selects the in-process store.
        ttl_seconds: Lifetime of a pending link request.
        key_prefix: Prefix for Redis keys.
    """

    redis_url: str | None = Field(default=None, validation_alias="REDIS_URL")
    ttl_seconds: int = Field(default=900, gt=0, validation_alias="STATE_TTL_SECONDS")
    key_prefix: str = Field(default="media_bot:state", validation_alias="STATE_KEY_PREFIX")


class BotConfig(BaseSettings):
    """Main Telegram bot configuration.

    Attributes:
        bot_token: Telegram bot API token from environment.
        admin_chat_id: Telegram chat ID of the bot owner (informational).
        port: Server port for webhook mode.
        listen_host: Interface the webhook server binds to.
        custom_domain: Explicit public domain for webhooks.
        railway_domain: Railway public domain for webhooks.
        railway_static_url: Legacy Railway domain variable.
        vercel_url: Vercel deployment domain.
        webhook_path: URL path Telegram posts updates to.
        webhook_secret: Secret token Telegram echoes in webhook requests.
        transport: How updates are received.
        log_level: Root logging level.
    """

    bot_token: str = Field(default="", validation_alias="BOT_TOKEN")
    admin_chat_id: int | None = Field(default=None, validation_alias="ADMIN_CHAT_ID")
    port: int = Field(default=8000, validation_alias="PORT")
    listen_host: str = Field(default="127.0.0.1", validation_alias="BOT_LISTEN_HOST")
    custom_domain: str | None = Field(default=None, validation_alias="WEBHOOK_DOMAIN")
    railway_domain: str | None = Field(default=None, validation_alias="RAILWAY_PUBLIC_DOMAIN")
    railway_static_url: str | None = Field(default=None, validation_alias="RAILWAY_STATIC_URL")
    vercel_url: str | None = Field(default=None, validation_alias="VERCEL_URL")
    webhook_path: str = Field(default="/webhook", validation_alias="WEBHOOK_PATH")
    webhook_secret: str | None = Field(default=None, validation_alias="WEBHOOK_SECRET")
    transport: Literal["auto", "polling", "webhook", "http"] = Field(
        default="auto", validation_alias="BOT_TRANSPORT"
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @property
    def webhook_domain(self) -> str | None:
        """Get the public domain Telegram should deliver updates to.

        Returns:
            Domain string if available, None for polling mode.
        """
        domain = (
            self.custom_domain or self.railway_domain or self.railway_static_url or self.vercel_url
        )
        if not domain:
            return None
        return domain.removeprefix("https://").removeprefix("http://").rstrip("/")

    @property
    def webhook_url(self) -> str | None:
        """Full public webhook URL, None when no domain is configured."""
        domain = self.webhook_domain
        if not domain:
            return None
        return f"https://{domain}{self.webhook_path}"

    @property
    def resolved_transport(self) -> str:
        """Resolve ``auto`` into a concrete transport.

        Returns:
            ``webhook`` if a public domain is configured, ``polling``
            otherwise; explicit choices are returned unchanged.
        """
        if self.transport != "auto":
            return self.transport
        return "webhook" if self.webhook_domain else "polling"


class Config:
    """Application configuration manager.

    Centralizes loading of environment variables, the optional upstream YAML
    file and default values. Environment variables win over the YAML file.
    """

    def __init__(self, config_dir: Path | None = None):
        """Initialize configuration manager.

        Args:
            config_dir: Path to configuration directory, defaults to app/config.
        """
        if config_dir is None:
            config_dir = Path(__file__).parent / "config"

        self.config_dir = Path(config_dir)

        self.bot = BotConfig()
        self.state = StateConfig()
        self.upstream = self._load_upstream_config()

    def _load_upstream_config(self) -> UpstreamConfig:
        """Build upstream settings from YAML defaults and the environment.

        Returns:
            UpstreamConfig with YAML values applied where no env var is set.
        """
        env_config = UpstreamConfig()

        upstreams_path = self.config_dir / "upstreams.yml"
        if not upstreams_path.exists():
            return env_config

        with open(upstreams_path) as f:
            data = yaml.safe_load(f) or {}

        social = data.get("social") or {}
        terabox = data.get("terabox") or {}

        overrides: dict[str, object] = {}
        if not _env_is_set("SOCIAL_API_URL"):
            overrides["social_endpoint"] = social.get("endpoint") or DEFAULT_SOCIAL_ENDPOINT
        if not _env_is_set("TERABOX_API_URL"):
            overrides["terabox_endpoint"] = terabox.get("endpoint") or DEFAULT_TERABOX_ENDPOINT
        if data.get("timeout") is not None and not _env_is_set("UPSTREAM_TIMEOUT"):
            overrides["timeout"] = float(data["timeout"])

        return env_config.model_copy(update=overrides)


# Global configuration instance
config = Config()
