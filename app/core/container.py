"""Dependency-injection container.

This module defines a dependency-injection (DI) container that wires together
the application's components. Handlers resolve their collaborators through
the shared ``container`` instance, and tests override individual providers.
"""

from dependency_injector import containers, providers

from app.bot.link_pipeline import LinkPipeline
from app.bot.response_formatter import ResponseFormatter
from app.bot.url_processor import URLProcessor
from app.config import config as app_config
from app.scrapers import build_upstream_registry
from app.services.state_store import create_state_store


class Container(containers.DeclarativeContainer):
    """DI container for the application.

    This container holds the wiring for all the application's components.
    """

    settings = providers.Object(app_config)

    # Services
    state_store = providers.Singleton(create_state_store, config=settings.provided.state)
    upstream_registry = providers.Singleton(
        build_upstream_registry, upstream_config=settings.provided.upstream
    )

    # Bot components
    response_formatter = providers.Singleton(ResponseFormatter)
    url_processor = providers.Singleton(URLProcessor)
    link_pipeline = providers.Singleton(
        LinkPipeline,
        registry=upstream_registry,
        formatter=response_formatter,
        processor=url_processor,
        media_store=state_store,
    )


# Global container instance
container = Container()
