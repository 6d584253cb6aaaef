"""Upstream download API clients.

Contains the clients for the third-party APIs that perform the actual media
extraction. Each client turns a user URL into a normalized ``MediaResult``.

Architecture:
- UpstreamClientProtocol: Unified interface for all upstream clients
- UpstreamRegistry: Routes a pending chat mode to its client
- SocialDownloaderClient: Generic social media downloader
- TeraboxClient: Terabox link resolver
"""

from ..config import UpstreamConfig
from .base import BaseUpstreamClient, UpstreamClientProtocol, UpstreamError, UpstreamRegistry
from .social import SocialDownloaderClient
from .terabox import TeraboxClient


def build_upstream_registry(upstream_config: UpstreamConfig) -> UpstreamRegistry:
    """Create a registry with both upstream clients registered.

    Args:
        upstream_config: Endpoint settings.

    Returns:
        Registry serving the social and Terabox modes.
    """
    registry = UpstreamRegistry()
    registry.register(SocialDownloaderClient(upstream_config.social_endpoint))
    registry.register(TeraboxClient(upstream_config.terabox_endpoint))
    return registry


__all__ = [
    "BaseUpstreamClient",
    "SocialDownloaderClient",
    "TeraboxClient",
    "UpstreamClientProtocol",
    "UpstreamError",
    "UpstreamRegistry",
    "build_upstream_registry",
]
