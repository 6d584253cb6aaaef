"""Base upstream client protocol and abstractions for media extraction.

Defines the unified interface that every third-party download API client
implements, the shared HTTP plumbing and the registry that routes a pending
chat mode to its client.
"""

import asyncio
import json
import logging
from typing import Any, Protocol

import aiohttp

from ..models import ChatMode, MediaResult

logger = logging.getLogger(__name__)


class UpstreamError(Exception):
    """Upstream API call failed (network, HTTP status or malformed payload)."""


class UpstreamClientProtocol(Protocol):
    """Protocol defining the interface for all upstream download clients.

    Methods:
        resolve: Turn a user URL into a normalized MediaResult.
        get_source_name: Get the upstream identifier.
        handles_mode: Check if the client serves the given chat mode.
    """

    async def resolve(self, url: str, session: aiohttp.ClientSession) -> MediaResult | None:
        """Resolve a user-submitted URL through the upstream API.

        Args:
            url: URL sent by the user.
            session: HTTP session for requests.

        Returns:
            MediaResult if the API reported success, None if it answered
            with a well-formed but unsuccessful payload.

        Raises:
            UpstreamError: On network failure, non-2xx status or a payload
                that is not the expected JSON shape.
        """
        ...

    def get_source_name(self) -> str:
        """Get the upstream name identifier (e.g., 'social', 'terabox')."""
        ...

    def handles_mode(self, mode: ChatMode) -> bool:
        """Check if this client serves links awaited in the given mode."""
        ...


class BaseUpstreamClient:
    """Base class providing the HTTP call shared by all upstream clients.

    The user URL is always sent as the single ``url`` query parameter of a
    GET request, without authentication and without retries.
    """

    mode: ChatMode = ChatMode.NONE

    def __init__(self, source_name: str, endpoint: str):
        """Initialize base client.

        Args:
            source_name: Name of the upstream (e.g., 'social', 'terabox').
            endpoint: API endpoint URL.
        """
        self.source_name = source_name
        self.endpoint = endpoint
        self.logger = logging.getLogger(f"{__name__}.{source_name}")

    def get_source_name(self) -> str:
        """Get the upstream name identifier."""
        return self.source_name

    def handles_mode(self, mode: ChatMode) -> bool:
        return mode is self.mode

    async def fetch_json(self, url: str, session: aiohttp.ClientSession) -> dict[str, Any]:
        """Call the upstream endpoint and decode its JSON body.

        Args:
            url: User URL passed as the ``url`` query parameter.
            session: HTTP session with the configured timeout.

        Returns:
            Decoded JSON object.

        Raises:
            UpstreamError: If the call fails or the body is not a JSON object.
        """
        self.logger.info(f"Requesting {self.source_name} API for {url}")

        try:
            async with session.get(self.endpoint, params={"url": url}) as response:
                if response.status < 200 or response.status >= 300:
                    raise UpstreamError(f"{self.source_name} API returned HTTP {response.status}")
                body = await response.text()
        except asyncio.TimeoutError as e:
            raise UpstreamError(f"{self.source_name} API timed out") from e
        except aiohttp.ClientError as e:
            raise UpstreamError(f"{self.source_name} API request failed: {e}") from e

        try:
            payload = json.loads(body)
        except json.JSONDecodeError as e:
            raise UpstreamError(f"{self.source_name} API returned invalid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise UpstreamError(
                f"{self.source_name} API returned {type(payload).__name__} instead of an object"
            )
        return payload


class UpstreamRegistry:
    """Registry for managing upstream clients.

    Provides centralized lookup of the client that serves a chat mode.
    """

    def __init__(self) -> None:
        """Initialize empty upstream registry."""
        self._clients: dict[str, UpstreamClientProtocol] = {}
        self.logger = logging.getLogger(f"{__name__}.registry")

    def register(self, client: UpstreamClientProtocol) -> None:
        """Register a new upstream client.

        Args:
            client: Client instance implementing UpstreamClientProtocol.
        """
        source = client.get_source_name()
        self._clients[source] = client
        self.logger.info(f"Registered upstream client: {source}")

    def get_client_for_mode(self, mode: ChatMode) -> UpstreamClientProtocol | None:
        """Find the client for a pending chat mode.

        Args:
            mode: Mode consumed from the state store.

        Returns:
            Client instance if found, None otherwise.
        """
        for client in self._clients.values():
            if client.handles_mode(mode):
                return client
        return None

    def get_client(self, source: str) -> UpstreamClientProtocol | None:
        return self._clients.get(source)

    def get_all_sources(self) -> list[str]:
        return list(self._clients.keys())
