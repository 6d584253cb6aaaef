"""Bot utility functions.

Provides HTTP session management for the upstream download APIs.
"""

import aiohttp

from ..config import config

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


def create_session(timeout: float | None = None) -> aiohttp.ClientSession:
    """Create configured aiohttp session for upstream API calls.

    Every call made through the session is bounded by the configured
    upstream timeout.

    Args:
        timeout: Total timeout in seconds, defaults to the upstream config.

    Returns:
        aiohttp.ClientSession: Configured HTTP session for making requests.
    """
    connector = aiohttp.TCPConnector(limit=100, limit_per_host=30)
    client_timeout = aiohttp.ClientTimeout(total=timeout or config.upstream.timeout)

    headers = {
        "User-Agent": USER_AGENT,
        "Accept": "application/json, text/plain, */*",
        "Accept-Language": "en-US,en;q=0.5",
    }

    return aiohttp.ClientSession(connector=connector, timeout=client_timeout, headers=headers)
