"""Terabox link resolver client."""

import aiohttp
from pydantic import ValidationError

from ..models import ChatMode, MediaResult, TeraboxApiResponse
from .base import BaseUpstreamClient, UpstreamError


class TeraboxClient(BaseUpstreamClient):
    """Client for the Terabox resolver API.

    Expects ``status``, ``media_url``, ``title`` and an optional
    ``thumbnail``. The resolved ``media_url`` is both the watch and the
    download target.
    """

    mode = ChatMode.AWAIT_TERABOX_LINK

    def __init__(self, endpoint: str):
        super().__init__("terabox", endpoint)

    async def resolve(self, url: str, session: aiohttp.ClientSession) -> MediaResult | None:
        payload = await self.fetch_json(url, session)

        try:
            data = TeraboxApiResponse.model_validate(payload)
        except ValidationError as e:
            raise UpstreamError(f"Unexpected Terabox API payload: {e}") from e

        if not data.is_success:
            self.logger.info(f"Terabox API returned status={data.status!r} without media")
            return None

        return MediaResult(
            source="terabox",
            title=data.title or "",
            thumbnail_url=data.thumbnail,
            watch_url=data.media_url,
            download_url=data.media_url,
        )
