"""Social media downloader client.

Wraps the generic social-media downloader API. Instagram, Facebook, YouTube
and other sites all go through the same endpoint; the platform picked in the
menu does not change the request.
"""

import logging

import aiohttp
from pydantic import ValidationError

from ..models import ChatMode, MediaResult, SocialApiResponse, SocialMedia
from .base import BaseUpstreamClient, UpstreamError

logger = logging.getLogger(__name__)


def _first_of_type(medias: list[SocialMedia], media_type: str) -> SocialMedia | None:
    """Return the first entry of the given type that carries a URL."""
    for media in medias:
        if media.type == media_type and media.url:
            return media
    return None


class SocialDownloaderClient(BaseUpstreamClient):
    """Client for the social media downloader API.

    Expects ``statusCode``, ``title``, ``thumbnail`` and an ordered
    ``medias`` list of video/audio entries. The first video and the first
    audio entry win; there is no ranking beyond list order.
    """

    mode = ChatMode.AWAIT_SOCIAL_LINK

    def __init__(self, endpoint: str):
        super().__init__("social", endpoint)

    async def resolve(self, url: str, session: aiohttp.ClientSession) -> MediaResult | None:
        payload = await self.fetch_json(url, session)

        try:
            data = SocialApiResponse.model_validate(payload)
        except ValidationError as e:
            raise UpstreamError(f"Unexpected social API payload: {e}") from e

        if not data.status_ok:
            self.logger.info(f"Social API answered with statusCode={data.status_code}")
            return None

        if not data.is_success:
            self.logger.info("Social API found the link but returned no medias")

        return self.to_media_result(data)

    @staticmethod
    def to_media_result(data: SocialApiResponse) -> MediaResult:
        """Normalize a successful social API payload.

        Args:
            data: Validated API payload.

        Returns:
            MediaResult with at most one video and one audio variant.
        """
        video = _first_of_type(data.medias, "video")
        audio = _first_of_type(data.medias, "audio")

        return MediaResult(
            source="social",
            title=data.title or "",
            thumbnail_url=data.thumbnail or (video.thumbnail if video else None),
            video_url=video.url if video else None,
            video_label=(video.resolution if video and video.resolution else "Best"),
            audio_url=audio.url if audio else None,
            audio_label=(audio.quality if audio and audio.quality else "Best"),
        )
