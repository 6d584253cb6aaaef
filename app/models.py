"""Data models for the media relay bot.

Defines Pydantic models for the conversation state, the raw payloads of the
two upstream download APIs, the normalized media result and the
transport-neutral outgoing chat message.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ChatMode(str, Enum):
    """Which kind of link the bot expects next from a chat."""

    NONE = "NONE"
    AWAIT_SOCIAL_LINK = "AWAIT_SOCIAL_LINK"
    AWAIT_TERABOX_LINK = "AWAIT_TERABOX_LINK"


class SocialPlatform(str, Enum):
    """Social platform picked in the submenu.

    Stored with the state but never changes which upstream API is called.
    """

    INSTAGRAM = "INSTAGRAM"
    FACEBOOK = "FACEBOOK"
    YOUTUBE = "YOUTUBE"
    OTHER = "OTHER"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ChatState(BaseModel):
    """Pending conversation state of a single chat.

    Attributes:
        chat_id: Telegram chat identifier.
        mode: Expected link type.
        platform: Social submenu choice, inert metadata.
        updated_at: When the state was written.
        expires_at: When the state stops being honoured, None for never.
    """

    chat_id: int
    mode: ChatMode = ChatMode.NONE
    platform: SocialPlatform | None = None
    updated_at: datetime = Field(default_factory=_utcnow)
    expires_at: datetime | None = None

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check whether the state outlived its TTL."""
        if self.expires_at is None:
            return False
        return (now or _utcnow()) >= self.expires_at


def _number_to_str(value: Any) -> Any:
    """Render numeric labels such as ``720`` or ``128`` as text."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class SocialMedia(BaseModel):
    """Single downloadable variant returned by the social downloader."""

    model_config = ConfigDict(extra="ignore")

    type: str | None = None
    url: str | None = None
    resolution: str | None = None
    quality: str | None = None
    thumbnail: str | None = None

    @field_validator("type", "resolution", "quality", mode="before")
    @classmethod
    def _coerce_labels(cls, value: Any) -> Any:
        return _number_to_str(value)


class SocialApiResponse(BaseModel):
    """Payload of the social downloader API.

    Success iff ``statusCode == 200`` and ``medias`` is non-empty. A 200
    answer with no medias is still a valid answer that offers nothing to
    download. A ``null`` medias list counts as empty and entries that are
    not objects are skipped.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    status_code: int | None = Field(default=None, alias="statusCode")
    title: str | None = None
    thumbnail: str | None = None
    medias: list[SocialMedia] = Field(default_factory=list)

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, value: Any) -> Any:
        return _number_to_str(value)

    @field_validator("medias", mode="before")
    @classmethod
    def _tolerate_missing_medias(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            return [entry for entry in value if isinstance(entry, dict)]
        return value

    @property
    def status_ok(self) -> bool:
        return self.status_code == 200

    @property
    def is_success(self) -> bool:
        return self.status_ok and len(self.medias) > 0


class TeraboxApiResponse(BaseModel):
    """Payload of the Terabox resolver API.

    Success iff ``status == "success"`` and ``media_url`` is present.
    """

    model_config = ConfigDict(extra="ignore")

    status: str | None = None
    media_url: str | None = None
    title: str | None = None
    thumbnail: str | None = None

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, value: Any) -> Any:
        return _number_to_str(value)

    @property
    def is_success(self) -> bool:
        return self.status == "success" and bool(self.media_url)


class MediaKind(str, Enum):
    """How a media URL is sent into the chat."""

    VIDEO = "VIDEO"
    AUDIO = "AUDIO"
    DOCUMENT = "DOCUMENT"


class MediaResult(BaseModel):
    """Normalized media description produced from either upstream API.

    Attributes:
        source: ``social`` or ``terabox``.
        title: Display title.
        thumbnail_url: Preview image, if any.
        video_url: Best (first) video variant.
        video_label: Resolution of the video variant, ``Best`` if unknown.
        audio_url: Best (first) audio variant, social path only.
        audio_label: Quality of the audio variant, ``Best`` if unknown.
        watch_url: Terabox streaming target.
        download_url: Terabox download target.
    """

    source: str
    title: str = ""
    thumbnail_url: str | None = None
    video_url: str | None = None
    video_label: str = "Best"
    audio_url: str | None = None
    audio_label: str = "Best"
    watch_url: str | None = None
    download_url: str | None = None

    @property
    def has_downloads(self) -> bool:
        return bool(self.video_url or self.audio_url or self.download_url)

    def direct_media(self) -> dict[MediaKind, str]:
        """URLs the bot can send straight into the chat, keyed by kind.

        Social results offer the video and audio variants. Terabox results
        stream the file as a video and send it as a document for download.
        """
        if self.source == "terabox":
            candidates = {MediaKind.VIDEO: self.watch_url, MediaKind.DOCUMENT: self.download_url}
        else:
            candidates = {MediaKind.VIDEO: self.video_url, MediaKind.AUDIO: self.audio_url}
        return {kind: url for kind, url in candidates.items() if url}


class StoredMedia(BaseModel):
    """Media URLs of one result card, kept for its send-to-chat buttons.

    Callback data is limited to 64 bytes, so the buttons carry a short
    token and the URLs live in the state store until they expire.
    """

    chat_id: int
    urls: dict[MediaKind, str]
    expires_at: datetime | None = None

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        return (now or _utcnow()) >= self.expires_at


class InlineButton(BaseModel):
    """Inline keyboard button opening a URL or triggering a callback."""

    text: str
    url: str | None = None
    callback_data: str | None = None

    @model_validator(mode="after")
    def _exactly_one_action(self) -> "InlineButton":
        if (self.url is None) == (self.callback_data is None):
            raise ValueError("Button needs exactly one of url or callback_data")
        return self


class OutgoingMessage(BaseModel):
    """Chat message independent of the delivery transport.

    Attributes:
        text: Message text, or the caption when a photo is attached.
        photo_url: Photo to send with the text as caption.
        keyboard: Inline keyboard rows.
        parse_mode: Telegram parse mode, None for plain text.
    """

    text: str
    photo_url: str | None = None
    keyboard: list[list[InlineButton]] = Field(default_factory=list)
    parse_mode: str | None = None

    @property
    def buttons(self) -> list[InlineButton]:
        """Flat list of all keyboard buttons."""
        return [button for row in self.keyboard for button in row]

    @property
    def url_buttons(self) -> list[InlineButton]:
        return [button for button in self.buttons if button.url]
