"""URL validation for user-submitted links.

Provides the helper used by the link pipeline to decide whether a text
message is a candidate URL before any upstream API is called.
"""

from __future__ import annotations

import logging
import re
from typing import Final

logger = logging.getLogger(__name__)


class URLProcessor:
    """Normalizes and validates candidate URLs."""

    SCHEME_PATTERN: Final[re.Pattern[str]] = re.compile(r"^https?://\S", re.IGNORECASE)

    def normalize(self, text: str | None) -> str:
        """Strip surrounding whitespace from a message text."""
        if not text:
            return ""
        return text.strip()

    def is_http_url(self, text: str | None) -> bool:
        """Check that the text begins with an HTTP(S) scheme.

        The body of the URL is not inspected; the upstream APIs decide
        whether they can handle it.
        """
        return bool(self.SCHEME_PATTERN.match(self.normalize(text)))


url_processor = URLProcessor()
