"""HTTP warm-up probe for image variants."""

from __future__ import annotations

import logging
from typing import Optional

import requests
from filetype import guess

from .config import DEFAULT_USER_AGENT
from .models import ProbeRequest

logger = logging.getLogger("product_gallery")

MAX_IMAGE_BYTES = 10 * 1024 * 1024
# RFC 9218 urgency 7 is the lowest priority a server can honour.
LOW_PRIORITY_HEADER = "u=7"


def detect_image_format(data: bytes) -> Optional[str]:
    """Detect image type using filetype; returns lowercase extension."""
    kind = guess(data)
    if kind and kind.mime.startswith("image/"):
        ext = kind.extension.lower()
        if ext == "jpeg":
            return "jpg"
        return ext
    return None


class HttpImageProbe:
    """Fetches the requested variant so HTTP caches along the way hold it."""

    supports_fetch_priority = True

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = 15.0,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout
        self.user_agent = user_agent

    def warm(self, request: ProbeRequest) -> None:
        headers = {"User-Agent": self.user_agent, "Accept": "image/*"}
        if request.fetch_priority == "low":
            headers["Priority"] = LOW_PRIORITY_HEADER
        resp = self.session.get(request.src, headers=headers, timeout=self.timeout)
        resp.raise_for_status()

        data = resp.content
        if len(data) > MAX_IMAGE_BYTES:
            raise ValueError(f"{request.src} is larger than {MAX_IMAGE_BYTES} bytes")
        extension = detect_image_format(data)
        if not extension:
            raise ValueError(
                f"{request.src} did not return an image "
                f"(Content-Type={resp.headers.get('Content-Type', '')})"
            )
        logger.debug("Warmed %s (%s, %d bytes)", request.src, extension, len(data))
