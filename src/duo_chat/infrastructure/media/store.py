"""Image payload resolution.

Inline ``data:image`` URIs are stored as they are. Anything else is uploaded
when an upload endpoint is configured; on any upload failure the original
string is kept.
"""
from __future__ import annotations

import logging

import httpx

logger = logging.getLogger(__name__)

INLINE_PREFIX = "data:image"


class PassthroughMediaStore:
    """Stores whatever reference the client sent."""

    async def resolve(self, image: str) -> str:
        return image


class HttpUploadMediaStore:
    """Uploads remote images to an HTTP media service and keeps its URL."""

    def __init__(
        self,
        upload_url: str,
        folder: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._upload_url = upload_url
        self._folder = folder
        self._timeout = timeout
        self._transport = transport

    async def resolve(self, image: str) -> str:
        if image.startswith(INLINE_PREFIX):
            return image
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.post(
                    self._upload_url,
                    json={"file": image, "folder": self._folder},
                )
                resp.raise_for_status()
                body = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Media upload failed, keeping direct reference: %s", exc)
            return image

        url = (body.get("secure_url") or body.get("url")) if isinstance(body, dict) else None
        if not url:
            logger.warning("Media upload response had no url, keeping direct reference")
            return image
        return url
