from __future__ import annotations

from typing import Protocol


class MediaStore(Protocol):
    async def resolve(self, image: str) -> str:
        """Return the durable reference to store for an image payload."""
        ...
