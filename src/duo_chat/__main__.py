"""Entrypoint: python -m duo_chat"""
from __future__ import annotations

import uvicorn

from duo_chat.config import settings


def main() -> None:
    uvicorn.run(
        "duo_chat.app:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL,
    )


if __name__ == "__main__":
    main()
