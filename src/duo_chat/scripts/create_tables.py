"""Create the database schema for local development."""
from __future__ import annotations

import asyncio
import logging

from duo_chat.infrastructure.db.base import Base
from duo_chat.infrastructure.db.models import MessageModel, UserModel  # noqa: F401
from duo_chat.infrastructure.db.session import engine

logger = logging.getLogger(__name__)


async def create_tables() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()
    logger.info("Created tables: %s", ", ".join(sorted(Base.metadata.tables)))


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    asyncio.run(create_tables())


if __name__ == "__main__":
    main()
