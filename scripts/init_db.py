#!/usr/bin/env python
"""Initialize database tables."""
import asyncio
import logging
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from tekkenstats.db.connection import dispose_engine, get_engine
from tekkenstats.db.models import Base
from tekkenstats.settings import get_settings, validate_environment


async def init_db() -> None:
    if get_settings().database_type == "sqlite":
        Path("data").mkdir(exist_ok=True)
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await dispose_engine()
    print("✓ Database tables created successfully")


if __name__ == "__main__":
    logging.basicConfig(
        level=get_settings().log_level_numeric,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    validate_environment()
    asyncio.run(init_db())
