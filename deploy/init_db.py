#!/usr/bin/env python3
"""
Initialize the feedback_entries schema for production.
Run this once after provisioning the database; the service itself only
creates tables when DB_CREATE_ALL (or APP_DEBUG) is enabled.
"""
import asyncio
import os
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy.ext.asyncio import create_async_engine

from togetai.models import Base


async def init_db(database_url: str) -> None:
    """Create all tables."""
    engine = create_async_engine(database_url, echo=True)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    print("Database schema initialized successfully!")
    await engine.dispose()


if __name__ == "__main__":
    url = os.getenv("DATABASE_URL")
    if not url:
        print("ERROR: DATABASE_URL is not set")
        sys.exit(1)
    asyncio.run(init_db(url))
