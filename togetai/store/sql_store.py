"""Relational record store on SQLAlchemy's async engine.

The UNIQUE constraint on ``feedback_entries.email`` is the final arbiter for
duplicates: two concurrent submissions can both pass the pre-insert lookup,
but only one row survives the commit.
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from togetai.exceptions import DuplicateEmailError
from togetai.models import Base, FeedbackEntry, FeedbackRecord, normalize_email
from togetai.store.base import RecordStore
from togetai.utils.logging import error_log

logger = logging.getLogger("Togetai.store")

UNIQUE_VIOLATION = "23505"


def _is_duplicate_email(exc: IntegrityError) -> bool:
    """Whether an IntegrityError came from the UNIQUE email constraint."""
    orig = exc.orig
    message = str(orig).lower()
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code is not None:
        # PostgreSQL: a primary-key clash also reports 23505
        return code == UNIQUE_VIOLATION and "pkey" not in message
    # SQLite: "UNIQUE constraint failed: feedback_entries.email"
    return "unique constraint failed" in message and ".email" in message


class SqlRecordStore(RecordStore):
    """Record store backed by the ``feedback_entries`` table."""

    backend_name = "database"

    def __init__(self, database_url: str, create_all: bool = False, echo: bool = False) -> None:
        self.database_url = database_url
        self.create_all = create_all
        self.engine = create_async_engine(database_url, echo=echo)
        self.async_session = sessionmaker(self.engine, class_=AsyncSession, expire_on_commit=False)

    async def initialize(self) -> None:
        if not self.create_all:
            logger.debug("Assuming feedback_entries schema already exists")
            return
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Database schema ensured")
        except SQLAlchemyError as e:
            error_log("Error creating database schema", exc=e)

    async def list_all(self) -> List[FeedbackEntry]:
        try:
            async with self.async_session() as session:
                result = await session.execute(
                    select(FeedbackRecord).order_by(FeedbackRecord.created_at, FeedbackRecord.id)
                )
                return [FeedbackEntry.model_validate(r) for r in result.scalars().all()]
        except SQLAlchemyError as e:
            error_log("Error reading feedback entries", exc=e)
            return []

    async def find_by_email(self, email: str) -> Optional[FeedbackEntry]:
        try:
            async with self.async_session() as session:
                result = await session.execute(
                    select(FeedbackRecord).where(FeedbackRecord.email == normalize_email(email))
                )
                record = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            error_log("Error looking up feedback entry", exc=e)
            return None
        return FeedbackEntry.model_validate(record) if record else None

    async def insert(self, entry: FeedbackEntry) -> bool:
        email = normalize_email(entry.email)
        record = FeedbackRecord(**entry.model_dump(exclude={"source", "email"}), source=entry.source.value, email=email)
        async with self.async_session() as session:
            try:
                session.add(record)
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                if _is_duplicate_email(e):
                    raise DuplicateEmailError(email) from e
                error_log("Integrity error inserting feedback entry", exc=e, context={"id": entry.id})
                return False
            except SQLAlchemyError as e:
                await session.rollback()
                error_log("Error inserting feedback entry", exc=e, context={"id": entry.id})
                return False

        logger.info(f"New entry stored: {entry.id}")
        return True

    async def delete_by_id(self, entry_id: str) -> bool:
        async with self.async_session() as session:
            try:
                result = await session.execute(delete(FeedbackRecord).where(FeedbackRecord.id == entry_id))
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                error_log("Error deleting feedback entry", exc=e, context={"id": entry_id})
                return False

        if result.rowcount:
            logger.info(f"Entry deleted: {entry_id}")
            return True
        return False

    async def close(self) -> None:
        await self.engine.dispose()
