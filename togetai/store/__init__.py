"""Record store backends."""

import logging

from togetai.config import STORE_BACKEND_DATABASE, STORE_BACKEND_FILE, Settings
from togetai.store.base import RecordStore
from togetai.store.file_store import JsonFileRecordStore
from togetai.store.sql_store import SqlRecordStore

logger = logging.getLogger("Togetai.store")


def build_store(settings: Settings) -> RecordStore:
    """Pick the record store for this deployment.

    A ``database`` backend without a ``DATABASE_URL`` falls back to the file
    store instead of refusing to start.
    """
    if settings.store_backend == STORE_BACKEND_DATABASE:
        if settings.database_url:
            return SqlRecordStore(settings.database_url, create_all=settings.db_create_all)
        logger.error("STORE_BACKEND=database but DATABASE_URL is not set, using the file store")
    elif settings.store_backend != STORE_BACKEND_FILE:
        logger.warning(f"Unknown STORE_BACKEND {settings.store_backend!r}, using the file store")
    return JsonFileRecordStore(settings.feedback_file)


__all__ = ["RecordStore", "JsonFileRecordStore", "SqlRecordStore", "build_store"]
