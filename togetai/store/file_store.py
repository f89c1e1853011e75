"""JSON file record store.

All entries live in one pretty-printed JSON array. Every mutation is a full
read-modify-write of that document, serialized by an ``asyncio.Lock``. The
lock only covers a single process: several workers sharing one file can
still race on the duplicate check.
"""

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError

from togetai.exceptions import DuplicateEmailError
from togetai.models import FeedbackEntry, normalize_email
from togetai.store.base import RecordStore
from togetai.utils.logging import error_log

logger = logging.getLogger("Togetai.store")


class _UnreadableStore(Exception):
    """The backing document exists but could not be loaded."""


class JsonFileRecordStore(RecordStore):
    """Record store backed by a single JSON document on disk."""

    backend_name = "file"

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        try:
            if not self.path.parent.exists():
                self.path.parent.mkdir(parents=True, exist_ok=True)
                logger.info(f"Created data directory {self.path.parent}")
            if not self.path.exists():
                await asyncio.to_thread(self._write, [])
                logger.info(f"Created {self.path.name}")
        except OSError as e:
            error_log("Error initializing data file", exc=e, context={"path": self.path})

    # --- Raw document access ---

    def _load(self) -> List[dict]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return []
        except (OSError, json.JSONDecodeError) as e:
            raise _UnreadableStore(str(e)) from e

        if not isinstance(data, list):
            raise _UnreadableStore(f"expected a JSON array, got {type(data).__name__}")
        return data

    def _write(self, entries: List[dict]) -> bool:
        # Write to a sibling file and swap it in so a failed write never
        # leaves a truncated document behind.
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(entries, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
            return True
        except (OSError, TypeError, ValueError) as e:
            error_log("Error writing feedback data", exc=e, context={"path": self.path})
            try:
                tmp_path.unlink(missing_ok=True)
            except OSError:
                pass
            return False

    def _read_entries(self) -> List[FeedbackEntry]:
        try:
            raw = self._load()
        except _UnreadableStore as e:
            error_log("Error reading feedback data", exc=e, context={"path": self.path})
            return []

        entries = []
        for item in raw:
            try:
                entries.append(FeedbackEntry.model_validate(item))
            except PydanticValidationError as e:
                logger.warning(f"Skipping malformed entry in {self.path.name}: {e.error_count()} error(s)")
        return entries

    # --- RecordStore ---

    async def list_all(self) -> List[FeedbackEntry]:
        async with self._lock:
            return await asyncio.to_thread(self._read_entries)

    async def find_by_email(self, email: str) -> Optional[FeedbackEntry]:
        wanted = normalize_email(email)
        async with self._lock:
            entries = await asyncio.to_thread(self._read_entries)
            for entry in entries:
                if normalize_email(entry.email) == wanted:
                    return entry
        return None

    async def insert(self, entry: FeedbackEntry) -> bool:
        async with self._lock:
            try:
                raw = await asyncio.to_thread(self._load)
            except _UnreadableStore as e:
                # Refuse to overwrite a document we could not parse
                error_log("Refusing to write over unreadable feedback data", exc=e, context={"path": self.path})
                return False

            email = normalize_email(entry.email)
            if any(normalize_email(str(item.get("email", ""))) == email for item in raw if isinstance(item, dict)):
                raise DuplicateEmailError(email)

            raw.append(entry.to_json())
            if not await asyncio.to_thread(self._write, raw):
                return False

        logger.info(f"New entry stored: {entry.id}")
        return True

    async def delete_by_id(self, entry_id: str) -> bool:
        async with self._lock:
            try:
                raw = await asyncio.to_thread(self._load)
            except _UnreadableStore as e:
                error_log("Error reading feedback data", exc=e, context={"path": self.path})
                return False

            remaining = [item for item in raw if not (isinstance(item, dict) and item.get("id") == entry_id)]
            if len(remaining) == len(raw):
                return False
            if not await asyncio.to_thread(self._write, remaining):
                return False

        logger.info(f"Entry deleted: {entry_id}")
        return True
