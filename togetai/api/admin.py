"""Admin API endpoints for inspecting and removing entries."""

import logging
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from litestar import Controller, delete, get
from litestar.params import Dependency
from litestar.status_codes import HTTP_200_OK
from pydantic import BaseModel

from togetai.auth import require_admin_guard
from togetai.exceptions import EntryNotFoundError
from togetai.models import FeedbackEntry
from togetai.store import RecordStore

logger = logging.getLogger("Togetai.admin")

KNOWN_ROLES = ("creator", "promoter", "other")


# --- Response Schemas ---

class FeedbackStats(BaseModel):
    """Aggregate counts over all stored entries."""
    total: int
    by_role: Dict[str, int]
    by_source: Dict[str, int]
    recent_24h: int
    recent_7d: int


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; they were written as UTC
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def compute_stats(entries: List[FeedbackEntry], now: Optional[datetime] = None) -> FeedbackStats:
    """Count entries by role, by form and by age."""
    now = now or datetime.now(timezone.utc)
    roles = Counter(entry.role.lower() for entry in entries)
    by_role = {role: roles.get(role, 0) for role in KNOWN_ROLES}
    by_role.update({role: count for role, count in roles.items() if role not in by_role})

    ages = [now - _as_utc(entry.created_at) for entry in entries]
    return FeedbackStats(
        total=len(entries),
        by_role=by_role,
        by_source=dict(Counter(entry.source.value for entry in entries)),
        recent_24h=sum(1 for age in ages if age < timedelta(days=1)),
        recent_7d=sum(1 for age in ages if age < timedelta(days=7)),
    )


# --- Controller ---

class AdminController(Controller):
    """API endpoints for reviewing stored submissions."""

    path = "/api/feedback"
    tags = ["admin"]
    guards = [require_admin_guard]

    @get("/")
    async def list_feedback(self, store: RecordStore = Dependency(skip_validation=True)) -> dict:
        """Get all stored entries. No pagination."""
        entries = await store.list_all()
        return {
            "success": True,
            "count": len(entries),
            "data": [entry.to_json() for entry in entries],
        }

    @get("/stats")
    async def feedback_stats(self, store: RecordStore = Dependency(skip_validation=True)) -> dict:
        """Get entry counts by role, form and age."""
        stats = compute_stats(await store.list_all())
        return {"success": True, "stats": stats.model_dump()}

    @delete("/{entry_id:str}", status_code=HTTP_200_OK)
    async def delete_feedback(self, entry_id: str, store: RecordStore = Dependency(skip_validation=True)) -> dict:
        """Delete one entry by id."""
        if not await store.delete_by_id(entry_id):
            raise EntryNotFoundError(f"Feedback entry {entry_id} not found")

        logger.info(f"Admin deleted entry {entry_id}")
        return {"success": True, "message": f"Feedback entry {entry_id} deleted"}
