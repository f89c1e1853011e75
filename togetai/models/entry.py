"""FeedbackEntry value shared by every record store."""

import enum
import secrets
import string
import time
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class EntrySource(str, enum.Enum):
    """Which form produced an entry."""
    FEEDBACK = "feedback"
    EARLY_ACCESS = "early_access"


DEFAULT_STATUS = "pending"

_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_entry_id(suffix_length: int = 9) -> str:
    """Millisecond timestamp followed by a random base36 suffix."""
    millis = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(suffix_length))
    return f"{millis}{suffix}"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FeedbackEntry(BaseModel):
    """One stored submission. Immutable once created."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str = Field(default_factory=generate_entry_id)
    source: EntrySource = EntrySource.FEEDBACK
    email: str
    name: str
    role: str
    instagram: str

    last_campaign: Optional[str] = None
    worst_part: Optional[str] = None
    one_thing: Optional[str] = None
    why_join: Optional[str] = None
    message: Optional[str] = None
    rating: Optional[str] = None

    status: str = DEFAULT_STATUS
    ip: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)

    def to_json(self) -> dict:
        """Plain JSON-compatible dict, as written to disk and returned by the API."""
        return self.model_dump(mode="json")
