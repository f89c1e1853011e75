"""Togetai data models."""

from togetai.models.base import Base
from togetai.models.entry import FeedbackEntry, EntrySource, generate_entry_id, normalize_email
from togetai.models.feedback import FeedbackRecord

__all__ = [
    "Base",
    "FeedbackEntry",
    "EntrySource",
    "FeedbackRecord",
    "generate_entry_id",
    "normalize_email",
]
