"""Relational mapping for stored feedback entries."""

from typing import Optional

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from togetai.models.base import Base


class FeedbackRecord(Base):
    """One persisted feedback or early-access submission."""

    __tablename__ = "feedback_entries"

    source: Mapped[str] = mapped_column(String(32), nullable=False, default="feedback")
    # Uniqueness is the final arbiter for duplicate submissions
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    role: Mapped[str] = mapped_column(String(100), nullable=False)
    instagram: Mapped[str] = mapped_column(String(200), nullable=False)

    last_campaign: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    worst_part: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    one_thing: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    why_join: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    rating: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    status: Mapped[str] = mapped_column(String(32), nullable=False, default="pending")
    ip: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)

    def __repr__(self) -> str:
        return f"<FeedbackRecord {self.email} ({self.created_at})>"
