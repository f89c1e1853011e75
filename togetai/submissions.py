"""Submission schemas and the validate / deduplicate / persist pipeline."""

import logging
from typing import Any, ClassVar, Dict, List, Optional, Type, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from togetai.exceptions import ConflictError, DuplicateEmailError, PersistenceError, ValidationError
from togetai.models import EntrySource, FeedbackEntry, normalize_email
from togetai.store import RecordStore

logger = logging.getLogger("Togetai.submissions")

CONFLICT_MESSAGE = "This email has already been submitted. We'll be in touch soon!"
PERSISTENCE_MESSAGE = "Internal server error"

# Accepts local, test and other special-use domains
EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"


# --- Request Schemas ---

class SubmissionBase(BaseModel):
    """Fields shared by every public form."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore", populate_by_name=True)

    source: ClassVar[EntrySource]

    role: str = Field(
        ...,
        min_length=1,
        max_length=100,
        validation_alias=AliasChoices("role", "creatorType", "creator_type"),
    )
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., max_length=320, pattern=EMAIL_PATTERN)
    instagram: str = Field(..., min_length=1, max_length=200)
    message: Optional[str] = Field(default=None, max_length=5000)

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value: Any) -> Any:
        if isinstance(value, str):
            return normalize_email(value)
        return value

    @field_validator("message", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def to_entry(self, ip: Optional[str] = None, user_agent: Optional[str] = None) -> FeedbackEntry:
        """Build a new entry with a fresh id and timestamp."""
        return FeedbackEntry(
            source=self.source,
            ip=ip,
            user_agent=user_agent,
            **self.model_dump(),
        )


class FeedbackSubmission(SubmissionBase):
    """Creator/promoter feedback form."""

    source: ClassVar[EntrySource] = EntrySource.FEEDBACK

    last_campaign: str = Field(..., min_length=1, max_length=5000)
    worst_part: str = Field(..., min_length=1, max_length=5000)
    one_thing: str = Field(..., min_length=1, max_length=5000)
    rating: Optional[str] = Field(default=None, max_length=20)

    @field_validator("rating", mode="before")
    @classmethod
    def _rating_to_str(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class EarlyAccessSubmission(SubmissionBase):
    """Early-access signup form."""

    source: ClassVar[EntrySource] = EntrySource.EARLY_ACCESS

    why_join: str = Field(..., min_length=1, max_length=5000)


S = TypeVar("S", bound=SubmissionBase)


def _field_name(error: Dict[str, Any]) -> str:
    loc = error.get("loc") or ("body",)
    return str(loc[0])


def describe_errors(errors: List[Dict[str, Any]]) -> str:
    """Turn pydantic errors into one client-facing sentence."""
    missing = []
    invalid = []
    for error in errors:
        name = _field_name(error)
        if error.get("type") in ("missing", "string_too_short") or (name == "email" and error.get("input") == ""):
            missing.append(name)
        elif error.get("type") == "string_too_long":
            limit = (error.get("ctx") or {}).get("max_length")
            invalid.append(f"{name} is too long (max {limit} characters)" if limit else f"{name} is too long")
        elif name == "email":
            invalid.append("email must be a valid email address")
        else:
            invalid.append(f"{name} is invalid")

    parts = []
    if missing:
        parts.append(f"All fields are required (missing: {', '.join(dict.fromkeys(missing))})")
    parts.extend(dict.fromkeys(invalid))
    return "; ".join(parts) or "Invalid submission"


def parse_submission(schema: Type[S], payload: Any) -> S:
    """Validate an untyped JSON payload against a submission schema."""
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    try:
        return schema.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(describe_errors(e.errors())) from e


async def submit_entry(
    store: RecordStore,
    schema: Type[SubmissionBase],
    payload: Any,
    ip: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> FeedbackEntry:
    """Validate, deduplicate and persist one submission.

    Raises ValidationError or ConflictError before anything is written and
    PersistenceError when the store rejects the write.
    """
    submission = parse_submission(schema, payload)

    if await store.find_by_email(submission.email) is not None:
        logger.info(f"Duplicate submission rejected for {submission.email}")
        raise ConflictError(CONFLICT_MESSAGE)

    entry = submission.to_entry(ip=ip, user_agent=user_agent)
    try:
        saved = await store.insert(entry)
    except DuplicateEmailError as e:
        logger.info(f"Duplicate submission rejected at write time for {e.email}")
        raise ConflictError(CONFLICT_MESSAGE) from e

    if not saved:
        raise PersistenceError(PERSISTENCE_MESSAGE)

    logger.info(f"New {entry.source.value} submission: {entry.id}")
    return entry
