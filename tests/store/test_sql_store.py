import pytest
import pytest_asyncio
from sqlalchemy.exc import IntegrityError

from togetai.exceptions import DuplicateEmailError
from togetai.models import FeedbackEntry
from togetai.store import SqlRecordStore
from togetai.store.sql_store import _is_duplicate_email


def make_entry(email: str, **overrides) -> FeedbackEntry:
    fields = {"email": email, "name": "Ana", "role": "creator", "instagram": "ana", "last_campaign": "c1"}
    fields.update(overrides)
    return FeedbackEntry(**fields)


@pytest_asyncio.fixture()
async def sql_store(tmp_path):
    store = SqlRecordStore(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", create_all=True)
    await store.initialize()
    yield store
    await store.close()


@pytest.mark.asyncio
async def test_insert_and_list(sql_store):
    first = make_entry("a@x.com")
    second = make_entry("b@x.com", source="early_access", why_join="fun")
    assert await sql_store.insert(first) is True
    assert await sql_store.insert(second) is True

    entries = await sql_store.list_all()
    assert [e.id for e in entries] == [first.id, second.id]
    assert entries[0].last_campaign == "c1"
    assert entries[1].source.value == "early_access"
    assert entries[1].status == "pending"


@pytest.mark.asyncio
async def test_initialize_is_idempotent(sql_store):
    await sql_store.insert(make_entry("a@x.com"))
    await sql_store.initialize()
    assert len(await sql_store.list_all()) == 1


@pytest.mark.asyncio
async def test_unique_constraint_reports_duplicate(sql_store):
    await sql_store.insert(make_entry("a@x.com"))

    with pytest.raises(DuplicateEmailError):
        await sql_store.insert(make_entry("A@X.com"))

    assert len(await sql_store.list_all()) == 1


@pytest.mark.asyncio
async def test_find_by_email(sql_store):
    entry = make_entry("a@x.com")
    await sql_store.insert(entry)

    found = await sql_store.find_by_email(" A@x.com")
    assert found is not None
    assert found.id == entry.id
    assert await sql_store.find_by_email("z@x.com") is None


@pytest.mark.asyncio
async def test_delete_by_id(sql_store):
    entry = make_entry("a@x.com")
    await sql_store.insert(entry)

    assert await sql_store.delete_by_id("missing") is False
    assert await sql_store.delete_by_id(entry.id) is True
    assert await sql_store.list_all() == []


@pytest.mark.asyncio
async def test_missing_schema_degrades_to_empty(tmp_path):
    store = SqlRecordStore(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}", create_all=False)
    await store.initialize()
    try:
        assert await store.list_all() == []
        assert await store.insert(make_entry("a@x.com")) is False
    finally:
        await store.close()


class FakePostgresError(Exception):
    def __init__(self, message, sqlstate):
        super().__init__(message)
        self.sqlstate = sqlstate


@pytest.mark.parametrize(
    "orig,expected",
    [
        (FakePostgresError('duplicate key value violates unique constraint "ix_feedback_entries_email"', "23505"), True),
        (FakePostgresError('duplicate key value violates unique constraint "feedback_entries_pkey"', "23505"), False),
        (FakePostgresError('null value in column "email" violates not-null constraint', "23502"), False),
        (Exception("UNIQUE constraint failed: feedback_entries.email"), True),
        (Exception("UNIQUE constraint failed: feedback_entries.id"), False),
        (Exception("NOT NULL constraint failed: feedback_entries.email"), False),
    ],
)
def test_duplicate_email_detection(orig, expected):
    assert _is_duplicate_email(IntegrityError("INSERT ...", {}, orig)) is expected
