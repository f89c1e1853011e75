import sys
from pathlib import Path
from typing import AsyncIterator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from asgi_lifespan import LifespanManager

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from togetai.config import Settings
from togetai.main import create_app
from togetai.notifier import Notifier
from togetai.store import JsonFileRecordStore


FEEDBACK_PAYLOAD = {
    "name": "Ana",
    "email": "ana@x.com",
    "instagram": "ana",
    "role": "creator",
    "last_campaign": "c1",
    "worst_part": "w",
    "one_thing": "t",
}


@pytest.fixture()
def feedback_payload() -> dict:
    return dict(FEEDBACK_PAYLOAD)


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(data_dir=tmp_path / "data")


@pytest.fixture()
def store(settings: Settings) -> JsonFileRecordStore:
    return JsonFileRecordStore(settings.feedback_file)


@pytest.fixture()
def notifier() -> Notifier:
    # No API key: delivery is skipped without touching the network
    return Notifier(api_key=None)


@pytest.fixture()
def app(settings, store, notifier):
    return create_app(settings=settings, store=store, notifier=notifier)


@pytest_asyncio.fixture()
async def client(app) -> AsyncIterator[AsyncClient]:
    async with LifespanManager(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
            yield ac
