import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from togetai.notifier import Notifier


@pytest.mark.asyncio
async def test_submit_feedback_then_list(client, feedback_payload):
    resp = await client.post("/api/submit-feedback", json=feedback_payload)
    assert resp.status_code == 200
    data = resp.json()
    assert data["success"] is True
    assert isinstance(data["id"], str) and data["id"]
    assert data["entry"]["email"] == "ana@x.com"
    assert data["entry"]["status"] == "pending"

    listing = await client.get("/api/feedback")
    assert listing.status_code == 200
    body = listing.json()
    assert body["success"] is True
    assert body["count"] == 1
    assert body["data"][0]["email"] == "ana@x.com"
    assert body["data"][0]["id"] == data["id"]


@pytest.mark.asyncio
async def test_duplicate_email_is_case_insensitive(client, feedback_payload):
    first = await client.post("/api/submit-feedback", json=feedback_payload)
    assert first.status_code == 200

    resp = await client.post("/api/submit-feedback", json={**feedback_payload, "email": "ANA@X.com"})
    assert resp.status_code == 409
    assert resp.json()["success"] is False
    assert "already" in resp.json()["message"]

    listing = await client.get("/api/feedback")
    assert listing.json()["count"] == 1


@pytest.mark.asyncio
async def test_invalid_email_rejected(client, feedback_payload):
    resp = await client.post("/api/submit-feedback", json={**feedback_payload, "email": "not-an-email"})
    assert resp.status_code == 400
    data = resp.json()
    assert data["success"] is False
    assert "email" in data["message"]

    listing = await client.get("/api/feedback")
    assert listing.json()["count"] == 0


@pytest.mark.asyncio
async def test_missing_and_blank_fields_rejected(client, feedback_payload):
    payload = {**feedback_payload, "worst_part": "   "}
    payload.pop("instagram")

    resp = await client.post("/api/submit-feedback", json=payload)
    assert resp.status_code == 400
    message = resp.json()["message"]
    assert "instagram" in message
    assert "worst_part" in message

    listing = await client.get("/api/feedback")
    assert listing.json()["count"] == 0


@pytest.mark.asyncio
async def test_non_object_body_rejected(client):
    resp = await client.post("/api/submit-feedback", json=["not", "an", "object"])
    assert resp.status_code == 400
    assert resp.json()["success"] is False


@pytest.mark.asyncio
async def test_fields_are_trimmed_and_creator_type_accepted(client, feedback_payload):
    payload = {**feedback_payload, "name": "  Ana  ", "email": "  Ana@X.com "}
    payload.pop("role")
    payload["creatorType"] = "promoter"
    payload["rating"] = 5

    resp = await client.post("/submit-feedback", json=payload)
    assert resp.status_code == 200
    entry = resp.json()["entry"]
    assert entry["name"] == "Ana"
    assert entry["email"] == "ana@x.com"
    assert entry["role"] == "promoter"
    assert entry["rating"] == "5"


@pytest.mark.asyncio
async def test_request_metadata_recorded(client, feedback_payload):
    resp = await client.post(
        "/api/submit-feedback",
        json=feedback_payload,
        headers={"user-agent": "pytest-agent", "x-forwarded-for": "203.0.113.9, 10.0.0.1"},
    )
    entry = resp.json()["entry"]
    assert entry["user_agent"] == "pytest-agent"
    assert entry["ip"] == "203.0.113.9"


@pytest.mark.asyncio
async def test_early_access_signup(client):
    payload = {
        "name": "Bo",
        "email": "bo@y.org",
        "instagram": "bo.makes",
        "creatorType": "creator",
        "why_join": "Better campaigns",
    }
    resp = await client.post("/api/early-access", json=payload)
    assert resp.status_code == 200
    assert resp.json()["entry"]["source"] == "early_access"

    missing = await client.post("/api/early-access", json={**payload, "email": "bo2@y.org", "why_join": ""})
    assert missing.status_code == 400
    assert "why_join" in missing.json()["message"]


@pytest.mark.asyncio
async def test_same_email_across_forms_conflicts(client, feedback_payload):
    await client.post("/api/submit-feedback", json=feedback_payload)
    resp = await client.post(
        "/api/early-access",
        json={"name": "Ana", "email": "ana@x.com", "instagram": "ana", "role": "creator", "why_join": "x"},
    )
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_confirmation_sent_once_per_accepted_submission(client, notifier, feedback_payload):
    with patch.object(notifier, "send_confirmation", new=AsyncMock(return_value=True)) as mock_send:
        await client.post("/api/submit-feedback", json=feedback_payload)
        await client.post("/api/submit-feedback", json=feedback_payload)

    mock_send.assert_awaited_once()
    args, _ = mock_send.await_args
    assert args[0] == "ana@x.com"
    assert args[1] == {"name": "Ana", "source": "feedback"}


@pytest.mark.asyncio
async def test_persistence_failure_returns_500_without_email(client, store, notifier, feedback_payload):
    with patch.object(store, "insert", new=AsyncMock(return_value=False)), patch.object(
        notifier, "send_confirmation", new=AsyncMock(return_value=True)
    ) as mock_send:
        resp = await client.post("/api/submit-feedback", json=feedback_payload)

    assert resp.status_code == 500
    assert resp.json() == {"success": False, "message": "Internal server error"}
    mock_send.assert_not_awaited()


@pytest.mark.asyncio
async def test_write_time_duplicate_maps_to_conflict(client, store, feedback_payload):
    # Simulates a concurrent writer winning between the lookup and the insert
    await client.post("/api/submit-feedback", json=feedback_payload)
    with patch.object(store, "find_by_email", new=AsyncMock(return_value=None)):
        resp = await client.post("/api/submit-feedback", json=feedback_payload)

    assert resp.status_code == 409
    listing = await client.get("/api/feedback")
    assert listing.json()["count"] == 1


@pytest.mark.asyncio
async def test_concurrent_submissions_with_same_email(client, feedback_payload):
    responses = await asyncio.gather(
        *(client.post("/api/submit-feedback", json=feedback_payload) for _ in range(5))
    )

    assert sorted(r.status_code for r in responses) == [200, 409, 409, 409, 409]
    listing = await client.get("/api/feedback")
    assert listing.json()["count"] == 1


@pytest.mark.asyncio
async def test_special_use_domain_accepted(client, feedback_payload):
    resp = await client.post("/api/submit-feedback", json={**feedback_payload, "email": "ana@team.local"})
    assert resp.status_code == 200
    assert resp.json()["entry"]["email"] == "ana@team.local"


@pytest.mark.asyncio
async def test_overlong_name_reports_limit(client, feedback_payload):
    resp = await client.post("/api/submit-feedback", json={**feedback_payload, "name": "x" * 250})
    assert resp.status_code == 400
    assert resp.json()["message"] == "name is too long (max 200 characters)"


@pytest.mark.parametrize("notifier", [Notifier(api_key="re_test_key")])
@pytest.mark.asyncio
async def test_email_failure_does_not_affect_submission(client, feedback_payload):
    class FakeResponse:
        status_code = 500
        text = "upstream unavailable"

        def json(self):
            return {"message": "upstream unavailable"}

    resend_client = AsyncMock()
    resend_client.__aenter__.return_value = resend_client
    resend_client.post = AsyncMock(return_value=FakeResponse())
    mock_post = resend_client.post

    # Replace the class only; the test client instance is already built
    with patch("togetai.notifier.httpx.AsyncClient", return_value=resend_client):
        resp = await client.post("/api/submit-feedback", json=feedback_payload)

    assert resp.status_code == 200
    data = resp.json()
    assert data["success"] is True
    assert data["id"]
    mock_post.assert_awaited_once()

    listing = await client.get("/api/feedback")
    assert listing.json()["count"] == 1
    assert listing.json()["data"][0]["id"] == data["id"]


@pytest.mark.asyncio
async def test_unknown_route_uses_common_error_shape(client):
    resp = await client.get("/api/does-not-exist")
    assert resp.status_code == 404
    assert resp.json()["success"] is False
