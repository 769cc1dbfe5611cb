"""HTTP tests for /api/messages."""

from __future__ import annotations

from uuid import uuid4

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt

from daycare_api.config import get_settings
from daycare_api.database import get_db
from daycare_api.main import app

from tests.conftest import auth_headers, create_test_token

settings = get_settings()


# =============================================================================
# App & Client Fixtures
# =============================================================================


@pytest_asyncio.fixture(scope="function")
async def client(session_factory, users):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def send(client, user, **body):
    payload = {"subject": "Hello", "content": "Body", "recipientType": "individual"}
    payload.update(body)
    return await client.post("/api/messages", json=payload, headers=auth_headers(user))


# =============================================================================
# Auth
# =============================================================================


class TestAuth:
    async def test_missing_token(self, client):
        response = await client.get("/api/messages/inbox")
        assert response.status_code in (401, 403)

    async def test_bad_token(self, client):
        response = await client.get("/api/messages/inbox", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401

    async def test_expired_token(self, client, users):
        token = create_test_token(users.parent.id, ["Parent"], expired=True)
        response = await client.get("/api/messages/inbox", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    async def test_single_role_claim(self, client, users):
        token = create_test_token(users.admin.id, [])
        headers = {"Authorization": f"Bearer {token}"}
        assert (await client.get("/api/messages/recipients", headers=headers)).status_code == 403

        token = jwt.encode({"sub": str(users.admin.id), "roles": "Admin"}, settings.secret_key,
                           algorithm=settings.algorithm)
        response = await client.get("/api/messages/recipients", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200


# =============================================================================
# Send
# =============================================================================


class TestSendEndpoint:
    async def test_success_shape(self, client, users):
        response = await send(client, users.admin, recipientId=str(users.parent.id))

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert isinstance(body["messageId"], int)

    async def test_empty_subject(self, client, users):
        response = await send(client, users.admin, subject="", recipientId=str(users.parent.id))
        assert response.status_code == 400
        assert response.json()["detail"] == "Subject and Content are required"

    async def test_parent_broadcast_forbidden(self, client, users):
        response = await send(client, users.parent, recipientType="all")
        assert response.status_code == 403

    async def test_null_recipient_type_is_a_policy_error(self, client, users):
        response = await send(client, users.parent, recipientType=None)
        assert response.status_code == 403

        response = await send(client, users.admin, recipientType=None, recipientId=str(users.parent.id))
        assert response.status_code == 400

        response = await send(client, users.admin, recipientType=7, recipientId=str(users.parent.id))
        assert response.status_code == 400

    async def test_long_subject(self, client, users):
        response = await send(client, users.admin, subject="x" * 256, recipientId=str(users.parent.id))
        assert response.status_code == 400
        assert response.json()["detail"] == "Subject is too long"

    async def test_admin_missing_recipient(self, client, users):
        response = await send(client, users.admin)
        assert response.status_code == 400
        assert response.json()["detail"] == "RecipientId required for individual messages"

    async def test_parent_routed_to_admin(self, client, users):
        response = await send(client, users.parent, recipientId=str(uuid4()))
        msg_id = response.json()["messageId"]

        inbox = (await client.get("/api/messages/inbox", headers=auth_headers(users.admin))).json()
        assert [m["id"] for m in inbox] == [msg_id]
        assert inbox[0]["senderName"] == "Paul Parent"

    async def test_unknown_parent_message(self, client, users):
        response = await send(client, users.parent, parentMessageId=4242)
        assert response.status_code == 404


# =============================================================================
# Read views
# =============================================================================


class TestReadEndpoints:
    async def test_broadcast_scenario(self, client, users):
        await send(client, users.admin, subject="Policy", content="New hours", recipientType="all")

        for user in (users.parent, users.teacher):
            inbox = (await client.get("/api/messages/inbox", headers=auth_headers(user))).json()
            assert inbox[0]["subject"] == "Policy"
            assert inbox[0]["recipientType"] == "all"

        sent = (await client.get("/api/messages/sent", headers=auth_headers(users.admin))).json()
        assert sent[0]["recipientName"] == "All Users"
        assert sent[0]["recipientId"] is None
        assert sent[0]["replyCount"] == 0

    async def test_thread_marks_read(self, client, users):
        msg_id = (await send(client, users.admin, recipientId=str(users.parent.id))).json()["messageId"]
        await send(client, users.parent, content="Reply", parentMessageId=msg_id)

        inbox = (await client.get("/api/messages/inbox", headers=auth_headers(users.parent))).json()
        assert inbox[0]["isRead"] is False
        assert inbox[0]["replyCount"] == 1

        thread = (await client.get(f"/api/messages/{msg_id}", headers=auth_headers(users.parent))).json()
        assert thread["isRead"] is True
        assert thread["senderName"] == "Alice Admin"
        assert thread["recipientName"] == "Paul Parent"
        assert [r["content"] for r in thread["replies"]] == ["Reply"]

        inbox = (await client.get("/api/messages/inbox", headers=auth_headers(users.parent))).json()
        assert inbox[0]["isRead"] is True

    async def test_thread_not_found(self, client, users):
        response = await client.get("/api/messages/999", headers=auth_headers(users.parent))
        assert response.status_code == 404

    async def test_recipients(self, client, users):
        response = await client.get("/api/messages/recipients", headers=auth_headers(users.admin))

        assert response.status_code == 200
        body = response.json()
        assert [p["name"] for p in body["parents"]] == ["Paul Parent", "Petra Parent"]
        assert body["teachers"][0] == {
            "id": str(users.teacher.id),
            "name": "Tina Teacher",
            "email": "tina@daycare.test",
        }

    async def test_recipients_forbidden(self, client, users):
        response = await client.get("/api/messages/recipients", headers=auth_headers(users.teacher))
        assert response.status_code == 403
