import pytest
from aiohttp.test_utils import TestClient, TestServer

from tgbot.config import BroadcastConfig
from tgbot.misc.departments import DEPARTMENTS, IT_DEPARTMENT
from tgbot.web.app import create_api_app

SALES = DEPARTMENTS[0]
MARKETING = DEPARTMENTS[3]


@pytest.fixture
async def client(bot, session_pool):
    app = create_api_app(
        bot, session_pool, BroadcastConfig(concurrency=5, send_timeout=1.0)
    )
    async with TestClient(TestServer(app)) as client:
        yield client


class TestDepartmentStats:
    """Test cases for GET /api/departments/stats"""

    async def test_counts_by_department(self, client, add_user):
        await add_user(1, SALES)
        await add_user(2, SALES)
        await add_user(3, IT_DEPARTMENT)

        response = await client.get("/api/departments/stats")

        assert response.status == 200
        assert await response.json() == [
            {"department": SALES, "count": 2},
            {"department": IT_DEPARTMENT, "count": 1},
        ]

    async def test_no_users(self, client):
        response = await client.get("/api/departments/stats")

        assert response.status == 200
        assert await response.json() == []


class TestCreateNotification:
    """Test cases for POST /api/notifications"""

    async def test_notification_is_saved_and_sent(self, client, bot, add_user):
        await add_user(1, SALES)
        await add_user(2, MARKETING)
        await add_user(3, IT_DEPARTMENT)

        response = await client.post(
            "/api/notifications",
            json={"message": "Hello", "departments": [MARKETING, SALES]},
        )

        assert response.status == 200
        body = await response.json()
        assert body["sent"] == 2
        assert body["failed"] == 0
        assert body["notification"]["message"] == "Hello"
        assert body["notification"]["departments"] == [SALES, MARKETING]
        assert body["notification"]["createdBy"] is None
        assert body["notification"]["createdAt"]
        assert bot.send_message.await_count == 2

    async def test_empty_departments_rejected_without_record(self, client, bot):
        response = await client.post(
            "/api/notifications", json={"message": "Hi", "departments": []}
        )

        assert response.status == 400
        body = await response.json()
        assert body["error"] == "Invalid request data"
        assert any(detail["loc"] == ["departments"] for detail in body["details"])

        history = await client.get("/api/notifications")
        assert await history.json() == []
        bot.send_message.assert_not_awaited()

    @pytest.mark.parametrize(
        "payload",
        [
            {"message": "", "departments": [SALES]},
            {"message": "   ", "departments": [SALES]},
            {"departments": [SALES]},
            {"message": "Hi", "departments": ["Отдел снабжения"]},
            {"message": "Hi"},
        ],
    )
    async def test_invalid_payload(self, client, payload):
        response = await client.post("/api/notifications", json=payload)

        assert response.status == 400
        assert (await response.json())["details"]

    async def test_malformed_json(self, client):
        response = await client.post(
            "/api/notifications",
            data="{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status == 400

    async def test_body_not_in_utf8(self, client):
        response = await client.post(
            "/api/notifications",
            data=b'\xff\xfe{"message": 1}',
            headers={"Content-Type": "application/json; charset=utf-8"},
        )

        assert response.status == 400
        assert (await response.json())["error"] == "Invalid request data"

    async def test_created_by_is_stored(self, client, add_user):
        admin = await add_user(10, IT_DEPARTMENT)

        response = await client.post(
            "/api/notifications",
            json={"message": "Hi", "departments": [SALES], "createdBy": admin.id},
        )

        assert response.status == 200
        body = await response.json()
        assert body["notification"]["createdBy"] == admin.id
        assert body["sent"] == 0


class TestListNotifications:
    """Test cases for GET /api/notifications"""

    async def test_history_is_newest_first(self, client):
        for message in ("first", "second"):
            await client.post(
                "/api/notifications",
                json={"message": message, "departments": [SALES]},
            )

        response = await client.get("/api/notifications")

        assert response.status == 200
        assert [item["message"] for item in await response.json()] == [
            "second",
            "first",
        ]

    async def test_limit(self, client):
        for message in ("first", "second", "third"):
            await client.post(
                "/api/notifications",
                json={"message": message, "departments": [SALES]},
            )

        response = await client.get("/api/notifications", params={"limit": "2"})

        assert response.status == 200
        assert len(await response.json()) == 2

    @pytest.mark.parametrize("limit", ["0", "-5", "501", "abc"])
    async def test_invalid_limit(self, client, limit):
        response = await client.get("/api/notifications", params={"limit": limit})

        assert response.status == 400
