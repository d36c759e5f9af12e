"""
Airdrop API - end-to-end tests through the FastAPI app.
"""

from sqlalchemy.exc import OperationalError

from airdrop.api.dependencies import get_catalog
from airdrop.main import app


def auth(client, telegram_id="1001", username="alice", **extra):
    response = client.post("/api/auth/telegram", json={"telegramId": telegram_id, "username": username, **extra})
    assert response.status_code == 200, response.text
    return response.json()["user"]


def init_tasks(client):
    response = client.post("/api/admin/init-tasks")
    assert response.status_code == 200
    return client.get("/api/tasks").json()["tasks"]


class TestAuth:
    def test_creates_user(self, client):
        user = auth(client, firstName="Alice", avatarUrl="https://img/a.png")

        assert user["telegramId"] == "1001"
        assert user["username"] == "alice"
        assert user["firstName"] == "Alice"
        assert user["balance"] == 0
        assert user["totalEarned"] == 0
        assert user["level"] == 1
        assert user["referredBy"] is None
        assert user["walletAddress"] is None
        assert len(user["referralCode"]) == 12

    def test_numeric_telegram_id_is_accepted(self, client):
        user = auth(client, telegram_id=123456789)
        assert user["telegramId"] == "123456789"

    def test_existing_user_is_returned(self, client):
        first = auth(client)
        second = auth(client, username="changed")
        assert second["id"] == first["id"]
        assert second["username"] == "alice"

    def test_invalid_payload(self, client):
        response = client.post("/api/auth/telegram", json={"telegramId": "1001"})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request data"}

    def test_referral_scenario(self, client):
        referrer = auth(client, telegram_id="1", username="a")
        invited = auth(client, telegram_id="2", username="b", referralCode=referrer["referralCode"])

        assert invited["referredBy"] == referrer["id"]

        profile = client.get("/api/user/1").json()
        assert profile["user"]["balance"] == 40
        assert profile["user"]["totalEarned"] == 40
        assert profile["referralStats"] == {"count": 1, "totalEarned": 40}


class TestProfile:
    def test_unknown_user(self, client):
        response = client.get("/api/user/nobody")
        assert response.status_code == 404
        assert response.json() == {"error": "User not found"}

    def test_profile_has_rank_and_stats(self, client):
        auth(client, telegram_id="1")
        auth(client, telegram_id="2")

        body = client.get("/api/user/2").json()

        assert body["user"]["rank"] == 1
        assert body["user"]["telegramId"] == "2"
        assert body["referralStats"] == {"count": 0, "totalEarned": 0}


class TestTasks:
    def test_init_tasks_is_idempotent(self, client):
        first = client.post("/api/admin/init-tasks").json()
        second = client.post("/api/admin/init-tasks").json()

        assert first == {"success": True, "message": "Default tasks created", "created": 5}
        assert second["created"] == 0
        assert len(client.get("/api/tasks").json()["tasks"]) == 5

    def test_task_list_order_and_shape(self, client):
        tasks = init_tasks(client)

        assert [task["sortOrder"] for task in tasks] == [1, 2, 3, 4, 5]
        assert tasks[0]["title"] == "Follow @CryptoProject"
        assert tasks[0]["actionUrl"] == "https://twitter.com/cryptoproject"
        assert tasks[4]["verificationData"] == {"requiredReferrals": 3}
        assert tasks[4]["isActive"] is True

    def test_start_and_complete(self, client):
        tasks = init_tasks(client)
        auth(client)
        task = tasks[0]

        started = client.post("/api/tasks/start", json={"telegramId": "1001", "taskId": task["id"]})
        assert started.status_code == 200
        body = started.json()
        assert body["actionUrl"] == task["actionUrl"]
        assert body["userTask"]["status"] == "pending"

        again = client.post("/api/tasks/start", json={"telegramId": "1001", "taskId": task["id"]})
        assert again.status_code == 400
        assert again.json() == {"error": "Task already started"}

        user_task_id = body["userTask"]["id"]
        done = client.post("/api/tasks/complete", json={"telegramId": "1001", "userTaskId": user_task_id})
        assert done.status_code == 200
        assert done.json() == {"success": True, "reward": 50, "message": "Task completed successfully!"}

        twice = client.post("/api/tasks/complete", json={"telegramId": "1001", "userTaskId": user_task_id})
        assert twice.status_code == 400
        assert twice.json() == {"error": "Task already completed"}

        user = client.get("/api/user/1001").json()["user"]
        assert user["balance"] == 50
        assert user["totalEarned"] == 50

    def test_submit_marks_completed(self, client):
        tasks = init_tasks(client)
        auth(client)
        user_task = client.post("/api/tasks/start", json={"telegramId": "1001", "taskId": tasks[1]["id"]}).json()["userTask"]

        response = client.post("/api/tasks/submit", json={"telegramId": "1001", "userTaskId": user_task["id"]})

        assert response.status_code == 200
        assert response.json()["userTask"]["status"] == "completed"
        assert response.json()["userTask"]["completedAt"] is not None

    def test_start_not_found(self, client):
        init_tasks(client)
        auth(client)

        no_user = client.post("/api/tasks/start", json={"telegramId": "404", "taskId": 1})
        no_task = client.post("/api/tasks/start", json={"telegramId": "1001", "taskId": 999})

        assert no_user.status_code == 404
        assert no_user.json() == {"error": "User not found"}
        assert no_task.status_code == 404
        assert no_task.json() == {"error": "Task not found"}

    def test_complete_someone_elses_task(self, client):
        tasks = init_tasks(client)
        auth(client, telegram_id="1")
        auth(client, telegram_id="2")
        user_task = client.post("/api/tasks/start", json={"telegramId": "1", "taskId": tasks[0]["id"]}).json()["userTask"]

        response = client.post("/api/tasks/complete", json={"telegramId": "2", "userTaskId": user_task["id"]})

        assert response.status_code == 404
        assert response.json() == {"error": "User task not found"}

    def test_user_tasks_include_task(self, client):
        tasks = init_tasks(client)
        auth(client)
        client.post("/api/tasks/start", json={"telegramId": "1001", "taskId": tasks[2]["id"]})

        user_tasks = client.get("/api/user/1001/tasks").json()["userTasks"]

        assert len(user_tasks) == 1
        assert user_tasks[0]["task"]["title"] == tasks[2]["title"]
        assert user_tasks[0]["rewardClaimed"] is False

    def test_user_tasks_unknown_user(self, client):
        assert client.get("/api/user/nobody/tasks").status_code == 404

    def test_missing_task_id(self, client):
        response = client.post("/api/tasks/start", json={"telegramId": "1001"})
        assert response.status_code == 400


class TestReferrals:
    def test_referral_listing(self, client, plain_settings):
        referrer = auth(client, telegram_id="1", username="a")
        auth(client, telegram_id="2", username="b", referralCode=referrer["referralCode"])

        body = client.get("/api/user/1/referrals").json()

        assert body["stats"] == {"count": 1, "totalEarned": 40}
        assert body["referralLink"] == f"https://t.me/{plain_settings.bot_username}?start={referrer['referralCode']}"
        assert len(body["referrals"]) == 1
        assert body["referrals"][0]["rewardEarned"] == 40
        assert body["referrals"][0]["referred"]["username"] == "b"

    def test_unknown_user(self, client):
        assert client.get("/api/user/nobody/referrals").status_code == 404


class TestWallet:
    def test_link_wallet(self, client):
        auth(client)
        address = "EQD4FPq-PRDieyQKkizFTRtSDyucUIqrj0v_zXJmqaDp6_0t"

        response = client.post("/api/user/wallet", json={"telegramId": "1001", "walletAddress": address})

        assert response.status_code == 200
        assert response.json()["reward"] == 200
        assert response.json()["user"]["walletAddress"] == address
        assert response.json()["user"]["balance"] == 200

    def test_bad_address(self, client):
        auth(client)
        response = client.post("/api/user/wallet", json={"telegramId": "1001", "walletAddress": "nope"})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid wallet address format"}


class TestLeaderboard:
    def test_leaderboard_order_and_limit(self, client):
        tasks = init_tasks(client)
        for telegram_id in ("1", "2", "3"):
            auth(client, telegram_id=telegram_id, username=f"u{telegram_id}")
        user_task = client.post("/api/tasks/start", json={"telegramId": "2", "taskId": tasks[2]["id"]}).json()["userTask"]
        client.post("/api/tasks/complete", json={"telegramId": "2", "userTaskId": user_task["id"]})

        board = client.get("/api/leaderboard").json()["leaderboard"]
        assert [entry["username"] for entry in board] == ["u2", "u1", "u3"]
        assert all("telegramId" not in entry for entry in board)
        assert [entry["rank"] for entry in board] == [1, 2, 2]
        assert board[0]["totalEarned"] == 100

        limited = client.get("/api/leaderboard?limit=1").json()["leaderboard"]
        assert len(limited) == 1

    def test_lenient_limit(self, client):
        for telegram_id in ("1", "2", "3"):
            auth(client, telegram_id=telegram_id)

        for query in ("?limit=0", "?limit=-4", "?limit=abc", "?limit=", "?limit=5000", ""):
            response = client.get(f"/api/leaderboard{query}")
            assert response.status_code == 200, query
            assert len(response.json()["leaderboard"]) == 3


class TestAdminAndErrors:
    def test_admin_password(self, client, plain_settings, monkeypatch):
        monkeypatch.setattr(plain_settings, "admin_password", "s3cret")

        denied = client.post("/api/admin/init-tasks")
        allowed = client.post("/api/admin/init-tasks", headers={"admin-password": "s3cret"})

        assert denied.status_code == 401
        assert denied.json() == {"error": "Not authenticated"}
        assert allowed.status_code == 200

    def test_store_failure_is_generic_500(self, client):
        class BrokenCatalog:
            def list_active(self):
                raise OperationalError("SELECT * FROM tasks", {}, Exception("disk I/O error"))

        app.dependency_overrides[get_catalog] = lambda: BrokenCatalog()
        response = client.get("/api/tasks")

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}
