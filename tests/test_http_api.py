"""End-to-end tests of the JSON API through the aiohttp test client."""

import pytest

from tests.factories import AccountFactory, TournamentFactory


async def signup(api_client, username="alice", password="hunter22"):
    resp = await api_client.post(
        "/api/auth/signup",
        json={"username": username, "email": f"{username}@example.com", "password": password},
    )
    assert resp.status == 201
    return (await resp.json())["user"]


@pytest.mark.integration
class TestHealthAndErrors:

    @pytest.mark.asyncio
    async def test_health(self, api_client):
        resp = await api_client.get("/health")

        assert resp.status == 200
        assert await resp.json() == {"status": "ok"}

    @pytest.mark.asyncio
    async def test_malformed_json_body(self, api_client):
        resp = await api_client.post(
            "/api/auth/login", data="{not json", headers={"Content-Type": "application/json"}
        )

        assert resp.status == 400
        assert "message" in await resp.json()

    @pytest.mark.asyncio
    async def test_schema_violation(self, api_client):
        resp = await api_client.post(
            "/api/auth/signup", json={"username": "al", "email": "not-an-email", "password": "x"}
        )

        assert resp.status == 400
        body = await resp.json()
        assert body["message"].startswith("Invalid request")

    @pytest.mark.asyncio
    async def test_unknown_route(self, api_client):
        resp = await api_client.get("/api/does-not-exist")

        assert resp.status == 404


@pytest.mark.integration
class TestAuthEndpoints:

    @pytest.mark.asyncio
    async def test_signup_and_login(self, api_client):
        user = await signup(api_client)
        assert user["username"] == "alice"
        assert "password" not in user

        resp = await api_client.post(
            "/api/auth/login", json={"email": "alice@example.com", "password": "hunter22"}
        )

        assert resp.status == 200
        summary = (await resp.json())["user"]
        assert summary["id"] == user["id"]
        assert summary["wallet_balance"] == "0.00"
        assert summary["is_admin"] is False

    @pytest.mark.asyncio
    async def test_signup_conflict(self, api_client):
        await signup(api_client)

        resp = await api_client.post(
            "/api/auth/signup",
            json={"username": "alice", "email": "new@example.com", "password": "hunter22"},
        )

        assert resp.status == 400
        assert await resp.json() == {"message": "Username already taken"}

    @pytest.mark.asyncio
    async def test_login_rejected(self, api_client):
        await signup(api_client)

        resp = await api_client.post(
            "/api/auth/login", json={"email": "alice@example.com", "password": "wrong-one"}
        )

        assert resp.status == 401
        assert await resp.json() == {"message": "Invalid credentials"}


@pytest.mark.integration
class TestWalletEndpoints:

    @pytest.mark.asyncio
    async def test_deposit_withdraw_and_ledger(self, api_client):
        user = await signup(api_client)
        user_id = user["id"]

        resp = await api_client.post(f"/api/wallet/{user_id}/add", json={"amount": "10.00"})
        assert resp.status == 200
        resp = await api_client.post(
            f"/api/wallet/{user_id}/add", json={"amount": 5.5, "payment_method": "card"}
        )
        assert (await resp.json())["balance"] == "15.50"

        resp = await api_client.post(f"/api/wallet/{user_id}/withdraw", json={"amount": "20.00"})
        assert resp.status == 400
        assert await resp.json() == {"message": "Insufficient balance"}

        resp = await api_client.post(f"/api/wallet/{user_id}/withdraw", json={"amount": "5.50"})
        assert resp.status == 200
        assert (await resp.json())["balance"] == "10.00"

        resp = await api_client.get(f"/api/wallet/{user_id}")
        wallet = await resp.json()
        assert wallet["balance"] == "10.00"
        assert wallet["bonus_balance"] == "0.00"

        resp = await api_client.get(f"/api/transactions/{user_id}")
        ledger = await resp.json()
        assert [(t["type"], t["amount"], t["status"]) for t in ledger] == [
            ("withdrawal", "5.50", "pending"),
            ("deposit", "5.50", "completed"),
            ("deposit", "10.00", "completed"),
        ]

    @pytest.mark.asyncio
    async def test_invalid_amount(self, api_client):
        user = await signup(api_client)

        resp = await api_client.post(f"/api/wallet/{user['id']}/add", json={"amount": "-3"})

        assert resp.status == 400
        assert await resp.json() == {"message": "Invalid amount"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["1e30", "10000000000.00"])
    async def test_amount_too_large_for_money_column(self, api_client, amount):
        user = await signup(api_client)

        resp = await api_client.post(f"/api/wallet/{user['id']}/add", json={"amount": amount})

        assert resp.status == 400
        assert await resp.json() == {"message": "Invalid amount"}

        resp = await api_client.post(
            "/api/tournaments",
            json={"title": "Cup", "game": "chess", "entry_fee": "0", "prize_pool": amount, "max_players": 2},
        )
        assert resp.status == 400

    @pytest.mark.asyncio
    async def test_wallet_of_unknown_user(self, api_client):
        resp = await api_client.get("/api/wallet/999")

        assert resp.status == 404
        assert await resp.json() == {"message": "Wallet not found"}


@pytest.mark.integration
class TestTournamentEndpoints:

    @pytest.mark.asyncio
    async def test_tournament_lifecycle(self, api_client):
        resp = await api_client.post(
            "/api/tournaments",
            json={
                "title": "Friday Blitz",
                "game": "chess",
                "entry_fee": "2.50",
                "prize_pool": "50",
                "max_players": 2,
            },
        )
        assert resp.status == 201
        tournament = await resp.json()
        assert tournament["entry_fee"] == "2.50"
        assert tournament["prize_pool"] == "50.00"
        assert tournament["current_players"] == 0

        resp = await api_client.put(
            f"/api/tournaments/{tournament['id']}", json={"description": "3+2 blitz"}
        )
        assert resp.status == 200
        updated = await resp.json()
        assert updated["description"] == "3+2 blitz"
        assert updated["title"] == "Friday Blitz"

        resp = await api_client.get("/api/tournaments")
        assert [t["id"] for t in await resp.json()] == [tournament["id"]]

        resp = await api_client.delete(f"/api/tournaments/{tournament['id']}")
        assert resp.status == 200

        resp = await api_client.get(f"/api/tournaments/{tournament['id']}")
        assert resp.status == 404
        assert await resp.json() == {"message": "Tournament not found"}

    @pytest.mark.asyncio
    async def test_join_flow(self, api_client, database_manager):
        alice, bob, carol = await AccountFactory.create_multiple(database_manager, 3)
        tournament = await TournamentFactory.create(database_manager, max_players=2)
        join_url = f"/api/tournaments/{tournament.id}/join"

        resp = await api_client.post(join_url, json={"userId": alice.id})
        assert resp.status == 200
        assert await resp.json() == {"message": "Successfully joined tournament"}

        resp = await api_client.post(join_url, json={"userId": alice.id})
        assert resp.status == 400
        assert await resp.json() == {"message": "Failed to join tournament"}

        resp = await api_client.post(join_url, json={"userId": bob.id})
        assert resp.status == 200

        resp = await api_client.post(join_url, json={"userId": carol.id})
        assert resp.status == 400
        assert await resp.json() == {"message": "Tournament is full"}

        resp = await api_client.get(f"/api/tournaments/{tournament.id}/participants")
        assert [p["user_id"] for p in await resp.json()] == [alice.id, bob.id]

        resp = await api_client.get(f"/api/tournaments/{tournament.id}")
        assert (await resp.json())["current_players"] == 2

    @pytest.mark.asyncio
    async def test_join_unknown_tournament(self, api_client, database_manager):
        user = await AccountFactory.create(database_manager)

        resp = await api_client.post("/api/tournaments/404/join", json={"userId": user.id})

        assert resp.status == 404


@pytest.mark.integration
class TestProfileAndAdminEndpoints:

    @pytest.mark.asyncio
    async def test_profile_get_and_update(self, api_client):
        user = await signup(api_client)

        resp = await api_client.get(f"/api/profile/{user['id']}")
        assert resp.status == 200
        assert (await resp.json())["username"] == "alice"

        resp = await api_client.put(f"/api/profile/{user['id']}", json={"username": "alicia"})
        assert resp.status == 200
        assert (await resp.json())["username"] == "alicia"

    @pytest.mark.asyncio
    async def test_admin_endpoints(self, api_client):
        user = await signup(api_client)
        user_id = user["id"]

        resp = await api_client.post(f"/api/admin/users/{user_id}/make-admin")
        assert resp.status == 200

        resp = await api_client.get("/api/admin/users")
        users = await resp.json()
        assert users[0]["user_id"] == user_id
        assert users[0]["is_admin"] is True

        resp = await api_client.post(f"/api/admin/users/{user_id}/remove-admin")
        assert resp.status == 200

        resp = await api_client.post(f"/api/admin/users/{user_id}/bonus", json={"amount": "4.00"})
        assert (await resp.json())["bonus_balance"] == "4.00"

        resp = await api_client.get("/api/admin/transactions")
        ledger = await resp.json()
        assert [t["type"] for t in ledger] == ["bonus"]

        resp = await api_client.post("/api/admin/users/999/make-admin")
        assert resp.status == 404


@pytest.mark.integration
class TestGameSessionEndpoints:

    @pytest.mark.asyncio
    async def test_game_session_flow(self, api_client, database_manager):
        user = await AccountFactory.create(database_manager)

        resp = await api_client.post("/api/game-sessions", json={"userId": user.id, "game": "chess"})
        assert resp.status == 201
        session = await resp.json()
        assert session["status"] == "active"

        resp = await api_client.patch(
            f"/api/game-sessions/{session['id']}", json={"status": "completed", "score": 42}
        )
        assert resp.status == 200
        finished = await resp.json()
        assert finished["status"] == "completed"
        assert finished["score"] == 42
        assert finished["ended_at"] is not None

        resp = await api_client.get(f"/api/game-sessions/user/{user.id}")
        assert [s["id"] for s in await resp.json()] == [session["id"]]

    @pytest.mark.asyncio
    async def test_invalid_status(self, api_client, database_manager):
        user = await AccountFactory.create(database_manager)
        resp = await api_client.post("/api/game-sessions", json={"userId": user.id, "game": "go"})
        session = await resp.json()

        resp = await api_client.patch(f"/api/game-sessions/{session['id']}", json={"status": "paused"})

        assert resp.status == 400
