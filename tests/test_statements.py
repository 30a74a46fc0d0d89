"""
Tests for the statement endpoints (balance, deposit, withdraw, single entry).

These tests verify the HTTP surface of the ledger:
  - A new user sees balance 0 and an empty statement
  - Deposits and withdrawals return 201 and show up in insertion order
  - Overdrafts and non-positive amounts are rejected with 400
  - A rejected withdrawal records nothing
  - A user can fetch their own entries; another user's entries are 404
"""

import uuid


class TestBalance:
    """Tests for GET /api/v1/statements/balance."""

    async def test_new_user_balance_is_zero(self, authenticated_client):
        response = await authenticated_client.get("/api/v1/statements/balance")
        assert response.status_code == 200
        data = response.json()
        assert data["balance"] == 0
        assert data["statement"] == []

    async def test_balance_read_is_idempotent(self, authenticated_client):
        await authenticated_client.post(
            "/api/v1/statements/deposit", json={"amount": 2500}
        )

        first = await authenticated_client.get("/api/v1/statements/balance")
        second = await authenticated_client.get("/api/v1/statements/balance")
        assert first.json() == second.json()


class TestDeposit:
    """Tests for POST /api/v1/statements/deposit."""

    async def test_deposit_created(self, authenticated_client):
        response = await authenticated_client.post(
            "/api/v1/statements/deposit",
            json={"amount": 100, "description": "Deposit description"},
        )
        assert response.status_code == 201
        txn = response.json()
        assert "id" in txn
        assert txn["kind"] == "deposit"
        assert txn["amount"] == 100
        assert txn["description"] == "Deposit description"
        assert isinstance(txn["amount"], int)

    async def test_deposit_without_description(self, authenticated_client):
        response = await authenticated_client.post(
            "/api/v1/statements/deposit", json={"amount": 100}
        )
        assert response.status_code == 201
        assert response.json()["description"] is None

    async def test_zero_deposit_rejected(self, authenticated_client):
        response = await authenticated_client.post(
            "/api/v1/statements/deposit", json={"amount": 0}
        )
        assert response.status_code == 400
        assert response.json()["error_type"] == "invalid_amount"

    async def test_negative_deposit_rejected(self, authenticated_client):
        response = await authenticated_client.post(
            "/api/v1/statements/deposit", json={"amount": -100}
        )
        assert response.status_code == 400
        assert response.json()["error_type"] == "invalid_amount"

    async def test_amount_beyond_64_bits_rejected(self, authenticated_client):
        response = await authenticated_client.post(
            "/api/v1/statements/deposit", json={"amount": 2**63}
        )
        assert response.status_code == 400
        assert response.json()["error_type"] == "invalid_amount"

        balance = await authenticated_client.get("/api/v1/statements/balance")
        assert balance.json()["statement"] == []

    async def test_amount_cents_key_also_accepted(self, authenticated_client):
        response = await authenticated_client.post(
            "/api/v1/statements/deposit", json={"amount_cents": 250}
        )
        assert response.status_code == 201
        assert response.json()["amount"] == 250

    async def test_overlong_description_is_validation_error(self, authenticated_client):
        response = await authenticated_client.post(
            "/api/v1/statements/deposit",
            json={"amount": 100, "description": "x" * 256},
        )
        assert response.status_code == 422

    async def test_missing_amount_is_validation_error(self, authenticated_client):
        response = await authenticated_client.post(
            "/api/v1/statements/deposit", json={"description": "no amount"}
        )
        assert response.status_code == 422


class TestWithdraw:
    """Tests for POST /api/v1/statements/withdraw."""

    async def test_deposit_then_withdraw(self, authenticated_client):
        """deposit 100, withdraw 90 -> balance 10 with both entries in order."""
        dep = await authenticated_client.post(
            "/api/v1/statements/deposit",
            json={"amount": 100, "description": "Deposit description"},
        )
        wd = await authenticated_client.post(
            "/api/v1/statements/withdraw",
            json={"amount": 90, "description": "Withdraw description"},
        )
        assert wd.status_code == 201
        assert wd.json()["kind"] == "withdraw"

        balance = await authenticated_client.get("/api/v1/statements/balance")
        data = balance.json()
        assert data["balance"] == 10
        assert [t["id"] for t in data["statement"]] == [dep.json()["id"], wd.json()["id"]]

    async def test_insufficient_funds(self, authenticated_client):
        """balance 10, withdraw 11 -> 400 and nothing recorded."""
        await authenticated_client.post(
            "/api/v1/statements/deposit", json={"amount": 100}
        )
        await authenticated_client.post(
            "/api/v1/statements/withdraw", json={"amount": 90}
        )

        response = await authenticated_client.post(
            "/api/v1/statements/withdraw", json={"amount": 11}
        )
        assert response.status_code == 400
        body = response.json()
        assert body["error_type"] == "insufficient_funds"
        assert "Insufficient funds" in body["detail"]
        assert body["requested_cents"] == 11
        assert body["available_cents"] == 10

        balance = await authenticated_client.get("/api/v1/statements/balance")
        assert balance.json()["balance"] == 10
        assert len(balance.json()["statement"]) == 2

    async def test_exact_balance_withdrawal(self, authenticated_client):
        await authenticated_client.post(
            "/api/v1/statements/deposit", json={"amount": 5000}
        )
        response = await authenticated_client.post(
            "/api/v1/statements/withdraw", json={"amount": 5000}
        )
        assert response.status_code == 201

        balance = await authenticated_client.get("/api/v1/statements/balance")
        assert balance.json()["balance"] == 0

    async def test_zero_withdrawal_rejected(self, authenticated_client):
        await authenticated_client.post(
            "/api/v1/statements/deposit", json={"amount": 5000}
        )
        response = await authenticated_client.post(
            "/api/v1/statements/withdraw", json={"amount": 0}
        )
        assert response.status_code == 400
        assert response.json()["error_type"] == "invalid_amount"

    async def test_withdraw_requires_token(self, client):
        response = await client.post(
            "/api/v1/statements/withdraw", json={"amount": 10}
        )
        assert response.status_code == 401


class TestSingleStatement:
    """Tests for GET /api/v1/statements/{statement_id}."""

    async def test_get_own_statement(self, authenticated_client):
        await authenticated_client.post(
            "/api/v1/statements/deposit", json={"amount": 100}
        )
        balance = await authenticated_client.get("/api/v1/statements/balance")
        statement = balance.json()["statement"][0]

        response = await authenticated_client.get(
            f"/api/v1/statements/{statement['id']}"
        )
        assert response.status_code == 200
        assert response.json()["id"] == statement["id"]
        assert response.json()["amount"] == 100

    async def test_unknown_statement_is_404(self, authenticated_client):
        response = await authenticated_client.get(
            f"/api/v1/statements/{uuid.uuid4()}"
        )
        assert response.status_code == 404
        assert response.json()["error_type"] == "statement_not_found"

    async def test_other_users_statement_is_404(
        self, authenticated_client, second_authenticated_client
    ):
        """User B can't read User A's entry, and can't tell it exists."""
        deposit = await authenticated_client.post(
            "/api/v1/statements/deposit", json={"amount": 100}
        )
        txn_id = deposit.json()["id"]

        response = await second_authenticated_client.get(f"/api/v1/statements/{txn_id}")
        assert response.status_code == 404
        assert response.json()["error_type"] == "statement_not_found"

    async def test_ledgers_are_isolated(
        self, authenticated_client, second_authenticated_client
    ):
        await authenticated_client.post(
            "/api/v1/statements/deposit", json={"amount": 700}
        )
        await second_authenticated_client.post(
            "/api/v1/statements/deposit", json={"amount": 300}
        )

        mine = await authenticated_client.get("/api/v1/statements/balance")
        theirs = await second_authenticated_client.get("/api/v1/statements/balance")
        assert mine.json()["balance"] == 700
        assert theirs.json()["balance"] == 300

    async def test_other_user_cannot_withdraw_my_money(
        self, authenticated_client, second_authenticated_client
    ):
        """Withdrawals are always against the caller's own ledger."""
        await authenticated_client.post(
            "/api/v1/statements/deposit", json={"amount": 1000}
        )

        response = await second_authenticated_client.post(
            "/api/v1/statements/withdraw", json={"amount": 500}
        )
        assert response.status_code == 400
        assert response.json()["available_cents"] == 0

        mine = await authenticated_client.get("/api/v1/statements/balance")
        assert mine.json()["balance"] == 1000


class TestStatementFlow:
    """
    The full client flow against the ledger routes, using the wire names
    "amount" and "balance". Extra body fields such as user_id are ignored.
    """

    async def test_deposit_withdraw_balance_and_single_entry(self, client):
        await client.post(
            "/api/v1/users",
            json={"name": "Flow User", "email": "flow@example.com", "password": "test123"},
        )
        login = await client.post(
            "/api/v1/sessions",
            json={"email": "flow@example.com", "password": "test123"},
        )
        assert login.status_code == 200
        session = login.json()
        headers = {"Authorization": f"Bearer {session['token']}"}
        owner_id = session["user"]["id"]

        deposit = await client.post(
            "/api/v1/statements/deposit",
            json={"amount": 100, "description": "Deposit description", "user_id": owner_id},
            headers=headers,
        )
        assert deposit.status_code == 201
        assert "id" in deposit.json()

        withdraw = await client.post(
            "/api/v1/statements/withdraw",
            json={"amount": 90, "description": "Withdraw description", "user_id": owner_id},
            headers=headers,
        )
        assert withdraw.status_code == 201
        assert "id" in withdraw.json()

        overdraw = await client.post(
            "/api/v1/statements/withdraw",
            json={"amount": 11, "description": "Withdraw description", "user_id": owner_id},
            headers=headers,
        )
        assert overdraw.status_code == 400

        balance = await client.get("/api/v1/statements/balance", headers=headers)
        assert balance.status_code == 200
        body = balance.json()
        assert body["balance"] == 10
        assert "balance_cents" not in body
        assert [t["amount"] for t in body["statement"]] == [100, 90]

        entry = await client.get(
            f"/api/v1/statements/{body['statement'][0]['id']}", headers=headers
        )
        assert entry.status_code == 200
        assert entry.json()["id"] == body["statement"][0]["id"]
        assert entry.json()["amount"] == 100
        assert "amount_cents" not in entry.json()


class TestHealth:

    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
