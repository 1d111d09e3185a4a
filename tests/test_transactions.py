"""
Tests for the ledger endpoints.

These tests verify:
  - GET /transactions returns only the caller's entries, newest first,
    with page/limit pagination metadata
  - POST /simulate-credit credits the first active account and records a
    "received" deposit entry
  - GET /transfer-analytics summarizes the caller's recent entries
"""


async def send(client, sender, recipient, amount_cents, **extra):
    body = {
        "recipient_public_id": recipient.customer_id,
        "amount_cents": amount_cents,
        "category": "Shopping",
        "pin": "1234",
        **extra,
    }
    response = await client.post("/transfer", json=body, headers=sender.headers)
    assert response.status_code == 201, response.text
    return response.json()["transaction"]


class TestListTransactions:
    """Tests for GET /transactions."""

    async def test_pagination(self, client, alice, bob):
        for amount in (100_00, 200_00, 300_00):
            await send(client, alice, bob, amount)

        first = await client.get("/transactions?page=1&limit=2", headers=alice.headers)
        assert first.status_code == 200
        data = first.json()
        assert data["pagination"] == {"page": 1, "limit": 2, "total": 3, "pages": 2}
        assert [t["amount_cents"] for t in data["transactions"]] == [300_00, 200_00]

        second = await client.get("/transactions?page=2&limit=2", headers=alice.headers)
        assert [t["amount_cents"] for t in second.json()["transactions"]] == [100_00]

    async def test_newest_first(self, client, alice, bob):
        for amount in (100_00, 200_00, 300_00):
            await send(client, alice, bob, amount)

        response = await client.get("/transactions", headers=alice.headers)
        created = [t["created_at"] for t in response.json()["transactions"]]
        assert created == sorted(created, reverse=True)

    async def test_only_own_entries(self, client, alice, bob):
        await send(client, alice, bob, 100_00)
        await send(client, bob, alice, 50_00)

        alice_entries = (await client.get("/transactions", headers=alice.headers)).json()["transactions"]
        bob_entries = (await client.get("/transactions", headers=bob.headers)).json()["transactions"]

        assert {t["user_id"] for t in alice_entries} == {alice.user_id}
        assert {t["user_id"] for t in bob_entries} == {bob.user_id}
        assert sorted(t["direction"] for t in alice_entries) == ["received", "sent"]
        assert sorted(t["direction"] for t in bob_entries) == ["received", "sent"]

    async def test_empty_history(self, client, make_member):
        member = await make_member("quiet@example.com")
        response = await client.get("/transactions", headers=member.headers)
        assert response.json() == {
            "transactions": [],
            "pagination": {"page": 1, "limit": 20, "total": 0, "pages": 0},
        }

    async def test_invalid_page(self, client, alice):
        response = await client.get("/transactions?page=0", headers=alice.headers)
        assert response.status_code == 400

    async def test_requires_token(self, client):
        response = await client.get("/transactions")
        assert response.status_code == 401


class TestSimulateCredit:
    """Tests for POST /simulate-credit."""

    async def test_credit_with_amount(self, client, alice, balance_of):
        response = await client.post(
            "/simulate-credit",
            json={"amount_cents": 2_500_00, "description": "Salary"},
            headers=alice.headers,
        )
        assert response.status_code == 201
        data = response.json()
        assert data["new_balance_cents"] == 12_500_00
        txn = data["transaction"]
        assert txn["direction"] == "received"
        assert txn["transaction_type"] == "deposit"
        assert txn["status"] == "completed"
        assert txn["description"] == "Salary"
        assert txn["recipient_account_id"] == alice.account["id"]
        assert await balance_of(alice) == 12_500_00

    async def test_credit_with_random_amount(self, client, alice):
        response = await client.post("/simulate-credit", headers=alice.headers)
        assert response.status_code == 201
        amount = response.json()["transaction"]["amount_cents"]
        assert 10_00 <= amount <= 100_00
        assert response.json()["new_balance_cents"] == 10_000_00 + amount

    async def test_credit_without_account(self, client, make_member):
        member = await make_member("noaccount@example.com")
        response = await client.post("/simulate-credit", json={}, headers=member.headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "No active bank accounts found"


class TestTransferAnalytics:
    """Tests for GET /transfer-analytics."""

    async def test_month_summary(self, client, alice, bob):
        await send(client, alice, bob, 1_000_00, priority="urgent")
        await send(client, alice, bob, 500_00, transfer_type="scheduled")
        await send(client, bob, alice, 300_00)

        response = await client.get("/transfer-analytics?period=month", headers=alice.headers)
        assert response.status_code == 200
        data = response.json()
        assert data["period"] == "month"
        assert data["total_transfers"] == 3
        assert data["total_sent_cents"] == 1_500_00
        assert data["total_received_cents"] == 300_00
        assert data["average_amount_cents"] == 600_00
        assert data["priority_breakdown"] == {"low": 0, "normal": 2, "high": 0, "urgent": 1}
        assert data["transfer_types"] == {"instant": 1, "scheduled": 1, "recurring": 0}

    async def test_default_period_is_month(self, client, alice):
        response = await client.get("/transfer-analytics", headers=alice.headers)
        assert response.json()["period"] == "month"
        assert response.json()["total_transfers"] == 0

    async def test_invalid_period(self, client, alice):
        response = await client.get("/transfer-analytics?period=decade", headers=alice.headers)
        assert response.status_code == 400
