"""
Tests for linked accounts, balances, and the public user lookup.

These tests verify:
  - Linking an account returns its full number once; later views mask it
  - Omitting the opening balance gets a random whole-unit mock balance
  - GET /accounts lists only the caller's active accounts, oldest first
  - GET /balance totals every active account
  - GET /find-user resolves customer ID, mobile number and account number
    and never exposes email, contact numbers or balances
"""


class TestLinkAccount:
    """Tests for POST /accounts/link."""

    async def test_link_with_opening_balance(self, client, make_member):
        member = await make_member("link@example.com")
        response = await client.post(
            "/accounts/link",
            json={
                "bank_name": "HDFC Bank",
                "institution": "HDFC",
                "account_type": "savings",
                "opening_balance_cents": 25_000_00,
            },
            headers=member.headers,
        )
        assert response.status_code == 201
        data = response.json()
        assert data["balance_cents"] == 25_000_00
        assert data["account_type"] == "savings"
        assert data["currency"] == "INR"
        assert len(data["account_number"]) == 10
        assert data["account_number"].isdigit()
        assert data["masked_account_number"] == "****" + data["account_number"][-4:]

    async def test_link_without_opening_balance_uses_mock_range(self, client, make_member):
        member = await make_member("mock@example.com")
        response = await client.post(
            "/accounts/link",
            json={"bank_name": "Mock Bank", "institution": "Mock"},
            headers=member.headers,
        )
        assert response.status_code == 201
        balance = response.json()["balance_cents"]
        assert 10_000_00 <= balance <= 509_999_00
        assert balance % 100 == 0

    async def test_link_rejects_negative_opening_balance(self, client, make_member):
        member = await make_member("negative@example.com")
        response = await client.post(
            "/accounts/link",
            json={"bank_name": "Bank", "institution": "Inst", "opening_balance_cents": -1},
            headers=member.headers,
        )
        assert response.status_code == 400

    async def test_link_requires_token(self, client):
        response = await client.post(
            "/accounts/link", json={"bank_name": "Bank", "institution": "Inst"}
        )
        assert response.status_code == 401


class TestListAndBalance:
    """Tests for GET /accounts and GET /balance."""

    async def test_accounts_are_scoped_and_ordered(self, client, make_member):
        owner = await make_member("owner@example.com", balance_cents=1_000_00)
        await make_member("other@example.com", balance_cents=9_000_00)
        second = await client.post(
            "/accounts/link",
            json={"bank_name": "Second", "institution": "Inst", "opening_balance_cents": 2_500_00},
            headers=owner.headers,
        )
        assert second.status_code == 201

        response = await client.get("/accounts", headers=owner.headers)
        assert response.status_code == 200
        accounts = response.json()
        assert [a["id"] for a in accounts] == [owner.account["id"], second.json()["id"]]
        assert all("account_number" not in a for a in accounts)

    async def test_balance_totals_active_accounts(self, client, make_member):
        member = await make_member("total@example.com", balance_cents=1_234_56)
        await client.post(
            "/accounts/link",
            json={"bank_name": "Second", "institution": "Inst", "opening_balance_cents": 65_44},
            headers=member.headers,
        )

        response = await client.get("/balance", headers=member.headers)
        assert response.status_code == 200
        data = response.json()
        assert data["total_balance_cents"] == 1_300_00
        assert len(data["accounts"]) == 2
        assert all(isinstance(a["balance_cents"], int) for a in data["accounts"])

    async def test_balance_with_no_accounts(self, client, make_member):
        member = await make_member("empty@example.com")
        response = await client.get("/balance", headers=member.headers)
        assert response.json() == {"total_balance_cents": 0, "accounts": []}


class TestFindUser:
    """Tests for GET /find-user/{identifier}."""

    async def test_find_by_customer_id(self, client, alice):
        response = await client.get(f"/find-user/{alice.customer_id}")
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == alice.user_id
        assert data["name"] == "Alice"
        assert set(data) == {"id", "name", "customer_id", "public_url"}

    async def test_find_by_formatted_mobile_number(self, client, alice):
        response = await client.get("/find-user/(98765) 43210")
        assert response.status_code == 200
        assert response.json()["id"] == alice.user_id

    async def test_find_by_account_number(self, client, alice):
        response = await client.get(f"/find-user/{alice.account['account_number']}")
        assert response.status_code == 200
        assert response.json()["id"] == alice.user_id

    async def test_find_user_not_found(self, client, alice):
        response = await client.get("/find-user/CUST_NOBODY")
        assert response.status_code == 404
        assert response.json() == {"detail": "User not found", "error_type": "user_not_found"}
