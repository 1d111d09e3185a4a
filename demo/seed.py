#!/usr/bin/env python3
"""
Demo seed script — populates the database with sample data for demos.

!! NOT FOR PRODUCTION !!
This script creates test users with known passwords and PINs and fake
spending history. It is intended ONLY for local demos and frontend
development.

Usage:
    # With the API server running on localhost:8000:
    python demo/seed.py

    # Reset the database and re-seed:
    python demo/seed.py --reset

    # Custom server URL:
    python demo/seed.py --base-url http://localhost:9000

Login credentials after seeding (every demo PIN is 1234):
    ┌──────────────────────────────┬───────────────────┬──────────────┐
    │ Email                        │ Password          │ Mobile       │
    ├──────────────────────────────┼───────────────────┼──────────────┤
    │ aarav.sharma@example.com     │ AaravDemo123!     │ 9876543210   │
    │ priya.iyer@example.com       │ PriyaDemo123!     │ 9823456781   │
    │ rohan.mehta@example.com      │ RohanDemo123!     │ 9812345672   │
    │ sneha.kapoor@example.com     │ SnehaDemo123!     │ 9801234563   │
    └──────────────────────────────┴───────────────────┴──────────────┘
"""

import argparse
import asyncio
import random
import sys
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path

import httpx

BASE_URL = "http://localhost:8000"
DEMO_PIN = "1234"

# ---------------------------------------------------------------------------
# Demo users
# ---------------------------------------------------------------------------

MEMBERS = [
    {
        "email": "aarav.sharma@example.com",
        "password": "AaravDemo123!",
        "name": "Aarav Sharma",
        "mobile_number": "9876543210",
        "accounts": [
            {"bank_name": "HDFC Bank", "institution": "HDFC", "opening_balance_cents": 85_000_00},
            {"bank_name": "SBI Savings", "institution": "State Bank of India",
             "account_type": "savings", "opening_balance_cents": 2_40_000_00},
        ],
    },
    {
        "email": "priya.iyer@example.com",
        "password": "PriyaDemo123!",
        "name": "Priya Iyer",
        "mobile_number": "9823456781",
        "accounts": [
            {"bank_name": "ICICI Bank", "institution": "ICICI", "opening_balance_cents": 1_20_000_00},
        ],
    },
    {
        "email": "rohan.mehta@example.com",
        "password": "RohanDemo123!",
        "name": "Rohan Mehta",
        "mobile_number": "9812345672",
        "accounts": [
            {"bank_name": "Axis Bank", "institution": "Axis", "opening_balance_cents": 60_000_00},
        ],
    },
    {
        "email": "sneha.kapoor@example.com",
        "password": "SnehaDemo123!",
        "name": "Sneha Kapoor",
        "mobile_number": "9801234563",
        # No linked account: the first transfer she receives opens one
        "accounts": [],
    },
]

# (category, description, min cents, max cents)
SPENDING = [
    ("Food", "Swiggy order", 250_00, 900_00),
    ("Food", "Zomato dinner", 400_00, 1_500_00),
    ("Shopping", "Amazon purchase", 800_00, 6_000_00),
    ("Shopping", "Myntra clothing", 1_200_00, 4_500_00),
    ("Travel", "Uber ride", 150_00, 700_00),
    ("Travel", "IRCTC train ticket", 600_00, 2_500_00),
    ("Bills", "Electricity bill", 1_500_00, 4_000_00),
    ("Bills", "Airtel recharge", 299_00, 799_00),
    ("Entertainment", "Netflix subscription", 199_00, 649_00),
    ("Entertainment", "PVR movie tickets", 400_00, 1_200_00),
    ("Health", "Apollo pharmacy", 200_00, 1_800_00),
    ("Education", "Udemy course", 450_00, 3_000_00),
]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def log(msg: str) -> None:
    print(f"  {msg}")


def format_rupees(cents: int) -> str:
    return f"₹{cents / 100:,.2f}"


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def register(client: httpx.AsyncClient, member: dict) -> dict:
    """Register a user and set their PIN; returns the registration body."""
    resp = await client.post(f"{BASE_URL}/auth/register", json={
        "email": member["email"],
        "password": member["password"],
        "name": member["name"],
        "mobile_number": member["mobile_number"],
    })
    resp.raise_for_status()
    data = resp.json()

    pin_resp = await client.post(
        f"{BASE_URL}/auth/set-pin",
        json={"pin": DEMO_PIN},
        headers=auth_header(data["token"]),
    )
    pin_resp.raise_for_status()
    return data


async def link_account(client: httpx.AsyncClient, token: str, account: dict) -> dict:
    resp = await client.post(
        f"{BASE_URL}/accounts/link",
        json=account,
        headers=auth_header(token),
    )
    resp.raise_for_status()
    return resp.json()


async def transfer(client: httpx.AsyncClient, token: str, recipient: dict,
                   amount_cents: int, category: str, description: str,
                   priority: str = "normal") -> dict:
    resp = await client.post(
        f"{BASE_URL}/transfer",
        json={
            **recipient,
            "amount_cents": amount_cents,
            "category": category,
            "description": description,
            "priority": priority,
            "pin": DEMO_PIN,
        },
        headers=auth_header(token),
    )
    return resp.json()


async def simulate_credit(client: httpx.AsyncClient, token: str,
                          amount_cents: int, description: str) -> dict:
    resp = await client.post(
        f"{BASE_URL}/simulate-credit",
        json={"amount_cents": amount_cents, "description": description},
        headers=auth_header(token),
    )
    return resp.json()


async def get_total_balance(client: httpx.AsyncClient, token: str) -> int:
    resp = await client.get(f"{BASE_URL}/balance", headers=auth_header(token))
    resp.raise_for_status()
    return resp.json()["total_balance_cents"]


# ---------------------------------------------------------------------------
# Seed logic
# ---------------------------------------------------------------------------

async def seed_spending(client: httpx.AsyncClient, payer: dict, merchant: dict,
                        count: int) -> list[str]:
    """
    Pay `merchant` for `count` random purchases.

    The merchant stands in for shops and service providers so the payer's
    ledger gets categorized "sent" entries. Returns the sent entries' IDs.
    """
    txn_ids: list[str] = []
    for _ in range(count):
        category, description, low, high = random.choice(SPENDING)
        result = await transfer(
            client, payer["token"], {"recipient_public_id": merchant["customer_id"]},
            random.randint(low, high), category, description,
        )
        if "transaction" in result:
            txn_ids.append(result["transaction"]["id"])
        elif result.get("error_type") == "insufficient_funds":
            break
    return txn_ids


async def backdate_transactions(txn_ids_by_month: dict[int, list[str]]) -> None:
    """Move entries (and the other leg of each transfer) into earlier months.

    txn_ids_by_month maps month_offset (0 = current, 1 = last month, etc.)
    to ledger entry IDs. Within each month entries are spread across random
    days.
    """
    from sqlalchemy import or_, select, update
    from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
    from neobank.config import settings
    from neobank.models.transaction import Transaction

    engine = create_async_engine(settings.DATABASE_URL)
    session_factory = async_sessionmaker(engine, class_=AsyncSession)

    now = datetime.now(timezone.utc)

    async with session_factory() as session:
        for month_offset, ids in txn_ids_by_month.items():
            if not ids or month_offset == 0:
                continue
            base = now.replace(day=15, hour=12) - timedelta(days=30 * month_offset)
            for txn_id in ids:
                ts = base + timedelta(days=random.randint(-12, 12), minutes=random.randint(0, 600))
                pair_id = await session.scalar(
                    select(Transaction.transfer_pair_id).where(Transaction.id == uuid.UUID(txn_id))
                )
                condition = Transaction.id == uuid.UUID(txn_id)
                if pair_id is not None:
                    condition = or_(condition, Transaction.transfer_pair_id == pair_id)
                await session.execute(
                    update(Transaction).where(condition).values(created_at=ts, updated_at=ts)
                )
        await session.commit()

    await engine.dispose()


async def seed(base_url: str) -> None:
    global BASE_URL
    BASE_URL = base_url

    print("\n========================================")
    print("  DEMO SEED — NOT FOR PRODUCTION")
    print("========================================\n")

    txn_ids_by_month: dict[int, list[str]] = {0: [], 1: []}

    async with httpx.AsyncClient(timeout=30.0) as client:
        try:
            health = await client.get(f"{BASE_URL}/health")
            health.raise_for_status()
        except (httpx.ConnectError, httpx.HTTPStatusError):
            print(f"  ERROR: Cannot connect to {BASE_URL}")
            print(f"  Start the server first: uvicorn neobank.main:app --reload\n")
            sys.exit(1)

        users: list[dict] = []
        for member in MEMBERS:
            print(f"\nCreating {member['name']}...")
            data = await register(client, member)
            log(f"Login: {member['email']} / {member['password']} (PIN {DEMO_PIN})")
            log(f"Customer ID: {data['customer_id']}")

            for account in member["accounts"]:
                linked = await link_account(client, data["token"], account)
                log(f"  {linked['bank_name']}: {linked['account_number']} "
                    f"({format_rupees(linked['balance_cents'])})")

            users.append({**member, **data})

        aarav, priya, rohan, sneha = users

        # --- Spending history ---
        print("\nCreating spending history...")
        for payer, merchant in ((aarav, rohan), (priya, rohan), (rohan, priya)):
            ids = await seed_spending(client, payer, merchant, random.randint(10, 16))
            mid = len(ids) // 2
            txn_ids_by_month[1].extend(ids[:mid])
            txn_ids_by_month[0].extend(ids[mid:])
            log(f"{payer['name']}: {len(ids)} purchases")

        # --- Salary credits ---
        print("\nSimulating salary credits...")
        for user in (aarav, priya, rohan):
            result = await simulate_credit(client, user["token"], random.randint(45_000_00, 90_000_00), "Salary")
            if "transaction" in result:
                txn_ids_by_month[1].append(result["transaction"]["id"])
            result = await simulate_credit(client, user["token"], random.randint(45_000_00, 90_000_00), "Salary")
            if "transaction" in result:
                log(f"{user['name']}: balance {format_rupees(result['new_balance_cents'])}")

        # --- Peer-to-peer payments, one per identifier kind ---
        print("\nCreating peer-to-peer payments...")
        payments = [
            (aarav, priya, {"recipient_mobile_number": "98234-56781"}, "Dinner split"),
            (priya, aarav, {"recipient_profile_url": aarav["public_url"]}, "Concert tickets"),
            (rohan, sneha, {"recipient_public_id": sneha["customer_id"]}, "Birthday gift"),
        ]
        for payer, payee, recipient, description in payments:
            amount = random.randint(500_00, 3_000_00)
            result = await transfer(client, payer["token"], recipient, amount, "Transfers",
                                    description, priority="high")
            if "transaction" in result:
                log(f"{payer['name']} -> {payee['name']}: {format_rupees(amount)}")

        for user in users:
            balance = await get_total_balance(client, user["token"])
            log(f"{user['name']}: total balance {format_rupees(balance)}")

    print("\nBackdating transactions across 2 months...")
    await backdate_transactions(txn_ids_by_month)
    log(f"Month -1 (last month): {len(txn_ids_by_month[1])} transactions")
    log(f"Month  0 (this month): {len(txn_ids_by_month[0])} transactions")

    print("\n========================================")
    print("  SEED COMPLETE — Login Credentials")
    print("========================================")
    print(f"\n  {'Email':<30s} {'Password':<20s} {'PIN'}")
    print(f"  {'─' * 30} {'─' * 20} {'─' * 4}")
    for m in MEMBERS:
        print(f"  {m['email']:<30s} {m['password']:<20s} {DEMO_PIN}")
    print()


def reset_database() -> None:
    """Delete the SQLite database file so the server recreates it on restart."""
    from sqlalchemy.engine import make_url
    from neobank.config import settings

    url = make_url(settings.DATABASE_URL)
    if url.get_backend_name() != "sqlite" or not url.database:
        print(f"\n  --reset only supports SQLite databases ({settings.DATABASE_URL})\n")
        return

    db_path = Path(url.database).resolve()
    if db_path.exists():
        db_path.unlink()
        print(f"\n  Deleted {db_path}")
        print("  Restart the server to recreate empty tables.\n")
    else:
        print(f"\n  No database found at {db_path}\n")


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

async def main() -> None:
    parser = argparse.ArgumentParser(
        description="Demo seed script — NOT FOR PRODUCTION",
        epilog="Creates sample users, linked accounts, transfers, and spending history.",
    )
    parser.add_argument(
        "--base-url", default="http://localhost:8000",
        help="Base URL of the running API (default: http://localhost:8000)",
    )
    parser.add_argument(
        "--reset", action="store_true",
        help="Delete the database file and exit (restart server to recreate)",
    )
    args = parser.parse_args()

    if args.reset:
        reset_database()
        return

    await seed(args.base_url)


if __name__ == "__main__":
    asyncio.run(main())
