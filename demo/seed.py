#!/usr/bin/env python3
"""
Demo seed script — populates a running Ledger API with sample data.

!! NOT FOR PRODUCTION !!
This script creates users with known passwords and a fake history of
deposits and withdrawals. It is intended ONLY for local demos.

Usage:
    # With the API server running on localhost:8000:
    python demo/seed.py

    # Delete the local database file (restart the server afterwards):
    python demo/seed.py --reset

    # Custom server URL:
    python demo/seed.py --base-url http://localhost:9000

Login credentials after seeding:
    ┌──────────────────────────────┬───────────────────┐
    │ Email                        │ Password          │
    ├──────────────────────────────┼───────────────────┤
    │ alice.chen@example.com       │ AliceDemo123!     │
    │ bob.martinez@example.com     │ BobDemo123!       │
    │ carol.nguyen@example.com     │ CarolDemo123!     │
    └──────────────────────────────┴───────────────────┘
"""

import argparse
import asyncio
import os
import random

import httpx

USERS = [
    {"name": "Alice Chen", "email": "alice.chen@example.com", "password": "AliceDemo123!",
     "paycheck_cents": 3200_00},
    {"name": "Bob Martinez", "email": "bob.martinez@example.com", "password": "BobDemo123!",
     "paycheck_cents": 2750_00},
    {"name": "Carol Nguyen", "email": "carol.nguyen@example.com", "password": "CarolDemo123!",
     "paycheck_cents": 4100_00},
]

SPENDING = [
    ("Rent", 1200_00, 1800_00),
    ("Groceries", 40_00, 180_00),
    ("Coffee", 3_50, 7_00),
    ("Utilities", 80_00, 220_00),
    ("Dinner out", 25_00, 120_00),
    ("ATM withdrawal", 20_00, 200_00),
]


def log(message: str) -> None:
    print(f"  {message}")


def cents_to_dollars(cents: int) -> str:
    return f"${cents / 100:,.2f}"


async def register_and_login(client: httpx.AsyncClient, user: dict) -> str:
    """Register the user (ignoring "already registered") and return a token."""
    response = await client.post(
        "/api/v1/users",
        json={"name": user["name"], "email": user["email"], "password": user["password"]},
    )
    if response.status_code not in (201, 409):
        response.raise_for_status()

    response = await client.post(
        "/api/v1/sessions",
        json={"email": user["email"], "password": user["password"]},
    )
    response.raise_for_status()
    return response.json()["token"]


async def record(
    client: httpx.AsyncClient, token: str, kind: str, amount_cents: int, description: str
) -> dict:
    """POST a deposit or withdraw; returns the JSON body (including errors)."""
    response = await client.post(
        f"/api/v1/statements/{kind}",
        json={"amount": amount_cents, "description": description},
        headers={"Authorization": f"Bearer {token}"},
    )
    return response.json()


async def get_balance(client: httpx.AsyncClient, token: str) -> int:
    response = await client.get(
        "/api/v1/statements/balance",
        headers={"Authorization": f"Bearer {token}"},
    )
    response.raise_for_status()
    return response.json()["balance"]


async def seed_history(client: httpx.AsyncClient, token: str, user: dict, months: int) -> int:
    """Two paychecks per month, then a handful of random expenses."""
    rejected = 0
    for month in range(months):
        for half in ("1st", "15th"):
            await record(client, token, "deposit", user["paycheck_cents"] // 2,
                         f"Paycheck ({half}, month {month + 1})")

        for _ in range(random.randint(5, 10)):
            description, low, high = random.choice(SPENDING)
            result = await record(client, token, "withdraw", random.randint(low, high), description)
            # Overdrafts are rejected by the API; count them instead of failing
            if result.get("error_type") == "insufficient_funds":
                rejected += 1
    return rejected


async def seed(base_url: str) -> None:
    print("\n========================================")
    print("  DEMO SEED — NOT FOR PRODUCTION")
    print("========================================\n")

    async with httpx.AsyncClient(base_url=base_url, timeout=30.0) as client:
        try:
            (await client.get("/health")).raise_for_status()
        except (httpx.ConnectError, httpx.HTTPStatusError):
            print(f"  ERROR: Cannot connect to {base_url}")
            print("  Start the server first: uvicorn ledger_api.main:app --reload\n")
            return

        for user in USERS:
            print(f"Seeding {user['name']}...")
            token = await register_and_login(client, user)
            rejected = await seed_history(client, token, user, months=3)
            balance = await get_balance(client, token)
            log(f"Balance: {cents_to_dollars(balance)} ({rejected} overdrafts rejected)")

    print("\n========================================")
    print("  SEED COMPLETE — Login Credentials")
    print("========================================")
    print(f"\n  {'Email':<30s} {'Password':<20s}")
    print(f"  {'─' * 30} {'─' * 20}")
    for user in USERS:
        print(f"  {user['email']:<30s} {user['password']:<20s}")
    print()


def reset_database() -> None:
    """Delete the SQLite database file so the server recreates it on restart."""
    db_path = os.path.join(os.path.dirname(__file__), "..", "data", "ledger.db")
    db_path = os.path.normpath(db_path)

    if os.path.exists(db_path):
        os.remove(db_path)
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
        epilog="Creates sample users with deposit/withdrawal history.",
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
