#!/usr/bin/env python3
"""Seed the ledger with one user per company and a sample marble.

Usage:
    python -m scripts.seed_demo
    # or from project root:
    python scripts/seed_demo.py
"""

import asyncio
import sys
from pathlib import Path

# Ensure project root is on path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from marbles_engine.common.config import get_settings
from marbles_engine.deps import get_db, get_invocation_service

DEMO_INVOCATIONS = [
    ("init", ["314"]),
    ("init_owner", ["o0000000000001", "alice", "supplier"]),
    ("init_owner", ["o0000000000002", "bob", "core-enterprise"]),
    ("init_owner", ["o0000000000003", "carol", "bank"]),
    ("init_marble", ["m0000000000001", "13188888888", "35000", "Q3 receivables",
                     "o0000000000001", "supplier"]),
]


async def seed_demo() -> None:
    get_settings()
    db = get_db()
    await db.init()
    await db.create_all()

    svc = get_invocation_service()
    for function, args in DEMO_INVOCATIONS:
        response = await svc.execute(db, function, args)
        if response.ok:
            print(f"  [ok] {function} {args[:1]}")
        else:
            print(f"  [skip] {function} {args[:1]}: {response.message}")

    await db.close()
    print("\nDone. Demo ledger seeded.")


if __name__ == "__main__":
    asyncio.run(seed_demo())
