#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from dropship_branding.config import ConfigurationError  # noqa: E402
from dropship_branding.db.supabase import PersistenceError, SupabaseClient  # noqa: E402

# (table, columns, required)
TABLE_CHECKS = (
    ("helix_segments", "label,group_name,description", False),
    ("projects", "*", True),
    ("outputs", "*", True),
)


async def _check_table(client: SupabaseClient, *, table: str, columns: str) -> tuple[bool, str]:
    try:
        rows = await client.select(table, columns=columns, limit=1)
    except PersistenceError as exc:
        return False, f"{exc.message} (code={exc.code})"
    sample = rows[0] if rows else None
    return True, f"sample row: {sample}" if sample else "accessible (no rows)"


async def verify(access_token: str | None) -> int:
    try:
        client = SupabaseClient.from_settings(access_token=access_token)
    except ConfigurationError as exc:
        print(f"Missing configuration: {exc.variable}. Set SUPABASE_URL and SUPABASE_ANON_KEY.")
        return 1

    failures = 0
    for table, columns, required in TABLE_CHECKS:
        ok, message = await _check_table(client, table=table, columns=columns)
        status = "ok" if ok else ("FAILED" if required else "unavailable")
        print(f"[{status}] {table}: {message}")
        if not ok and required:
            failures += 1
        elif not ok:
            print(f"  {table} is optional; the API falls back to the built-in segment list.")

    if failures:
        print("Database is not ready: create the missing tables and row level security policies.")
        return 1
    print("Database verification completed: projects and outputs are accessible.")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Check that the hosted database tables are reachable.")
    parser.add_argument(
        "--access-token",
        type=str,
        default=None,
        help="User access token to run the checks under row level security (defaults to the anon key).",
    )
    args = parser.parse_args()
    sys.exit(asyncio.run(verify(args.access_token)))
