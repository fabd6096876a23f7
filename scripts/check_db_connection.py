#!/usr/bin/env python3
"""Check that DATABASE_URL is reachable and the schema is migrated."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

# REQUIRED: Add parent directory to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import func, inspect, select, text
from sqlalchemy.exc import SQLAlchemyError
from src.infrastructure.db.models import AssessmentRecord
from src.infrastructure.db.session import dispose_engine, get_session_factory

EXPECTED_TABLES = {"assessments", "admin_users"}


async def check() -> bool:
    session_factory = get_session_factory()
    async with session_factory() as session:
        await session.execute(text("SELECT 1"))
        print("✅ Database reachable")

        connection = await session.connection()
        tables = set(await connection.run_sync(lambda conn: inspect(conn).get_table_names()))
        missing = EXPECTED_TABLES - tables
        if missing:
            print(f"❌ Missing tables: {', '.join(sorted(missing))} (run `alembic upgrade head`)")
            return False

        count = await session.scalar(select(func.count()).select_from(AssessmentRecord))
        print(f"✅ Schema present, {count} assessment(s) stored")
    return True


async def main() -> int:
    try:
        ok = await check()
    except (SQLAlchemyError, OSError) as exc:
        print(f"❌ Database check failed: {exc}")
        ok = False
    finally:
        await dispose_engine()
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
