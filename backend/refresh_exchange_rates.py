#!/usr/bin/env python3
"""
Run one exchange rate refresh cycle outside the API process.

Usage:
    python refresh_exchange_rates.py              # refresh now
    python refresh_exchange_rates.py --list       # refresh, then print the table
    python refresh_exchange_rates.py --prune-days 30
"""

import argparse
import asyncio
import sys
from datetime import datetime, timedelta, timezone
from typing import Optional

from worklio.core.config import settings
from worklio.core.logging import setup_logging
from worklio.db.init_db import create_tables
from worklio.db.session import close_db, get_sessionmaker, init_db
from worklio.db.repositories.exchange_rate_repository import ExchangeRateRepository
from worklio.deps.di_container import build_container


async def refresh(list_rates: bool, prune_days: Optional[int]) -> int:
    setup_logging()
    await init_db()
    if settings.DB_AUTO_CREATE_TABLES:
        await create_tables()

    container = build_container()
    scheduler = container.exchange_rate_scheduler()
    try:
        updated = await scheduler.run_cycle()
        if updated is None:
            print("Refresh failed, see log for details", file=sys.stderr)
            return 1
        print(f"Updated {updated} exchange rates")

        async with get_sessionmaker()() as session:
            repo = ExchangeRateRepository(session)
            if prune_days is not None:
                cutoff = datetime.now(timezone.utc) - timedelta(days=prune_days)
                removed = await repo.delete_older_than(cutoff)
                await session.commit()
                print(f"Removed {removed} rates not refreshed since {cutoff:%Y-%m-%d}")
            if list_rates:
                for row in await repo.list_all():
                    print(f"  {row.base_currency} -> {row.target_currency}: {row.rate} ({row.updated_at})")
        return 0
    finally:
        await close_db()


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--list", action="store_true", help="print stored rates afterwards")
    parser.add_argument("--prune-days", type=int, default=None, help="delete rates older than N days")
    args = parser.parse_args()
    return asyncio.run(refresh(args.list, args.prune_days))


if __name__ == "__main__":
    sys.exit(main())
