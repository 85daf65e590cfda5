#!/usr/bin/env python3
"""
Daily weekly-bonus sweep.

Recalculates the weekly bonus of every active branch for the bucket that
contains the given business date (today by default). Meant to be run once
a day by cron; POST /api/bonuses/sync/trigger runs the same code.

Usage:
    python3 scripts/run_daily_sync.py
    python3 scripts/run_daily_sync.py --date 2025-03-15 --actor-id 7

Exit status is 1 when any branch failed with an error. Branches skipped
because their bonus is already requested or decided, or because they have
no revenue yet, do not change the exit status.
"""
import argparse
import logging
import os
import sys
from datetime import date

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app_config.settings import LOG_LEVEL
from database import SessionLocal
from services.bonus_repository import BonusRepository
from services.revenue_sync import RevenueSyncService

logger = logging.getLogger("run_daily_sync")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Sync weekly bonuses for all active branches")
    parser.add_argument(
        "--date", dest="sync_date", type=date.fromisoformat, default=None,
        help="Business date to sync for, YYYY-MM-DD (default: today in the business timezone)",
    )
    parser.add_argument(
        "--actor-id", type=int, default=None,
        help="User id recorded in the audit trail (default: system)",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=LOG_LEVEL.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    db = SessionLocal()
    try:
        service = RevenueSyncService(BonusRepository(db))
        result = service.trigger_manual_sync(today=args.sync_date, actor_id=args.actor_id)
    finally:
        db.close()

    print(result.message)
    for branch in result.results:
        marker = "OK  " if branch.success else ("SKIP" if branch.skipped else "FAIL")
        print(f"  [{marker}] {branch.branch_id} {branch.branch_name}: {branch.message}")

    return 0 if result.failed_count == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
