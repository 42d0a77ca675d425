#!/usr/bin/env python3
"""
Remove stored files that no media record points at.

Usage:
    python scripts/cleanup_orphans.py
    python scripts/cleanup_orphans.py --dry-run
    python scripts/cleanup_orphans.py --min-age-seconds 86400
"""

import argparse
import asyncio
import os
import sys
from datetime import timedelta

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


async def run_sweep(dry_run: bool, min_age_seconds: int | None):
    """Sweep the post media container."""
    from src.core.config import get_settings
    from src.core.logging import configure_logging
    from src.db.session import close_db, get_session_maker, init_db
    from src.services.storage.cleanup import sweep_orphans
    from src.services.storage.service import get_storage_service

    settings = get_settings()
    configure_logging(settings)
    await init_db(settings)

    storage = get_storage_service(settings)
    try:
        async with get_session_maker()() as session:
            if min_age_seconds is None:
                min_age_seconds = settings.orphan_grace_period_seconds
            return await sweep_orphans(
                session,
                storage,
                dry_run=dry_run,
                min_age=timedelta(seconds=min_age_seconds),
            )
    finally:
        await storage.provider.close()
        await close_db()


def main():
    parser = argparse.ArgumentParser(description="Delete orphaned blobs")
    parser.add_argument("--dry-run", action="store_true", help="List orphans without deleting them")
    parser.add_argument(
        "--min-age-seconds",
        type=int,
        default=None,
        help="Skip blobs younger than this (default: ORPHAN_GRACE_PERIOD_SECONDS)",
    )
    args = parser.parse_args()

    report = asyncio.run(run_sweep(args.dry_run, args.min_age_seconds))

    print("=" * 70)
    print(f"  Files scanned:  {report.scanned}")
    print(f"  Orphans found:  {len(report.orphans)}")
    print(f"  Too recent:     {len(report.skipped_recent)}")
    print("=" * 70)

    for name in report.orphans:
        print(f"  {name}")

    if args.dry_run:
        print()
        print("  Dry run, nothing deleted.")
    else:
        print()
        print(f"  ✓ Deleted: {len(report.deleted)}")
        if report.failed:
            print(f"  ✗ Failed:  {len(report.failed)}")


if __name__ == "__main__":
    main()
