"""
Orphaned blob sweeping.

Blob deletes are best-effort, so a container can hold files no media row
points at. This finds and removes them.

Only the post media container is swept. Standalone uploads from
/api/store go to their own container and never have media rows, so they
are never candidates. Blobs younger than the grace period are skipped:
a post upload is written before its media row is committed.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import BlobNotFoundError
from src.core.logging import get_logger
from src.db.repositories import MediaRepository
from src.services.storage.service import StorageService

logger = get_logger(__name__)

DEFAULT_MIN_AGE = timedelta(hours=1)


@dataclass
class SweepReport:
    """Outcome of an orphan sweep."""

    scanned: int = 0
    orphans: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped_recent: list[str] = field(default_factory=list)


async def find_orphans(session: AsyncSession, storage: StorageService) -> tuple[int, list[str]]:
    """Return the number of stored files and those no media row references."""
    referenced = {
        storage.extract_key(path)
        for path in await MediaRepository(session).get_all_paths()
    }
    stored = await storage.provider.list_files(storage.container)
    return len(stored), [name for name in stored if name not in referenced]


async def is_older_than(storage: StorageService, name: str, min_age: timedelta) -> bool:
    """True when the blob was last written more than ``min_age`` ago."""
    if min_age <= timedelta(0):
        return True
    modified = await storage.provider.last_modified(storage.container, name)
    if modified.tzinfo is None:
        modified = modified.replace(tzinfo=timezone.utc)
    return datetime.now(timezone.utc) - modified >= min_age


async def sweep_orphans(
    session: AsyncSession,
    storage: StorageService,
    dry_run: bool = False,
    min_age: timedelta = DEFAULT_MIN_AGE,
) -> SweepReport:
    """
    Delete stored files that no media row references.

    Args:
        session: Database session used to read media rows.
        storage: Storage service for the post media container.
        dry_run: Only report orphans, delete nothing.
        min_age: Unreferenced blobs newer than this are left alone.
    """
    scanned, candidates = await find_orphans(session, storage)
    report = SweepReport(scanned=scanned)

    for name in candidates:
        try:
            old_enough = await is_older_than(storage, name, min_age)
        except BlobNotFoundError:
            continue
        if old_enough:
            report.orphans.append(name)
        else:
            report.skipped_recent.append(name)

    if dry_run:
        logger.info(
            "orphan_sweep_dry_run",
            scanned=scanned,
            orphans=len(report.orphans),
            skipped_recent=len(report.skipped_recent),
        )
        return report

    for name in report.orphans:
        try:
            await storage.delete(name)
            report.deleted.append(name)
        except Exception as e:
            logger.warning("orphan_delete_failed", key=name, error=str(e))
            report.failed.append(name)

    logger.info(
        "orphan_sweep_completed",
        backend=storage.provider_name,
        container=storage.container,
        scanned=scanned,
        deleted=len(report.deleted),
        failed=len(report.failed),
        skipped_recent=len(report.skipped_recent),
    )
    return report
