"""
Snapshot persistence operations.

Saves and loads whole-store snapshots. The newest row is the current
durable state; older rows are kept up to a retention count.
"""

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from terrapulse.models.db import StoreSnapshotDB
from terrapulse.models.snapshot import StoreSnapshot, snapshot_from_json, snapshot_to_json

logger = logging.getLogger(__name__)


async def save_snapshot(session: AsyncSession, snapshot: StoreSnapshot) -> StoreSnapshotDB:
    """Store a snapshot as a new row."""
    row = StoreSnapshotDB(
        user_count=len(snapshot.users),
        nft_count=len(snapshot.nfts),
        listing_count=len(snapshot.listings),
        payload=snapshot_to_json(snapshot),
    )
    session.add(row)
    await session.flush()

    logger.info(
        "SNAPSHOT_SAVED",
        extra={"snapshot_id": row.id, "users": row.user_count, "nfts": row.nft_count},
    )
    return row


async def get_latest_snapshot(session: AsyncSession) -> StoreSnapshotDB | None:
    """
    Get the most recently saved snapshot row.

    Returns None if nothing has been saved yet.
    """
    result = await session.execute(
        select(StoreSnapshotDB).order_by(StoreSnapshotDB.id.desc()).limit(1)
    )
    return result.scalar_one_or_none()


async def load_latest_snapshot(session: AsyncSession) -> StoreSnapshot | None:
    """
    Load the most recent snapshot as a domain model.

    Returns None if nothing has been saved yet.
    """
    row = await get_latest_snapshot(session)
    if row is None:
        return None
    return snapshot_row_to_model(row)


def snapshot_row_to_model(row: StoreSnapshotDB) -> StoreSnapshot:
    """Convert a database snapshot row to a domain model."""
    return snapshot_from_json(row.payload)


async def prune_snapshots(session: AsyncSession, keep: int) -> int:
    """
    Delete all but the newest `keep` snapshots.

    Returns the number of rows deleted.
    """
    if keep < 1:
        raise ValueError(f"keep must be at least 1, got {keep}")

    result = await session.execute(
        select(StoreSnapshotDB.id).order_by(StoreSnapshotDB.id.desc()).offset(keep)
    )
    stale_ids = list(result.scalars().all())
    if not stale_ids:
        return 0

    await session.execute(delete(StoreSnapshotDB).where(StoreSnapshotDB.id.in_(stale_ids)))
    await session.flush()
    return len(stale_ids)
