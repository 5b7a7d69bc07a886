"""Tests for snapshot persistence operations."""

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from terrapulse.db.operations import (
    get_latest_snapshot,
    load_latest_snapshot,
    prune_snapshots,
    save_snapshot,
    snapshot_row_to_model,
)
from terrapulse.models.db import Base, StoreSnapshotDB
from terrapulse.models.nft import NFTMetadata, Wildlife
from terrapulse.models.snapshot import StoreSnapshot
from terrapulse.services.marketplace import Marketplace
from terrapulse.services.store import EntityStore


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def session(async_engine) -> AsyncSession:
    """Provide a database session for tests."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture
def populated_snapshot(
    marketplace: Marketplace, wildlife_metadata: NFTMetadata, wildlife: Wildlife
) -> StoreSnapshot:
    marketplace.register_user("alice", "Alice")
    marketplace.register_user("bob", "Bob")
    nft_id = marketplace.mint_nft("alice", wildlife_metadata, wildlife)
    marketplace.list_nft_for_sale("alice", nft_id, 400)
    marketplace.purchase_nft("bob", nft_id)
    other = marketplace.mint_nft("alice", wildlife_metadata, wildlife)
    marketplace.list_nft_for_sale("alice", other, 120)
    return marketplace.store.snapshot()


class TestSnapshotOperations:
    async def test_save_snapshot(
        self, session: AsyncSession, populated_snapshot: StoreSnapshot
    ) -> None:
        """Saving records denormalized counts."""
        row = await save_snapshot(session, populated_snapshot)

        assert row.id is not None
        assert row.user_count == 2
        assert row.nft_count == 2
        assert row.listing_count == 1

    async def test_load_latest_snapshot_empty(self, session: AsyncSession) -> None:
        """Returns None when nothing has been saved."""
        assert await load_latest_snapshot(session) is None
        assert await get_latest_snapshot(session) is None

    async def test_round_trip(
        self, session: AsyncSession, populated_snapshot: StoreSnapshot
    ) -> None:
        """A loaded snapshot equals the saved one."""
        await save_snapshot(session, populated_snapshot)
        await session.commit()

        loaded = await load_latest_snapshot(session)

        assert loaded == populated_snapshot

    async def test_latest_wins(
        self, session: AsyncSession, populated_snapshot: StoreSnapshot
    ) -> None:
        """The newest snapshot is the one loaded."""
        await save_snapshot(session, StoreSnapshot())
        await save_snapshot(session, populated_snapshot)
        await session.commit()

        row = await get_latest_snapshot(session)

        assert row is not None
        assert snapshot_row_to_model(row) == populated_snapshot

    async def test_restore_into_store(
        self, session: AsyncSession, populated_snapshot: StoreSnapshot
    ) -> None:
        """A stored snapshot restores a working store."""
        await save_snapshot(session, populated_snapshot)
        await session.commit()

        store = EntityStore()
        loaded = await load_latest_snapshot(session)
        assert loaded is not None
        store.restore(loaded)

        assert store.check_listing_coherence() == []
        assert store.users["bob"].rewards_points == 4


class TestPruneSnapshots:
    async def test_prune_keeps_newest(self, session: AsyncSession) -> None:
        for _ in range(5):
            await save_snapshot(session, StoreSnapshot())
        await session.commit()

        deleted = await prune_snapshots(session, keep=2)
        await session.commit()

        assert deleted == 3
        rows = (await session.execute(select(StoreSnapshotDB))).scalars().all()
        assert len(rows) == 2

    async def test_prune_nothing_to_delete(self, session: AsyncSession) -> None:
        await save_snapshot(session, StoreSnapshot())

        assert await prune_snapshots(session, keep=3) == 0

    async def test_prune_requires_positive_keep(self, session: AsyncSession) -> None:
        with pytest.raises(ValueError, match="at least 1"):
            await prune_snapshots(session, keep=0)
