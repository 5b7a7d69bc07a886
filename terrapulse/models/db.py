"""
SQLAlchemy ORM models for persistent storage.

The marketplace state lives in memory. Durability comes from storing whole
snapshots of it as JSON documents, newest row wins.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class StoreSnapshotDB(Base):
    """
    A serialized snapshot of users, NFTs and listings.

    Counts are denormalized so snapshots can be inspected without
    decoding the payload.
    """

    __tablename__ = "store_snapshots"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    user_count: Mapped[int] = mapped_column(Integer, default=0)
    nft_count: Mapped[int] = mapped_column(Integer, default=0)
    listing_count: Mapped[int] = mapped_column(Integer, default=0)

    # Output of snapshot_to_json()
    payload: Mapped[dict[str, Any]] = mapped_column(JSON)

    def __repr__(self) -> str:
        return (
            f"<StoreSnapshotDB(id={self.id}, users={self.user_count}, "
            f"nfts={self.nft_count}, listings={self.listing_count})>"
        )
