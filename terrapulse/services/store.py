"""
Entity Store — canonical in-memory marketplace state.

Three mappings held behind ONE lock:
- users: principal -> User
- nfts: nft id -> NFT
- listings: nft id -> asking price

INVARIANTS:
- `id in listings` iff `nfts[id].price is not None`, with equal values
- A single lock covers all three mappings, so cross-mapping updates are
  never observed half-done

Callers that mutate state hold `lock` for the whole operation. The store
itself does no validation; that belongs to the marketplace service.
"""

import copy
import logging
from dataclasses import dataclass, field
from threading import RLock

from terrapulse.models.failure import MarketplaceSystemError
from terrapulse.models.nft import NFT
from terrapulse.models.snapshot import StoreSnapshot
from terrapulse.models.user import User

logger = logging.getLogger(__name__)


@dataclass
class EntityStore:
    """Users, NFTs and listings behind a single re-entrant lock."""

    users: dict[str, User] = field(default_factory=dict)
    nfts: dict[str, NFT] = field(default_factory=dict)
    listings: dict[str, int] = field(default_factory=dict)
    lock: RLock = field(default_factory=RLock, repr=False, compare=False)

    def snapshot(self) -> StoreSnapshot:
        """Deep copy of the current state."""
        with self.lock:
            return StoreSnapshot(
                users=copy.deepcopy(self.users),
                nfts=copy.deepcopy(self.nfts),
                listings=dict(self.listings),
            )

    def restore(self, snapshot: StoreSnapshot) -> None:
        """
        Replace all state with a copy of `snapshot`.

        The snapshot is copied so later changes to it do not leak in.

        Raises:
            MarketplaceSystemError: If listings and NFT prices disagree in
                the snapshot. The current state is kept.
        """
        users = copy.deepcopy(snapshot.users)
        nfts = copy.deepcopy(snapshot.nfts)
        listings = dict(snapshot.listings)

        incoherent = _incoherent_ids(nfts, listings)
        if incoherent:
            logger.error(
                "SNAPSHOT_LISTINGS_INCOHERENT",
                extra={"nft_ids": incoherent},
            )
            raise MarketplaceSystemError(
                f"Snapshot listings disagree with NFT prices: {', '.join(incoherent)}"
            )

        with self.lock:
            self.users = users
            self.nfts = nfts
            self.listings = listings

        logger.info(
            "STORE_RESTORED",
            extra={"users": len(users), "nfts": len(nfts), "listings": len(listings)},
        )

    def clear(self) -> None:
        """Drop all state."""
        with self.lock:
            self.users = {}
            self.nfts = {}
            self.listings = {}

    def check_listing_coherence(self) -> list[str]:
        """
        Ids where listings and NFT prices disagree.

        Returns an empty list when the store is coherent.
        """
        with self.lock:
            return _incoherent_ids(self.nfts, self.listings)


def _incoherent_ids(nfts: dict[str, NFT], listings: dict[str, int]) -> list[str]:
    incoherent = []
    for nft_id, price in listings.items():
        nft = nfts.get(nft_id)
        if nft is None or nft.price != price:
            incoherent.append(nft_id)
    for nft_id, nft in nfts.items():
        if nft.price is not None and nft_id not in listings:
            incoherent.append(nft_id)
    return incoherent
