import threading

import pytest

from terrapulse.models.failure import InvalidOperationError, MarketplaceSystemError
from terrapulse.models.nft import NFTMetadata, Wildlife
from terrapulse.models.snapshot import StoreSnapshot, snapshot_from_json, snapshot_to_json
from terrapulse.services.marketplace import Marketplace
from terrapulse.services.store import EntityStore


@pytest.fixture
def populated(
    marketplace: Marketplace, wildlife_metadata: NFTMetadata, wildlife: Wildlife
) -> Marketplace:
    marketplace.register_user("alice", "Alice", "alice@example.org")
    marketplace.register_user("bob", "Bob")
    sold = marketplace.mint_nft("alice", wildlife_metadata, wildlife)
    marketplace.list_nft_for_sale("alice", sold, 250)
    marketplace.purchase_nft("bob", sold)
    listed = marketplace.mint_nft("alice", wildlife_metadata, wildlife)
    marketplace.list_nft_for_sale("alice", listed, 900)
    marketplace.record_contribution("bob", "mangrove-replanting", 12)
    return marketplace


class TestEntityStore:
    def test_starts_empty(self) -> None:
        store = EntityStore()
        assert store.users == {}
        assert store.nfts == {}
        assert store.listings == {}
        assert store.check_listing_coherence() == []

    def test_snapshot_is_deep_copy(self, populated: Marketplace) -> None:
        snapshot = populated.store.snapshot()
        snapshot.users["bob"].rewards_points = 999
        snapshot.listings.clear()

        assert populated.store.users["bob"].rewards_points == 2
        assert len(populated.store.listings) == 1

    def test_restore_replaces_state(self, populated: Marketplace) -> None:
        snapshot = populated.store.snapshot()
        other = EntityStore()

        other.restore(snapshot)

        assert other.snapshot() == snapshot

    def test_restore_rejects_incoherent_snapshot(self, populated: Marketplace) -> None:
        snapshot = populated.store.snapshot()
        snapshot.listings["ghost"] = 10
        before = populated.store.snapshot()

        with pytest.raises(MarketplaceSystemError, match="disagree"):
            populated.store.restore(snapshot)

        assert populated.store.snapshot() == before
        assert populated.store.check_listing_coherence() == []

    def test_restore_rejects_listing_without_price(self, populated: Marketplace) -> None:
        snapshot = populated.store.snapshot()
        nft_id = next(iter(snapshot.listings))
        snapshot.nfts[nft_id].price = None
        other = EntityStore()

        with pytest.raises(MarketplaceSystemError, match=nft_id):
            other.restore(snapshot)

        assert other.snapshot() == StoreSnapshot()

    def test_restore_isolated_from_snapshot(self, populated: Marketplace) -> None:
        snapshot = populated.store.snapshot()
        other = EntityStore()
        other.restore(snapshot)

        snapshot.users["alice"].username = "Mallory"

        assert other.users["alice"].username == "Alice"

    def test_clear(self, populated: Marketplace) -> None:
        populated.store.clear()
        assert populated.store.snapshot() == StoreSnapshot()

    def test_coherence_detects_listing_without_price(self, populated: Marketplace) -> None:
        store = populated.store
        nft_id = next(iter(store.listings))
        store.nfts[nft_id].price = None

        assert store.check_listing_coherence() == [nft_id]

    def test_coherence_detects_price_without_listing(self, populated: Marketplace) -> None:
        store = populated.store
        nft_id = next(iter(store.listings))
        del store.listings[nft_id]

        assert store.check_listing_coherence() == [nft_id]

    def test_coherence_detects_price_mismatch(self, populated: Marketplace) -> None:
        store = populated.store
        nft_id = next(iter(store.listings))
        store.listings[nft_id] = 1

        assert nft_id in store.check_listing_coherence()

    def test_coherence_detects_dangling_listing(self, populated: Marketplace) -> None:
        populated.store.listings["ghost"] = 10
        assert populated.store.check_listing_coherence() == ["ghost"]


class TestSnapshotSerialization:
    def test_json_round_trip(self, populated: Marketplace) -> None:
        snapshot = populated.store.snapshot()

        restored = snapshot_from_json(snapshot_to_json(snapshot))

        assert restored == snapshot

    def test_entity_kind_preserved(self, populated: Marketplace) -> None:
        data = snapshot_to_json(populated.store.snapshot())

        kinds = {nft["entity_type"]["kind"] for nft in data["nfts"].values()}
        assert kinds == {"wildlife"}

    def test_enums_serialized_as_values(self, populated: Marketplace) -> None:
        data = snapshot_to_json(populated.store.snapshot())

        nft = next(iter(data["nfts"].values()))
        assert nft["metadata"]["conservation_status"] == "critically_endangered"
        assert nft["transaction_history"][0]["transaction_type"] == "mint"

    def test_restored_store_keeps_operating(self, populated: Marketplace) -> None:
        """A marketplace over a restored store continues where the original left off."""
        snapshot = snapshot_from_json(snapshot_to_json(populated.store.snapshot()))
        store = EntityStore()
        store.restore(snapshot)
        revived = Marketplace(store=store, id_generator=populated.ids)
        nft_id, price = revived.get_marketplace_listings()[0]

        revived.purchase_nft("bob", nft_id)

        assert revived.get_user_profile("bob").rewards_points == 2 + price // 100


class TestConcurrency:
    BUYERS = 8

    def test_single_winner_for_contended_purchase(
        self, marketplace: Marketplace, wildlife_metadata: NFTMetadata, wildlife: Wildlife
    ) -> None:
        """Buyers racing for one listing: one sale, every other attempt is rejected."""
        marketplace.register_user("seller", "Seller")
        nft_id = marketplace.mint_nft("seller", wildlife_metadata, wildlife)
        marketplace.list_nft_for_sale("seller", nft_id, 500)
        buyers = [f"buyer-{n}" for n in range(self.BUYERS)]
        for buyer in buyers:
            marketplace.register_user(buyer, buyer)

        barrier = threading.Barrier(self.BUYERS)
        winners: list[str] = []
        rejected: list[Exception] = []

        def attempt(buyer: str) -> None:
            barrier.wait()
            try:
                marketplace.purchase_nft(buyer, nft_id)
            except Exception as exc:
                rejected.append(exc)
            else:
                winners.append(buyer)

        threads = [threading.Thread(target=attempt, args=(buyer,)) for buyer in buyers]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        assert len(winners) == 1
        assert len(rejected) == self.BUYERS - 1
        assert all(isinstance(exc, InvalidOperationError) for exc in rejected)

        winner = winners[0]
        nft = marketplace.get_nft(nft_id)
        assert nft.owner == winner
        assert nft.price is None
        assert marketplace.get_marketplace_listings() == []
        assert marketplace.store.check_listing_coherence() == []
        assert [t.transaction_type.value for t in nft.transaction_history] == ["mint", "sale"]
        for buyer in buyers:
            adopted = marketplace.get_user_profile(buyer).adopted_nfts
            assert (nft_id in adopted) == (buyer == winner)
