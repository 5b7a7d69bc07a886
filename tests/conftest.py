import pytest

from terrapulse.models.nft import (
    ConservationStatus,
    Hotel,
    Location,
    NFTMetadata,
    Reserve,
    Wildlife,
)
from terrapulse.services.id_generator import IdGenerator
from terrapulse.services.marketplace import Marketplace
from terrapulse.services.store import EntityStore


class FakeClock:
    """Clock that advances by `step` nanoseconds on every read."""

    def __init__(self, start: int = 1_700_000_000_000_000_000, step: int = 1_000) -> None:
        self.current = start
        self.step = step

    def now(self) -> int:
        self.current += self.step
        return self.current


class CountingEntropy:
    """Entropy source returning an increasing counter."""

    def __init__(self) -> None:
        self.calls = 0

    def entropy(self) -> bytes:
        self.calls += 1
        return self.calls.to_bytes(8, "big")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def id_generator(clock: FakeClock) -> IdGenerator:
    return IdGenerator(clock=clock, entropy=CountingEntropy())


@pytest.fixture
def store() -> EntityStore:
    return EntityStore()


@pytest.fixture
def marketplace(store: EntityStore, id_generator: IdGenerator) -> Marketplace:
    return Marketplace(store=store, id_generator=id_generator)


@pytest.fixture
def wildlife_metadata() -> NFTMetadata:
    """Metadata for a Bornean orangutan NFT."""
    return NFTMetadata(
        name="Bornean Orangutan",
        description="Adult female from the Sabangau peat swamp forest",
        image_url="https://images.example.org/orangutan.png",
        conservation_status=ConservationStatus.CRITICALLY_ENDANGERED,
        location=Location(
            latitude=-2.3,
            longitude=113.9,
            region="Central Kalimantan",
            country="Indonesia",
        ),
        attributes={"age": "14", "name": "Sari"},
    )


@pytest.fixture
def wildlife() -> Wildlife:
    return Wildlife(species="Pongo pygmaeus", category="mammal")


@pytest.fixture
def hotel() -> Hotel:
    return Hotel(star_rating=4, eco_rating=5)


@pytest.fixture
def reserve() -> Reserve:
    return Reserve(area_size=56_800, habitat_type="peat swamp forest")
