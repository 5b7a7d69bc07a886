"""
NFT domain model.

An NFT is a uniquely identified conservation collectible: a wildlife
species, an eco-hotel, or a nature reserve. The kind of entity is a tagged
union (`EntityType`) discriminated by the `kind` field, so every variant
carries only its own attributes.

INVARIANT: `price` is set iff the NFT is currently listed for sale.
INVARIANT: `transaction_history` is append-only.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, Literal

from pydantic import Field


class ConservationStatus(str, Enum):
    """IUCN-style conservation status."""

    LEAST_CONCERN = "least_concern"
    NEAR_THREATENED = "near_threatened"
    VULNERABLE = "vulnerable"
    ENDANGERED = "endangered"
    CRITICALLY_ENDANGERED = "critically_endangered"


class PopulationTrend(str, Enum):
    """Direction of a population over time."""

    INCREASING = "increasing"
    STABLE = "stable"
    DECREASING = "decreasing"
    UNKNOWN = "unknown"


class TransactionType(str, Enum):
    """Kind of event recorded in an NFT's history."""

    MINT = "mint"
    TRANSFER = "transfer"
    SALE = "sale"
    ADOPTION = "adoption"


@dataclass(frozen=True, slots=True)
class Wildlife:
    """A wild animal or plant species."""

    species: str
    category: str
    kind: Literal["wildlife"] = "wildlife"


@dataclass(frozen=True, slots=True)
class Hotel:
    """An eco-hotel. Ratings are 0-255."""

    star_rating: int
    eco_rating: int
    kind: Literal["hotel"] = "hotel"

    def __post_init__(self) -> None:
        for name in ("star_rating", "eco_rating"):
            value = getattr(self, name)
            if not 0 <= value <= 255:
                raise ValueError(f"{name} must be between 0 and 255, got {value}")


@dataclass(frozen=True, slots=True)
class Reserve:
    """A protected nature reserve."""

    area_size: int
    habitat_type: str
    kind: Literal["reserve"] = "reserve"

    def __post_init__(self) -> None:
        if self.area_size < 0:
            raise ValueError(f"area_size must be non-negative, got {self.area_size}")


EntityType = Annotated[Wildlife | Hotel | Reserve, Field(discriminator="kind")]


@dataclass(frozen=True, slots=True)
class Location:
    """Geographic location of the entity."""

    latitude: float
    longitude: float
    region: str
    country: str


@dataclass
class NFTMetadata:
    """Descriptive, owner-independent data about an NFT."""

    name: str
    description: str
    image_url: str
    conservation_status: ConservationStatus
    location: Location
    attributes: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Transaction:
    """
    Immutable audit entry.

    Attributes:
        transaction_type: What happened
        from_principal: Previous owner (anonymous principal for mints)
        to_principal: New owner
        price: Price paid (0 for mints and transfers)
        timestamp: Nanoseconds since the Unix epoch
        transaction_hash: Display fingerprint, not a security guarantee
    """

    transaction_type: TransactionType
    from_principal: str
    to_principal: str
    price: int
    timestamp: int
    transaction_hash: str


@dataclass
class ConservationData:
    """Conservation tracking for the entity an NFT represents."""

    status: ConservationStatus
    population_trend: PopulationTrend
    last_updated: int
    threats: list[str] = field(default_factory=list)
    conservation_actions: list[str] = field(default_factory=list)


@dataclass
class NFT:
    """A minted collectible and its ownership state."""

    id: str
    entity_type: EntityType
    metadata: NFTMetadata
    owner: str | None
    creation_date: int
    conservation_data: ConservationData
    price: int | None = None
    transaction_history: list[Transaction] = field(default_factory=list)

    def is_listed(self) -> bool:
        """Whether the NFT currently has an asking price."""
        return self.price is not None

    def is_owned_by(self, principal_id: str) -> bool:
        """Whether the principal is the current owner."""
        return self.owner is not None and self.owner == principal_id
