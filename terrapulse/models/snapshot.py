"""
Store snapshot — the serializable form of the whole marketplace state.

A snapshot is a plain deep copy of the three mappings. It is converted to
and from JSON-compatible data with a pydantic TypeAdapter, which also
validates the tagged `EntityType` union on the way back in.
"""

from dataclasses import dataclass, field
from typing import Any

from pydantic import TypeAdapter

from terrapulse.models.nft import NFT
from terrapulse.models.user import User


@dataclass
class StoreSnapshot:
    """Users, NFTs and listings at one point in time."""

    users: dict[str, User] = field(default_factory=dict)
    nfts: dict[str, NFT] = field(default_factory=dict)
    listings: dict[str, int] = field(default_factory=dict)


_snapshot_adapter: TypeAdapter[StoreSnapshot] = TypeAdapter(StoreSnapshot)


def snapshot_to_json(snapshot: StoreSnapshot) -> dict[str, Any]:
    """Convert a snapshot to JSON-compatible data."""
    return _snapshot_adapter.dump_python(snapshot, mode="json")


def snapshot_from_json(data: dict[str, Any]) -> StoreSnapshot:
    """
    Rebuild a snapshot from JSON-compatible data.

    Raises:
        pydantic.ValidationError: If the data does not describe a snapshot
    """
    return _snapshot_adapter.validate_python(data)
