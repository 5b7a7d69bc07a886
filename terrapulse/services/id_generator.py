"""
NFT id and transaction fingerprint generation.

Ids are derived from the clock plus per-request entropy. Both are injected
so tests can drive the generator deterministically.

Transaction hashes are display fingerprints for the audit trail. They are
NOT collision-resistant against adversarial input and must never be used as
a security or uniqueness guarantee.
"""

import hashlib
import logging
import os
import time
from collections.abc import Container
from typing import Protocol

from terrapulse.config import MAX_ID_ATTEMPTS, NFT_ID_BYTES, TRANSACTION_HASH_BYTES
from terrapulse.models.failure import MarketplaceSystemError

logger = logging.getLogger(__name__)


class Clock(Protocol):
    """Source of timestamps, in nanoseconds since the Unix epoch."""

    def now(self) -> int: ...


class EntropySource(Protocol):
    """Source of request-specific random bytes."""

    def entropy(self) -> bytes: ...


class SystemClock:
    """Wall clock."""

    def now(self) -> int:
        return time.time_ns()


class RandomEntropy:
    """Operating system randomness."""

    def __init__(self, size: int = 16) -> None:
        self.size = size

    def entropy(self) -> bytes:
        return os.urandom(self.size)


def _timestamp_bytes(timestamp: int) -> bytes:
    return timestamp.to_bytes(8, "big")


class IdGenerator:
    """Generates NFT ids and transaction hashes."""

    def __init__(
        self,
        clock: Clock | None = None,
        entropy: EntropySource | None = None,
        max_attempts: int = MAX_ID_ATTEMPTS,
    ) -> None:
        self.clock = clock or SystemClock()
        self.entropy_source = entropy or RandomEntropy()
        self.max_attempts = max_attempts

    def now(self) -> int:
        """Current timestamp from the injected clock."""
        return self.clock.now()

    def candidate_id(self, timestamp: int, entropy: bytes) -> str:
        """Hex id for one (timestamp, entropy) pair."""
        digest = hashlib.sha256(_timestamp_bytes(timestamp) + entropy).digest()
        return digest[:NFT_ID_BYTES].hex()

    def new_nft_id(self, existing: Container[str]) -> str:
        """
        Generate an id not present in `existing`.

        Each attempt reads the clock and the entropy source again.

        Raises:
            MarketplaceSystemError: If every attempt collided
        """
        for attempt in range(1, self.max_attempts + 1):
            candidate = self.candidate_id(self.clock.now(), self.entropy_source.entropy())
            if candidate not in existing:
                return candidate
            logger.debug(
                "NFT_ID_COLLISION",
                extra={"candidate": candidate, "attempt": attempt},
            )

        raise MarketplaceSystemError(
            f"Could not generate a unique NFT id after {self.max_attempts} attempts"
        )

    def transaction_hash(self, timestamp: int, principal: str) -> str:
        """Audit fingerprint of (timestamp, principal)."""
        digest = hashlib.sha256(_timestamp_bytes(timestamp) + principal.encode()).digest()
        return digest[:TRANSACTION_HASH_BYTES].hex()
