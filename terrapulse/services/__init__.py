from terrapulse.services.id_generator import (
    Clock,
    EntropySource,
    IdGenerator,
    RandomEntropy,
    SystemClock,
)
from terrapulse.services.identity import ANONYMOUS_PRINCIPAL, ensure_authorized, is_anonymous
from terrapulse.services.marketplace import Marketplace
from terrapulse.services.rewards import calculate_rewards
from terrapulse.services.store import EntityStore

__all__ = [
    "ANONYMOUS_PRINCIPAL",
    "Clock",
    "EntityStore",
    "EntropySource",
    "IdGenerator",
    "Marketplace",
    "RandomEntropy",
    "SystemClock",
    "calculate_rewards",
    "ensure_authorized",
    "is_anonymous",
]
