from terrapulse.models.failure import (
    ApiResponse,
    FailureDetail,
    FailureKind,
    InsufficientFundsError,
    InvalidOperationError,
    KnownError,
    MarketplaceError,
    MarketplaceSystemError,
    NFTNotFoundError,
    NotAuthorizedError,
    OutcomeType,
    UserNotFoundError,
    create_known_failure,
    create_unknown_failure,
    finalize_response,
    is_finalized,
)
from terrapulse.models.nft import (
    NFT,
    ConservationData,
    ConservationStatus,
    EntityType,
    Hotel,
    Location,
    NFTMetadata,
    PopulationTrend,
    Reserve,
    Transaction,
    TransactionType,
    Wildlife,
)
from terrapulse.models.snapshot import StoreSnapshot, snapshot_from_json, snapshot_to_json
from terrapulse.models.user import Contribution, User

__all__ = [
    "ApiResponse",
    "ConservationData",
    "ConservationStatus",
    "Contribution",
    "EntityType",
    "FailureDetail",
    "FailureKind",
    "Hotel",
    "InsufficientFundsError",
    "InvalidOperationError",
    "KnownError",
    "Location",
    "MarketplaceError",
    "MarketplaceSystemError",
    "NFT",
    "NFTMetadata",
    "NFTNotFoundError",
    "NotAuthorizedError",
    "OutcomeType",
    "PopulationTrend",
    "Reserve",
    "StoreSnapshot",
    "Transaction",
    "TransactionType",
    "User",
    "UserNotFoundError",
    "Wildlife",
    "create_known_failure",
    "create_unknown_failure",
    "finalize_response",
    "is_finalized",
    "snapshot_from_json",
    "snapshot_to_json",
]
