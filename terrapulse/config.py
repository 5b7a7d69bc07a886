from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "TerraPulse"
    debug: bool = False

    database_url: str = "postgresql+asyncpg://localhost:5432/terrapulse"

    # Header carrying the authenticated caller principal
    caller_header: str = "X-Caller-Principal"

    # Restore state on startup and save it on shutdown
    persist_snapshots: bool = True

    # Number of stored snapshots kept after each save
    snapshot_retention: int = 10


settings = Settings()


# =============================================================================
# MARKETPLACE CONSTANTS
# =============================================================================

# One reward point per this many units of purchase price (truncating)
REWARDS_DIVISOR = 100

# Give up generating an NFT id after this many collisions
MAX_ID_ATTEMPTS = 16

# Digest prefix lengths, in bytes, before hex encoding
NFT_ID_BYTES = 8
TRANSACTION_HASH_BYTES = 16
