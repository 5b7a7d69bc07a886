from terrapulse.api.health import router as health_router
from terrapulse.api.marketplace import router as marketplace_router
from terrapulse.api.nfts import router as nfts_router
from terrapulse.api.users import router as users_router

__all__ = [
    "health_router",
    "marketplace_router",
    "nfts_router",
    "users_router",
]
