import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from terrapulse.api import health_router, marketplace_router, nfts_router, users_router
from terrapulse.api.dependencies import get_marketplace
from terrapulse.config import settings
from terrapulse.db.database import async_session_factory, init_db
from terrapulse.db.operations import load_latest_snapshot, prune_snapshots, save_snapshot
from terrapulse.models.failure import KnownError, create_known_failure, create_unknown_failure

logger = logging.getLogger(__name__)


async def restore_state() -> None:
    """Load the newest stored snapshot into the marketplace, if any."""
    async with async_session_factory() as session:
        snapshot = await load_latest_snapshot(session)
    if snapshot is None:
        logger.info("NO_SNAPSHOT_FOUND")
        return
    get_marketplace().store.restore(snapshot)


async def persist_state() -> None:
    """Save the current marketplace state and prune old snapshots."""
    snapshot = get_marketplace().store.snapshot()
    async with async_session_factory() as session:
        await save_snapshot(session, snapshot)
        await prune_snapshots(session, keep=settings.snapshot_retention)
        await session.commit()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    await init_db()
    if settings.persist_snapshots:
        await restore_state()
    yield
    if settings.persist_snapshots:
        await persist_state()


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("terrapulse"),
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(marketplace_router)
app.include_router(nfts_router)
app.include_router(users_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(KnownError)
async def known_error_handler(_request: Request, exc: KnownError) -> JSONResponse:
    """Typed errors become classified known failures with their own status."""
    logger.info(
        "KNOWN_FAILURE",
        extra={"failure_kind": exc.kind.value, "status_code": exc.status_code},
    )
    response = create_known_failure(exc)
    return JSONResponse(status_code=exc.status_code, content=response.model_dump(mode="json"))


@app.exception_handler(Exception)
async def unknown_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Anything else becomes a classified unknown failure, never a raw 500."""
    logger.exception("UNKNOWN_FAILURE")
    response = create_unknown_failure(exc)
    return JSONResponse(status_code=500, content=response.model_dump(mode="json"))
