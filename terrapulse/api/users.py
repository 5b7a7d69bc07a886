"""
User API endpoints.

Registration, login tracking, contributions and profile lookup. The caller
is taken from the caller header; anonymous callers cannot register.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from terrapulse.api.dependencies import get_caller, get_marketplace
from terrapulse.models.nft import NFT
from terrapulse.models.user import Contribution, User
from terrapulse.services.marketplace import Marketplace

router = APIRouter(prefix="/users", tags=["users"])


class RegisterRequest(BaseModel):
    """Request model for registering the caller."""

    username: str = Field(..., min_length=1, max_length=64, examples=["ranger_jo"])
    email: str | None = Field(default=None, examples=["jo@example.org"])


class RegisterResponse(BaseModel):
    """Response model for registration."""

    principal_id: str


class ContributionRequest(BaseModel):
    """Request model for recording a conservation contribution."""

    project_id: str = Field(..., min_length=1, examples=["borneo-orangutan-2026"])
    amount: int = Field(..., gt=0, description="Amount contributed")


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register_user(
    request: RegisterRequest,
    caller: Annotated[str, Depends(get_caller)],
    marketplace: Annotated[Marketplace, Depends(get_marketplace)],
) -> RegisterResponse:
    """
    Register the caller as a user.

    Fails with 409 if the caller is already registered.
    """
    principal_id = marketplace.register_user(caller, request.username, request.email)
    return RegisterResponse(principal_id=principal_id)


@router.post("/me/login", response_model=User)
async def touch_login(
    caller: Annotated[str, Depends(get_caller)],
    marketplace: Annotated[Marketplace, Depends(get_marketplace)],
) -> User:
    """Record a login and return the caller's profile."""
    return marketplace.touch_login(caller)


@router.post(
    "/me/contributions",
    response_model=Contribution,
    status_code=status.HTTP_201_CREATED,
)
async def record_contribution(
    request: ContributionRequest,
    caller: Annotated[str, Depends(get_caller)],
    marketplace: Annotated[Marketplace, Depends(get_marketplace)],
) -> Contribution:
    """Record a contribution to a conservation project."""
    return marketplace.record_contribution(caller, request.project_id, request.amount)


@router.get("/{principal_id}", response_model=User)
async def get_user_profile(
    principal_id: str,
    marketplace: Annotated[Marketplace, Depends(get_marketplace)],
) -> User:
    """Get a user's profile."""
    return marketplace.get_user_profile(principal_id)


@router.get("/{principal_id}/nfts", response_model=list[NFT])
async def get_user_nfts(
    principal_id: str,
    marketplace: Annotated[Marketplace, Depends(get_marketplace)],
) -> list[NFT]:
    """List the NFTs a principal currently owns, minted ones included."""
    return marketplace.get_nfts_by_owner(principal_id)
