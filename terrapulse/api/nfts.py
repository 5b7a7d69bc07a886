"""
NFT API endpoints.

Minting, lookup and owner-to-owner transfer.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from terrapulse.api.dependencies import get_caller, get_marketplace
from terrapulse.models.nft import NFT, EntityType, NFTMetadata
from terrapulse.services.marketplace import Marketplace

router = APIRouter(prefix="/nfts", tags=["nfts"])


class MintRequest(BaseModel):
    """Request model for minting an NFT."""

    metadata: NFTMetadata
    entity_type: EntityType = Field(
        ...,
        description="Tagged by `kind`: wildlife, hotel or reserve",
        examples=[{"kind": "wildlife", "species": "Pongo pygmaeus", "category": "mammal"}],
    )


class MintResponse(BaseModel):
    """Response model for minting."""

    nft_id: str


class TransferRequest(BaseModel):
    """Request model for transferring an NFT."""

    recipient: str = Field(..., min_length=1, description="Principal receiving the NFT")


@router.post("", response_model=MintResponse, status_code=status.HTTP_201_CREATED)
async def mint_nft(
    request: MintRequest,
    caller: Annotated[str, Depends(get_caller)],
    marketplace: Annotated[Marketplace, Depends(get_marketplace)],
) -> MintResponse:
    """Mint a new NFT owned by the caller. It starts unlisted."""
    nft_id = marketplace.mint_nft(caller, request.metadata, request.entity_type)
    return MintResponse(nft_id=nft_id)


@router.get("/{nft_id}", response_model=NFT)
async def get_nft(
    nft_id: str,
    marketplace: Annotated[Marketplace, Depends(get_marketplace)],
) -> NFT:
    """Get an NFT with its full transaction history."""
    return marketplace.get_nft(nft_id)


@router.post("/{nft_id}/transfer", status_code=status.HTTP_204_NO_CONTENT)
async def transfer_nft(
    nft_id: str,
    request: TransferRequest,
    caller: Annotated[str, Depends(get_caller)],
    marketplace: Annotated[Marketplace, Depends(get_marketplace)],
) -> None:
    """Give an NFT to another principal. Any active listing is withdrawn."""
    marketplace.transfer_nft(caller, nft_id, request.recipient)
