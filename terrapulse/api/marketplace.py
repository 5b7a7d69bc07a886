"""
Marketplace API endpoints.

The listing book: list, delist, purchase and browse NFTs for sale.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from terrapulse.api.dependencies import get_caller, get_marketplace
from terrapulse.services.marketplace import Marketplace

router = APIRouter(prefix="/marketplace", tags=["marketplace"])


class ListingRequest(BaseModel):
    """Request model for listing an NFT."""

    nft_id: str = Field(..., min_length=1)
    price: int = Field(..., ge=0, description="Fixed asking price")


class ListingResponse(BaseModel):
    """A single active listing."""

    nft_id: str
    price: int


class ListingsResponse(BaseModel):
    """Response model for the active listings."""

    listings: list[ListingResponse]
    count: int


@router.get("/listings", response_model=ListingsResponse)
async def get_marketplace_listings(
    marketplace: Annotated[Marketplace, Depends(get_marketplace)],
) -> ListingsResponse:
    """
    List every NFT currently for sale.

    Order is not guaranteed.
    """
    listings = [
        ListingResponse(nft_id=nft_id, price=price)
        for nft_id, price in marketplace.get_marketplace_listings()
    ]
    return ListingsResponse(listings=listings, count=len(listings))


@router.post(
    "/listings",
    response_model=ListingResponse,
    status_code=status.HTTP_201_CREATED,
)
async def list_nft_for_sale(
    request: ListingRequest,
    caller: Annotated[str, Depends(get_caller)],
    marketplace: Annotated[Marketplace, Depends(get_marketplace)],
) -> ListingResponse:
    """
    List an NFT the caller owns.

    Listing an already listed NFT replaces its price.
    """
    marketplace.list_nft_for_sale(caller, request.nft_id, request.price)
    return ListingResponse(nft_id=request.nft_id, price=request.price)


@router.delete("/listings/{nft_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delist_nft(
    nft_id: str,
    caller: Annotated[str, Depends(get_caller)],
    marketplace: Annotated[Marketplace, Depends(get_marketplace)],
) -> None:
    """Withdraw an NFT the caller owns from sale."""
    marketplace.delist_nft(caller, nft_id)


@router.post("/listings/{nft_id}/purchase", status_code=status.HTTP_204_NO_CONTENT)
async def purchase_nft(
    nft_id: str,
    caller: Annotated[str, Depends(get_caller)],
    marketplace: Annotated[Marketplace, Depends(get_marketplace)],
) -> None:
    """
    Buy a listed NFT at its asking price.

    Payment is simulated. The buyer earns one reward point per 100 paid.
    """
    marketplace.purchase_nft(caller, nft_id)
