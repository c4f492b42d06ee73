from typing import List

from fastapi import APIRouter, Depends, Response, status

from campus_market.api.dependencies import get_identity
from campus_market.core.firebase import Identity
from campus_market.schemas.wishlist_schema import WishlistEntryRead
from campus_market.services.wishlist.wishlist_service import (
    WishlistService,
    wishlist_entry_read,
)

router = APIRouter(prefix="/wishlist", tags=["Wishlist"])


@router.get(
    "/",
    response_model=List[WishlistEntryRead],
    summary="Get wishlist of current user",
    description="Fetch all wishlist entries of the current user, most recent first.",
)
async def get_wishlist(
    *,
    identity: Identity = Depends(get_identity),
    wishlist_service: WishlistService = Depends(WishlistService.get_dependency),
):
    entries = await wishlist_service.fetch_wishlist()
    return [wishlist_entry_read(entry) for entry in entries]


@router.post(
    "/{listing_id}",
    response_model=WishlistEntryRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add a listing to the wishlist",
    description="Fails with 409 when the listing is already on the wishlist.",
)
async def add_to_wishlist(
    *,
    listing_id: str,
    identity: Identity = Depends(get_identity),
    wishlist_service: WishlistService = Depends(WishlistService.get_dependency),
):
    entry = await wishlist_service.add_wishlist_entry(listing_id)
    return wishlist_entry_read(entry)


@router.delete(
    "/{entry_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a wishlist entry",
)
async def remove_from_wishlist(
    *,
    entry_id: str,
    identity: Identity = Depends(get_identity),
    wishlist_service: WishlistService = Depends(WishlistService.get_dependency),
):
    await wishlist_service.remove_wishlist_entry(entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
