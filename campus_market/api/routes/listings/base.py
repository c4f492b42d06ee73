from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile, status

from campus_market.api.dependencies import get_identity, get_settings
from campus_market.api.routes.listings.forms import (
    get_staging_area,
    listing_form,
    listing_update_form,
)
from campus_market.core.config import Settings
from campus_market.core.firebase import Identity
from campus_market.schemas.listing_schema import (
    CatalogPage,
    ListingCardDetails,
    ListingForm,
    ListingQueryParameters,
    ListingUpdateForm,
    MyListings,
    SearchSuggestion,
    SoldUpdate,
)
from campus_market.services.catalog.query_engine import (
    CatalogCriteria,
    query_catalog,
    validate_criteria,
)
from campus_market.services.listing.listing_service import (
    ListingService,
    listing_card,
    listing_details,
)
from campus_market.services.storage.staging import ImageStagingArea

router = APIRouter()


# browse the catalog: search, facets, sort and pagination
@router.get(
    "/",
    response_model=CatalogPage,
    summary="Browse listings",
    description="Search, filter and sort listings that are still for sale. Sold listings are excluded.",
)
async def get_listings_by_params(
    *,
    params: Annotated[ListingQueryParameters, Query()],
    listing_service: ListingService = Depends(ListingService.get_dependency),
):
    criteria = CatalogCriteria(
        term=params.search or "",
        category=params.category,
        min_price=params.min_price,
        max_price=params.max_price,
        conditions=params.conditions,
        negotiable_only=params.negotiable_only,
        sort=params.sort,
    )
    # reject bad criteria before touching the store
    validate_criteria(criteria)

    listings = await listing_service.fetch_active_listings()
    result = query_catalog(listings, criteria)

    page = result.items[params.offset : params.offset + params.limit]
    return CatalogPage(
        total=result.total,
        limit=params.limit,
        offset=params.offset,
        items=[listing_card(listing) for listing in page],
    )


@router.get(
    "/search",
    response_model=List[SearchSuggestion],
    summary="Quick title search",
    description="Up to five active listings whose title contains the query. Queries shorter than three characters return nothing.",
)
async def search_listings(
    *,
    q: str = "",
    listing_service: ListingService = Depends(ListingService.get_dependency),
):
    return await listing_service.search_titles(q)


# current user's listings in profile/listings
@router.get(
    "/my",
    response_model=MyListings,
    summary="Get current user's listings",
    description="Fetch all listings created by the current user, split into active and sold.",
)
async def get_my_listings(
    *,
    identity: Identity = Depends(get_identity),
    listing_service: ListingService = Depends(ListingService.get_dependency),
):
    listings = await listing_service.fetch_owner_listings(identity.uid)
    return MyListings(
        active=[listing_card(listing) for listing in listings if not listing.sold],
        sold=[listing_card(listing) for listing in listings if listing.sold],
    )


@router.get(
    "/{listing_id}",
    response_model=ListingCardDetails,
    summary="Get a listing by ID",
    description="Listing page data: images, seller, contact link and wishlist state for signed in users.",
)
async def get_listing(
    *,
    listing_id: str,
    listing_service: ListingService = Depends(ListingService.get_dependency),
    settings: Settings = Depends(get_settings),
):
    listing = await listing_service.fetch_listing_by_id(listing_id)
    entry_id = await listing_service.find_wishlist_entry_id(listing.id)
    return listing_details(listing, entry_id, settings.default_phone_region)


@router.post(
    "/",
    response_model=ListingCardDetails,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new listing",
    description="Multipart form with the listing fields and one to five image files (5MB each).",
)
async def create_listing(
    *,
    identity: Identity = Depends(get_identity),
    form: ListingForm = Depends(listing_form),
    images: Optional[List[UploadFile]] = File(None),
    staging: ImageStagingArea = Depends(get_staging_area),
    listing_service: ListingService = Depends(ListingService.get_dependency),
    settings: Settings = Depends(get_settings),
):
    async with staging:
        staged = [await staging.acquire(upload) for upload in images or []]
        listing = await listing_service.create_listing(form, staged)

    return listing_details(listing, None, settings.default_phone_region)


@router.put(
    "/{listing_id}",
    response_model=ListingCardDetails,
    summary="Update an existing listing",
    description="Changes listing fields, drops images listed in remove_image_ids and appends uploaded ones. The listing must keep one to five images.",
)
async def update_listing(
    *,
    listing_id: str,
    identity: Identity = Depends(get_identity),
    form: ListingUpdateForm = Depends(listing_update_form),
    images: Optional[List[UploadFile]] = File(None),
    staging: ImageStagingArea = Depends(get_staging_area),
    listing_service: ListingService = Depends(ListingService.get_dependency),
    settings: Settings = Depends(get_settings),
):
    async with staging:
        staged = [await staging.acquire(upload) for upload in images or []]
        listing = await listing_service.update_listing(listing_id, form, staged)

    entry_id = await listing_service.find_wishlist_entry_id(listing.id)
    return listing_details(listing, entry_id, settings.default_phone_region)


@router.put(
    "/{listing_id}/sold",
    response_model=ListingCardDetails,
    summary="Mark a listing as sold or available",
    description="Sold listings leave the catalog but stay on the seller's profile.",
)
async def set_listing_sold(
    *,
    listing_id: str,
    update: SoldUpdate,
    identity: Identity = Depends(get_identity),
    listing_service: ListingService = Depends(ListingService.get_dependency),
    settings: Settings = Depends(get_settings),
):
    listing = await listing_service.set_sold(listing_id, update.sold)
    entry_id = await listing_service.find_wishlist_entry_id(listing.id)
    return listing_details(listing, entry_id, settings.default_phone_region)


@router.delete(
    "/{listing_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a listing",
    description="Removes the listing together with its images and wishlist entries.",
)
async def delete_listing(
    *,
    listing_id: str,
    identity: Identity = Depends(get_identity),
    listing_service: ListingService = Depends(ListingService.get_dependency),
):
    await listing_service.delete_listing(listing_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
