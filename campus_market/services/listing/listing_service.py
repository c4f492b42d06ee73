import time
from typing import List, Optional, Sequence

from fastapi import Depends
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlmodel import select

from campus_market.api.dependencies import get_async_session, get_optional_identity
from campus_market.core.config import Settings, config
from campus_market.core.firebase import Identity
from campus_market.db.database import commit_or_raise
from campus_market.models.listing_image import ListingImage
from campus_market.models.listing_model import Listing, utc_now
from campus_market.models.user_model import User
from campus_market.models.wishlist_entry_model import WishlistEntry
from campus_market.schemas.listing_schema import (
    ListingCard,
    ListingCardDetails,
    ListingForm,
    ListingImageRead,
    ListingUpdateForm,
    SearchSuggestion,
    SellerInfoCard,
)
from campus_market.services.contact import build_whatsapp_link
from campus_market.services.exceptions import (
    FieldValidationError,
    NotAuthenticated,
    NotFound,
    PermissionDenied,
    StoreError,
)
from campus_market.services.storage.image_store import ImageStore, get_image_store
from campus_market.services.storage.staging import StagedImage


def escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def listing_card(listing: Listing) -> ListingCard:
    return ListingCard(
        id=listing.id,
        owner_id=listing.owner_id,
        title=listing.title,
        price=listing.price,
        category=listing.category,
        condition=listing.condition,
        negotiable=listing.negotiable,
        pickup_location=listing.pickup_location,
        sold=listing.sold,
        image_url=listing.images[0].url if listing.images else None,
        created_at=listing.created_at,
        updated_at=listing.updated_at,
    )


def listing_details(
    listing: Listing,
    wishlist_entry_id: Optional[str] = None,
    default_region: str = "IN",
) -> ListingCardDetails:
    seller = None
    contact_url = None
    if listing.owner is not None:
        seller = SellerInfoCard(
            id=listing.owner.id,
            full_name=listing.owner.full_name,
            hostel_details=listing.owner.hostel_details,
        )
        contact_url = build_whatsapp_link(
            listing.owner.phone_number, listing.title, default_region
        )

    return ListingCardDetails(
        **listing_card(listing).model_dump(),
        description=listing.description,
        images=[
            ListingImageRead(id=image.id, url=image.url, position=image.position)
            for image in listing.images
        ],
        seller=seller,
        contact_url=contact_url,
        liked=wishlist_entry_id is not None,
        wishlist_entry_id=wishlist_entry_id,
    )


class ListingService:
    def __init__(
        self,
        session: AsyncSession,
        identity: Optional[Identity] = None,
        image_store: Optional[ImageStore] = None,
        settings: Settings = config,
    ) -> None:
        self.session = session
        self.identity = identity
        self.image_store = image_store or ImageStore()
        self.settings = settings

    def _require_identity(self) -> Identity:
        if self.identity is None:
            raise NotAuthenticated("User not authenticated.")
        return self.identity

    def _listing_query(self):
        return select(Listing).options(
            selectinload(Listing.images),
            selectinload(Listing.owner),
        )

    async def fetch_active_listings(self) -> List[Listing]:
        """
        Returns every listing that is not sold, with images and owner loaded.
        Ordering is left to the catalog engine.
        """
        result = await self.session.execute(
            self._listing_query().where(Listing.sold.is_(False))
        )
        return list(result.scalars().all())

    async def fetch_listing_by_id(self, listing_id: str) -> Listing:
        result = await self.session.execute(
            self._listing_query()
            .where(Listing.id == listing_id)
            .execution_options(populate_existing=True)
        )
        listing = result.scalars().one_or_none()
        if listing is None:
            raise NotFound(f"Listing with ID {listing_id} not found.")
        return listing

    async def fetch_owner_listings(self, owner_id: str) -> List[Listing]:
        """
        Returns all listings posted by a user, sold ones included, newest first.

        :param owner_id: ID of the seller.
        """
        result = await self.session.execute(
            self._listing_query()
            .where(Listing.owner_id == owner_id)
            .order_by(Listing.created_at.desc(), Listing.id.desc())
        )
        return list(result.scalars().all())

    async def search_titles(
        self, term: Optional[str], limit: Optional[int] = None
    ) -> List[SearchSuggestion]:
        """Quick title lookup for the search bar, active listings only."""
        term = (term or "").strip()
        if len(term) < self.settings.search_min_chars:
            return []

        result = await self.session.execute(
            select(Listing.id, Listing.title)
            .where(
                Listing.sold.is_(False),
                Listing.title.ilike(f"%{escape_like(term)}%", escape="\\"),
            )
            .order_by(Listing.created_at.desc(), Listing.id.desc())
            .limit(limit or self.settings.search_suggestion_limit)
        )
        return [SearchSuggestion(id=row.id, title=row.title) for row in result.all()]

    def _check_image_count(self, count: int) -> None:
        if count < 1:
            raise FieldValidationError("images", "Please upload at least one image")
        if count > self.settings.max_listing_images:
            raise FieldValidationError(
                "images", f"Maximum {self.settings.max_listing_images} images allowed"
            )

    async def _upload_images(
        self, listing_id: str, images: Sequence[StagedImage], start_position: int
    ) -> List[ListingImage]:
        uploaded: List[ListingImage] = []
        for index, staged in enumerate(images):
            path = f"products/{listing_id}/{int(time.time() * 1000)}-{start_position + index}"
            try:
                url = await self.image_store.upload(path, staged)
            except StoreError:
                self._report_orphans(listing_id, uploaded)
                raise
            uploaded.append(
                ListingImage(url=url, storage_path=path, position=start_position + index)
            )
        return uploaded

    def _report_orphans(self, listing_id: str, images: Sequence[ListingImage]) -> None:
        # nothing references these blobs, the operator cleans them up
        if images:
            logger.warning(
                "Orphaned blobs for listing {}: {}",
                listing_id,
                [image.storage_path for image in images],
            )

    async def _delete_blobs(self, paths: Sequence[str]) -> None:
        for path in paths:
            try:
                await self.image_store.delete(path)
            except StoreError as e:
                logger.warning("Could not delete blob {}: {}", path, e)

    async def _get_owned_listing(self, listing_id: str, *extra_options) -> Listing:
        identity = self._require_identity()

        result = await self.session.execute(
            self._listing_query().options(*extra_options).where(Listing.id == listing_id)
        )
        listing = result.scalars().one_or_none()
        if listing is None:
            raise NotFound(f"Listing with ID {listing_id} not found.")

        # only the seller may change a listing
        if listing.owner_id != identity.uid:
            raise PermissionDenied("You are not authorized to modify this listing.")
        return listing

    async def create_listing(
        self, data: ListingForm, images: Sequence[StagedImage]
    ) -> Listing:
        """
        Uploads the images, then stores the listing and its image rows in one
        commit so a listing without images is never persisted.
        """
        identity = self._require_identity()
        self._check_image_count(len(images))

        owner = await self.session.get(User, identity.uid)
        if owner is None:
            raise NotFound("User profile not found. Register before creating a listing.")

        listing = Listing(**data.model_dump(), owner_id=owner.id)
        listing.images = await self._upload_images(listing.id, images, start_position=0)

        self.session.add(listing)
        try:
            await commit_or_raise(self.session, "create the listing")
        except StoreError:
            self._report_orphans(listing.id, listing.images)
            raise
        logger.info("User {} created listing {}", owner.id, listing.id)

        return await self.fetch_listing_by_id(listing.id)

    async def update_listing(
        self,
        listing_id: str,
        data: ListingUpdateForm,
        new_images: Sequence[StagedImage] = (),
    ) -> Listing:
        listing = await self._get_owned_listing(listing_id)

        current = {image.id: image for image in listing.images}
        unknown = [image_id for image_id in data.remove_image_ids if image_id not in current]
        if unknown:
            raise FieldValidationError(
                "remove_image_ids", f"Images {', '.join(unknown)} do not belong to this listing"
            )

        removed_ids = set(data.remove_image_ids)
        removed = [image for image in listing.images if image.id in removed_ids]
        kept = [image for image in listing.images if image.id not in removed_ids]
        self._check_image_count(len(kept) + len(new_images))

        update_data = data.model_dump(exclude_unset=True, exclude={"remove_image_ids"})
        for key, value in update_data.items():
            # only the pickup location may be cleared
            if value is None and key != "pickup_location":
                continue
            setattr(listing, key, value)

        added = await self._upload_images(listing.id, new_images, start_position=len(kept))

        # removed rows are deleted as orphans on commit
        listing.images = kept + added
        for position, image in enumerate(listing.images):
            image.position = position
        listing.updated_at = utc_now()

        self.session.add(listing)
        try:
            await commit_or_raise(self.session, "update the listing")
        except StoreError:
            self._report_orphans(listing.id, added)
            raise
        logger.info("Listing {} updated ({} images removed, {} added)", listing.id, len(removed), len(added))

        await self._delete_blobs([image.storage_path for image in removed])
        return await self.fetch_listing_by_id(listing.id)

    async def set_sold(self, listing_id: str, sold: bool) -> Listing:
        listing = await self._get_owned_listing(listing_id)
        listing.sold = sold
        listing.updated_at = utc_now()

        self.session.add(listing)
        await commit_or_raise(self.session, "update the listing")
        logger.info("Listing {} marked {}", listing.id, "sold" if sold else "available")
        return await self.fetch_listing_by_id(listing.id)

    async def delete_listing(self, listing_id: str) -> None:
        """Deletes the listing, its image rows and wishlist entries."""
        listing = await self._get_owned_listing(
            listing_id, selectinload(Listing.wishlist_entries)
        )
        paths = [image.storage_path for image in listing.images]

        await self.session.delete(listing)
        await commit_or_raise(self.session, "delete the listing")
        logger.info("Listing {} deleted", listing_id)

        await self._delete_blobs(paths)

    async def find_wishlist_entry_id(self, listing_id: str) -> Optional[str]:
        """ID of the caller's wishlist entry for a listing, if any."""
        if self.identity is None:
            return None
        result = await self.session.execute(
            select(WishlistEntry.id).where(
                WishlistEntry.user_id == self.identity.uid,
                WishlistEntry.listing_id == listing_id,
            )
        )
        return result.scalar_one_or_none()

    @classmethod
    async def get_dependency(
        cls,
        session: AsyncSession = Depends(get_async_session),
        identity: Optional[Identity] = Depends(get_optional_identity),
        image_store: ImageStore = Depends(get_image_store),
    ) -> "ListingService":
        return cls(session, identity, image_store)
