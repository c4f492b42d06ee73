from typing import List, Optional

from fastapi import Depends
from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlmodel import select

from campus_market.api.dependencies import get_async_session, get_optional_identity
from campus_market.core.firebase import Identity
from campus_market.db.database import commit_or_raise
from campus_market.models.listing_model import Listing
from campus_market.models.user_model import User
from campus_market.models.wishlist_entry_model import WishlistEntry
from campus_market.schemas.wishlist_schema import WishlistEntryRead
from campus_market.services.exceptions import (
    DuplicateWishlistEntry,
    NotAuthenticated,
    NotFound,
    PermissionDenied,
)
from campus_market.services.listing.listing_service import listing_card


def wishlist_entry_read(entry: WishlistEntry) -> WishlistEntryRead:
    return WishlistEntryRead(
        id=entry.id,
        listing_id=entry.listing_id,
        created_at=entry.created_at,
        listing=listing_card(entry.listing),
    )


class WishlistService:
    def __init__(self, session: AsyncSession, identity: Optional[Identity] = None) -> None:
        self.session = session
        self.identity = identity

    def _require_identity(self) -> Identity:
        if self.identity is None:
            raise NotAuthenticated("User not authenticated.")
        return self.identity

    def _entry_query(self):
        return select(WishlistEntry).options(
            selectinload(WishlistEntry.listing).selectinload(Listing.images)
        )

    async def fetch_wishlist(self) -> List[WishlistEntry]:
        """Returns the caller's wishlist, most recently added first."""
        identity = self._require_identity()
        result = await self.session.execute(
            self._entry_query()
            .where(WishlistEntry.user_id == identity.uid)
            .order_by(WishlistEntry.created_at.desc(), WishlistEntry.id.desc())
        )
        return list(result.scalars().all())

    async def add_wishlist_entry(self, listing_id: str) -> WishlistEntry:
        identity = self._require_identity()

        if await self.session.get(User, identity.uid) is None:
            raise NotFound("User profile not found. Register before using the wishlist.")

        if await self.session.get(Listing, listing_id) is None:
            raise NotFound(f"Listing with ID {listing_id} not found.")

        # check if listing is already on the wishlist
        existing = await self.session.execute(
            select(WishlistEntry.id).where(
                WishlistEntry.user_id == identity.uid,
                WishlistEntry.listing_id == listing_id,
            )
        )
        if existing.scalar_one_or_none() is not None:
            raise DuplicateWishlistEntry(
                f"Listing with ID {listing_id} is already in your wishlist."
            )

        entry = WishlistEntry(user_id=identity.uid, listing_id=listing_id)
        self.session.add(entry)
        try:
            await self.session.commit()
        except IntegrityError as e:
            # a concurrent request added the same pair first
            await self.session.rollback()
            raise DuplicateWishlistEntry(
                f"Listing with ID {listing_id} is already in your wishlist."
            ) from e

        logger.info("User {} added listing {} to the wishlist", identity.uid, listing_id)
        result = await self.session.execute(
            self._entry_query()
            .where(WishlistEntry.id == entry.id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().one()

    async def remove_wishlist_entry(self, entry_id: str) -> None:
        """Removing an entry that is already gone succeeds."""
        identity = self._require_identity()

        entry = await self.session.get(WishlistEntry, entry_id)
        if entry is None:
            return

        if entry.user_id != identity.uid:
            raise PermissionDenied("You are not authorized to change this wishlist.")

        await self.session.delete(entry)
        await commit_or_raise(self.session, "remove the wishlist entry")
        logger.info("User {} removed wishlist entry {}", identity.uid, entry_id)

    @classmethod
    async def get_dependency(
        cls,
        session: AsyncSession = Depends(get_async_session),
        identity: Optional[Identity] = Depends(get_optional_identity),
    ) -> "WishlistService":
        return cls(session, identity)
