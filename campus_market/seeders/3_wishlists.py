import asyncio
import random

from loguru import logger
from sqlmodel import select

from campus_market.db.database import async_session
from campus_market.models.listing_image import ListingImage  # noqa: F401
from campus_market.models.listing_model import Listing
from campus_market.models.user_model import User
from campus_market.models.wishlist_entry_model import WishlistEntry

MAX_ENTRIES_PER_USER = 4


async def seed_wishlists():
    async with async_session() as session:
        users: list[User] = list((await session.execute(select(User))).scalars().all())
        listings: list[Listing] = list((await session.execute(select(Listing))).scalars().all())

        if not listings:
            logger.warning("No listings found. Run the listing seeder first.")
            return

        existing = await session.execute(select(WishlistEntry.user_id, WishlistEntry.listing_id))
        taken = {(row.user_id, row.listing_id) for row in existing.all()}

        total = 0
        for user in users:
            # users don't wishlist their own listings
            candidates = [listing for listing in listings if listing.owner_id != user.id]
            for listing in random.sample(candidates, min(MAX_ENTRIES_PER_USER, len(candidates))):
                if (user.id, listing.id) in taken:
                    continue
                session.add(WishlistEntry(user_id=user.id, listing_id=listing.id))
                taken.add((user.id, listing.id))
                total += 1

        await session.commit()
        logger.info("Seeded {} wishlist entries", total)


if __name__ == "__main__":
    asyncio.run(seed_wishlists())
