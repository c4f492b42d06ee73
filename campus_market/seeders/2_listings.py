import asyncio
import random
from datetime import timedelta
from decimal import Decimal

from faker import Faker
from loguru import logger
from sqlmodel import select

from campus_market.db.database import async_session
from campus_market.models.enums.category import Category
from campus_market.models.enums.condition import Condition
from campus_market.models.listing_image import ListingImage
from campus_market.models.listing_model import Listing, utc_now
from campus_market.models.user_model import User
from campus_market.models.wishlist_entry_model import WishlistEntry  # noqa: F401

fake = Faker("en_IN")

UNSPLASH = "https://images.unsplash.com/{}?auto=format&fit=crop&q=80&w=1536"

# the storefront's sample catalog
SAMPLE_LISTINGS = [
    ("Data Structures and Algorithms Textbook", 850, Category.BOOKS, Condition.GOOD, True, "photo-1544383835-bda2bc66a55d"),
    ("TI-84 Plus Graphing Calculator", 1200, Category.ELECTRONICS, Condition.LIKE_NEW, False, "photo-1574492543172-b7be99fd7ba1"),
    ("IIIT-RKV Branded Hoodie - Large", 450, Category.CLOTHING, Condition.NEW, True, "photo-1620799140408-edc6dcb6d633"),
    ("Logitech G402 Gaming Mouse", 950, Category.ELECTRONICS, Condition.USED, False, "photo-1615663245857-ac93bb7c39e7"),
    ("Operating Systems Concepts Book", 600, Category.BOOKS, Condition.GOOD, True, "photo-1532012197267-da84d127e765"),
    ("Wooden Study Table", 1800, Category.FURNITURE, Condition.GOOD, True, "photo-1518455027359-f3f8164ba6bd"),
    ("Scientific Calculator - Casio FX-991ES", 750, Category.ELECTRONICS, Condition.LIKE_NEW, False, "photo-1587142369400-ce359326c2d5"),
    ("Complete Set of Programming Reference Books", 1500, Category.BOOKS, Condition.GOOD, True, "photo-1456513080510-7bf3a84b82f8"),
    ("Samsung Galaxy S20 - 128GB", 12000, Category.ELECTRONICS, Condition.USED, True, "photo-1610945415295-d9bbf067e59c"),
    ("Computer Networks Textbook", 550, Category.BOOKS, Condition.LIKE_NEW, False, "photo-1544391591-51cdca0a6c4e"),
    ("Desk Lamp with Adjustable Brightness", 350, Category.ELECTRONICS, Condition.GOOD, True, "photo-1534107414612-5c96a9f6a843"),
    ("Lab Coat - Size Medium", 200, Category.CLOTHING, Condition.NEW, False, "photo-1584308666744-24d5c474f2ae"),
]


async def seed_listings():
    async with async_session() as session:
        result = await session.execute(select(User))
        users: list[User] = list(result.scalars().all())
        if not users:
            logger.warning("No users found. Run the user seeder first.")
            return

        created = 0
        now = utc_now()
        for index, (title, price, category, condition, negotiable, photo) in enumerate(SAMPLE_LISTINGS):
            existing = await session.execute(select(Listing.id).where(Listing.title == title))
            if existing.scalar_one_or_none():
                logger.info("Listing '{}' already exists. Skipping.", title)
                continue

            listing = Listing(
                title=title,
                description=fake.paragraph(nb_sentences=3),
                category=category,
                condition=condition,
                price=Decimal(price),
                negotiable=negotiable,
                pickup_location=random.choice([None, "Library entrance", "Hostel 2 gate", "Main canteen"]),
                owner_id=random.choice(users).id,
                # later entries are newer, like the sample ids were
                created_at=now - timedelta(hours=len(SAMPLE_LISTINGS) - index),
                updated_at=now - timedelta(hours=len(SAMPLE_LISTINGS) - index),
            )
            listing.images = [
                ListingImage(url=UNSPLASH.format(photo), storage_path=f"seed/{photo}", position=0)
            ]
            session.add(listing)
            created += 1

        await session.commit()
        logger.info("Seeded {} listings", created)


if __name__ == "__main__":
    asyncio.run(seed_listings())
