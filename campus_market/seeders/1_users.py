import asyncio

from faker import Faker
from loguru import logger
from sqlmodel import select

from campus_market.core.config import config
from campus_market.db.database import async_session, init_db
from campus_market.models import listing_image, listing_model, wishlist_entry_model  # noqa: F401
from campus_market.models.user_model import User

fake = Faker("en_IN")
NUM_USERS = 10


async def seed_users():
    await init_db()
    async with async_session() as session:
        users = []

        for index in range(NUM_USERS):
            email = f"{fake.unique.user_name()}{config.campus_email_domain}"

            # Check if user already exists
            result = await session.execute(select(User).where(User.email == email))
            if result.scalar_one_or_none():
                logger.info("User with email {} already exists. Skipping.", email)
                continue

            user = User(
                id=f"seed-user-{index}",
                email=email,
                full_name=fake.name(),
                student_id=f"R{fake.unique.random_number(digits=6, fix_len=True)}",
                phone_number=f"+9198{fake.random_number(digits=8, fix_len=True)}",
                hostel_details=f"Hostel {fake.random_int(1, 6)}, Room {fake.random_int(100, 450)}",
            )
            users.append(user)
            session.add(user)

        await session.commit()
        logger.info("Seeded {} users", len(users))


if __name__ == "__main__":
    asyncio.run(seed_users())
