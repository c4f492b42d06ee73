from typing import Callable, List

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from loguru import logger
from sqlalchemy import select

from campus_market.core.config import Settings
from campus_market.db.database import async_session
from campus_market.models.listing_image import ListingImage
from campus_market.models.listing_model import Listing
from campus_market.services.storage.staging import sweep_staging_dir


async def sweep_abandoned_uploads(settings: Settings) -> int:
    """Remove staged image files older than the configured age."""
    removed = sweep_staging_dir(settings.staging_dir, settings.staging_max_age_minutes)
    if removed:
        logger.info("Removed {} abandoned staged images", removed)
    return removed


async def report_imageless_listings(session_factory: Callable = async_session) -> List[str]:
    """
    Listings must always carry at least one image. Rows that lost theirs
    outside the API are reported for the operator, never fixed automatically.
    """
    async with session_factory() as session:
        result = await session.execute(
            select(Listing.id).where(
                ~select(ListingImage.id)
                .where(ListingImage.listing_id == Listing.id)
                .exists()
            )
        )
        listing_ids = list(result.scalars().all())

    if listing_ids:
        logger.warning(
            "Found {} listings without images: {}", len(listing_ids), listing_ids
        )
    return listing_ids


def register_maintenance_jobs(scheduler: AsyncIOScheduler, settings: Settings) -> None:
    scheduler.add_job(
        sweep_abandoned_uploads,
        "interval",
        minutes=settings.staging_max_age_minutes,
        args=[settings],
        id="sweep_abandoned_uploads",
        replace_existing=True,
    )
    scheduler.add_job(
        report_imageless_listings,
        "interval",
        hours=6,
        id="report_imageless_listings",
        replace_existing=True,
    )
