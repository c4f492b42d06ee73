from datetime import datetime

from sqlmodel import SQLModel

from campus_market.schemas.listing_schema import ListingCard


class WishlistEntryRead(SQLModel):
    id: str
    listing_id: str
    created_at: datetime
    listing: ListingCard
