from datetime import datetime, timezone
from typing import TYPE_CHECKING, List, Optional
from uuid import uuid4

from sqlalchemy import TIMESTAMP, Column
from sqlmodel import Field, Relationship

from campus_market.schemas.listing_schema import ListingBase

if TYPE_CHECKING:
    from .listing_image import ListingImage
    from .user_model import User
    from .wishlist_entry_model import WishlistEntry


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Listing(ListingBase, table=True):
    __tablename__ = "listings"
    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    owner_id: str = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    sold: bool = Field(default=False, index=True)

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(TIMESTAMP(timezone=True), nullable=False, index=True),
    )
    # set by the service on every mutation
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(TIMESTAMP(timezone=True), nullable=False),
    )

    # Relationships
    images: List["ListingImage"] = Relationship(
        back_populates="listing",
        cascade_delete=True,
        sa_relationship_kwargs={"order_by": "ListingImage.position"},
    )

    wishlist_entries: List["WishlistEntry"] = Relationship(
        back_populates="listing",
        cascade_delete=True,
    )

    owner: Optional["User"] = Relationship(back_populates="listings")
