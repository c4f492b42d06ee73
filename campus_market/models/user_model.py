from datetime import datetime, timezone
from typing import TYPE_CHECKING, List

from sqlalchemy import TIMESTAMP, Column
from sqlmodel import Field, Relationship

from campus_market.schemas.user_schema import UserBase

if TYPE_CHECKING:
    from .listing_model import Listing
    from .wishlist_entry_model import WishlistEntry


class User(UserBase, table=True):
    __tablename__ = "users"

    # matches the identity provider's uid
    id: str = Field(primary_key=True, max_length=128)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(TIMESTAMP(timezone=True), nullable=False),
    )

    # Relationships
    listings: List["Listing"] = Relationship(
        back_populates="owner",
        cascade_delete=True,
    )

    wishlist_entries: List["WishlistEntry"] = Relationship(
        back_populates="user",
        cascade_delete=True,
    )
