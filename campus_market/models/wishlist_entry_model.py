from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional
from uuid import uuid4

from sqlalchemy import TIMESTAMP, Column, UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from .listing_model import Listing
    from .user_model import User


class WishlistEntry(SQLModel, table=True):
    __tablename__ = "wishlist_entries"
    __table_args__ = (
        UniqueConstraint("user_id", "listing_id", name="uq_wishlist_user_listing"),
    )

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    listing_id: str = Field(foreign_key="listings.id", index=True, ondelete="CASCADE")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(TIMESTAMP(timezone=True), nullable=False),
    )

    user: Optional["User"] = Relationship(back_populates="wishlist_entries")
    listing: Optional["Listing"] = Relationship(back_populates="wishlist_entries")
