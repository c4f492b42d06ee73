from uuid import uuid4

from sqlmodel import Field, Relationship, SQLModel

from campus_market.models.listing_model import Listing


class ListingImageBase(SQLModel):
    url: str = Field(max_length=1024)
    # object store path, needed to delete the blob later
    storage_path: str = Field(max_length=512)
    position: int = Field(default=0, ge=0)


class ListingImage(ListingImageBase, table=True):
    __tablename__ = "listing_images"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    listing_id: str = Field(foreign_key="listings.id", index=True, ondelete="CASCADE")

    listing: Listing = Relationship(back_populates="images")
