from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from sqlmodel import Field, SQLModel

from campus_market.models.enums.category import ALL_CATEGORIES, Category
from campus_market.models.enums.condition import Condition
from campus_market.models.enums.sort_order import SortOrder


# Basic schema for listing data, shared by the table model and the forms
class ListingBase(SQLModel):
    title: str = Field(min_length=5, max_length=255)
    description: str = Field(min_length=10, max_length=5000)
    category: Category
    condition: Condition
    price: Decimal = Field(max_digits=10, decimal_places=2, gt=0)
    negotiable: bool = Field(default=False)
    pickup_location: Optional[str] = Field(default=None, max_length=255)


# multipart form sent together with the image files on creation
class ListingForm(ListingBase):
    model_config = ConfigDict(extra="forbid")


# multipart form for updates, every field optional
class ListingUpdateForm(BaseModel):
    model_config = ConfigDict(extra="forbid")
    title: Optional[str] = Field(default=None, min_length=5, max_length=255)
    description: Optional[str] = Field(default=None, min_length=10, max_length=5000)
    category: Optional[Category] = None
    condition: Optional[Condition] = None
    price: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2, gt=0)
    negotiable: Optional[bool] = None
    pickup_location: Optional[str] = Field(default=None, max_length=255)
    # ids of images to drop from the listing
    remove_image_ids: List[str] = Field(default_factory=list)


class SoldUpdate(BaseModel):
    sold: bool


class ListingImageRead(SQLModel):
    id: str
    url: str
    position: int


# Seller info schema
# this is used to display seller info on the listing page
class SellerInfoCard(SQLModel):
    id: str
    full_name: Optional[str] = None
    hostel_details: Optional[str] = None


# Schema for listing cards in the product grid, the profile and the wishlist
class ListingCard(SQLModel):
    id: str
    owner_id: str
    title: str
    price: Decimal
    category: Category
    condition: Condition
    negotiable: bool
    pickup_location: Optional[str] = None
    sold: bool
    image_url: Optional[str] = None  # title image
    created_at: datetime
    updated_at: Optional[datetime] = None


# Schema for the listing page
class ListingCardDetails(ListingCard):
    description: str
    images: List[ListingImageRead]
    seller: Optional[SellerInfoCard] = None
    contact_url: Optional[str] = None  # outbound chat link to the seller
    liked: bool = False
    wishlist_entry_id: Optional[str] = None


class CatalogPage(BaseModel):
    total: int
    limit: int
    offset: int
    items: List[ListingCard]


class MyListings(BaseModel):
    active: List[ListingCard]
    sold: List[ListingCard]


class SearchSuggestion(BaseModel):
    id: str
    title: str


class ListingQueryParameters(BaseModel):
    # kept loose on purpose, the catalog engine validates and names bad fields
    search: Optional[str] = None
    category: str = ALL_CATEGORIES
    min_price: Optional[str] = None
    max_price: Optional[str] = None
    conditions: List[str] = Field(default_factory=list)
    negotiable_only: bool = False
    sort: str = SortOrder.NEWEST.value

    # pagination is applied on the engine output
    limit: int = Field(default=20, ge=1, le=100)
    offset: int = Field(default=0, ge=0)
