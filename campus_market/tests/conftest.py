import os

os.environ["TESTING"] = "1"
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from loguru import logger
from sqlalchemy import StaticPool
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from campus_market.api.dependencies import (
    get_async_session,
    get_optional_identity,
    get_settings,
)
from campus_market.api.main import app
from campus_market.core.config import Settings
from campus_market.core.firebase import Identity
from campus_market.models import (  # noqa: F401
    listing_image,
    listing_model,
    user_model,
    wishlist_entry_model,
)
from campus_market.models.enums.category import Category
from campus_market.models.enums.condition import Condition
from campus_market.models.listing_image import ListingImage
from campus_market.models.listing_model import Listing
from campus_market.models.user_model import User
from campus_market.services.exceptions import StoreError
from campus_market.services.storage.image_store import get_image_store

DATABASE_URL = "sqlite+aiosqlite:///:memory:"

SELLER = Identity(uid="seller-uid", email="seller@iiitrkvalley.ac.in")
BUYER = Identity(uid="buyer-uid", email="buyer@iiitrkvalley.ac.in")

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class FakeImageStore:
    """Keeps uploaded blobs in memory instead of the storage bucket."""

    def __init__(self, fail_on_upload: int | None = None) -> None:
        self.blobs: dict[str, bytes] = {}
        self.deleted: list[str] = []
        # 1-based number of the upload that raises, None never fails
        self.fail_on_upload = fail_on_upload
        self.uploads = 0

    async def upload(self, path, image) -> str:
        self.uploads += 1
        if self.uploads == self.fail_on_upload:
            raise StoreError(f"Failed to upload {image.filename}.")
        self.blobs[path] = image.path.read_bytes()
        return f"https://storage.test/{path}"

    async def delete(self, path) -> None:
        self.deleted.append(path)
        self.blobs.pop(path, None)


class CurrentIdentity:
    """Whoever the next request is signed in as, None for anonymous."""

    value: Identity | None = None


@pytest_asyncio.fixture()
async def session_factory():
    engine = create_async_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
        # ensure that we are connecting to the same
        # in memory database
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield async_sessionmaker(engine, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest.fixture()
def image_store() -> FakeImageStore:
    return FakeImageStore()


@pytest.fixture()
def log_messages():
    """Warnings and errors logged while the test runs."""
    messages = []
    sink_id = logger.add(lambda message: messages.append(str(message)), level="WARNING")
    yield messages
    logger.remove(sink_id)


@pytest.fixture()
def test_settings(tmp_path) -> Settings:
    return Settings(testing="1", staging_dir=tmp_path / "staging")


@pytest.fixture()
def sign_in():
    def _sign_in(identity: Identity | None) -> None:
        CurrentIdentity.value = identity

    yield _sign_in
    CurrentIdentity.value = None


@pytest_asyncio.fixture()
async def async_client(session_factory, image_store, test_settings) -> AsyncClient:
    async def override_get_async_session() -> AsyncSession:
        async with session_factory() as session:
            yield session

    async def override_get_optional_identity():
        return CurrentIdentity.value

    app.dependency_overrides[get_async_session] = override_get_async_session
    app.dependency_overrides[get_optional_identity] = override_get_optional_identity
    app.dependency_overrides[get_image_store] = lambda: image_store
    app.dependency_overrides[get_settings] = lambda: test_settings

    headers = {"Authorization": "Bearer fake"}
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test", headers=headers
    ) as client:
        yield client

    app.dependency_overrides.clear()
    CurrentIdentity.value = None


@pytest_asyncio.fixture()
async def users(session_factory):
    """A registered seller and buyer."""
    async with session_factory() as session:
        seller = User(
            id=SELLER.uid,
            email=SELLER.email,
            full_name="Test Seller",
            phone_number="+919876543210",
            hostel_details="Hostel 2, Room 114",
        )
        buyer = User(id=BUYER.uid, email=BUYER.email, full_name="Test Buyer")
        session.add_all([seller, buyer])
        await session.commit()
    return seller, buyer


@pytest_asyncio.fixture()
async def make_listing(session_factory, users):
    """Insert a listing with one image straight into the store."""

    async def _make_listing(owner_id=SELLER.uid, with_image=True, **fields) -> Listing:
        values = {
            "title": "Scientific Calculator - Casio FX-991ES",
            "description": "Used for one semester, all functions work.",
            "category": Category.ELECTRONICS,
            "condition": Condition.LIKE_NEW,
            "price": Decimal("750"),
            "negotiable": False,
        }
        values.update(fields)
        async with session_factory() as session:
            listing = Listing(owner_id=owner_id, **values)
            if with_image:
                listing.images = [
                    ListingImage(
                        url=f"https://storage.test/products/{listing.id}/0",
                        storage_path=f"products/{listing.id}/0",
                        position=0,
                    )
                ]
            session.add(listing)
            await session.commit()
        return listing

    return _make_listing


@pytest.fixture()
def seller_identity() -> Identity:
    return SELLER


@pytest.fixture()
def buyer_identity() -> Identity:
    return BUYER
