import pytest
from fastapi import status


@pytest.mark.asyncio
async def test_add_and_fetch_wishlist(async_client, make_listing, sign_in, buyer_identity):
    lamp = await make_listing(title="Desk Lamp with Adjustable Brightness")
    table = await make_listing(title="Wooden Study Table")
    sign_in(buyer_identity)

    first = await async_client.post(f"/wishlist/{lamp.id}")
    second = await async_client.post(f"/wishlist/{table.id}")
    assert first.status_code == status.HTTP_201_CREATED
    assert second.status_code == status.HTTP_201_CREATED
    assert first.json()["listing"]["title"] == "Desk Lamp with Adjustable Brightness"

    response = await async_client.get("/wishlist/")
    assert response.status_code == status.HTTP_200_OK
    assert {entry["listing_id"] for entry in response.json()} == {lamp.id, table.id}


@pytest.mark.asyncio
async def test_duplicate_wishlist_entry(async_client, make_listing, sign_in, buyer_identity):
    listing = await make_listing()
    sign_in(buyer_identity)

    await async_client.post(f"/wishlist/{listing.id}")
    response = await async_client.post(f"/wishlist/{listing.id}")

    assert response.status_code == status.HTTP_409_CONFLICT
    assert len((await async_client.get("/wishlist/")).json()) == 1


@pytest.mark.asyncio
async def test_wishlist_missing_listing(async_client, users, sign_in, buyer_identity):
    sign_in(buyer_identity)

    response = await async_client.post("/wishlist/does-not-exist")

    assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
async def test_remove_wishlist_entry(async_client, make_listing, sign_in, buyer_identity):
    listing = await make_listing()
    sign_in(buyer_identity)
    entry = (await async_client.post(f"/wishlist/{listing.id}")).json()

    response = await async_client.delete(f"/wishlist/{entry['id']}")
    assert response.status_code == status.HTTP_204_NO_CONTENT
    assert (await async_client.get("/wishlist/")).json() == []

    # already gone is fine
    again = await async_client.delete(f"/wishlist/{entry['id']}")
    assert again.status_code == status.HTTP_204_NO_CONTENT


@pytest.mark.asyncio
async def test_cannot_remove_someone_elses_entry(
    async_client, make_listing, sign_in, buyer_identity, seller_identity
):
    listing = await make_listing()
    sign_in(buyer_identity)
    entry = (await async_client.post(f"/wishlist/{listing.id}")).json()

    sign_in(seller_identity)
    response = await async_client.delete(f"/wishlist/{entry['id']}")

    assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.asyncio
async def test_wishlist_requires_sign_in(async_client, make_listing):
    listing = await make_listing()

    assert (await async_client.get("/wishlist/")).status_code == status.HTTP_401_UNAUTHORIZED
    assert (await async_client.post(f"/wishlist/{listing.id}")).status_code == status.HTTP_401_UNAUTHORIZED
