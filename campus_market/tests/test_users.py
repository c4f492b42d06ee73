import pytest
from fastapi import status

from campus_market.core.firebase import Identity

NEW_STUDENT = Identity(uid="new-student", email="Priya.Singh@IIITRKValley.ac.in")


@pytest.mark.asyncio
async def test_register(async_client, session_factory, sign_in):
    sign_in(NEW_STUDENT)

    response = await async_client.post(
        "/auth/register",
        json={"full_name": "Priya Singh", "student_id": "R190123", "phone_number": "98765 43210"},
    )
    assert response.status_code == status.HTTP_201_CREATED

    data = response.json()
    assert data["id"] == "new-student"
    assert data["email"] == "priya.singh@iiitrkvalley.ac.in"
    assert data["phone_number"] == "+919876543210"


@pytest.mark.asyncio
async def test_register_requires_institutional_email(async_client, sign_in):
    sign_in(Identity(uid="outsider", email="someone@gmail.com"))

    response = await async_client.post("/auth/register", json={"full_name": "Someone"})

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert response.json()["field"] == "email"


@pytest.mark.asyncio
async def test_register_twice(async_client, sign_in):
    sign_in(NEW_STUDENT)

    await async_client.post("/auth/register", json={"full_name": "Priya Singh"})
    response = await async_client.post("/auth/register", json={"full_name": "Priya Singh"})

    assert response.status_code == status.HTTP_409_CONFLICT


@pytest.mark.asyncio
async def test_register_requires_sign_in(async_client):
    response = await async_client.post("/auth/register", json={"full_name": "Priya Singh"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
async def test_get_profile(async_client, users, sign_in, seller_identity):
    sign_in(seller_identity)

    response = await async_client.get("/profile/")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["email"] == seller_identity.email


@pytest.mark.asyncio
async def test_get_profile_before_registering(async_client, sign_in):
    sign_in(NEW_STUDENT)

    response = await async_client.get("/profile/")

    assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
async def test_update_profile(async_client, users, sign_in, buyer_identity):
    sign_in(buyer_identity)

    response = await async_client.put(
        "/profile/", json={"hostel_details": "Hostel 4, Room 210", "phone_number": "+91 98480 22338"}
    )
    assert response.status_code == status.HTTP_200_OK

    data = response.json()
    assert data["hostel_details"] == "Hostel 4, Room 210"
    assert data["phone_number"] == "+919848022338"
    assert data["full_name"] == "Test Buyer"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"phone_number": "not a phone"},
        {"email": "other@iiitrkvalley.ac.in"},
        {"full_name": ""},
    ],
)
async def test_update_profile_rejects_bad_input(async_client, users, sign_in, buyer_identity, payload):
    sign_in(buyer_identity)

    response = await async_client.put("/profile/", json=payload)

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


@pytest.mark.asyncio
async def test_public_profile_counts_active_listings(async_client, make_listing, seller_identity):
    await make_listing()
    await make_listing(sold=True)

    response = await async_client.get(f"/profile/{seller_identity.uid}")
    assert response.status_code == status.HTTP_200_OK

    data = response.json()
    assert data["full_name"] == "Test Seller"
    assert data["active_listings"] == 1
    assert "phone_number" not in data


@pytest.mark.asyncio
async def test_public_profile_missing(async_client):
    response = await async_client.get("/profile/nobody")

    assert response.status_code == status.HTTP_404_NOT_FOUND
