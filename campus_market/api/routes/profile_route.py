from fastapi import APIRouter, Depends

from campus_market.api.dependencies import get_identity
from campus_market.core.firebase import Identity
from campus_market.schemas.user_schema import ProfileRead, ProfileUpdate, PublicProfile
from campus_market.services.user.user_service import UserService

router = APIRouter(prefix="/profile", tags=["Profile"])


@router.get("/", response_model=ProfileRead)
async def get_profile(
    *,
    identity: Identity = Depends(get_identity),
    user_service: UserService = Depends(UserService.get_dependency),
):
    return await user_service.get_current_user()


@router.put("/", response_model=ProfileRead)
async def update_profile(
    *,
    update_data: ProfileUpdate,
    identity: Identity = Depends(get_identity),
    user_service: UserService = Depends(UserService.get_dependency),
):
    return await user_service.update_profile(update_data)


@router.get(
    "/{user_id}",
    response_model=PublicProfile,
    summary="Get a seller's public profile",
)
async def get_public_profile(
    *,
    user_id: str,
    user_service: UserService = Depends(UserService.get_dependency),
):
    return await user_service.get_public_profile(user_id)
