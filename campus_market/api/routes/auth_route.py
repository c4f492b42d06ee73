from fastapi import APIRouter, Depends, status

from campus_market.api.dependencies import get_identity
from campus_market.core.firebase import Identity
from campus_market.schemas.user_schema import ProfileRead, RegisterFormRequest
from campus_market.services.user.user_service import UserService

router = APIRouter(prefix="/auth", tags=["auth"])


# the account itself is created with the identity provider, this stores the profile
@router.post(
    "/register",
    response_model=ProfileRead,
    status_code=status.HTTP_201_CREATED,
    summary="Register a student profile",
    description="Requires an ID token whose email belongs to the institutional domain.",
)
async def register_user(
    *,
    register_form: RegisterFormRequest,
    identity: Identity = Depends(get_identity),
    user_service: UserService = Depends(UserService.get_dependency),
):
    return await user_service.register(register_form)
