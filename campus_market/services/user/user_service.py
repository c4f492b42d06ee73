from typing import Optional

from fastapi import Depends
from loguru import logger
from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from campus_market.api.dependencies import get_async_session, get_optional_identity
from campus_market.core.config import Settings, config
from campus_market.core.firebase import Identity
from campus_market.db.database import commit_or_raise
from campus_market.models.listing_model import Listing
from campus_market.models.user_model import User
from campus_market.schemas.user_schema import (
    ProfileUpdate,
    PublicProfile,
    RegisterFormRequest,
)
from campus_market.services.exceptions import (
    DuplicateUser,
    FieldValidationError,
    NotAuthenticated,
    NotFound,
)


def is_campus_email(email: Optional[str], domain: str) -> bool:
    return bool(email) and email.strip().lower().endswith(domain.lower())


class UserService:
    def __init__(
        self,
        session: AsyncSession,
        identity: Optional[Identity] = None,
        settings: Settings = config,
    ) -> None:
        self.session = session
        self.identity = identity
        self.settings = settings

    def _require_identity(self) -> Identity:
        if self.identity is None:
            raise NotAuthenticated("User not authenticated.")
        return self.identity

    async def register(self, form: RegisterFormRequest) -> User:
        """
        Creates the profile row for a freshly signed up identity.

        :raises FieldValidationError: if the email is not an institutional one.
        :raises DuplicateUser: if the identity or email is already registered.
        """
        identity = self._require_identity()

        if not is_campus_email(identity.email, self.settings.campus_email_domain):
            raise FieldValidationError(
                "email",
                f"Please use your institutional email address ({self.settings.campus_email_domain}).",
            )
        email = identity.email.strip().lower()

        existing = await self.session.execute(
            select(User.id).where(or_(User.id == identity.uid, User.email == email))
        )
        if existing.first() is not None:
            raise DuplicateUser(f"An account for '{email}' already exists.")

        user = User(id=identity.uid, email=email, **form.model_dump())
        self.session.add(user)
        await commit_or_raise(self.session, "register the user")
        await self.session.refresh(user)
        logger.info("Registered user {}", user.id)
        return user

    async def get_user(self, user_id: str) -> User:
        user = await self.session.get(User, user_id)
        if user is None:
            raise NotFound("This user profile does not exist.")
        return user

    async def get_current_user(self) -> User:
        identity = self._require_identity()
        return await self.get_user(identity.uid)

    async def update_profile(self, update: ProfileUpdate) -> User:
        """Updates only the caller's own profile."""
        user = await self.get_current_user()
        user.sqlmodel_update(update.model_dump(exclude_unset=True))

        self.session.add(user)
        await commit_or_raise(self.session, "update the profile")
        await self.session.refresh(user)
        return user

    async def get_public_profile(self, user_id: str) -> PublicProfile:
        user = await self.get_user(user_id)
        result = await self.session.execute(
            select(func.count(Listing.id)).where(
                Listing.owner_id == user.id, Listing.sold.is_(False)
            )
        )
        return PublicProfile(
            id=user.id,
            full_name=user.full_name,
            hostel_details=user.hostel_details,
            active_listings=result.scalar_one(),
        )

    @classmethod
    async def get_dependency(
        cls,
        session: AsyncSession = Depends(get_async_session),
        identity: Optional[Identity] = Depends(get_optional_identity),
    ) -> "UserService":
        return cls(session, identity)
