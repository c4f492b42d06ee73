from typing import AsyncGenerator

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio.session import AsyncSession

from campus_market.core.config import Settings, config
from campus_market.core.firebase import Identity, verify_token
from campus_market.db.database import async_session

security = HTTPBearer(auto_error=False)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session() as session:
        yield session


def get_settings() -> Settings:
    return config


async def get_optional_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Identity | None:
    # browsing is open to anonymous visitors
    if credentials is None:
        return None
    return verify_token(credentials.credentials)


async def get_identity(
    identity: Identity | None = Depends(get_optional_identity),
) -> Identity:
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not authenticated.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity
