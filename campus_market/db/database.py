import ssl

from loguru import logger
from sqlalchemy.engine import URL
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.ext.asyncio.session import AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from campus_market.core import config
from campus_market.services.exceptions import StoreError


def build_database_url(settings: config.Settings) -> URL | str:
    # a full url wins over the individual pieces
    if settings.database_url:
        return settings.database_url

    return URL.create(
        drivername="postgresql+asyncpg",
        username=settings.db_user,
        password=settings.db_password,
        host=settings.db_host,
        port=settings.db_port,
        database=settings.db_name,
    )


# upgrade connection to use SSL in production
connect_args = {}
if config.config.environment == config.Environment.PRODUCTION:
    connect_args["ssl"] = ssl.create_default_context()

engine = create_async_engine(
    build_database_url(config.config),
    echo=config.config.db_echo,
    future=True,
    connect_args=connect_args,
)

# factory for creating asynchronous sessions (AsyncSession)
async_session = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    # objects remain available after committing a transaction
    expire_on_commit=False,
)


async def init_db():
    # models must be imported so their tables are registered on the metadata
    from campus_market.models import (  # noqa: F401
        listing_image,
        listing_model,
        user_model,
        wishlist_entry_model,
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def commit_or_raise(session: AsyncSession, action: str) -> None:
    """Commit the session, turning driver failures into a StoreError."""
    try:
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error("Database error while trying to {}: {}", action, e)
        raise StoreError(f"Could not {action}. Please try again.") from e
