from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from campus_market.api.dependencies import get_async_session

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/")
async def health(*, session: AsyncSession = Depends(get_async_session)):
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        return {"status": "degraded", "database": "unreachable", "detail": str(e)}
    return {"status": "ok", "database": "ok"}
