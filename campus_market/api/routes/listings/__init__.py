from fastapi import APIRouter

from .base import router as crud_router

router = APIRouter(prefix="/listings", tags=["Listings"])
router.include_router(
    crud_router,
)
