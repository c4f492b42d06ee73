from .auth_route import router as auth_router
from .health_route import router as health_router
from .listings import router as listings_router
from .profile_route import router as profile_router
from .wishlist_route import router as wishlist_router

__all__ = [
    "auth_router",
    "health_router",
    "listings_router",
    "profile_router",
    "wishlist_router",
]
