from contextlib import asynccontextmanager

import socketio
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from campus_market.api.errors import setup_exception_handlers
from campus_market.api.routes import (
    auth_router,
    health_router,
    listings_router,
    profile_router,
    wishlist_router,
)
from campus_market.api.socket import debouncer, sio
from campus_market.core.config import config
from campus_market.core.firebase import init_firebase
from campus_market.core.logging import setup_logging
from campus_market.schedulers.maintenance import register_maintenance_jobs


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Perform startup tasks
    setup_logging(config)
    init_firebase(config)

    scheduler = AsyncIOScheduler()
    register_maintenance_jobs(scheduler, config)
    scheduler.start()
    app.state.scheduler = scheduler  # Store the scheduler in app state for access
    logger.info("{} started", config.app_name)

    yield

    # Cleanup
    scheduler.shutdown()
    await debouncer.close()


app = FastAPI(title=config.app_name, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
setup_exception_handlers(app)

app.include_router(health_router)
app.include_router(auth_router)
app.include_router(profile_router)
app.include_router(listings_router)
app.include_router(wishlist_router)

# socket.io for search as you type, everything else is plain HTTP
asgi_app = socketio.ASGIApp(sio, other_asgi_app=app)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(asgi_app, host="0.0.0.0", port=8000)
