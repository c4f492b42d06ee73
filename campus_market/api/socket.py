from typing import Callable, Hashable

import socketio
from loguru import logger

from campus_market.core.config import config
from campus_market.db.database import async_session
from campus_market.services.catalog.debounce import SearchDebouncer
from campus_market.services.listing.listing_service import ListingService

sio = socketio.AsyncServer(async_mode="asgi", cors_allowed_origins="*")


def make_search_callback(session_factory: Callable = async_session, server=sio):
    async def run_search(sid: Hashable, term: str) -> None:
        # searching the catalog is public, no identity needed
        async with session_factory() as session:
            suggestions = await ListingService(session).search_titles(term)
        await server.emit(
            "search_results",
            {"term": term, "results": [s.model_dump() for s in suggestions]},
            to=sid,
        )

    return run_search


debouncer = SearchDebouncer(config.search_debounce_seconds, make_search_callback())


@sio.event
async def connect(sid, environ, auth=None):
    logger.debug("Socket {} connected", sid)
    return True


@sio.event
async def search(sid, data):
    term = (data or {}).get("term", "") if isinstance(data, dict) else str(data or "")
    if len(term.strip()) < config.search_min_chars:
        # too short to search, also drop whatever was still pending
        debouncer.cancel(sid)
        await sio.emit("search_results", {"term": term, "results": []}, to=sid)
        return
    debouncer.submit(sid, term)


@sio.event
async def disconnect(sid):
    debouncer.cancel(sid)
    logger.debug("Socket {} disconnected", sid)
