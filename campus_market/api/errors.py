from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from loguru import logger

from campus_market.services.exceptions import (
    DuplicateUser,
    DuplicateWishlistEntry,
    FieldValidationError,
    InvalidCriteria,
    MarketError,
    NotAuthenticated,
    NotFound,
    PermissionDenied,
    StoreError,
)

STATUS_CODES: dict[type[MarketError], int] = {
    FieldValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    InvalidCriteria: status.HTTP_400_BAD_REQUEST,
    NotAuthenticated: status.HTTP_401_UNAUTHORIZED,
    PermissionDenied: status.HTTP_403_FORBIDDEN,
    NotFound: status.HTTP_404_NOT_FOUND,
    DuplicateWishlistEntry: status.HTTP_409_CONFLICT,
    DuplicateUser: status.HTTP_409_CONFLICT,
    StoreError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


async def market_error_handler(request: Request, exc: MarketError) -> JSONResponse:
    status_code = next(
        (code for error_cls, code in STATUS_CODES.items() if isinstance(exc, error_cls)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )

    content = {"detail": getattr(exc, "message", None) or str(exc)}
    # field scoped errors tell the client which input to highlight
    if isinstance(exc, (FieldValidationError, InvalidCriteria)):
        content["field"] = exc.field

    if status_code >= 500:
        logger.error("{} {} failed: {!r}", request.method, request.url.path, exc)
    else:
        logger.info("{} {} rejected: {}", request.method, request.url.path, exc)

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, NotAuthenticated) else None
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def setup_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MarketError, market_error_handler)
