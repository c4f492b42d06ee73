from dataclasses import dataclass

from firebase_admin import _apps, auth, credentials, initialize_app
from firebase_admin import exceptions as firebase_exceptions
from loguru import logger

from campus_market.core.config import Settings

firebase_app = None


@dataclass(frozen=True)
class Identity:
    """Verified caller snapshot, passed explicitly to whatever needs it."""

    uid: str
    email: str | None = None


def init_firebase(settings: Settings) -> None:
    global firebase_app
    if _apps or settings.is_testing:
        return

    cred = credentials.Certificate(settings.firebase_credentials)
    options = {"storageBucket": settings.storage_bucket} if settings.storage_bucket else None
    firebase_app = initialize_app(cred, options)
    logger.info("Firebase initialised for {}", settings.app_name)


def verify_token(token: str) -> Identity | None:
    """Resolve an ID token to an identity, None when it is not valid."""
    try:
        claims = auth.verify_id_token(token, firebase_app)
    except (ValueError, firebase_exceptions.FirebaseError) as e:
        logger.info("Rejected ID token: {}", e)
        return None

    return Identity(uid=claims["uid"], email=claims.get("email"))
