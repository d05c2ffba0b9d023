"""
FastAPI dependencies and error translation shared by the routers.

Dependencies:
- current_user_id: the authenticated user, read from the X-User-Id header set
  by the identity layer in front of the API
- require_cron: scheduler authentication for the lifecycle endpoints
- get_provider: the scoreboard provider; tests override it with a fake

Error Translation:
Lifecycle functions raise domain exceptions from pickem.exceptions. to_http()
maps each category onto one HTTP status code so every router answers the same
way for the same failure.
"""

import hmac
import logging
from collections.abc import Generator

from fastapi import Header, HTTPException, Request

from ..config.settings import settings
from ..data.collection.espn_collector import EspnScoreboardCollector
from ..data.collection.scoreboard import ScoreboardProvider
from ..exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    NotLeagueMemberError,
    NotReadyError,
    PickemError,
    ProviderUnavailableError,
    ValidationError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = (
    (ValidationError, 400),
    (NotLeagueMemberError, 403),
    (AuthorizationError, 401),
    (NotFoundError, 404),
    (ConflictError, 409),
    (NotReadyError, 409),
    (ProviderUnavailableError, 502),
)


def to_http(error: PickemError) -> HTTPException:
    """Translate a domain exception into an HTTPException."""
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))


def current_user_id(x_user_id: str | None = Header(None)) -> str:
    """Authenticated user id, or 401 when the request is anonymous."""
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user_id


def is_cron_request(request: Request) -> bool:
    """True for the platform scheduler header or a matching shared secret."""
    if request.headers.get(settings.trusted_cron_header) == "1":
        return True
    secret = request.headers.get("x-cron-secret")
    if not settings.cron_secret or not secret:
        return False
    return hmac.compare_digest(secret.encode(), settings.cron_secret.encode())


def require_cron(request: Request):
    """Reject lifecycle triggers that are not from the scheduler, before any side effect."""
    if not is_cron_request(request):
        logger.warning(f"Rejected unauthenticated lifecycle call to {request.url.path}")
        raise HTTPException(status_code=401, detail="Unauthorized")


def get_provider() -> Generator[ScoreboardProvider, None, None]:
    provider = EspnScoreboardCollector()
    try:
        yield provider
    finally:
        provider.close()
