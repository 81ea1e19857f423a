"""Health check endpoints for monitoring and readiness probes."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse

from peoplecount.errors import StoreError
from peoplecount.services.user_store import UserStore, get_user_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["health"])


@router.get("/", response_class=PlainTextResponse)
async def root() -> str:
    """Basic liveness check."""
    return "Backend OK"


@router.get("/health/ready")
def readiness_check(store: UserStore = Depends(get_user_store)) -> dict:
    """Readiness check verifying the database is reachable.

    Raises:
        HTTPException: If MongoDB does not answer a ping.
    """
    try:
        store.ping()
    except StoreError as e:
        logger.error("Database readiness check failed: %s", e)
        raise HTTPException(
            status_code=503,
            detail={"status": "not ready", "checks": {"database": "error"}},
        ) from e

    return {"status": "ready", "checks": {"database": "ok"}}
