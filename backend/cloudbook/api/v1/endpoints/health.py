from __future__ import annotations

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from cloudbook import __version__
from cloudbook.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("")
async def health_check():
    """Liveness: the process is up and serving requests."""
    return {"status": "healthy", "service": "cloudbook-api", "version": __version__}


@router.get("/ready")
async def readiness_check(request: Request):
    """Readiness: the note store answers a scoped query. 503 otherwise."""
    settings = request.app.state.settings
    db_status = "connected"
    code = status.HTTP_200_OK
    try:
        # user 0 never exists; this only proves the store answers
        await request.app.state.note_repository.list(user_id=0)
    except Exception as e:
        logger.warning("Readiness probe failed", extra={"error": str(e)})
        db_status = f"error: {e}"
        code = status.HTTP_503_SERVICE_UNAVAILABLE

    return JSONResponse(
        status_code=code,
        content={
            "status": "ready" if code == status.HTTP_200_OK else "unavailable",
            "database": db_status,
            "storage_backend": settings.storage_backend,
            "external_auth": settings.external_auth_enabled,
        },
    )
