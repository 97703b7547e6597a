"""Health check endpoints."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text

from app.db.session import AsyncSessionLocal
from app.deps import get_archive, get_llm
from app.storage import ContractArchive

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check():
    """Liveness probe."""
    return {"status": "ok"}


@router.get("/health/ready")
async def readiness_check(
    archive: ContractArchive | None = Depends(get_archive),
    llm=Depends(get_llm),
):
    """Readiness probe - checks DB and storage; reports the analysis mode."""
    checks = {}
    all_ok = True

    # Check database
    try:
        async with AsyncSessionLocal() as db:
            await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        logger.warning("Readiness: database check failed: %s", e)
        checks["database"] = f"error: {e}"
        all_ok = False

    # Storage is optional; analysis still works without it
    if archive is not None:
        try:
            archive.ping()
            checks["storage"] = "ok"
        except Exception as e:
            logger.warning("Readiness: storage check failed: %s", e)
            checks["storage"] = f"error: {e}"
            all_ok = False
    else:
        checks["storage"] = "not configured"

    checks["analysis"] = "ai" if llm is not None else "heuristic"

    return JSONResponse(
        status_code=200 if all_ok else 503,
        content={"status": "ok" if all_ok else "degraded", "checks": checks},
    )
