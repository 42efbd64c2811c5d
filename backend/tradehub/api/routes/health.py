"""Health Probes: is the engine up, and can it reach the trade database.

Invariants:
    - GET /api/v1/health/ answers 200 while the process serves requests
    - GET /api/v1/health/ready answers 503 until the lifespan has opened the
      database and a SELECT 1 succeeds; pipelines cannot run without it
"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from tradehub.infrastructure import database
from tradehub.pipelines.registry import PIPELINES

router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    return {
        "status": "healthy",
        "service": "tradehub-engine",
        "version": "1.0.0",
        "pipelines": len(PIPELINES),
    }


@router.get("/ready")
async def readiness_check():
    # db_manager is read at call time; it is None until init_db runs
    manager = database.db_manager
    db_ok = await manager.health_check() if manager else False
    if not db_ok:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "checks": {"database": "unavailable"},
            },
        )
    return {"status": "ready", "checks": {"database": "healthy"}}
