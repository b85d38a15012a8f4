# cleanweb/adapters/web/routers/health.py
from typing import Dict

import structlog
from fastapi import APIRouter, Depends, Response, status

from cleanweb.adapters.web.dependencies import get_product_repository
from cleanweb.core.ports.product_repository import IProductRepository

logger = structlog.get_logger()

router = APIRouter(prefix="/health", tags=["System"])


@router.get("/live", status_code=status.HTTP_200_OK)
async def liveness_probe():
    """
    Liveness Probe.
    Returns 200 OK if the process is serving requests.
    """
    return {"status": "ok", "service": "cleanweb"}


@router.get("/ready", status_code=status.HTTP_200_OK)
async def readiness_probe(
    response: Response,
    repo: IProductRepository = Depends(get_product_repository),
) -> Dict[str, str]:
    """
    Readiness Probe.
    Returns 503 Service Unavailable if storage is down.
    """
    health_status = {"storage": "down"}

    try:
        if await repo.health_check():
            health_status["storage"] = "up"
    except Exception as e:
        logger.error("health_check_failed", component="storage", error=str(e))

    if not all(value == "up" for value in health_status.values()):
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        logger.warning("readiness_probe_failed", status=health_status)

    return health_status
