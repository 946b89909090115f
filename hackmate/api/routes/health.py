from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from hackmate.config import settings
from hackmate.gateway import SKILLS, Gateway, GatewayError
from hackmate.routers.dependencies import get_gateway


router = APIRouter(prefix="/health", tags=["health"])


class HealthStatus(BaseModel):
    status: str
    timestamp: datetime


class GatewayHealthStatus(BaseModel):
    gateway: str
    backend: str
    error: str | None = None
    timestamp: datetime


@router.get("/", response_model=HealthStatus, summary="API heartbeat")
def health_check() -> HealthStatus:
    return HealthStatus(status="ok", timestamp=datetime.now(timezone.utc))


@router.get("/gateway", response_model=GatewayHealthStatus, summary="Gateway connectivity check")
async def gateway_health_check(gateway: Gateway = Depends(get_gateway)) -> GatewayHealthStatus:
    now = datetime.now(timezone.utc)
    try:
        await gateway.select_all(SKILLS)
    except GatewayError as exc:
        return GatewayHealthStatus(gateway="error", backend=settings.gateway_backend, error=exc.message, timestamp=now)
    return GatewayHealthStatus(gateway="ok", backend=settings.gateway_backend, timestamp=now)
