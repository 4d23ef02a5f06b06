from __future__ import annotations

from fastapi import APIRouter, Depends

from franceconnect.api.routes_oauth import get_oauth_service
from franceconnect.models.schemas import HealthOut
from franceconnect.services.oauth import OAuthService

router = APIRouter(tags=["health"])


def _check_redis() -> bool:
    try:
        from franceconnect.services.oauth.session import get_redis_client
        r = get_redis_client()
        return bool(r.ping())
    except Exception:  # noqa: BLE001
        return False


@router.get("/healthz", response_model=HealthOut)
def healthz(oauth_service: OAuthService = Depends(get_oauth_service)) -> HealthOut:
    redis_ok = _check_redis()
    return HealthOut(
        status="ok" if redis_ok else "degraded",
        redis=redis_ok,
        providers=sorted(oauth_service.providers),
    )
