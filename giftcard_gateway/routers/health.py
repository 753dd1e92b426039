from fastapi import APIRouter, Request

from ..middleware import current_rate_limit, limiter
from ..schemas import HealthResponse

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
@limiter.limit(current_rate_limit)
def health(request: Request):
    return {"ok": True}
