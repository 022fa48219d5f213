from functools import lru_cache

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse

from app.core.cache import InMemoryTTLCache
from app.core.config import settings
from app.core.insight_runs_store import get_insight_run_summary
from app.core.rate_limit import rate_limit
from app.core.security import authenticate, bearer_token, require_label
from app.api.v1.analytics import AppwriteClientFactory, get_appwrite_client_factory
from app.schemas.insights import IndustryInsightsData, IndustryInsightsRequest, IndustryInsightsResponse
from app.services.insights_service import IndustryInsightsService, InsightsError

router = APIRouter()


@lru_cache(maxsize=1)
def get_insights_cache() -> InMemoryTTLCache[IndustryInsightsData]:
    return InMemoryTTLCache(ttl_s=settings.insights_cache_ttl_s)


def get_insights_service(
    cache: InMemoryTTLCache[IndustryInsightsData] = Depends(get_insights_cache),
) -> IndustryInsightsService:
    return IndustryInsightsService(cache=cache)


@router.post("/industry-insights", response_model=IndustryInsightsResponse)
@rate_limit()
def industry_insights(
    request: Request,
    payload: IndustryInsightsRequest,
    service: IndustryInsightsService = Depends(get_insights_service),
):
    _ = request
    try:
        data, cached = service.get_insights(payload.profile, force_refresh=payload.force_refresh)
    except InsightsError as exc:
        return JSONResponse(status_code=exc.status_code, content={"success": False, "error": str(exc)})
    return IndustryInsightsResponse(data=data, cached=cached)


@router.get("/industry-insights")
def industry_insights_info():
    return {
        "endpoint": "/v1/industry-insights",
        "method": "POST",
        "description": "Fetch real-time industry trends and insights using Perplexity Sonar",
        "parameters": {
            "profile": "Optional Profile object for personalized insights based on skills and aptitude",
            "forceRefresh": "Skip the cache and regenerate insights",
        },
        "features": [
            "Real-time job demand trends",
            "Salary growth statistics",
            "Emerging skills analysis",
            "Personalized or general market insights",
        ],
        "caching": f"{settings.insights_cache_ttl_s // 3600} hours in-memory cache",
        "model": settings.insights_model,
    }


@router.get("/industry-insights/runs/summary")
async def industry_insights_runs_summary(
    authorization: str | None = Header(default=None),
    client_factory: AppwriteClientFactory = Depends(get_appwrite_client_factory),
):
    token = bearer_token(authorization)
    async with client_factory(token) as client:
        account = await authenticate(client)
    require_label(account)
    return get_insight_run_summary()
