import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi import _rate_limit_exceeded_handler
import sentry_sdk

from app.api.v1.analytics import router as analytics_router
from app.api.v1.health import router as health_router
from app.api.v1.insights import router as insights_router
from app.core.config import settings
from app.core.lifespan import lifespan
from app.core.rate_limit import limiter
from app.integrations.appwrite import AppwriteError

logging.basicConfig(level=settings.log_level, format="%(message)s")
logger = logging.getLogger(__name__)

if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn)


async def appwrite_error_handler(request: Request, exc: AppwriteError) -> JSONResponse:
    logger.warning("appwrite_error path=%s status=%s: %s", request.url.path, exc.status_code, exc)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": {"error": "Upstream data service error", "details": str(exc)}},
    )


app = FastAPI(title="SkillSync Analytics API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_allowed_origins),
    allow_origin_regex=(settings.cors_allow_origin_regex or "").strip() or None,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(AppwriteError, appwrite_error_handler)
app.add_middleware(SlowAPIMiddleware)

app.include_router(health_router, prefix="/v1", tags=["Health"])
app.include_router(analytics_router, prefix="/v1", tags=["Analytics"])
app.include_router(insights_router, prefix="/v1", tags=["Industry Insights"])
