from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.analytics.benchmarks import get_industry_benchmarks
from app.core.config import settings

router = APIRouter()


@router.get("/health", summary="Health Check", description="Check the health status of the application.")
async def health_check():
    return {"status": "healthy"}


@router.get("/ready", summary="Readiness Check", description="Check that configuration needed for analytics is present.")
async def readiness_check():
    problems: list[str] = []
    if not settings.appwrite_project_id:
        problems.append("APPWRITE_PROJECT_ID is not set")
    try:
        get_industry_benchmarks()
    except RuntimeError as exc:
        problems.append(str(exc))

    if problems:
        return JSONResponse(status_code=503, content={"status": "not_ready", "problems": problems})
    return {"status": "ready"}
