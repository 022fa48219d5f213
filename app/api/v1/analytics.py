import logging
from datetime import datetime, timezone
from typing import Callable

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from app.analytics import RowTotals, build_snapshot_from_rows, get_industry_benchmarks
from app.core.rate_limit import rate_limit
from app.core.security import authenticate, bearer_token, require_label
from app.integrations.appwrite import AppwriteClient, AppwriteError
from app.schemas.analytics import AnalyticsResponse, UniversityUser

logger = logging.getLogger(__name__)

router = APIRouter()

AppwriteClientFactory = Callable[[str], AppwriteClient]


def get_appwrite_client_factory() -> AppwriteClientFactory:
    return AppwriteClient


@router.get("/analytics", response_model=AnalyticsResponse)
@rate_limit()
async def analytics(
    request: Request,
    authorization: str | None = Header(default=None),
    client_factory: AppwriteClientFactory = Depends(get_appwrite_client_factory),
):
    _ = request
    token = bearer_token(authorization)

    async with client_factory(token) as client:
        account = await authenticate(client)
        require_label(account)
        try:
            rows = await client.fetch_analytics_rows()
        except AppwriteError as exc:
            raise HTTPException(
                status_code=exc.status_code,
                detail={"error": "Failed to fetch analytics data", "details": str(exc)},
            ) from exc

    try:
        snapshot = build_snapshot_from_rows(
            rows.profiles.rows,
            rows.courses.rows,
            rows.pathways.rows,
            totals=RowTotals(
                profiles=rows.profiles.total,
                courses=rows.courses.total,
                pathways=rows.pathways.total,
            ),
        )
        benchmarks = get_industry_benchmarks()
    except Exception as exc:  # noqa: BLE001 - reported to the dashboard as a 500
        logger.exception("analytics_snapshot_failed user=%s", account.id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Failed to generate analytics", "details": str(exc)},
        ) from exc

    return AnalyticsResponse(
        data=snapshot.data,
        enhanced=snapshot.enhanced,
        industry_benchmarks=benchmarks,
        generated_at=datetime.now(timezone.utc),
        university_user=UniversityUser(name=account.name, email=account.email),
    )
