from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Sequence

import httpx

from app.core.config import settings

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("assessmentScores", "skills", "dominantType", "completionPercentage")
COURSE_FIELDS = ("platform", "completed", "difficulty", "category", "bookmarked")
PATHWAY_FIELDS = ("completed", "category", "level")


class AppwriteError(RuntimeError):
    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class AppwriteAccount:
    id: str
    name: str
    email: str
    labels: tuple[str, ...] = ()


@dataclass
class RowPage:
    total: int
    rows: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class AnalyticsRows:
    profiles: RowPage
    courses: RowPage
    pathways: RowPage


def _query(method: str, values: Sequence[Any]) -> str:
    return json.dumps({"method": method, "values": list(values)}, separators=(",", ":"))


class AppwriteClient:
    """Minimal REST client for the Account and TablesDB APIs, scoped to one caller's JWT."""

    def __init__(
        self,
        jwt: str,
        *,
        endpoint: str | None = None,
        project_id: str | None = None,
        timeout_s: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._endpoint = (endpoint or settings.appwrite_endpoint).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._endpoint,
            headers={
                "X-Appwrite-Project": project_id or settings.appwrite_project_id,
                "X-Appwrite-JWT": jwt,
                "Content-Type": "application/json",
            },
            timeout=timeout_s or settings.appwrite_timeout_s,
            transport=transport,
        )

    async def __aenter__(self) -> "AppwriteClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(
        self,
        path: str,
        params: list[tuple[str, str]] | None = None,
        *,
        session_check: bool = False,
    ) -> dict[str, Any]:
        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as exc:
            logger.warning("appwrite_request_failed path=%s: %s", path, exc)
            raise AppwriteError(f"Appwrite request failed: {exc}") from exc

        if session_check and response.status_code in (401, 403):
            raise AppwriteError("Invalid or expired session.", status_code=401)
        if response.status_code >= 400:
            logger.warning("appwrite_request_rejected path=%s status=%s", path, response.status_code)
            raise AppwriteError(f"Appwrite responded with status {response.status_code}.")

        try:
            payload = response.json()
        except ValueError as exc:
            raise AppwriteError("Appwrite returned a non-JSON response.") from exc
        if not isinstance(payload, dict):
            raise AppwriteError("Appwrite returned an unexpected payload.")
        return payload

    async def get_account(self) -> AppwriteAccount:
        payload = await self._get("/account", session_check=True)
        labels = payload.get("labels") or []
        return AppwriteAccount(
            id=str(payload.get("$id") or ""),
            name=str(payload.get("name") or ""),
            email=str(payload.get("email") or ""),
            labels=tuple(str(label) for label in labels if label),
        )

    async def list_rows(
        self,
        table_id: str,
        *,
        select: Sequence[str],
        limit: int,
        database_id: str | None = None,
    ) -> RowPage:
        database = database_id or settings.appwrite_database_id
        payload = await self._get(
            f"/tablesdb/{database}/tables/{table_id}/rows",
            params=[
                ("queries[]", _query("select", select)),
                ("queries[]", _query("limit", [limit])),
            ],
        )
        rows = payload.get("rows")
        if not isinstance(rows, list):
            rows = []
        total = payload.get("total")
        return RowPage(total=total if isinstance(total, int) else len(rows), rows=rows)

    async def fetch_analytics_rows(self, limit: int | None = None) -> AnalyticsRows:
        row_limit = limit or settings.analytics_row_limit
        profiles, courses, pathways = await asyncio.gather(
            self.list_rows(settings.appwrite_profiles_table_id, select=PROFILE_FIELDS, limit=row_limit),
            self.list_rows(settings.appwrite_courses_table_id, select=COURSE_FIELDS, limit=row_limit),
            self.list_rows(settings.appwrite_pathways_table_id, select=PATHWAY_FIELDS, limit=row_limit),
        )
        logger.info(
            "appwrite_rows_fetched profiles=%s courses=%s pathways=%s",
            len(profiles.rows),
            len(courses.rows),
            len(pathways.rows),
        )
        return AnalyticsRows(profiles=profiles, courses=courses, pathways=pathways)
