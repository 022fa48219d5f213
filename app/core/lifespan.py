import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from app.analytics.benchmarks import get_industry_benchmarks
from app.core.config import settings
from app.core.insight_runs_store import purge_old_insight_runs

logger = logging.getLogger(__name__)

PURGE_INTERVAL_S = 3600


async def purge_insight_runs_until(stop_event: asyncio.Event, interval_s: float = PURGE_INTERVAL_S) -> None:
    """Apply insight-run retention every ``interval_s`` seconds until ``stop_event`` is set."""
    while not stop_event.is_set():
        try:
            deleted = purge_old_insight_runs()
        except Exception as exc:  # pragma: no cover - sqlite failures are logged, the loop keeps going
            logger.warning("insight_runs_retention_purge_failed: %s", exc)
        else:
            if deleted:
                logger.info("insight_runs_retention_purge deleted=%s", deleted)
        with contextlib.suppress(asyncio.TimeoutError):
            await asyncio.wait_for(stop_event.wait(), timeout=interval_s)


@asynccontextmanager
async def lifespan(app):
    benchmarks = get_industry_benchmarks()
    logger.info(
        "startup skills_benchmarked=%s appwrite_endpoint=%s",
        len(benchmarks.top_skills),
        settings.appwrite_endpoint,
    )

    stop_event = asyncio.Event()
    purge_task = asyncio.create_task(purge_insight_runs_until(stop_event))
    try:
        yield
    finally:
        stop_event.set()
        purge_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await purge_task
