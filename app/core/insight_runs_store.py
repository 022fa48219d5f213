from __future__ import annotations

import os
import sqlite3
import threading
from datetime import datetime, timedelta, timezone

from app.core.config import settings

_conn: sqlite3.Connection | None = None
_conn_lock = threading.Lock()


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _get_connection() -> sqlite3.Connection:
    global _conn
    with _conn_lock:
        if _conn is not None:
            return _conn

        db_path = settings.insights_runs_db_path
        directory = os.path.dirname(db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        _conn = sqlite3.connect(
            db_path,
            check_same_thread=False,
            timeout=5,
            isolation_level=None,
        )
        _conn.execute("PRAGMA journal_mode=WAL;")
        _conn.execute("PRAGMA synchronous=NORMAL;")
        _conn.execute("PRAGMA busy_timeout=5000;")
        _conn.execute(
            """
            CREATE TABLE IF NOT EXISTS insight_runs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                created_at TEXT NOT NULL,
                run_id TEXT NOT NULL,
                cache_key_hash TEXT NOT NULL,
                model TEXT NOT NULL,
                profile_based INTEGER NOT NULL,
                status TEXT NOT NULL,
                error_code TEXT,
                latency_ms INTEGER
            );
            """
        )
        _conn.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_insight_runs_created_at
            ON insight_runs (created_at);
            """
        )
        return _conn


def log_insight_run(
    *,
    run_id: str,
    cache_key_hash: str,
    model: str,
    profile_based: bool,
    status: str,
    error_code: str | None = None,
    latency_ms: int | None = None,
) -> None:
    conn = _get_connection()
    with _conn_lock:
        conn.execute(
            """
            INSERT INTO insight_runs (
                created_at, run_id, cache_key_hash, model, profile_based, status, error_code, latency_ms
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                _utc_now().isoformat(),
                run_id,
                cache_key_hash,
                model,
                1 if profile_based else 0,
                status,
                error_code,
                latency_ms,
            ),
        )
        conn.commit()


def purge_old_insight_runs() -> int:
    conn = _get_connection()
    retention_days = max(1, int(settings.insights_runs_retention_days))
    cutoff = (_utc_now() - timedelta(days=retention_days)).isoformat()
    with _conn_lock:
        cur = conn.execute("DELETE FROM insight_runs WHERE created_at < ?", (cutoff,))
        conn.commit()
    return int(cur.rowcount or 0)


def get_insight_run_summary() -> dict[str, object]:
    conn = _get_connection()
    with _conn_lock:
        cur = conn.execute(
            """
            SELECT status, COUNT(*) AS count, AVG(latency_ms) AS avg_latency_ms
            FROM insight_runs
            GROUP BY status
            ORDER BY count DESC
            """
        )
        rows = cur.fetchall()
    by_status = {
        row[0]: {
            "count": int(row[1]),
            "avg_latency_ms": int(row[2]) if row[2] is not None else None,
        }
        for row in rows
    }
    return {
        "total": sum(item["count"] for item in by_status.values()),
        "by_status": by_status,
    }


def clear_insight_runs() -> None:
    conn = _get_connection()
    with _conn_lock:
        conn.execute("DELETE FROM insight_runs")
        conn.commit()
