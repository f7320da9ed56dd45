from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime, timedelta, timezone
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from ats_engine.core.config import settings
from ats_engine.core.errors import AggregationError
from ats_engine.schemas.metrics import QualityMetricLog

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _get_db_path() -> Path:
    return Path(settings.metrics_db_path)


def init_db(db_path: Path | None = None) -> None:
    if not settings.metrics_enabled:
        return
    path = db_path or _get_db_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(path) as conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS quality_metrics (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                created_at TEXT NOT NULL,
                optimization_id TEXT,
                section TEXT NOT NULL,
                total_evaluated INTEGER NOT NULL,
                passed INTEGER NOT NULL,
                failed INTEGER NOT NULL,
                pass_rate REAL NOT NULL,
                avg_score REAL NOT NULL,
                log_json TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_quality_metrics_created_at
            ON quality_metrics (created_at)
            """
        )
        conn.commit()


def append_metric_log(entry: QualityMetricLog, *, db_path: Path | None = None) -> None:
    """Append one entry; rows are never updated."""
    if not settings.metrics_enabled:
        return
    path = db_path or _get_db_path()
    with sqlite3.connect(path) as conn:
        conn.execute(
            """
            INSERT INTO quality_metrics (
                created_at, optimization_id, section, total_evaluated, passed, failed,
                pass_rate, avg_score, log_json
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                entry.timestamp,
                entry.optimization_id,
                entry.section,
                entry.total_evaluated,
                entry.passed,
                entry.failed,
                entry.pass_rate,
                entry.avg_score,
                json.dumps(entry.model_dump(mode="json"), ensure_ascii=False),
            ),
        )
        conn.commit()


def read_metric_logs(
    start: datetime,
    end: datetime | None = None,
    *,
    section: str | None = None,
    db_path: Path | None = None,
) -> list[QualityMetricLog]:
    """Entries with ``start <= created_at < end``; a missing database reads as empty."""
    path = db_path or _get_db_path()
    if not settings.metrics_enabled or not path.exists():
        return []

    query = "SELECT log_json FROM quality_metrics WHERE created_at >= ?"
    params: list[str] = [start.astimezone(timezone.utc).isoformat()]
    if end is not None:
        query += " AND created_at < ?"
        params.append(end.astimezone(timezone.utc).isoformat())
    if section:
        query += " AND section = ?"
        params.append(section)
    query += " ORDER BY id ASC"

    try:
        with sqlite3.connect(path) as conn:
            rows = conn.execute(query, params).fetchall()
    except sqlite3.Error as exc:
        raise AggregationError(f"Failed to read quality metrics: {exc}", code="METRICS_READ_FAILED") from exc

    try:
        return [QualityMetricLog.model_validate_json(row[0]) for row in rows]
    except PydanticValidationError as exc:
        raise AggregationError(f"Corrupt quality metrics row: {exc}", code="METRICS_CORRUPT") from exc


def purge_old_records(*, db_path: Path | None = None, now: datetime | None = None) -> int:
    if not settings.metrics_enabled:
        return 0
    path = db_path or _get_db_path()
    if not path.exists():
        return 0
    retention = max(1, int(settings.metrics_retention_days))
    cutoff = ((now or _utc_now()) - timedelta(days=retention)).isoformat()
    with sqlite3.connect(path) as conn:
        cur = conn.execute("DELETE FROM quality_metrics WHERE created_at < ?", (cutoff,))
        conn.commit()
        deleted = int(cur.rowcount or 0)
    if deleted:
        logger.info("quality_metrics_purged deleted=%s retention_days=%s", deleted, retention)
    return deleted
