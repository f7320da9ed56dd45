"""Time-windowed reads over the quality metrics log.

Metrics are non-critical: a failed read is logged and reported as "no data"
instead of failing the request.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, time, timedelta, timezone
from pathlib import Path

from ats_engine.core.errors import AggregationError
from ats_engine.schemas.metrics import (
    FailurePattern,
    MetricsSummary,
    PassRatePoint,
    QualityHealth,
    QualityMetricLog,
    SectionMetrics,
)
from ats_engine.schemas.resume import SECTION_NAMES

from .health import evaluate_quality_health
from .store import read_metric_logs

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _day_start(moment: datetime) -> datetime:
    return datetime.combine(moment.astimezone(timezone.utc).date(), time.min, tzinfo=timezone.utc)


def _window_start(now: datetime, days: int) -> datetime:
    return _day_start(now) - timedelta(days=max(1, days) - 1)


def _safe_read(start: datetime, end: datetime | None = None, **kwargs) -> list[QualityMetricLog] | None:
    try:
        return read_metric_logs(start, end, **kwargs)
    except AggregationError as exc:
        logger.warning("quality_metrics_read_failed code=%s error=%s", exc.code, exc.message)
        return None


def _weighted(logs: list[QualityMetricLog]) -> tuple[int, float, float]:
    total = sum(log.total_evaluated for log in logs)
    if total == 0:
        return 0, 0.0, 0.0
    passed = sum(log.passed for log in logs)
    avg = sum(log.avg_score * log.total_evaluated for log in logs) / total
    return total, round(passed / total * 100, 2), round(avg, 2)


def section_metrics(logs: list[QualityMetricLog], section: str) -> SectionMetrics:
    scoped = [log for log in logs if log.section == section]
    total, rate, avg = _weighted(scoped)
    reasons: Counter[str] = Counter()
    for log in scoped:
        for pattern in log.failure_patterns:
            reasons[pattern.reason] += pattern.count
    top = reasons.most_common(1)
    return SectionMetrics(
        section=section,
        total_evaluated=total,
        pass_rate=rate,
        avg_score=avg,
        top_failure=top[0][0] if top else None,
    )


def aggregate_metrics(logs: list[QualityMetricLog], *, period: str, date: str) -> MetricsSummary:
    total, rate, avg = _weighted(logs)
    if total == 0:
        return MetricsSummary(period=period, date=date, has_data=False, total_optimizations=len(logs))
    return MetricsSummary(
        period=period,
        date=date,
        has_data=True,
        total_optimizations=len({log.optimization_id or f"row-{index}" for index, log in enumerate(logs)}),
        total_evaluated=total,
        overall_pass_rate=rate,
        overall_avg_score=avg,
        by_section={
            section: section_metrics(logs, section)
            for section in SECTION_NAMES
            if any(log.section == section for log in logs)
        },
    )


def get_today_metrics(*, now: datetime | None = None, db_path: Path | None = None) -> MetricsSummary:
    current = now or _utc_now()
    date = current.date().isoformat()
    logs = _safe_read(_day_start(current), db_path=db_path)
    if logs is None:
        return MetricsSummary(period="today", date=date, has_data=False)
    return aggregate_metrics(logs, period="today", date=date)


def get_weekly_metrics(*, now: datetime | None = None, db_path: Path | None = None) -> MetricsSummary:
    current = now or _utc_now()
    date = current.date().isoformat()
    logs = _safe_read(_window_start(current, 7), db_path=db_path)
    if logs is None:
        return MetricsSummary(period="weekly", date=date, has_data=False)
    return aggregate_metrics(logs, period="weekly", date=date)


def get_section_metrics(
    section: str,
    *,
    days: int = 7,
    now: datetime | None = None,
    db_path: Path | None = None,
) -> SectionMetrics:
    logs = _safe_read(_window_start(now or _utc_now(), days), section=section, db_path=db_path) or []
    return section_metrics(logs, section)


def get_pass_rate_trend(*, days: int = 7, now: datetime | None = None, db_path: Path | None = None) -> list[PassRatePoint]:
    """One point per day, oldest first; days without data report a zero pass rate."""
    current = now or _utc_now()
    start = _window_start(current, days)
    logs = _safe_read(start, db_path=db_path) or []

    by_day: dict[str, list[QualityMetricLog]] = {}
    for log in logs:
        day = datetime.fromisoformat(log.timestamp).astimezone(timezone.utc).date().isoformat()
        by_day.setdefault(day, []).append(log)

    points: list[PassRatePoint] = []
    for offset in range(max(1, days)):
        day = (start + timedelta(days=offset)).date().isoformat()
        total, rate, _ = _weighted(by_day.get(day, []))
        points.append(PassRatePoint(date=day, pass_rate=rate, total_evaluated=total))
    return points


def get_failure_patterns(
    *,
    limit: int = 10,
    days: int = 7,
    now: datetime | None = None,
    db_path: Path | None = None,
) -> list[FailurePattern]:
    logs = _safe_read(_window_start(now or _utc_now(), days), db_path=db_path) or []
    merged: dict[tuple[str, str], int] = {}
    for log in logs:
        for pattern in log.failure_patterns:
            key = (pattern.criterion, pattern.reason)
            merged[key] = merged.get(key, 0) + pattern.count
    ranked = sorted(merged.items(), key=lambda item: item[1], reverse=True)[:limit]
    return [FailurePattern(criterion=criterion, reason=reason, count=count) for (criterion, reason), count in ranked]


def get_quality_health(*, days: int = 1, now: datetime | None = None, db_path: Path | None = None) -> QualityHealth:
    logs = _safe_read(_window_start(now or _utc_now(), days), db_path=db_path) or []
    return evaluate_quality_health(logs)
