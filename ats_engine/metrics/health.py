from __future__ import annotations

import logging

from ats_engine.core.config.scoring import get_scoring_value
from ats_engine.schemas.metrics import QualityHealth, QualityMetricLog

logger = logging.getLogger(__name__)

NO_DATA_ALERT = "No metrics data available"


def _thresholds() -> tuple[float, float, float]:
    return (
        float(get_scoring_value("metrics.health.critical_pass_rate", 50)),
        float(get_scoring_value("metrics.health.warning_pass_rate", 70)),
        float(get_scoring_value("metrics.health.warning_avg_score", 65)),
    )


def _classify(pass_rate: float, avg_score: float) -> tuple[str, list[str]]:
    critical_rate, warning_rate, warning_avg = _thresholds()
    status = "healthy"
    alerts: list[str] = []
    if pass_rate < critical_rate:
        status = "critical"
        alerts.append(f"CRITICAL: Pass rate {pass_rate:.1f}% is below {critical_rate:g}%")
    elif pass_rate < warning_rate:
        status = "warning"
        alerts.append(f"WARNING: Pass rate {pass_rate:.1f}% is below {warning_rate:g}%")
    if avg_score < warning_avg:
        if status == "healthy":
            status = "warning"
        alerts.append(f"WARNING: Average score {avg_score:.1f} is below {warning_avg:g}")
    return status, alerts


def evaluate_quality_health(logs: list[QualityMetricLog]) -> QualityHealth:
    """Health over a set of entries, each weighted by how many results it evaluated."""
    total = sum(log.total_evaluated for log in logs)
    if total == 0:
        return QualityHealth(status="healthy", alerts=[NO_DATA_ALERT])

    passed = sum(log.passed for log in logs)
    pass_rate = round(passed / total * 100, 2)
    avg_score = round(sum(log.avg_score * log.total_evaluated for log in logs) / total, 2)
    status, alerts = _classify(pass_rate, avg_score)
    return QualityHealth(status=status, pass_rate=pass_rate, avg_score=avg_score, alerts=alerts)


def emit_quality_alerts(entry: QualityMetricLog) -> list[str]:
    """Log alerts for one freshly collected entry: critical at error level, warnings at warning level."""
    if entry.total_evaluated == 0:
        return []
    _, alerts = _classify(entry.pass_rate, entry.avg_score)
    for alert in alerts:
        if alert.startswith("CRITICAL"):
            logger.error("quality_alert section=%s optimization_id=%s %s", entry.section, entry.optimization_id, alert)
        else:
            logger.warning("quality_alert section=%s optimization_id=%s %s", entry.section, entry.optimization_id, alert)
    return alerts
