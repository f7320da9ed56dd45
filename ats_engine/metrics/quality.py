from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone
from typing import Iterable

from ats_engine.core.config.scoring import get_scoring_value
from ats_engine.schemas.judge import CRITERIA, JudgeResult
from ats_engine.schemas.metrics import SCORE_BUCKETS, FailurePattern, QualityMetricLog

_REASON_MAX_CHARS = 100


def _round2(value: float) -> float:
    return round(value + 0.0, 2)


def criterion_failure_threshold() -> int:
    return int(get_scoring_value("metrics.criterion_failure_threshold", 15))


def pass_rate(results: list[JudgeResult]) -> float:
    if not results:
        return 0.0
    return _round2(sum(1 for result in results if result.passed) / len(results) * 100)


def average_score(results: list[JudgeResult]) -> float:
    if not results:
        return 0.0
    return _round2(sum(result.overall_score for result in results) / len(results))


def score_bucket(score: int) -> str:
    index = min(int(score) // 20, len(SCORE_BUCKETS) - 1)
    return SCORE_BUCKETS[max(index, 0)]


def score_distribution(results: Iterable[JudgeResult]) -> dict[str, int]:
    distribution = {bucket: 0 for bucket in SCORE_BUCKETS}
    for result in results:
        distribution[score_bucket(result.overall_score)] += 1
    return distribution


def criteria_averages(results: list[JudgeResult]) -> dict[str, float]:
    if not results:
        return {criterion: 0.0 for criterion in CRITERIA}
    return {
        criterion: _round2(sum(getattr(result.criteria_scores, criterion) for result in results) / len(results))
        for criterion in CRITERIA
    }


def failure_breakdown(results: Iterable[JudgeResult]) -> dict[str, int]:
    """Count, among non-passing results, how often each criterion fell below the failure threshold."""
    threshold = criterion_failure_threshold()
    breakdown = {criterion: 0 for criterion in CRITERIA}
    for result in results:
        if result.passed:
            continue
        for criterion, score in result.criteria_scores.as_dict().items():
            if score < threshold:
                breakdown[criterion] += 1
    return breakdown


def weakest_criterion(result: JudgeResult) -> str:
    scores = result.criteria_scores.as_dict()
    return min(CRITERIA, key=lambda criterion: scores[criterion])


def extract_failure_patterns(results: Iterable[JudgeResult], *, limit: int | None = None) -> list[FailurePattern]:
    """Group failed results by weakest criterion and judge reasoning, most frequent first."""
    top = int(get_scoring_value("metrics.failure_pattern_limit", 5)) if limit is None else limit
    counts: Counter[tuple[str, str]] = Counter()
    for result in results:
        if result.passed:
            continue
        reason = " ".join(result.reasoning.split())[:_REASON_MAX_CHARS] or "No reasoning provided"
        counts[(weakest_criterion(result), reason)] += 1
    return [
        FailurePattern(criterion=criterion, reason=reason, count=count)
        for (criterion, reason), count in counts.most_common(top)
    ]


def collect_quality_metrics(
    results: list[JudgeResult],
    section: str,
    optimization_id: str | None = None,
    *,
    now: datetime | None = None,
) -> QualityMetricLog:
    passed = sum(1 for result in results if result.passed)
    return QualityMetricLog(
        timestamp=(now or datetime.now(timezone.utc)).isoformat(),
        optimization_id=optimization_id,
        section=section,
        total_evaluated=len(results),
        passed=passed,
        failed=len(results) - passed,
        pass_rate=pass_rate(results),
        avg_score=average_score(results),
        score_distribution=score_distribution(results),
        criteria_averages=criteria_averages(results),
        failure_breakdown=failure_breakdown(results),
        failure_patterns=extract_failure_patterns(results),
    )
