from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

HealthStatus = Literal["healthy", "warning", "critical"]
MetricsPeriod = Literal["today", "weekly"]
SCORE_BUCKETS: tuple[str, ...] = ("0-20", "20-40", "40-60", "60-80", "80-100")


class FailurePattern(BaseModel):
    criterion: str
    reason: str
    count: int = Field(ge=1)


class QualityMetricLog(BaseModel):
    """Append-only aggregate of judge results for one section of one optimization run."""

    timestamp: str
    optimization_id: str | None = None
    section: str
    total_evaluated: int = Field(ge=0)
    passed: int = Field(ge=0)
    failed: int = Field(ge=0)
    pass_rate: float
    avg_score: float
    score_distribution: dict[str, int] = Field(default_factory=dict)
    criteria_averages: dict[str, float] = Field(default_factory=dict)
    failure_breakdown: dict[str, int] = Field(default_factory=dict)
    failure_patterns: list[FailurePattern] = Field(default_factory=list)


class SectionMetrics(BaseModel):
    section: str
    total_evaluated: int
    pass_rate: float
    avg_score: float
    top_failure: str | None = None


class MetricsSummary(BaseModel):
    period: MetricsPeriod
    date: str
    has_data: bool
    total_optimizations: int = 0
    total_evaluated: int = 0
    overall_pass_rate: float = 0.0
    overall_avg_score: float = 0.0
    by_section: dict[str, SectionMetrics] = Field(default_factory=dict)


class PassRatePoint(BaseModel):
    date: str
    pass_rate: float
    total_evaluated: int


class QualityHealth(BaseModel):
    status: HealthStatus
    pass_rate: float | None = None
    avg_score: float | None = None
    alerts: list[str] = Field(default_factory=list)
