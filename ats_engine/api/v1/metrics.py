from fastapi import APIRouter, Depends, Query

from ats_engine.core.security import require_api_key
from ats_engine.metrics import query
from ats_engine.schemas.resume import SectionName

router = APIRouter()


@router.get("/metrics/today")
def today(_: None = Depends(require_api_key)):
    return query.get_today_metrics()


@router.get("/metrics/weekly")
def weekly(_: None = Depends(require_api_key)):
    return query.get_weekly_metrics()


@router.get("/metrics/sections/{section}")
def section(
    section: SectionName,
    days: int = Query(default=7, ge=1, le=90),
    _: None = Depends(require_api_key),
):
    return query.get_section_metrics(section, days=days)


@router.get("/metrics/trend")
def trend(
    days: int = Query(default=7, ge=1, le=90),
    _: None = Depends(require_api_key),
):
    return query.get_pass_rate_trend(days=days)


@router.get("/metrics/failure-patterns")
def failure_patterns(
    limit: int = Query(default=10, ge=1, le=50),
    days: int = Query(default=7, ge=1, le=90),
    _: None = Depends(require_api_key),
):
    return query.get_failure_patterns(limit=limit, days=days)


@router.get("/metrics/health")
def health(
    days: int = Query(default=1, ge=1, le=30),
    _: None = Depends(require_api_key),
):
    return query.get_quality_health(days=days)
