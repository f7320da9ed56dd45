from __future__ import annotations

import logging
from datetime import date

from ats_engine.analysis.qualifications import resume_qualifications
from ats_engine.core.config.scoring import get_scoring_value
from ats_engine.core.errors import ComputationError
from ats_engine.normalize.utils import round_half_up
from ats_engine.schemas.keywords import KeywordAnalysisResult
from ats_engine.schemas.resume import StructuredResume
from ats_engine.schemas.scoring import (
    DIMENSIONS,
    ActionItem,
    ATSScore,
    JDQualifications,
    ScoreBreakdown,
    ScoreTier,
    WeightProfile,
)

from .content_quality import content_quality_action_items, score_content_quality
from .format_score import format_action_items, score_format
from .keyword_score import keyword_action_items, score_keywords
from .qualification_fit import qualification_action_items, score_qualification_fit
from .section_score import section_action_items, score_sections
from .weights import detect_job_role, detect_seniority, select_weight_profile, validate_weight_profile

logger = logging.getLogger(__name__)

ALGORITHM_VERSION = "v2.1.0-2026.01"

_PRIORITY_RANK = {"critical": 0, "high": 1, "medium": 2, "low": 3}
_DEFAULT_GAIN = {"critical": 15.0, "high": 10.0, "medium": 5.0, "low": 2.0}


def combine_scores(breakdown: ScoreBreakdown, profile: WeightProfile) -> int:
    """Weighted sum of the five sub-scores, rounded half-up once at the end."""
    validate_weight_profile(profile)
    weights = profile.weights()
    scores = breakdown.scores()
    total = 0.0
    for dimension in DIMENSIONS:
        value = scores[dimension]
        if value != value:  # NaN
            raise ComputationError(f"Sub-score '{dimension}' is not a number", code="SCORE_INVALID")
        total += value * weights[dimension]
    return max(0, min(100, round_half_up(total)))


def score_tier(overall: int) -> ScoreTier:
    if overall >= int(get_scoring_value("tiers.excellent", 85)):
        return "excellent"
    if overall >= int(get_scoring_value("tiers.strong", 70)):
        return "strong"
    if overall >= int(get_scoring_value("tiers.moderate", 55)):
        return "moderate"
    return "weak"


def prioritize_action_items(items: list[ActionItem], profile: WeightProfile) -> list[ActionItem]:
    weights = profile.weights()
    ranked: list[ActionItem] = []
    for item in items:
        gain = item.potential_gain or _DEFAULT_GAIN[item.priority]
        ranked.append(item.model_copy(update={"potential_gain": round(gain * weights[item.dimension], 2)}))
    ranked.sort(key=lambda item: (_PRIORITY_RANK[item.priority], -item.potential_gain))
    return ranked[: int(get_scoring_value("action_items.limit", 8))]


def calculate_ats_score(
    analysis: KeywordAnalysisResult,
    resume: StructuredResume,
    *,
    job_description: str,
    jd_qualifications: JDQualifications | None = None,
    candidate_type: str = "fulltime",
    today: date | None = None,
) -> ATSScore:
    """Deterministic five-dimension score for one resume against one job description."""
    role = detect_job_role(job_description)
    seniority = detect_seniority(job_description, candidate_type)
    profile = select_weight_profile(candidate_type, seniority, role)

    keyword_texts = [keyword.text for keyword in analysis.all_keywords()]
    breakdown = ScoreBreakdown(
        keywords=score_keywords(analysis),
        qualification_fit=score_qualification_fit(
            jd_qualifications or JDQualifications(),
            resume_qualifications(resume, today=today),
        ),
        content_quality=score_content_quality(resume, keyword_texts, candidate_type),
        sections=score_sections(resume, candidate_type),
        format=score_format(resume),
    )
    overall = combine_scores(breakdown, profile)

    items = [
        *keyword_action_items(breakdown.keywords),
        *qualification_action_items(breakdown.qualification_fit),
        *content_quality_action_items(breakdown.content_quality),
        *section_action_items(breakdown.sections),
        *format_action_items(breakdown.format),
    ]
    result = ATSScore(
        overall=overall,
        breakdown=breakdown,
        weight_profile=profile,
        tier=score_tier(overall),
        candidate_type=candidate_type,
        role=role,
        seniority=seniority,
        action_items=prioritize_action_items(items, profile),
        algorithm_version=ALGORITHM_VERSION,
    )
    logger.info(
        "ats_scored overall=%s tier=%s profile=%s candidate_type=%s",
        result.overall,
        result.tier,
        profile.name,
        candidate_type,
    )
    return result
