from __future__ import annotations

from ats_engine.core.config.scoring import get_scoring_value
from ats_engine.schemas.keywords import KeywordAnalysisResult
from ats_engine.schemas.scoring import ActionItem, SubScore


def _importance_weight(importance: str) -> float:
    return float(get_scoring_value(f"keywords.importance_weights.{importance}", 0.6))


def _match_weight(match_type: str) -> float:
    return float(get_scoring_value(f"matching.match_type_weights.{match_type}", 0.65))


def _placement_weight(location: str) -> float:
    return float(
        get_scoring_value(
            f"keywords.placement_weights.{location}",
            get_scoring_value("keywords.placement_weights.other", 0.65),
        )
    )


def score_keywords(analysis: KeywordAnalysisResult) -> SubScore:
    """Required-keyword coverage with per-miss penalties plus a capped preferred bonus (0-100)."""
    if analysis.total == 0:
        return SubScore(score=100.0, details={"reason": "no_keywords"})

    required_possible = required_achieved = 0.0
    preferred_possible = preferred_achieved = 0.0
    penalty = 0.0
    missing_required: list[str] = []
    missing_preferred: list[str] = []
    inexact_required: list[str] = []

    for item in analysis.matched:
        keyword = item.keyword
        earned = _importance_weight(keyword.importance) * _match_weight(item.match_type) * _placement_weight(item.resume_location)
        if keyword.required:
            required_possible += _importance_weight(keyword.importance)
            required_achieved += earned
            if item.match_type != "exact":
                inexact_required.append(keyword.text)
        else:
            preferred_possible += _importance_weight(keyword.importance)
            preferred_achieved += earned

    for keyword in analysis.missing:
        if keyword.required:
            required_possible += _importance_weight(keyword.importance)
            missing_required.append(keyword.text)
            if keyword.importance == "high":
                penalty += float(get_scoring_value("keywords.missing_high_penalty", 0.15))
            else:
                penalty += float(get_scoring_value("keywords.missing_required_penalty", 0.12))
        else:
            preferred_possible += _importance_weight(keyword.importance)
            missing_preferred.append(keyword.text)

    floor = float(get_scoring_value("keywords.min_penalty_multiplier", 0.30))
    multiplier = max(floor, 1.0 - penalty)
    preferred_ratio = preferred_achieved / preferred_possible if preferred_possible > 0 else 0.0

    if required_possible > 0:
        required_ratio = required_achieved / required_possible
        bonus = preferred_ratio * float(get_scoring_value("keywords.preferred_bonus_cap", 0.25))
        final = min(1.0, required_ratio * multiplier + bonus)
    else:
        required_ratio = 1.0
        bonus = 0.0
        final = preferred_ratio

    return SubScore(
        score=max(0.0, min(100.0, final * 100)),
        details={
            "required_ratio": required_ratio,
            "preferred_ratio": preferred_ratio,
            "preferred_bonus": bonus,
            "penalty_multiplier": multiplier,
            "missing_required": missing_required,
            "missing_preferred": missing_preferred,
            "inexact_required": inexact_required,
            "match_percentage": analysis.match_percentage,
        },
    )


def keyword_action_items(sub_score: SubScore) -> list[ActionItem]:
    items: list[ActionItem] = []
    details = sub_score.details
    missing_required = details.get("missing_required") or []
    if missing_required:
        items.append(
            ActionItem(
                dimension="keywords",
                priority="critical",
                message=f"Add missing required keywords you genuinely have: {', '.join(missing_required[:4])}",
                potential_gain=float(len(missing_required)),
            )
        )
    inexact = details.get("inexact_required") or []
    if inexact:
        items.append(
            ActionItem(
                dimension="keywords",
                priority="high",
                message=f"Use the job description's exact wording for: {', '.join(inexact[:2])}",
            )
        )
    missing_preferred = details.get("missing_preferred") or []
    if len(missing_preferred) > 3:
        items.append(
            ActionItem(
                dimension="keywords",
                priority="medium",
                message=f"Consider adding preferred keywords: {', '.join(missing_preferred[:3])}",
            )
        )
    return items
