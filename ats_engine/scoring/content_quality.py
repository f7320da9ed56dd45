from __future__ import annotations

import re
from typing import Literal

from ats_engine.core.config.scoring import get_scoring_value
from ats_engine.normalize.utils import strip_bullet_prefix, term_pattern
from ats_engine.schemas.resume import StructuredResume
from ats_engine.schemas.scoring import ActionItem, SubScore

VerbStrength = Literal["strong", "moderate", "weak", "unknown"]
QuantTier = Literal["high", "medium", "low"]

STRONG_ACTION_VERBS = {
    "led", "directed", "managed", "supervised", "headed", "oversaw", "coordinated", "orchestrated",
    "spearheaded", "championed", "achieved", "accomplished", "delivered", "exceeded", "surpassed",
    "secured", "grew", "increased", "expanded", "scaled", "accelerated", "boosted", "enhanced",
    "maximized", "optimized", "built", "created", "developed", "designed", "established", "founded",
    "launched", "initiated", "pioneered", "introduced", "improved", "streamlined", "transformed",
    "revamped", "modernized", "upgraded", "refined", "restructured", "solved", "resolved", "fixed",
    "eliminated", "reduced", "minimized", "prevented", "mitigated", "drove", "generated", "produced",
    "saved", "cut", "negotiated", "implemented", "architected", "engineered", "automated", "deployed",
    "migrated", "integrated", "refactored", "mentored", "trained", "analyzed",
}

MODERATE_ACTION_VERBS = {
    "contributed", "collaborated", "partnered", "facilitated", "supported", "assisted", "participated",
    "engaged", "maintained", "handled", "processed", "performed", "conducted", "completed", "prepared",
    "organized", "documented", "wrote", "tested", "reviewed", "updated", "modified",
}

WEAK_ACTION_VERBS = {
    "helped", "worked", "was", "had", "did", "made", "dealt", "used", "involved", "responsible",
    "tried", "attempted", "learned", "studied", "observed", "watched", "saw", "knew", "understood",
    "familiarized",
}

WEAK_VERB_PHRASES: tuple[str, ...] = (
    "was responsible for",
    "responsible for",
    "was involved in",
    "dealt with",
    "tasked with",
    "in charge of",
    "looked after",
)

# Ordered high -> low; the best tier found in a bullet counts.
QUANTIFICATION_PATTERNS: tuple[tuple[re.Pattern[str], QuantTier], ...] = (
    (re.compile(r"\$[\d,]+(?:\.\d+)?\s*[MBT]\b", re.IGNORECASE), "high"),
    (re.compile(r"\b9\d(?:\.\d+)?\s*%"), "high"),
    (re.compile(r"\b\d{2,}x\b", re.IGNORECASE), "high"),
    (re.compile(r"\b\d{1,3}(?:,\d{3}){2,}\+?"), "high"),
    (re.compile(r"team\s+of\s+\d{2,}", re.IGNORECASE), "high"),
    (re.compile(r"\b\d+\s*(?:countries|regions|markets)\b", re.IGNORECASE), "high"),
    (re.compile(r"\$[\d,]+(?:\.\d+)?\s*K\b", re.IGNORECASE), "medium"),
    (re.compile(r"\b[5-8]\d(?:\.\d+)?\s*%"), "medium"),
    (re.compile(r"\b[2-9]x\b", re.IGNORECASE), "medium"),
    (re.compile(r"\b\d{1,3},\d{3}\+?\s*(?:users?|customers?|requests?)", re.IGNORECASE), "medium"),
    (re.compile(r"team\s+of\s+\d", re.IGNORECASE), "medium"),
    (re.compile(r"\$[\d,]+(?:\.\d+)?"), "low"),
    (re.compile(r"\b\d{1,2}(?:\.\d+)?\s*%"), "low"),
    (re.compile(r"\b\d+\+?\s*(?:users?|customers?|clients?)", re.IGNORECASE), "low"),
)


def content_bullets(resume: StructuredResume) -> list[str]:
    """Bullet-level content from experience, projects and education details."""
    bullets = list(resume.all_bullets())
    for entry in resume.experience:
        if not entry.bullets and entry.description.strip():
            bullets.append(entry.description)
    for entry in resume.education:
        bullets.extend(detail for detail in entry.details if detail.strip())
    return [strip_bullet_prefix(bullet) for bullet in bullets if bullet.strip()]


def quantification_tier(bullet: str) -> QuantTier | None:
    for pattern, tier in QUANTIFICATION_PATTERNS:
        if pattern.search(bullet):
            return tier
    return None


def classify_action_verb(bullet: str) -> VerbStrength:
    lowered = bullet.strip().lower()
    if any(lowered.startswith(phrase) for phrase in WEAK_VERB_PHRASES):
        return "weak"
    words = lowered.split()
    first = re.sub(r"[^a-z]", "", words[0]) if words else ""
    if not first:
        return "unknown"
    if first in STRONG_ACTION_VERBS:
        return "strong"
    if first in MODERATE_ACTION_VERBS:
        return "moderate"
    if first in WEAK_ACTION_VERBS:
        return "weak"
    return "unknown"


def _quantification_score(bullets: list[str]) -> tuple[float, dict[str, int]]:
    counts = {"high": 0, "medium": 0, "low": 0}
    points = 0.0
    for bullet in bullets:
        tier = quantification_tier(bullet)
        if tier is None:
            continue
        counts[tier] += 1
        points += float(get_scoring_value(f"content_quality.quantification_tier_points.{tier}", 0.4))
    with_metrics = sum(counts.values())
    coverage = with_metrics / len(bullets)
    quality = points / with_metrics if with_metrics else 0.0
    return (coverage * 0.6 + quality * 0.4) * 100, counts


def _action_verb_score(bullets: list[str], candidate_type: str) -> tuple[float, dict[str, int]]:
    counts = {"strong": 0, "moderate": 0, "weak": 0}
    for bullet in bullets:
        strength = classify_action_verb(bullet)
        if strength in counts:
            counts[strength] += 1
    total = len(bullets)
    if candidate_type == "coop":
        penalty = float(get_scoring_value("content_quality.coop_weak_verb_penalty", 0.05))
        raw = (counts["strong"] + counts["moderate"]) / total - counts["weak"] * penalty
    else:
        moderate_credit = float(get_scoring_value("content_quality.moderate_verb_credit", 0.6))
        weak_penalty = float(get_scoring_value("content_quality.weak_verb_penalty", 0.2))
        raw = (counts["strong"] + counts["moderate"] * moderate_credit - counts["weak"] * weak_penalty) / total
    return max(0.0, min(1.0, raw)) * 100, counts


def _keyword_density_score(bullets: list[str], keywords: list[str]) -> tuple[float, list[str]]:
    if not keywords:
        return float(get_scoring_value("content_quality.no_keywords_density_score", 50)), []
    text = "\n".join(bullets)
    found = [keyword for keyword in keywords if term_pattern(keyword).search(text)]
    full_coverage = float(get_scoring_value("content_quality.keyword_density_full_coverage", 0.5))
    return min(1.0, len(found) / len(keywords) / full_coverage) * 100, found


def score_content_quality(resume: StructuredResume, keywords: list[str], candidate_type: str) -> SubScore:
    bullets = content_bullets(resume)
    if not bullets:
        return SubScore(score=0.0, details={"total_bullets": 0, "reason": "no_bullets"})

    quant_score, tiers = _quantification_score(bullets)
    verb_score, verbs = _action_verb_score(bullets, candidate_type)
    density_score, found = _keyword_density_score(bullets, keywords)

    weights = {
        "quantification": float(get_scoring_value("content_quality.weights.quantification", 0.35)),
        "action_verbs": float(get_scoring_value("content_quality.weights.action_verbs", 0.30)),
        "keyword_density": float(get_scoring_value("content_quality.weights.keyword_density", 0.35)),
    }
    score = (
        quant_score * weights["quantification"]
        + verb_score * weights["action_verbs"]
        + density_score * weights["keyword_density"]
    )
    return SubScore(
        score=max(0.0, min(100.0, score)),
        details={
            "total_bullets": len(bullets),
            "quantification_score": quant_score,
            "action_verb_score": verb_score,
            "keyword_density_score": density_score,
            "bullets_with_metrics": sum(tiers.values()),
            "metric_tiers": tiers,
            "verb_counts": verbs,
            "keywords_in_content": found,
        },
    )


def content_quality_action_items(sub_score: SubScore) -> list[ActionItem]:
    details = sub_score.details
    total = details.get("total_bullets", 0)
    if not total:
        return [
            ActionItem(
                dimension="content_quality",
                priority="high",
                message="Add bullet points describing what you built or achieved",
            )
        ]
    items: list[ActionItem] = []
    if details.get("quantification_score", 0) < 40:
        items.append(
            ActionItem(
                dimension="content_quality",
                priority="high",
                message=f"Add metrics to bullets (only {details.get('bullets_with_metrics', 0)}/{total} are quantified)",
            )
        )
    verbs = details.get("verb_counts") or {}
    if verbs.get("weak", 0) > verbs.get("strong", 0):
        items.append(
            ActionItem(
                dimension="content_quality",
                priority="high",
                message='Replace weak openers like "Helped" or "Worked on" with strong verbs such as "Led" or "Built"',
            )
        )
    tiers = details.get("metric_tiers") or {}
    if tiers.get("low", 0) > tiers.get("high", 0) and details.get("bullets_with_metrics", 0):
        items.append(
            ActionItem(
                dimension="content_quality",
                priority="medium",
                message="Upgrade metrics to higher-impact numbers such as revenue, percentages or scale",
            )
        )
    if details.get("keyword_density_score", 100) < 50:
        items.append(
            ActionItem(
                dimension="content_quality",
                priority="low",
                message="Work more job description keywords into your bullets",
            )
        )
    return items
