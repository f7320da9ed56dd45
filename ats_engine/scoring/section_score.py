from __future__ import annotations

from typing import Any

from ats_engine.core.config.scoring import get_scoring_value
from ats_engine.schemas.resume import StructuredResume
from ats_engine.schemas.scoring import ActionItem, SubScore

SCORED_SECTIONS: tuple[str, ...] = ("summary", "skills", "experience", "education", "projects", "certifications")


def section_config(candidate_type: str) -> dict[str, dict[str, Any]]:
    config = get_scoring_value(f"sections.{candidate_type}") or get_scoring_value("sections.fulltime") or {}
    return {name: dict(value) for name, value in config.items() if isinstance(value, dict)}


def _entry_units(bullets: list[str], fallback: str) -> int:
    count = sum(1 for bullet in bullets if bullet.strip())
    return count or (1 if fallback.strip() else 0)


def section_measure(resume: StructuredResume, section: str) -> int:
    """Content size used against the per-section threshold: characters or item counts."""
    if section == "summary":
        return len(resume.section_text("summary").strip())
    if section == "education":
        return len(resume.section_text("education").strip())
    if section == "skills":
        return sum(1 for skill in resume.skills if skill.strip())
    if section == "experience":
        return sum(_entry_units(entry.bullets, entry.description or entry.title) for entry in resume.experience)
    if section == "projects":
        return sum(_entry_units(entry.bullets, entry.description or entry.name) for entry in resume.projects)
    if section == "certifications":
        return sum(1 for cert in resume.certifications if cert.strip())
    return 0


def score_sections(resume: StructuredResume, candidate_type: str) -> SubScore:
    config = section_config(candidate_type)
    achieved = 0.0
    possible = 0.0
    breakdown: dict[str, dict[str, Any]] = {}

    for section in SCORED_SECTIONS:
        rules = config.get(section)
        if not rules:
            continue
        measure = section_measure(resume, section)
        required = bool(rules.get("required", False))
        if not required and measure == 0:
            continue
        max_points = float(rules.get("max_points", 0))
        threshold = float(rules.get("min_chars") or rules.get("min_items") or 1)
        points = max_points * min(1.0, measure / threshold) if measure else 0.0
        possible += max_points
        achieved += points
        breakdown[section] = {
            "present": measure > 0,
            "required": required,
            "meets_threshold": measure >= threshold,
            "measure": measure,
            "threshold": threshold,
            "points": points,
            "max_points": max_points,
        }

    score = achieved / possible * 100 if possible > 0 else 0.0
    return SubScore(
        score=max(0.0, min(100.0, score)),
        details={"candidate_type": candidate_type, "sections": breakdown},
    )


def section_action_items(sub_score: SubScore) -> list[ActionItem]:
    items: list[ActionItem] = []
    for section, info in (sub_score.details.get("sections") or {}).items():
        if not info["present"]:
            items.append(
                ActionItem(
                    dimension="sections",
                    priority="high" if info["required"] else "low",
                    message=f"Add a {section} section",
                    potential_gain=info["max_points"],
                )
            )
        elif not info["meets_threshold"]:
            items.append(
                ActionItem(
                    dimension="sections",
                    priority="medium",
                    message=f"Expand the {section} section",
                    potential_gain=info["max_points"] - info["points"],
                )
            )
    return items
