from __future__ import annotations

from typing import Literal

from ats_engine.analysis.qualifications import DEGREE_LEVELS
from ats_engine.core.config.scoring import get_scoring_value
from ats_engine.normalize.utils import term_pattern
from ats_engine.schemas.scoring import ActionItem, JDQualifications, ResumeQualifications, SubScore

FieldMatch = Literal["exact", "related", "none"]

DEGREE_FIELD_MATCHES: dict[str, tuple[str, ...]] = {
    "computer science": ("computer science", "cs", "computing", "computational"),
    "software engineering": ("software engineering", "software development"),
    "information technology": ("information technology", "it", "information systems", "mis"),
    "engineering": ("engineering", "electrical engineering", "computer engineering"),
    "related": ("mathematics", "math", "physics", "data science", "statistics"),
}


def _mentions(text: str, aliases: tuple[str, ...]) -> bool:
    return any(term_pattern(alias).search(text) for alias in aliases)


def field_match(resume_fields: list[str], required_fields: list[str]) -> FieldMatch:
    if not required_fields:
        return "exact"
    resume_text = " | ".join(resume_fields)
    if not resume_text.strip():
        return "none"
    for field in required_fields:
        if term_pattern(field).search(resume_text):
            return "exact"
    required_text = " | ".join(required_fields)
    for category, aliases in DEGREE_FIELD_MATCHES.items():
        if category == "related":
            continue
        if _mentions(resume_text, aliases) and (_mentions(required_text, aliases) or category in required_text.lower()):
            return "exact"
    if "related" in required_text.lower():
        if any(_mentions(resume_text, aliases) for aliases in DEGREE_FIELD_MATCHES.values()):
            return "related"
    return "none"


def _degree_fit(jd: JDQualifications, resume: ResumeQualifications) -> tuple[float, bool, str | None]:
    requirement = jd.degree
    if requirement is None:
        return 100.0, True, None
    required_level = DEGREE_LEVELS[requirement.level]
    has_level = DEGREE_LEVELS[resume.degree_level] if resume.degree_level else 0

    if has_level >= required_level:
        match = field_match(resume.degree_fields, requirement.fields)
        if match == "exact":
            return 100.0, True, "Degree fully matches requirements"
        if match == "related":
            return 85.0, True, "Degree in a related field"
        return 70.0, True, "Degree level met but field differs"
    if has_level == required_level - 1:
        return (50.0 if requirement.required else 75.0), False, "Degree level one step below requirement"
    note = "Degree level well below requirement" if resume.degree_level else "No degree listed"
    return (20.0 if requirement.required else 50.0), False, note


def _experience_fit(jd: JDQualifications, resume: ResumeQualifications) -> tuple[float, bool, str | None]:
    requirement = jd.experience
    if requirement is None or requirement.min_years <= 0:
        return 100.0, True, None
    required = requirement.min_years
    has = resume.total_experience_years or 0.0
    if has >= required:
        return 100.0, True, f"{has:g} years meets the {required:g}+ requirement"
    if has >= required * 0.75:
        return 75.0, False, f"{has:g} years slightly below the {required:g}+ requirement"
    if has >= required * 0.5:
        return (40.0 if requirement.required else 60.0), False, f"{has:g} years below the {required:g}+ requirement"
    return (15.0 if requirement.required else 40.0), False, f"{has:g} years well below the {required:g}+ requirement"


def _certification_fit(jd: JDQualifications, resume: ResumeQualifications) -> tuple[float, list[str], list[str]]:
    requirement = jd.certifications
    if requirement is None or not requirement.certifications:
        return 100.0, [], []
    held = [cert.lower() for cert in resume.certifications]
    met: list[str] = []
    missing: list[str] = []
    for cert in requirement.certifications:
        wanted = cert.lower()
        if any(wanted in have or have in wanted for have in held if have):
            met.append(cert)
        else:
            missing.append(cert)
    return len(met) / len(requirement.certifications) * 100, met, missing


def score_qualification_fit(jd: JDQualifications, resume: ResumeQualifications) -> SubScore:
    """Degree, experience-years and certification fit; neutral when the job states none."""
    if jd.is_empty():
        return SubScore(
            score=float(get_scoring_value("qualification_fit.neutral_score", 50)),
            details={"reason": "no_stated_qualifications"},
        )

    degree_score, degree_met, degree_note = _degree_fit(jd, resume)
    experience_score, experience_met, experience_note = _experience_fit(jd, resume)
    cert_score, certs_met, certs_missing = _certification_fit(jd, resume)

    score = (
        degree_score * float(get_scoring_value("qualification_fit.weights.degree", 0.40))
        + experience_score * float(get_scoring_value("qualification_fit.weights.experience", 0.40))
        + cert_score * float(get_scoring_value("qualification_fit.weights.certifications", 0.20))
    )
    return SubScore(
        score=max(0.0, min(100.0, score)),
        details={
            "degree_score": degree_score,
            "experience_score": experience_score,
            "certification_score": cert_score,
            "degree_met": degree_met,
            "degree_note": degree_note,
            "experience_met": experience_met,
            "experience_note": experience_note,
            "certifications_met": certs_met,
            "certifications_missing": certs_missing,
        },
    )


def qualification_action_items(sub_score: SubScore) -> list[ActionItem]:
    details = sub_score.details
    items: list[ActionItem] = []
    if details.get("experience_met") is False and details.get("experience_note"):
        items.append(ActionItem(dimension="qualification_fit", priority="medium", message=details["experience_note"]))
    if details.get("degree_met") is False and details.get("degree_note"):
        items.append(ActionItem(dimension="qualification_fit", priority="medium", message=details["degree_note"]))
    missing = details.get("certifications_missing") or []
    if missing:
        items.append(
            ActionItem(
                dimension="qualification_fit",
                priority="low",
                message=f"Missing certifications: {', '.join(missing[:2])}",
            )
        )
    return items
