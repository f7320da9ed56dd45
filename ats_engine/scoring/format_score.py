from __future__ import annotations

import re

from ats_engine.core.config.scoring import get_scoring_value
from ats_engine.normalize.utils import (
    has_email,
    has_github,
    has_linkedin,
    has_phone,
    is_bullet_like,
    word_count,
)
from ats_engine.schemas.resume import StructuredResume
from ats_engine.schemas.scoring import ActionItem, SubScore

_DATE_PATTERNS = (
    re.compile(
        r"\b(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|Jun(?:e)?|Jul(?:y)?|Aug(?:ust)?"
        r"|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)\.?\s+\d{4}\b",
        re.IGNORECASE,
    ),
    re.compile(r"\b\d{1,2}/\d{4}\b"),
    re.compile(r"\b\d{4}\s*[-–—]\s*(?:\d{4}|present|current|now)\b", re.IGNORECASE),
)
_HEADER_PATTERNS = (
    re.compile(r"\b(?:experience|work\s+experience|employment|professional\s+experience)\b", re.IGNORECASE),
    re.compile(r"\b(?:education|academic)\b", re.IGNORECASE),
    re.compile(r"\b(?:skills|technical\s+skills|core\s+competencies)\b", re.IGNORECASE),
    re.compile(r"\b(?:summary|profile|professional\s+summary)\b", re.IGNORECASE),
)
_OBJECTIVE_RE = re.compile(r"\b(?:objective|career\s+objective)\s*[:|\n]", re.IGNORECASE)
_REFERENCES_RE = re.compile(r"\breferences\s+(?:available\s+)?(?:upon|on)\s+request\b", re.IGNORECASE)

# Deductions that are real parsing problems; the rest surface as low-priority warnings.
_ISSUES = {"no_email", "few_dates", "too_short", "objective_without_summary"}

_MESSAGES = {
    "no_email": "Add a professional email address to your contact details",
    "no_phone": "Add a phone number to your contact details",
    "few_dates": 'Add dates to your work history (e.g. "Jan 2020 - Present")',
    "few_headers": "Use standard section headers (Summary, Skills, Experience, Education)",
    "no_bullets": "Use bullet points for experience and achievements",
    "too_short": "Resume is sparse; aim for at least 300 words",
    "too_long": "Resume may be too long; aim for under 800 words",
    "objective_without_summary": 'Replace the "Objective" section with a professional summary',
    "references_line": 'Remove "References available upon request"',
}


def _date_count(resume: StructuredResume, text: str) -> int:
    found = sum(len(pattern.findall(text)) for pattern in _DATE_PATTERNS)
    structured = sum(1 for entry in resume.experience for value in (entry.start_date, entry.end_date) if value)
    return max(found, structured)


def _header_count(resume: StructuredResume, text: str) -> int:
    found = sum(1 for pattern in _HEADER_PATTERNS if pattern.search(text)) if resume.raw_text.strip() else 0
    structured = sum(1 for section in ("experience", "education", "skills", "summary") if resume.has_section(section))
    return max(found, structured)


def _has_bullets(resume: StructuredResume) -> bool:
    if resume.all_bullets():
        return True
    return any(is_bullet_like(line) for line in resume.raw_text.splitlines())


def score_format(resume: StructuredResume) -> SubScore:
    """Start from full marks and deduct for parseability problems; small bonuses for profile links."""
    text = resume.full_text()
    contact = resume.contact
    contact_text = " ".join(value for value in (contact.email, contact.phone, contact.linkedin, contact.github) if value)
    searchable = f"{contact_text}\n{text}"
    has_experience = bool(resume.experience) or resume.has_section("experience")

    flags = {
        "no_email": not (contact.email or has_email(searchable)),
        "no_phone": not (contact.phone or has_phone(searchable)),
        "few_dates": has_experience and _date_count(resume, text) < int(get_scoring_value("format.min_dates", 2)),
        "few_headers": _header_count(resume, text) < int(get_scoring_value("format.min_headers", 3)),
        "no_bullets": has_experience and not _has_bullets(resume),
        "too_short": False,
        "too_long": False,
        "objective_without_summary": bool(
            (resume.objective.strip() or _OBJECTIVE_RE.search(text)) and not resume.summary.strip()
        ),
        "references_line": bool(_REFERENCES_RE.search(text)),
    }
    words = word_count(text)
    if words < int(get_scoring_value("format.min_words", 200)):
        flags["too_short"] = True
    elif words > int(get_scoring_value("format.max_words", 1000)):
        flags["too_long"] = True

    score = 1.0
    for flag, raised in flags.items():
        if raised:
            score -= float(get_scoring_value(f"format.deductions.{flag}", 0.05))
    linkedin = bool(contact.linkedin) or has_linkedin(searchable)
    github = bool(contact.github) or has_github(searchable)
    if linkedin:
        score += float(get_scoring_value("format.bonuses.linkedin", 0.03))
    if github:
        score += float(get_scoring_value("format.bonuses.github", 0.02))

    return SubScore(
        score=max(0.0, min(1.0, score)) * 100,
        details={
            "word_count": words,
            "flags": [flag for flag, raised in flags.items() if raised],
            "has_linkedin": linkedin,
            "has_github": github,
        },
    )


def format_action_items(sub_score: SubScore) -> list[ActionItem]:
    return [
        ActionItem(
            dimension="format",
            priority="high" if flag in _ISSUES else "low",
            message=_MESSAGES.get(flag, flag),
        )
        for flag in sub_score.details.get("flags") or []
    ]
