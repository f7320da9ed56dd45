from __future__ import annotations

import logging
import re
from datetime import date

from pydantic import BaseModel

from ats_engine.ai.completion import json_completion, truncate
from ats_engine.ai.parsing import parse_payload
from ats_engine.ai.types import LLMClient
from ats_engine.core.config import settings
from ats_engine.core.errors import ExtractionError, ExtractionTimeoutError, LLMError, LLMTimeoutError
from ats_engine.schemas.resume import StructuredResume
from ats_engine.schemas.scoring import (
    CertificationRequirement,
    DegreeLevel,
    DegreeRequirement,
    ExperienceRequirement,
    JDQualifications,
    ResumeQualifications,
)

logger = logging.getLogger(__name__)

DEGREE_LEVELS: dict[str, int] = {
    "high_school": 1,
    "associate": 2,
    "bachelor": 3,
    "master": 4,
    "phd": 5,
}

_DEGREE_PATTERNS: tuple[tuple[DegreeLevel, re.Pattern[str]], ...] = (
    ("phd", re.compile(r"\b(ph\.?\s?d|doctor(ate)?|d\.?phil)\b", re.I)),
    ("master", re.compile(r"\b(master'?s?|m\.?sc?|m\.?eng|mba|m\.?a\.?)\b", re.I)),
    ("bachelor", re.compile(r"\b(bachelor'?s?|b\.?sc?|b\.?eng|b\.?a\.?|bcom|undergraduate)\b", re.I)),
    ("associate", re.compile(r"\b(associate'?s?|a\.?a\.?s?)\b", re.I)),
    ("high_school", re.compile(r"\b(high school|secondary school|ged)\b", re.I)),
)

_MONTH = (
    r"(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|Jun(?:e)?|Jul(?:y)?|Aug(?:ust)?"
    r"|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)"
)
_DATE_RANGE_RE = re.compile(
    rf"(?:{_MONTH}\.?\s+)?(\d{{4}})\s*(?:-|–|—|to)\s*(?:{_MONTH}\.?\s+)?(\d{{4}}|present|current|now)",
    re.I,
)
_YEAR_RE = re.compile(r"(\d{4})")
_ONGOING = {"present", "current", "now", ""}

_SYSTEM_PROMPT = "You are a job posting analyst extracting qualification requirements. Return JSON only."

_USER_PROMPT = """<job_description>
{job_description}
</job_description>

Extract the qualification requirements:
1. degree: level ("high_school", "associate", "bachelor", "master", "phd"; the highest mentioned), fields (acceptable fields, include "related field" when stated), required (false for "or equivalent experience" or "preferred")
2. experience: min_years, max_years (omit when no range), required
3. certifications: certifications (names or acronyms), required

Omit any requirement the posting does not mention.

Return: {{"degree": {{"level": "bachelor", "fields": ["Computer Science", "related field"], "required": true}}, "experience": {{"min_years": 3, "max_years": 5, "required": true}}, "certifications": {{"certifications": ["AWS"], "required": false}}}}"""


class _QualificationPayload(BaseModel):
    degree: DegreeRequirement | None = None
    experience: ExperienceRequirement | None = None
    certifications: CertificationRequirement | None = None


async def extract_jd_qualifications(job_description: str, *, client: LLMClient) -> JDQualifications:
    try:
        payload = await json_completion(
            client,
            system_prompt=_SYSTEM_PROMPT,
            user_prompt=_USER_PROMPT.format(job_description=truncate(job_description, settings.max_jd_chars)),
            task="qualification_extraction",
            temperature=0.0,
            max_tokens=600,
        )
    except LLMTimeoutError as exc:
        raise ExtractionTimeoutError(f"Qualification extraction timed out: {exc}") from exc
    except LLMError as exc:
        raise ExtractionError(f"Qualification extraction failed: {exc}") from exc

    parsed = parse_payload(_QualificationPayload, payload, task="qualification_extraction")
    logger.info(
        "jd_qualifications_extracted degree=%s min_years=%s certifications=%s",
        parsed.degree.level if parsed.degree else None,
        parsed.experience.min_years if parsed.experience else None,
        len(parsed.certifications.certifications) if parsed.certifications else 0,
    )
    return JDQualifications(
        degree=parsed.degree,
        experience=parsed.experience,
        certifications=parsed.certifications,
    )


def detect_degree_level(text: str) -> DegreeLevel | None:
    for level, pattern in _DEGREE_PATTERNS:
        if pattern.search(text or ""):
            return level
    return None


def _year_of(value: str | None, today: date) -> int | None:
    raw = (value or "").strip().lower()
    if raw in _ONGOING:
        return today.year
    found = _YEAR_RE.search(raw)
    return int(found.group(1)) if found else None


def experience_years_from_text(text: str, *, today: date | None = None) -> float:
    """Sum date ranges like 'Jan 2020 - Present', counting a half year for partial years."""
    current = today or date.today()
    total_months = 0
    for match in _DATE_RANGE_RE.finditer(text or ""):
        start = int(match.group(1))
        end_raw = match.group(2).lower()
        end = current.year if end_raw in _ONGOING else int(end_raw)
        if end >= start:
            total_months += (end - start) * 12 + 6
    return round(total_months / 12, 1)


def experience_years(resume: StructuredResume, *, today: date | None = None) -> float:
    current = today or date.today()
    total_months = 0
    counted = False
    for entry in resume.experience:
        start = _year_of(entry.start_date, current) if entry.start_date else None
        if start is None:
            continue
        end = _year_of(entry.end_date, current)
        if end is None or end < start:
            continue
        counted = True
        total_months += (end - start) * 12 + 6
    if counted:
        return round(total_months / 12, 1)
    return experience_years_from_text(resume.section_text("experience") or resume.raw_text, today=current)


def resume_qualifications(resume: StructuredResume, *, today: date | None = None) -> ResumeQualifications:
    best_level: DegreeLevel | None = None
    fields: list[str] = []
    for entry in resume.education:
        level = detect_degree_level(entry.degree)
        if level and (best_level is None or DEGREE_LEVELS[level] > DEGREE_LEVELS[best_level]):
            best_level = level
        if entry.field_of_study:
            fields.append(entry.field_of_study)
        elif entry.degree:
            fields.append(entry.degree)

    years = experience_years(resume, today=today) if resume.experience or resume.raw_text else None
    return ResumeQualifications(
        degree_level=best_level,
        degree_fields=fields,
        total_experience_years=years,
        certifications=list(resume.certifications),
    )
