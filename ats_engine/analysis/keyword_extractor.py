from __future__ import annotations

import logging
import re

from pydantic import BaseModel, Field

from ats_engine.ai.completion import json_completion, truncate
from ats_engine.ai.parsing import parse_payload
from ats_engine.ai.types import LLMClient
from ats_engine.core.config import settings
from ats_engine.core.config.scoring import get_scoring_value
from ats_engine.core.errors import ExtractionError, ExtractionTimeoutError, LLMError, LLMTimeoutError, ValidationError
from ats_engine.normalize.utils import term_pattern
from ats_engine.schemas.keywords import (
    IMPORTANCE_RANK,
    ExtractedKeyword,
    Importance,
    KeywordCategory,
    normalize_keyword_text,
)

logger = logging.getLogger(__name__)

_SEGMENT_SPLIT_RE = re.compile(r"(?<=[.!?])\s+|[;\n•]")

_SYSTEM_PROMPT = (
    "You are a job posting analyst. Extract the keywords an applicant tracking system "
    "would screen for. Return JSON only."
)

_USER_PROMPT = """Extract the keywords from this job description.

<job_description>
{job_description}
</job_description>

For each keyword return:
- keyword: the term as written (e.g. "Python", "project management", "AWS Certified Solutions Architect")
- category: one of "skills", "technologies", "qualifications", "experience", "soft_skills", "certifications"
- importance: "high" when the posting requires it, "medium" when it is emphasized but not required, "low" when it is a nice-to-have
- required: true when the posting marks it as required

Rules:
- Do not invent keywords that are not in the job description.
- Prefer specific terms over generic ones ("PostgreSQL" over "databases").
- When unsure whether something is required, treat it as required.

Return: {{"keywords": [{{"keyword": "Python", "category": "technologies", "importance": "high", "required": true}}]}}"""


class _RawKeyword(BaseModel):
    keyword: str = Field(min_length=1)
    category: KeywordCategory
    importance: Importance
    required: bool | None = None


class _ExtractionPayload(BaseModel):
    keywords: list[_RawKeyword] = Field(default_factory=list)


def validate_job_description(job_description: str | None) -> str:
    text = (job_description or "").strip()
    min_chars = int(get_scoring_value("extraction.min_jd_chars", 50))
    if len(text) < min_chars:
        raise ValidationError(
            f"Job description must be at least {min_chars} characters (got {len(text)}).",
            code="VALIDATION_ERROR",
        )
    return text


def _markers(path: str) -> tuple[str, ...]:
    values = get_scoring_value(path, []) or []
    return tuple(str(value).lower() for value in values)


def _nearest_marker_kind(segment: str, keyword: str) -> str | None:
    found_keyword = term_pattern(keyword).search(segment)
    if found_keyword is None:
        return None
    position = found_keyword.start()
    lowered = segment.lower()

    best_kind: str | None = None
    best_distance: int | None = None
    for kind, markers in (
        ("required", _markers("extraction.required_markers")),
        ("preferred", _markers("extraction.preferred_markers")),
    ):
        for marker in markers:
            for found in re.finditer(rf"(?<![a-z]){re.escape(marker)}(?![a-z])", lowered):
                distance = abs(found.start() - position)
                if best_distance is None or distance < best_distance:
                    best_kind, best_distance = kind, distance
    return best_kind


def contextual_requirement(job_description: str, keyword: str) -> str | None:
    """Return 'required' or 'preferred' from the framing nearest the keyword, if any."""
    kinds: list[str] = []
    pattern = term_pattern(keyword)
    for segment in _SEGMENT_SPLIT_RE.split(job_description):
        if not segment or not pattern.search(segment):
            continue
        kind = _nearest_marker_kind(segment, keyword)
        if kind:
            kinds.append(kind)
    if "required" in kinds:
        return "required"
    if "preferred" in kinds:
        return "preferred"
    return None


def _higher(left: Importance, right: Importance) -> Importance:
    return left if IMPORTANCE_RANK[left] >= IMPORTANCE_RANK[right] else right


def finalize_keywords(raw_keywords: list[_RawKeyword], job_description: str) -> list[ExtractedKeyword]:
    """Apply contextual importance, dedupe by normalized text and keep first-seen order."""
    ordered: dict[str, ExtractedKeyword] = {}
    limit = int(get_scoring_value("extraction.max_keywords", 40))

    for raw in raw_keywords:
        importance: Importance = raw.importance
        required = bool(raw.required) if raw.required is not None else importance == "high"
        if contextual_requirement(job_description, raw.keyword) == "required":
            importance = "high"
            required = True
        if importance == "high" and raw.required is None:
            required = True

        key = normalize_keyword_text(raw.keyword)
        if not key:
            continue
        existing = ordered.get(key)
        if existing is None:
            if len(ordered) >= limit:
                continue
            ordered[key] = ExtractedKeyword(
                text=raw.keyword,
                category=raw.category,
                importance=importance,
                required=required,
            )
            continue
        ordered[key] = existing.model_copy(
            update={
                "importance": _higher(existing.importance, importance),
                "required": existing.required or required,
            }
        )
    return list(ordered.values())


async def extract_keywords(job_description: str, *, client: LLMClient) -> list[ExtractedKeyword]:
    text = validate_job_description(job_description)
    prompt = _USER_PROMPT.format(job_description=truncate(text, settings.max_jd_chars))
    try:
        payload = await json_completion(
            client,
            system_prompt=_SYSTEM_PROMPT,
            user_prompt=prompt,
            task="keyword_extraction",
            temperature=0.0,
            max_tokens=1500,
        )
    except LLMTimeoutError as exc:
        raise ExtractionTimeoutError(f"Keyword extraction timed out: {exc}") from exc
    except LLMError as exc:
        raise ExtractionError(f"Keyword extraction failed: {exc}", code=exc.code if exc.code != "LLM_ERROR" else None) from exc

    parsed = parse_payload(_ExtractionPayload, payload, task="keyword_extraction")
    keywords = finalize_keywords(parsed.keywords, text)
    logger.info(
        "keywords_extracted total=%s high=%s jd_chars=%s",
        len(keywords),
        sum(1 for item in keywords if item.importance == "high"),
        len(text),
    )
    return keywords
