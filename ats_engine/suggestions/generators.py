from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Literal

from pydantic import BaseModel, Field

from ats_engine.ai.completion import json_completion, truncate
from ats_engine.ai.parsing import parse_payload
from ats_engine.ai.types import LLMClient
from ats_engine.core.config import settings
from ats_engine.core.errors import (
    GenerationError,
    GenerationTimeoutError,
    LLMError,
    LLMTimeoutError,
    ValidationError,
)
from ats_engine.schemas.suggestions import (
    AnySectionSuggestions,
    EducationSuggestions,
    ExperienceSuggestions,
    ProjectsSuggestions,
    SkillsSuggestions,
    Suggestion,
    SummarySuggestions,
)

from .ai_tells import detect_ai_tell_phrases
from .context import GenerationInputs, build_section_context
from .integrity import apply_integrity_filter
from .preferences import generation_temperature, preference_guidance
from .prompts import (
    CANDIDATE_NOTES,
    COMMON_RULES,
    EDUCATION_PROMPT,
    EXPERIENCE_PROMPT,
    PROJECTS_PROMPT,
    SKILLS_PROMPT,
    SUMMARY_PROMPT,
    SYSTEM_PROMPT,
)

logger = logging.getLogger(__name__)

SectionGenerator = Callable[..., Awaitable[AnySectionSuggestions]]


class _SummaryPayload(BaseModel):
    suggested: str = Field(min_length=1)
    keywords_added: list[str] = Field(default_factory=list)
    reasoning: str = ""


class _SkillItem(BaseModel):
    skill: str = Field(min_length=1)
    reason: str = ""


class _SkillsPayload(BaseModel):
    skill_additions: list[_SkillItem] = Field(default_factory=list)
    skill_removals: list[_SkillItem] = Field(default_factory=list)
    summary: str = ""


class _BulletRewrite(BaseModel):
    original: str = ""
    suggested: str = Field(min_length=1)
    keywords_added: list[str] = Field(default_factory=list)
    metrics_added: list[str] = Field(default_factory=list)
    impact: Literal["critical", "high", "moderate"] = "moderate"
    reasoning: str = ""


class _EntryRewrite(BaseModel):
    entry_index: int = Field(default=0, ge=0)
    bullets: list[_BulletRewrite] = Field(default_factory=list)


class _ExperiencePayload(BaseModel):
    entries: list[_EntryRewrite]
    summary: str = ""


class _EducationItem(BaseModel):
    entry_index: int = Field(default=0, ge=0)
    original: str = ""
    suggested: str = Field(min_length=1)
    keywords_added: list[str] = Field(default_factory=list)
    reasoning: str = ""


class _EducationPayload(BaseModel):
    suggestions: list[_EducationItem]
    summary: str = ""


class _ProjectsPayload(BaseModel):
    heading_suggestion: str | None = None
    entries: list[_EntryRewrite]
    summary: str = ""


async def _generate(section: str, template: str, inputs: GenerationInputs, client: LLMClient) -> dict[str, Any]:
    prompt = template.format(
        section=truncate(inputs.section_content(section), settings.max_section_chars),
        resume=truncate(inputs.resume.full_text(), settings.max_section_chars),
        job_description=truncate(inputs.job_description, settings.max_jd_chars),
        ats_context=build_section_context(section, inputs),
        preferences=preference_guidance(inputs.preferences),
        rules=COMMON_RULES,
        candidate_note=CANDIDATE_NOTES.get(inputs.candidate_type, ""),
    )
    try:
        return await json_completion(
            client,
            system_prompt=SYSTEM_PROMPT,
            user_prompt=prompt,
            task=f"{section}_suggestions",
            temperature=generation_temperature(inputs.preferences),
            max_tokens=3000 if section in {"experience", "projects"} else 1500,
        )
    except LLMTimeoutError as exc:
        raise GenerationTimeoutError(f"{section} generation timed out: {exc}") from exc
    except LLMError as exc:
        raise GenerationError(f"{section} generation failed: {exc}") from exc


def _parse(model: type[BaseModel], payload: dict[str, Any], section: str) -> Any:
    try:
        return parse_payload(model, payload, task=f"{section}_suggestions")
    except ValidationError as exc:
        raise GenerationError(exc.message, code="GENERATION_INVALID_RESPONSE") from exc


def _finish(payload: AnySectionSuggestions, inputs: GenerationInputs) -> AnySectionSuggestions:
    for suggestion in payload.suggestions:
        suggestion.ai_tell_phrases = detect_ai_tell_phrases(suggestion.suggested_text)
    cleaned = apply_integrity_filter(payload, inputs.gaps)
    logger.info("suggestions_generated section=%s count=%s", cleaned.section, len(cleaned.suggestions))
    return cleaned


def _bullet_suggestions(section: str, entries: list[_EntryRewrite], suggestion_type: str) -> list[Suggestion]:
    suggestions: list[Suggestion] = []
    for entry in entries:
        for bullet in entry.bullets:
            suggestions.append(
                Suggestion(
                    section=section,
                    item_index=entry.entry_index,
                    original_text=bullet.original,
                    suggested_text=bullet.suggested,
                    suggestion_type=suggestion_type,
                    reasoning=bullet.reasoning,
                    keywords_added=bullet.keywords_added,
                    metrics_added=bullet.metrics_added,
                    impact=bullet.impact,
                )
            )
    return suggestions


async def generate_summary_suggestions(inputs: GenerationInputs, *, client: LLMClient) -> SummarySuggestions:
    raw = await _generate("summary", SUMMARY_PROMPT, inputs, client)
    parsed: _SummaryPayload = _parse(_SummaryPayload, raw, "summary")
    suggestion = Suggestion(
        section="summary",
        original_text=inputs.resume.section_text("summary"),
        suggested_text=parsed.suggested,
        suggestion_type="rewrite",
        reasoning=parsed.reasoning,
        keywords_added=parsed.keywords_added,
        impact="high",
    )
    return _finish(SummarySuggestions(suggestions=[suggestion], explanation=parsed.reasoning), inputs)


async def generate_skills_suggestions(inputs: GenerationInputs, *, client: LLMClient) -> SkillsSuggestions:
    raw = await _generate("skills", SKILLS_PROMPT, inputs, client)
    parsed: _SkillsPayload = _parse(_SkillsPayload, raw, "skills")
    suggestions = [
        Suggestion(
            section="skills",
            suggested_text=item.skill,
            suggestion_type="skill_addition",
            reasoning=item.reason,
            keywords_added=[item.skill],
        )
        for item in parsed.skill_additions
    ]
    suggestions.extend(
        Suggestion(
            section="skills",
            original_text=item.skill,
            suggested_text="",
            suggestion_type="skill_removal",
            reasoning=item.reason,
        )
        for item in parsed.skill_removals
    )
    payload = SkillsSuggestions(
        suggestions=suggestions,
        explanation=parsed.summary,
        existing_skills=list(inputs.resume.skills),
        skill_additions=[item.skill for item in parsed.skill_additions],
        skill_removals=[item.skill for item in parsed.skill_removals],
    )
    return _finish(payload, inputs)


async def generate_experience_suggestions(inputs: GenerationInputs, *, client: LLMClient) -> ExperienceSuggestions:
    raw = await _generate("experience", EXPERIENCE_PROMPT, inputs, client)
    parsed: _ExperiencePayload = _parse(_ExperiencePayload, raw, "experience")
    payload = ExperienceSuggestions(
        suggestions=_bullet_suggestions("experience", parsed.entries, "bullet_rewrite"),
        explanation=parsed.summary,
    )
    return _finish(payload, inputs)


async def generate_education_suggestions(inputs: GenerationInputs, *, client: LLMClient) -> EducationSuggestions:
    raw = await _generate("education", EDUCATION_PROMPT, inputs, client)
    parsed: _EducationPayload = _parse(_EducationPayload, raw, "education")
    suggestions = [
        Suggestion(
            section="education",
            item_index=item.entry_index,
            original_text=item.original,
            suggested_text=item.suggested,
            suggestion_type="education_detail",
            reasoning=item.reasoning,
            keywords_added=item.keywords_added,
        )
        for item in parsed.suggestions
    ]
    return _finish(EducationSuggestions(suggestions=suggestions, explanation=parsed.summary), inputs)


async def generate_projects_suggestions(inputs: GenerationInputs, *, client: LLMClient) -> ProjectsSuggestions:
    raw = await _generate("projects", PROJECTS_PROMPT, inputs, client)
    parsed: _ProjectsPayload = _parse(_ProjectsPayload, raw, "projects")
    payload = ProjectsSuggestions(
        suggestions=_bullet_suggestions("projects", parsed.entries, "project_rewrite"),
        explanation=parsed.summary,
        heading_suggestion=parsed.heading_suggestion,
    )
    return _finish(payload, inputs)


SECTION_GENERATORS: dict[str, SectionGenerator] = {
    "summary": generate_summary_suggestions,
    "skills": generate_skills_suggestions,
    "experience": generate_experience_suggestions,
    "education": generate_education_suggestions,
    "projects": generate_projects_suggestions,
}
