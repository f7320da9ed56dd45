"""Entry points used by the HTTP routes.

``analyze_resume`` runs the deterministic path (extract, match, classify,
score) and propagates the first error. ``optimize_resume`` adds the
suggestion fan-out and the judge gate, where failures stay local to a
section or a single suggestion.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
import uuid
from dataclasses import dataclass
from datetime import date
from typing import Mapping

from ats_engine.ai.types import LLMClient
from ats_engine.analysis import (
    classify_gaps,
    detect_candidate_type,
    extract_jd_qualifications,
    extract_keywords,
    match_keywords,
    validate_job_description,
)
from ats_engine.analysis.qualifications import experience_years
from ats_engine.core.config import settings
from ats_engine.core.errors import JudgeError, PipelineError
from ats_engine.judge.judge import judge_suggestion
from ats_engine.metrics.health import emit_quality_alerts
from ats_engine.metrics.quality import collect_quality_metrics
from ats_engine.metrics.store import append_metric_log
from ats_engine.schemas.api import OptimizationResponse, ResumeAnalysis, ResumeRequest, SectionJudgeSummary
from ats_engine.schemas.judge import JudgeResult, SuggestionContext
from ats_engine.schemas.keywords import normalize_keyword_text
from ats_engine.schemas.preferences import CandidateTypeInput, CandidateTypeResult
from ats_engine.schemas.suggestions import AnySectionSuggestions, SectionOutcome, SkillsSuggestions, Suggestion
from ats_engine.scoring import calculate_ats_score
from ats_engine.suggestions import SECTION_GENERATORS, GenerationInputs, generate_all_suggestions
from ats_engine.suggestions.generators import SectionGenerator
from ats_engine.taxonomy import TaxonomyProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JudgePolicy:
    enabled: bool = True
    retry_borderline: bool = True
    show_unjudged: bool = True

    @classmethod
    def from_settings(cls) -> "JudgePolicy":
        return cls(
            enabled=settings.judge_enabled,
            retry_borderline=settings.judge_retry_borderline,
            show_unjudged=settings.show_unjudged_suggestions,
        )


def resolve_candidate_type(request: ResumeRequest, *, today: date | None = None) -> CandidateTypeResult:
    resume = request.resume
    provided = request.candidate or CandidateTypeInput()
    signals = CandidateTypeInput(
        user_job_type=provided.user_job_type,
        career_goal=provided.career_goal,
        resume_role_count=provided.resume_role_count if provided.resume_role_count is not None else resume.role_count,
        has_active_education=(
            provided.has_active_education if provided.has_active_education is not None else resume.has_active_education
        ),
        total_experience_years=(
            provided.total_experience_years
            if provided.total_experience_years is not None
            else experience_years(resume, today=today)
        ),
    )
    return detect_candidate_type(signals)


async def analyze_resume(
    request: ResumeRequest,
    *,
    client: LLMClient,
    taxonomy: TaxonomyProvider | None = None,
    today: date | None = None,
) -> ResumeAnalysis:
    job_description = validate_job_description(request.job_description)
    candidate = resolve_candidate_type(request, today=today)

    keywords, jd_qualifications = await asyncio.gather(
        extract_keywords(job_description, client=client),
        extract_jd_qualifications(job_description, client=client),
    )
    keyword_analysis = match_keywords(keywords, request.resume, taxonomy=taxonomy)
    gaps = classify_gaps(keyword_analysis.missing, request.resume, taxonomy=taxonomy)
    score = calculate_ats_score(
        keyword_analysis,
        request.resume,
        job_description=job_description,
        jd_qualifications=jd_qualifications,
        candidate_type=candidate.candidate_type,
        today=today,
    )
    return ResumeAnalysis(
        candidate=candidate,
        keywords=keywords,
        keyword_analysis=keyword_analysis,
        gaps=gaps,
        jd_qualifications=jd_qualifications,
        score=score,
    )


def _suggestion_context(suggestion: Suggestion, inputs: GenerationInputs) -> SuggestionContext:
    return SuggestionContext(
        suggestion_id=suggestion.suggestion_id,
        section=suggestion.section,
        original_text=suggestion.original_text,
        suggested_text=suggestion.suggested_text,
        job_description=inputs.job_description,
        matched_keywords=inputs.matched_terms(),
        missing_keywords=inputs.addressable_terms(),
        ats_overall=inputs.ats_score.overall if inputs.ats_score else None,
        job_type=inputs.preferences.job_type,
        modification_level=inputs.preferences.modification_level,
    )


def _judgeable(suggestion: Suggestion) -> bool:
    return suggestion.suggestion_type != "skill_removal" and bool(suggestion.suggested_text.strip())


async def _judge_all(
    suggestions: list[Suggestion],
    inputs: GenerationInputs,
    judge_client: LLMClient,
) -> dict[str, JudgeResult | PipelineError]:
    targets = [suggestion for suggestion in suggestions if _judgeable(suggestion)]
    results = await asyncio.gather(
        *(judge_suggestion(_suggestion_context(suggestion, inputs), client=judge_client) for suggestion in targets),
        return_exceptions=True,
    )
    verdicts: dict[str, JudgeResult | PipelineError] = {}
    for suggestion, result in zip(targets, results):
        if isinstance(result, asyncio.CancelledError):
            raise result
        if isinstance(result, PipelineError):
            logger.warning(
                "judge_failed suggestion_id=%s section=%s code=%s",
                suggestion.suggestion_id,
                suggestion.section,
                result.code,
            )
            verdicts[suggestion.suggestion_id] = result
        elif isinstance(result, BaseException):
            logger.error("judge_crashed suggestion_id=%s", suggestion.suggestion_id, exc_info=result)
            verdicts[suggestion.suggestion_id] = JudgeError(str(result) or result.__class__.__name__)
        else:
            verdicts[suggestion.suggestion_id] = result
    return verdicts


def _slot(suggestion: Suggestion) -> tuple[str, int, str]:
    # Skill additions have no original text; the skill itself is the slot.
    if suggestion.suggestion_type == "skill_addition":
        return suggestion.suggestion_type, 0, normalize_keyword_text(suggestion.suggested_text)
    return suggestion.suggestion_type, suggestion.item_index, suggestion.original_text.strip().lower()


async def _retry_borderline(
    section: str,
    borderline: list[Suggestion],
    inputs: GenerationInputs,
    *,
    client: LLMClient,
    judge_client: LLMClient,
    generator: SectionGenerator,
) -> dict[str, tuple[Suggestion, JudgeResult]]:
    """Regenerate the section once; a borderline suggestion is replaced only by a passing one for the same slot."""
    try:
        regenerated: AnySectionSuggestions = await generator(inputs, client=client)
    except PipelineError as exc:
        logger.warning("borderline_retry_failed section=%s code=%s", section, exc.code)
        return {}
    except Exception as exc:
        logger.error("borderline_retry_crashed section=%s", section, exc_info=exc)
        return {}

    wanted = {_slot(suggestion): suggestion.suggestion_id for suggestion in borderline}
    candidates = [suggestion for suggestion in regenerated.suggestions if _slot(suggestion) in wanted]
    verdicts = await _judge_all(candidates, inputs, judge_client)

    replacements: dict[str, tuple[Suggestion, JudgeResult]] = {}
    for candidate in candidates:
        verdict = verdicts.get(candidate.suggestion_id)
        original_id = wanted[_slot(candidate)]
        if isinstance(verdict, JudgeResult) and verdict.passed and original_id not in replacements:
            replacements[original_id] = (candidate, verdict)
    logger.info("borderline_retry section=%s borderline=%s replaced=%s", section, len(borderline), len(replacements))
    return replacements


def _with_suggestions(payload: AnySectionSuggestions, kept: list[Suggestion]) -> AnySectionSuggestions:
    update: dict = {"suggestions": kept}
    if isinstance(payload, SkillsSuggestions):
        update["skill_additions"] = [item.suggested_text for item in kept if item.suggestion_type == "skill_addition"]
    return payload.model_copy(update=update)


async def apply_judge_policy(
    outcome: SectionOutcome,
    inputs: GenerationInputs,
    *,
    client: LLMClient,
    judge_client: LLMClient,
    policy: JudgePolicy,
    generator: SectionGenerator | None = None,
) -> tuple[SectionOutcome, SectionJudgeSummary, list[JudgeResult]]:
    payload = outcome.payload
    summary = SectionJudgeSummary()
    if payload is None:
        return outcome, summary, []

    verdicts = await _judge_all(payload.suggestions, inputs, judge_client)
    judged = [verdict for verdict in verdicts.values() if isinstance(verdict, JudgeResult)]

    borderline = [
        suggestion
        for suggestion in payload.suggestions
        if isinstance(verdicts.get(suggestion.suggestion_id), JudgeResult)
        and verdicts[suggestion.suggestion_id].recommendation == "borderline"
    ]
    replacements: dict[str, tuple[Suggestion, JudgeResult]] = {}
    if borderline and policy.retry_borderline and generator is not None:
        summary.retried = True
        replacements = await _retry_borderline(
            outcome.section,
            borderline,
            inputs,
            client=client,
            judge_client=judge_client,
            generator=generator,
        )
        judged.extend(verdict for _, verdict in replacements.values())

    kept: list[Suggestion] = []
    for suggestion in payload.suggestions:
        if suggestion.suggestion_id in replacements:
            replacement, verdict = replacements[suggestion.suggestion_id]
            kept.append(replacement.model_copy(update={"judged": True, "judge": verdict}))
            summary.passed += 1
            continue

        verdict = verdicts.get(suggestion.suggestion_id)
        if verdict is None:
            kept.append(suggestion)
        elif isinstance(verdict, PipelineError):
            summary.unjudged += 1
            if policy.show_unjudged:
                kept.append(suggestion.model_copy(update={"judged": False}))
            else:
                summary.withheld += 1
        elif verdict.recommendation == "pass":
            summary.passed += 1
            kept.append(suggestion.model_copy(update={"judged": True, "judge": verdict}))
        elif verdict.recommendation == "borderline":
            summary.borderline += 1
            kept.append(suggestion.model_copy(update={"judged": True, "judge": verdict, "low_confidence": True}))
        else:
            summary.withheld += 1

    summary.evaluated = len(judged)
    logger.info(
        "section_judged section=%s evaluated=%s passed=%s borderline=%s withheld=%s unjudged=%s",
        outcome.section,
        summary.evaluated,
        summary.passed,
        summary.borderline,
        summary.withheld,
        summary.unjudged,
    )
    updated = outcome.model_copy(update={"payload": _with_suggestions(payload, kept)})
    return updated, summary, judged


async def record_quality_metrics(results: list[JudgeResult], section: str, optimization_id: str) -> None:
    if not results or not settings.metrics_enabled:
        return
    entry = collect_quality_metrics(results, section, optimization_id)
    emit_quality_alerts(entry)
    try:
        await asyncio.to_thread(append_metric_log, entry)
    except sqlite3.Error as exc:
        logger.warning("quality_metrics_append_failed section=%s error=%s", section, exc)


async def optimize_resume(
    request: ResumeRequest,
    *,
    client: LLMClient,
    judge_client: LLMClient | None = None,
    policy: JudgePolicy | None = None,
    generators: Mapping[str, SectionGenerator] | None = None,
    taxonomy: TaxonomyProvider | None = None,
    today: date | None = None,
) -> OptimizationResponse:
    optimization_id = uuid.uuid4().hex
    gate = policy or JudgePolicy.from_settings()
    registry = generators or SECTION_GENERATORS

    analysis = await analyze_resume(request, client=client, taxonomy=taxonomy, today=today)
    inputs = GenerationInputs(
        job_description=request.job_description,
        resume=request.resume,
        analysis=analysis.keyword_analysis,
        gaps=analysis.gaps,
        preferences=request.preferences,
        candidate_type=analysis.candidate.candidate_type,
        ats_score=analysis.score,
    )
    orchestrated = await generate_all_suggestions(inputs, client=client, generators=registry)

    sections: dict[str, SectionOutcome] = dict(orchestrated.outcomes)
    judge_summaries: dict[str, SectionJudgeSummary] = {}
    if gate.enabled:
        reviewer = judge_client or client
        successes = list(orchestrated.successes.items())
        judged_sections = await asyncio.gather(
            *(
                apply_judge_policy(
                    outcome,
                    inputs,
                    client=client,
                    judge_client=reviewer,
                    policy=gate,
                    generator=registry.get(section),
                )
                for section, outcome in successes
            )
        )
        for (section, _), (updated, summary, results) in zip(successes, judged_sections):
            sections[section] = updated
            judge_summaries[section] = summary
            await record_quality_metrics(results, section, optimization_id)

    logger.info(
        "resume_optimized optimization_id=%s score=%s sections=%s failed=%s",
        optimization_id,
        analysis.score.overall,
        len(orchestrated.successes),
        len(orchestrated.failures),
    )
    return OptimizationResponse(
        optimization_id=optimization_id,
        analysis=analysis,
        sections=sections,
        skipped=orchestrated.skipped,
        judge=judge_summaries,
    )
