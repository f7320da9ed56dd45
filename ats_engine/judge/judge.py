"""Quality gate for generated suggestions.

Each suggestion is scored on four 0-25 criteria by the language-understanding
collaborator. The overall score is always recomputed here as the sum of the
criteria, and the recommendation is a pure function of that sum. Unchanged
suggestions are caught by a cheap similarity gate before any call is made.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from pydantic import BaseModel, Field

from ats_engine.ai.completion import json_completion, truncate
from ats_engine.ai.parsing import parse_payload
from ats_engine.ai.types import LLMClient
from ats_engine.core.config import settings
from ats_engine.core.config.scoring import get_scoring_value
from ats_engine.core.errors import JudgeError, JudgeTimeoutError, LLMError, LLMTimeoutError, ValidationError
from ats_engine.schemas.judge import JudgeCriteriaScores, JudgeResult, Recommendation, SuggestionContext

from .prompts import JOB_TYPE_GUIDANCE, JUDGE_PROMPT, MODIFICATION_GUIDANCE, SYSTEM_PROMPT

logger = logging.getLogger(__name__)

_SENTENCE_END_RE = re.compile(r"[.!?](?=\s|$)")
_WHITESPACE_RE = re.compile(r"\s+")

NEAR_DUPLICATE_REASONING = "Near-duplicate: suggestion is essentially unchanged from original"


def quality_threshold() -> int:
    return int(get_scoring_value("judge.quality_threshold", 60))


def borderline_threshold_low() -> int:
    return int(get_scoring_value("judge.borderline_threshold_low", 40))


def recommendation_for_score(score: int, *, threshold: int | None = None, low: int | None = None) -> Recommendation:
    pass_at = quality_threshold() if threshold is None else threshold
    fail_below = borderline_threshold_low() if low is None else low
    if score >= pass_at:
        return "pass"
    if score < fail_below:
        return "fail"
    return "borderline"


def _normalize(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", (text or "").strip().lower())


def text_similarity(original: str, suggested: str) -> float:
    """Jaccard similarity over the character sets of both normalised texts."""
    left = set(_normalize(original))
    right = set(_normalize(suggested))
    union = left | right
    if not union:
        return 1.0
    return len(left & right) / len(union)


def is_near_duplicate(original: str, suggested: str) -> bool:
    if not (original or "").strip():
        return False
    if _normalize(original) == _normalize(suggested):
        return True
    return text_similarity(original, suggested) > float(get_scoring_value("judge.near_duplicate_similarity", 0.95))


def truncate_at_sentence(text: str, limit: int) -> str:
    """Cut ``text`` at the last sentence end within ``limit`` characters.

    Falls back to a hard cut when no sentence ends in the second half of the window.
    """
    value = (text or "").strip()
    if len(value) <= limit:
        return value
    window = value[:limit]
    ends = [match.end() for match in _SENTENCE_END_RE.finditer(window)]
    if ends and ends[-1] >= limit // 2:
        return window[: ends[-1]]
    return window.rstrip()


def _near_duplicate_result(context: SuggestionContext, threshold: int | None) -> JudgeResult:
    score = int(get_scoring_value("judge.near_duplicate_score", 25))
    criteria = JudgeCriteriaScores(authenticity=min(score, 25), clarity=0, ats_relevance=0, actionability=0)
    return JudgeResult(
        suggestion_id=context.suggestion_id,
        section=context.section,
        criteria_scores=criteria,
        overall_score=criteria.total(),
        recommendation=recommendation_for_score(criteria.total(), threshold=threshold),
        reasoning=NEAR_DUPLICATE_REASONING,
        short_circuited=True,
    )


class _JudgePayload(BaseModel):
    authenticity: int = Field(ge=0, le=25)
    clarity: int = Field(ge=0, le=25)
    ats_relevance: int = Field(ge=0, le=25)
    actionability: int = Field(ge=0, le=25)
    overall_score: int | None = None
    reasoning: str = ""


def build_judge_prompt(context: SuggestionContext) -> str:
    excerpt = truncate_at_sentence(context.job_description, int(get_scoring_value("judge.jd_excerpt_chars", 1500)))
    keyword_lines: list[str] = []
    if context.matched_keywords:
        keyword_lines.append(f"Keywords already matched: {', '.join(context.matched_keywords[:15])}")
    if context.missing_keywords:
        keyword_lines.append(f"Keywords the candidate can honestly address: {', '.join(context.missing_keywords[:15])}")
    if context.ats_overall is not None:
        keyword_lines.append(f"Current ATS score: {context.ats_overall}/100")
    keyword_context = ("\n<ats_context>\n" + "\n".join(keyword_lines) + "\n</ats_context>\n") if keyword_lines else ""

    return JUDGE_PROMPT.format(
        modification_guidance=MODIFICATION_GUIDANCE.get(context.modification_level, MODIFICATION_GUIDANCE["moderate"]),
        job_type_guidance=JOB_TYPE_GUIDANCE.get(context.job_type, JOB_TYPE_GUIDANCE["fulltime"]),
        section=context.section,
        original_text=truncate(context.original_text, settings.max_section_chars),
        suggested_text=truncate(context.suggested_text, settings.max_section_chars),
        jd_excerpt=excerpt,
        keyword_context=keyword_context,
    )


async def judge_suggestion(
    context: SuggestionContext,
    *,
    client: LLMClient,
    threshold: int | None = None,
) -> JudgeResult:
    """Score one suggestion; raises JudgeError / JudgeTimeoutError, never returns a fake verdict."""
    if is_near_duplicate(context.original_text, context.suggested_text):
        logger.info("judge_near_duplicate suggestion_id=%s section=%s", context.suggestion_id, context.section)
        return _near_duplicate_result(context, threshold)

    try:
        raw: dict[str, Any] = await json_completion(
            client,
            system_prompt=SYSTEM_PROMPT,
            user_prompt=build_judge_prompt(context),
            task="judge",
            temperature=0.0,
            max_tokens=400,
        )
    except LLMTimeoutError as exc:
        raise JudgeTimeoutError(f"Judge timed out for {context.suggestion_id}: {exc}") from exc
    except LLMError as exc:
        raise JudgeError(f"Judge failed for {context.suggestion_id}: {exc}") from exc

    try:
        parsed = parse_payload(_JudgePayload, raw, task="judge")
    except ValidationError as exc:
        raise JudgeError(exc.message, code="JUDGE_INVALID_RESPONSE") from exc

    criteria = JudgeCriteriaScores(
        authenticity=parsed.authenticity,
        clarity=parsed.clarity,
        ats_relevance=parsed.ats_relevance,
        actionability=parsed.actionability,
    )
    overall = criteria.total()
    if parsed.overall_score is not None and parsed.overall_score != overall:
        logger.debug(
            "judge_overall_mismatch suggestion_id=%s reported=%s computed=%s",
            context.suggestion_id,
            parsed.overall_score,
            overall,
        )

    result = JudgeResult(
        suggestion_id=context.suggestion_id,
        section=context.section,
        criteria_scores=criteria,
        overall_score=overall,
        recommendation=recommendation_for_score(overall, threshold=threshold),
        reasoning=parsed.reasoning.strip(),
    )
    logger.info(
        "suggestion_judged suggestion_id=%s section=%s score=%s recommendation=%s",
        result.suggestion_id,
        result.section,
        result.overall_score,
        result.recommendation,
    )
    return result
