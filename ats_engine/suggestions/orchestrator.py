"""Concurrent fan-out over the per-section generators.

All applicable generators start together and are joined with
``asyncio.gather(..., return_exceptions=True)``: every task settles, and a
failure in one section is reported for that section only.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Mapping

from ats_engine.ai.types import LLMClient
from ats_engine.core.errors import GenerationError, PipelineError
from ats_engine.schemas.resume import SECTION_NAMES, StructuredResume
from ats_engine.schemas.suggestions import OrchestrationResult, SectionError, SectionOutcome

from .context import GenerationInputs
from .generators import SECTION_GENERATORS, SectionGenerator

logger = logging.getLogger(__name__)


def applicable_sections(candidate_type: str, resume: StructuredResume) -> tuple[list[str], list[str]]:
    """Split sections into (generate, skip) before any generator runs."""
    applicable: list[str] = []
    skipped: list[str] = []
    for section in SECTION_NAMES:
        present = resume.has_section(section)
        if section == "summary":
            use = candidate_type != "coop" and (candidate_type == "career_changer" or present)
        elif section in {"skills", "experience"}:
            use = present or bool(resume.full_text().strip())
        else:
            use = candidate_type in {"coop", "career_changer"} or present
        (applicable if use else skipped).append(section)
    return applicable, skipped


def _failure(section: str, exc: BaseException) -> SectionOutcome:
    if isinstance(exc, PipelineError):
        error = SectionError(code=exc.code, message=exc.message)
    else:
        error = SectionError(code=GenerationError.default_code, message=str(exc) or exc.__class__.__name__)
    return SectionOutcome(section=section, status="failure", error=error)


async def generate_all_suggestions(
    inputs: GenerationInputs,
    *,
    client: LLMClient,
    generators: Mapping[str, SectionGenerator] | None = None,
    sections: list[str] | None = None,
) -> OrchestrationResult:
    registry = generators or SECTION_GENERATORS
    if sections is None:
        targets, skipped = applicable_sections(inputs.candidate_type, inputs.resume)
    else:
        targets, skipped = list(sections), []
    targets = [section for section in targets if section in registry]

    results = await asyncio.gather(
        *(registry[section](inputs, client=client) for section in targets),
        return_exceptions=True,
    )

    outcomes: dict[str, SectionOutcome] = {}
    for section, result in zip(targets, results):
        if isinstance(result, asyncio.CancelledError):
            raise result
        if isinstance(result, BaseException):
            outcome = _failure(section, result)
            logger.warning(
                "suggestion_section_failed section=%s code=%s",
                section,
                outcome.error.code if outcome.error else None,
            )
            if not isinstance(result, PipelineError):
                logger.error("suggestion_section_crashed section=%s", section, exc_info=result)
        else:
            outcome = SectionOutcome(section=section, status="success", payload=result)
        outcomes[section] = outcome

    logger.info(
        "suggestions_orchestrated generated=%s failed=%s skipped=%s",
        sum(1 for outcome in outcomes.values() if outcome.ok),
        sum(1 for outcome in outcomes.values() if not outcome.ok),
        ",".join(skipped) or "-",
    )
    return OrchestrationResult(outcomes=outcomes, skipped=skipped)
