from __future__ import annotations

import logging

from ats_engine.schemas.keywords import GapClassificationResult, normalize_keyword_text
from ats_engine.schemas.suggestions import AnySectionSuggestions, SkillsSuggestions

logger = logging.getLogger(__name__)


def apply_integrity_filter(payload: AnySectionSuggestions, gaps: GapClassificationResult) -> AnySectionSuggestions:
    """Strip unfixable keywords the generator reported as added anyway.

    Skill additions naming an unfixable keyword are dropped outright; other
    suggestions keep their text but lose the false keyword credit.
    """
    blocked = gaps.unfixable_keys
    if not blocked:
        return payload

    removed = 0
    kept = []
    for suggestion in payload.suggestions:
        if suggestion.suggestion_type == "skill_addition" and normalize_keyword_text(suggestion.suggested_text) in blocked:
            removed += 1
            continue
        clean = [keyword for keyword in suggestion.keywords_added if normalize_keyword_text(keyword) not in blocked]
        removed += len(suggestion.keywords_added) - len(clean)
        kept.append(suggestion.model_copy(update={"keywords_added": clean}))

    update: dict = {"suggestions": kept}
    if isinstance(payload, SkillsSuggestions):
        additions = [skill for skill in payload.skill_additions if normalize_keyword_text(skill) not in blocked]
        removed += len(payload.skill_additions) - len(additions)
        update["skill_additions"] = additions

    if removed:
        logger.warning("integrity_filter_removed section=%s count=%s", payload.section, removed)
    return payload.model_copy(update=update)
