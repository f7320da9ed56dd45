from __future__ import annotations

from dataclasses import dataclass

from ats_engine.core.config.scoring import get_scoring_value
from ats_engine.core.errors import ValidationError
from ats_engine.normalize.utils import round_half_up, significant_tokens, snippet, stem, term_pattern
from ats_engine.schemas.keywords import (
    ExtractedKeyword,
    KeywordAnalysisResult,
    MatchedKeyword,
    MatchType,
    ResumeLocation,
)
from ats_engine.schemas.resume import StructuredResume
from ats_engine.taxonomy import TaxonomyProvider, get_default_taxonomy_provider


@dataclass(slots=True)
class ResumeUnit:
    location: ResumeLocation
    text: str


@dataclass(slots=True)
class _Hit:
    match_type: MatchType
    unit: ResumeUnit
    start: int
    end: int
    term: str


def resume_units(resume: StructuredResume) -> list[ResumeUnit]:
    """Searchable resume units in placement order (skills first, free text last)."""
    units: list[ResumeUnit] = []
    units.extend(ResumeUnit("skills_section", skill) for skill in resume.skills if skill.strip())
    for text in (resume.summary, resume.objective):
        if text.strip():
            units.append(ResumeUnit("summary", text))
    for entry in resume.experience:
        units.extend(ResumeUnit("experience_bullet", bullet) for bullet in entry.bullets if bullet.strip())
    for entry in resume.experience:
        header = " ".join(part for part in (entry.title, entry.company, entry.description) if part)
        if header.strip():
            units.append(ResumeUnit("experience_paragraph", header))
    for project in resume.projects:
        if project.text().strip():
            units.append(ResumeUnit("projects", project.text()))
    for education in resume.education:
        if education.text().strip():
            units.append(ResumeUnit("education", education.text()))
    units.extend(ResumeUnit("certifications", cert) for cert in resume.certifications if cert.strip())
    if resume.raw_text.strip():
        units.append(ResumeUnit("other", resume.raw_text))
    return units


def _find_term(term: str, units: list[ResumeUnit]) -> tuple[ResumeUnit, int, int] | None:
    pattern = term_pattern(term)
    for unit in units:
        found = pattern.search(unit.text)
        if found:
            return unit, found.start(), found.end()
    return None


def _synonyms(keyword: ExtractedKeyword, taxonomy: TaxonomyProvider) -> list[str]:
    normalized, canonical = taxonomy.normalize_skill(keyword.text)
    if not canonical:
        return []
    return sorted(alias for alias in taxonomy.aliases(canonical) if alias != normalized)


def _partial(keyword: ExtractedKeyword, units: list[ResumeUnit]) -> tuple[ResumeUnit, int, int] | None:
    wanted = {stem(token) for token in significant_tokens(keyword.text)}
    if not wanted:
        return None
    for unit in units:
        unit_tokens = significant_tokens(unit.text)
        stems = {stem(token) for token in unit_tokens}
        if wanted <= stems:
            first = next(token for token in unit_tokens if stem(token) in wanted)
            position = unit.text.lower().find(first)
            position = max(position, 0)
            return unit, position, position + len(first)
    return None


def _best_hit(keyword: ExtractedKeyword, units: list[ResumeUnit], taxonomy: TaxonomyProvider) -> _Hit | None:
    exact = _find_term(keyword.text, units)
    if exact:
        return _Hit("exact", exact[0], exact[1], exact[2], keyword.text)

    for alias in _synonyms(keyword, taxonomy):
        found = _find_term(alias, units)
        if found:
            return _Hit("synonym", found[0], found[1], found[2], alias)

    partial = _partial(keyword, units)
    if partial:
        unit, start, end = partial
        return _Hit("partial", unit, start, end, unit.text[start:end])
    return None


def match_percentage(matched: int, total: int) -> int:
    if total <= 0:
        return 100
    return min(100, max(0, round_half_up(matched / total * 100)))


def match_keywords(
    keywords: list[ExtractedKeyword],
    resume: StructuredResume,
    *,
    taxonomy: TaxonomyProvider | None = None,
) -> KeywordAnalysisResult:
    """Match keywords against the resume: exact, then synonym, then partial. Pure and deterministic."""
    units = resume_units(resume)
    if not units:
        raise ValidationError("Resume content is required for keyword matching.")

    provider = taxonomy or get_default_taxonomy_provider()
    max_chars = int(get_scoring_value("matching.context_max_chars", 100))

    matched: list[MatchedKeyword] = []
    missing: list[ExtractedKeyword] = []
    seen: set[str] = set()
    for keyword in keywords:
        if keyword.key in seen:
            continue
        seen.add(keyword.key)
        hit = _best_hit(keyword, units, provider)
        if hit is None:
            missing.append(keyword)
            continue
        matched.append(
            MatchedKeyword(
                keyword=keyword,
                match_type=hit.match_type,
                resume_location=hit.unit.location,
                context=snippet(hit.unit.text, hit.start, hit.end, max_chars),
                matched_term=hit.term,
            )
        )

    considered = [item.keyword for item in matched] + missing
    return KeywordAnalysisResult(
        matched=matched,
        missing=missing,
        match_percentage=match_percentage(len(matched), len(considered)),
        required_total=sum(1 for item in considered if item.required),
        required_matched=sum(1 for item in matched if item.keyword.required),
        preferred_total=sum(1 for item in considered if not item.required),
        preferred_matched=sum(1 for item in matched if not item.keyword.required),
    )
