"""Classify missing keywords by how honestly the resume could address them.

terminology: the resume already says the same thing in different words.
potential: the resume shows adjacent experience the candidate could elaborate on.
unfixable: nothing in the resume supports it. These never reach rewrite prompts.
"""

from __future__ import annotations

import logging

from ats_engine.core.config.scoring import get_scoring_value
from ats_engine.normalize.utils import term_pattern
from ats_engine.schemas.keywords import (
    ClassifiedGap,
    ExtractedKeyword,
    GapClassificationResult,
    GapPriority,
    KeywordCategory,
    normalize_keyword_text,
)
from ats_engine.schemas.resume import StructuredResume
from ats_engine.taxonomy import TaxonomyProvider, get_default_taxonomy_provider

logger = logging.getLogger(__name__)

# JD wording -> resume wordings that mean the same thing.
TERMINOLOGY_MAPPINGS: dict[str, tuple[str, ...]] = {
    "restful api": ("rest api", "rest apis", "restful apis", "rest services", "api development"),
    "restful apis": ("rest api", "rest apis", "restful api", "rest services", "api development"),
    "sql": ("mysql", "postgresql", "postgres", "rdbms", "sql server"),
    "nosql": ("mongodb", "dynamodb", "cassandra", "document database"),
    "agile": ("scrum", "sprint", "sprints", "kanban", "agile methodologies"),
    "agile methodologies": ("agile", "scrum", "sprint", "sprints", "kanban"),
    "problem-solving": ("problem solving", "troubleshooting", "debugging", "root cause"),
    "problem solving": ("problem-solving", "troubleshooting", "debugging", "root cause"),
    "communication": ("communicated", "presented", "collaboration", "collaborated", "stakeholders"),
    "leadership": ("led", "leading", "mentored", "mentoring", "supervised"),
    "ci/cd": ("continuous integration", "continuous deployment", "jenkins", "github actions", "gitlab ci", "deployment pipeline"),
    "unit testing": ("unit tests", "test coverage", "pytest", "jest", "junit"),
    "test-driven development": ("tdd", "test-driven", "test first"),
    "data visualization": ("tableau", "power bi", "dashboards", "looker"),
    "stakeholder management": ("stakeholders", "client management", "account management"),
    "project management": ("managed projects", "project delivery", "project planning", "roadmap"),
}

QUALIFICATION_MARKERS: tuple[str, ...] = (
    "degree",
    "bachelor",
    "master",
    "phd",
    "computer science",
    "software engineering",
    "information technology",
    "years of experience",
    "certified",
    "certification",
    "license",
    "licensed",
    "clearance",
)

_TARGET_SECTIONS: dict[str, list[str]] = {
    "skills": ["skills", "experience", "projects"],
    "technologies": ["skills", "experience", "projects"],
    "soft_skills": ["summary", "experience"],
    "experience": ["experience", "summary"],
    "qualifications": ["education", "summary"],
    "certifications": ["education", "skills"],
}


def importance_to_priority(keyword: ExtractedKeyword) -> GapPriority:
    if keyword.required:
        if keyword.importance == "high":
            return "critical"
        if keyword.importance == "medium":
            return "high"
        return "medium"
    if keyword.importance == "high":
        return "medium"
    return "low"


def potential_impact(keyword: ExtractedKeyword) -> float:
    base = float(get_scoring_value(f"gaps.impact_points.{keyword.importance}", 4))
    return base if keyword.required else base / 2


def target_sections(category: KeywordCategory) -> list[str]:
    return list(_TARGET_SECTIONS.get(category, ["skills", "experience"]))


def _first_present(text: str, terms: tuple[str, ...] | list[str] | set[str]) -> str | None:
    for term in sorted(terms):
        if term and term_pattern(term).search(text):
            return term
    return None


def _gap(
    keyword: ExtractedKeyword,
    category: str,
    *,
    reason: str,
    instruction: str,
    evidence: str | None = None,
) -> ClassifiedGap:
    return ClassifiedGap(
        keyword=keyword,
        category=category,
        priority=importance_to_priority(keyword),
        potential_impact=potential_impact(keyword),
        evidence=evidence,
        target_sections=[] if category == "unfixable" else target_sections(keyword.category),
        instruction=instruction,
        reason=reason,
    )


def classify_gap(
    keyword: ExtractedKeyword,
    resume_text: str,
    *,
    taxonomy: TaxonomyProvider,
) -> ClassifiedGap:
    key = normalize_keyword_text(keyword.text)

    variants = TERMINOLOGY_MAPPINGS.get(key)
    if variants:
        found = _first_present(resume_text, variants)
        if found:
            return _gap(
                keyword,
                "terminology",
                evidence=found,
                reason=f'Resume uses "{found}", which is equivalent',
                instruction=f'Rephrase "{found}" as "{keyword.text}" where it is accurate',
            )

    for jd_term, resume_variants in TERMINOLOGY_MAPPINGS.items():
        if key in resume_variants and term_pattern(jd_term).search(resume_text):
            return _gap(
                keyword,
                "terminology",
                evidence=jd_term,
                reason=f'Resume uses "{jd_term}", "{keyword.text}" can be named explicitly',
                instruction=f'Mention "{keyword.text}" alongside the existing "{jd_term}"',
            )

    if term_pattern(keyword.text).search(resume_text):
        return _gap(
            keyword,
            "terminology",
            evidence=keyword.text,
            reason=f'"{keyword.text}" appears in the resume but not where screeners look',
            instruction=f'Make "{keyword.text}" more prominent, e.g. in the skills section',
        )

    family = taxonomy.family_of(keyword.text)
    if family:
        normalized, canonical = taxonomy.normalize_skill(keyword.text)
        own_forms = {normalized} | (taxonomy.aliases(canonical) if canonical else set())
        siblings = taxonomy.family_members(family) - own_forms
        found = _first_present(resume_text, siblings)
        if found:
            return _gap(
                keyword,
                "potential",
                evidence=found,
                reason=f'Resume shows "{found}", which is related to {keyword.text}',
                instruction=f'Only add "{keyword.text}" if the candidate has genuinely used it alongside "{found}"',
            )

    if keyword.category in {"qualifications", "certifications"} or any(marker in key for marker in QUALIFICATION_MARKERS):
        return _gap(
            keyword,
            "unfixable",
            reason="Qualification or certification that cannot be claimed without holding it",
            instruction=f'Do not add "{keyword.text}"',
        )

    return _gap(
        keyword,
        "unfixable",
        reason="No supporting or adjacent evidence in the resume",
        instruction=f'Do not add "{keyword.text}"',
    )


def classify_gaps(
    missing: list[ExtractedKeyword],
    resume: StructuredResume,
    *,
    taxonomy: TaxonomyProvider | None = None,
) -> GapClassificationResult:
    """Assign exactly one gap category to every missing keyword."""
    provider = taxonomy or get_default_taxonomy_provider()
    resume_text = resume.full_text()
    if resume.raw_text.strip():
        structured = "\n".join(resume.section_text(name) for name in ("summary", "skills", "experience", "education", "projects", "certifications"))
        resume_text = f"{resume_text}\n{structured}"

    gaps = [classify_gap(keyword, resume_text, taxonomy=provider) for keyword in missing]
    result = GapClassificationResult(gaps=gaps)
    logger.info(
        "gaps_classified total=%s terminology=%s potential=%s unfixable=%s",
        len(gaps),
        len(result.by_category("terminology")),
        len(result.by_category("potential")),
        len(result.by_category("unfixable")),
    )
    return result


def filter_gaps_for_section(result: GapClassificationResult, section: str) -> list[ClassifiedGap]:
    """Gaps a rewrite of `section` may address; unfixable gaps are never returned."""
    return [gap for gap in result.addressable if section in gap.target_sections]
