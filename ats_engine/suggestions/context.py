"""Shared inputs for the section generators and the gap context injected into their prompts."""

from __future__ import annotations

from dataclasses import dataclass, field

from ats_engine.analysis.gap_addressability import filter_gaps_for_section
from ats_engine.schemas.keywords import ClassifiedGap, GapClassificationResult, KeywordAnalysisResult
from ats_engine.schemas.preferences import OptimizationPreferences
from ats_engine.schemas.resume import StructuredResume
from ats_engine.schemas.scoring import ATSScore

# Sub-scores each section rewrite can move.
SECTION_DIMENSIONS: dict[str, tuple[str, ...]] = {
    "summary": ("keywords", "content_quality"),
    "skills": ("keywords",),
    "experience": ("keywords", "content_quality", "qualification_fit"),
    "education": ("qualification_fit", "sections"),
    "projects": ("keywords", "content_quality", "sections"),
}

WEAK_COMPONENT_SCORE = 50


@dataclass(slots=True)
class GenerationInputs:
    job_description: str
    resume: StructuredResume
    analysis: KeywordAnalysisResult
    gaps: GapClassificationResult
    preferences: OptimizationPreferences = field(default_factory=OptimizationPreferences)
    candidate_type: str = "fulltime"
    ats_score: ATSScore | None = None

    def section_content(self, section: str) -> str:
        """Section text, or the whole resume when the section is empty."""
        text = self.resume.section_text(section)
        return text if text.strip() else self.resume.full_text()

    def matched_terms(self) -> list[str]:
        return [item.keyword.text for item in self.analysis.matched]

    def addressable_terms(self) -> list[str]:
        return [gap.keyword.text for gap in self.gaps.addressable]


def _format_gap(gap: ClassifiedGap) -> str:
    parts = [f'"{gap.keyword.text}"']
    if gap.evidence:
        parts.append(f'(related to "{gap.evidence}" in resume)')
    parts.append(f"[+{gap.potential_impact:g} pts]")
    return f"- {' '.join(parts)}\n  -> {gap.instruction}"


def _content_flags(score: ATSScore) -> list[str]:
    details = score.breakdown.content_quality.details
    flags: list[str] = []
    total = details.get("total_bullets", 0)
    if total and details.get("bullets_with_metrics", 0) < total * 0.5:
        flags.append("Many bullets lack measurable outcomes; add numbers only where the original supports them")
    if (details.get("verb_counts") or {}).get("weak", 0) > 2:
        flags.append("Weak openers detected; prefer verbs such as led, built, delivered")
    if details.get("keyword_density_score", 100) < 50:
        flags.append("Few job keywords appear in bullets; work matched keywords in naturally")
    return flags


def build_section_context(section: str, inputs: GenerationInputs) -> str:
    """Prompt block listing only the gaps this section may honestly address.

    Unfixable gaps are never listed, not even as a warning, so the generator has
    no way to pick them up.
    """
    section_gaps = filter_gaps_for_section(inputs.gaps, section)
    required = [gap for gap in section_gaps if gap.keyword.required]
    preferred = [gap for gap in section_gaps if not gap.keyword.required]
    terminology = [gap for gap in required if gap.category == "terminology"]
    potential = [gap for gap in required if gap.category == "potential"]

    lines = [f"## ATS context for the {section} section"]
    score = inputs.ats_score
    if score is not None:
        lines.append(f"Current ATS score: {score.overall}/100")
        scores = score.breakdown.scores()
        weights = score.weight_profile.weights()
        weak = [dim for dim in SECTION_DIMENSIONS.get(section, ()) if scores[dim] < WEAK_COMPONENT_SCORE]
        if weak:
            lines.append("")
            lines.append("Weak components affecting this section:")
            for dimension in weak:
                lines.append(f"- {dimension}: {round(scores[dimension])}/100 ({round(weights[dimension] * 100)}% weight)")

    if terminology:
        lines.append("")
        lines.append("### Required keywords: wording fixes (the resume already has equivalent experience)")
        lines.extend(_format_gap(gap) for gap in terminology)
    if potential:
        lines.append("")
        lines.append("### Required keywords: related experience present (add only if the candidate has it)")
        lines.extend(_format_gap(gap) for gap in potential)
    if preferred:
        lines.append("")
        lines.append("### Preferred keywords (optional, lower priority)")
        lines.extend(_format_gap(gap) for gap in preferred[:5])

    if section == "experience" and score is not None:
        flags = _content_flags(score)
        if flags:
            lines.append("")
            lines.append("### Content quality issues")
            lines.extend(f"- {flag}" for flag in flags)

    matched = inputs.matched_terms()
    if matched:
        lines.append("")
        lines.append(f"Keywords already matched (keep them): {', '.join(matched[:20])}")

    lines.append("")
    lines.append("Only use keywords listed above. Never add skills, tools, credentials or experience the resume does not show.")
    return "\n".join(lines)
