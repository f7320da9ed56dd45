from __future__ import annotations

from ats_engine.schemas.preferences import OptimizationPreferences

_TONE = {
    "professional": "Use a polished, corporate register.",
    "technical": "Use precise technical language and name concrete tools and systems.",
    "casual": "Use a conversational but still professional voice.",
}
_VERBOSITY = {
    "concise": "Keep each rewrite short: one line per bullet, 2-3 sentences for a summary.",
    "detailed": "Use 1-2 lines per bullet and 3-4 sentences for a summary.",
    "comprehensive": "Be thorough: include context, method and outcome in each bullet.",
}
_EMPHASIS = {
    "skills": "Foreground technical and domain skills.",
    "impact": "Foreground measurable outcomes and business impact.",
    "keywords": "Foreground exact job description terminology where it is accurate.",
}
_INDUSTRY = {
    "tech": "Use software industry conventions.",
    "finance": "Use finance industry conventions; be precise about figures and compliance.",
    "healthcare": "Use healthcare industry conventions; respect clinical terminology.",
    "generic": "",
}
_LEVEL = {
    "entry": "The candidate is early career; credit coursework, projects and collaboration.",
    "mid": "The candidate is mid-level; stress ownership and delivered results.",
    "senior": "The candidate is senior; stress leadership, scope and strategic impact.",
}
_MODIFICATION = {
    "conservative": "Change as little as possible: keep structure and wording, adjust terminology only.",
    "moderate": "Restructure sentences where it helps, keeping every claim from the original.",
    "aggressive": "Rewrite freely for impact, but never add claims the original does not support.",
}


def preference_guidance(preferences: OptimizationPreferences) -> str:
    lines = [
        "<preferences>",
        f"Tone: {_TONE[preferences.tone]}",
        f"Length: {_VERBOSITY[preferences.verbosity]}",
        f"Emphasis: {_EMPHASIS[preferences.emphasis]}",
    ]
    if _INDUSTRY[preferences.industry]:
        lines.append(f"Industry: {_INDUSTRY[preferences.industry]}")
    lines.append(f"Level: {_LEVEL[preferences.experience_level]}")
    if preferences.job_type == "coop":
        lines.append("Target: a co-op or internship role; learning-oriented framing is fine.")
    lines.append(f"Edits: {_MODIFICATION[preferences.modification_level]}")
    lines.append("</preferences>")
    return "\n".join(lines)


def generation_temperature(preferences: OptimizationPreferences) -> float:
    return {"conservative": 0.2, "moderate": 0.35, "aggressive": 0.5}[preferences.modification_level]
