from __future__ import annotations

import re

from ats_engine.schemas.suggestions import AITellRewrite

# Phrase -> plainer replacement ("" drops it).
AI_TELL_PHRASES: dict[str, str] = {
    "leverage my expertise": "use my experience",
    "leveraged": "used",
    "leveraging": "using",
    "synergy": "collaboration",
    "synergize": "work together",
    "i have the pleasure": "",
    "i am excited": "",
    "passionate about": "focused on",
    "dynamic professional": "professional",
    "results-driven": "",
    "proven track record": "record",
    "fast-paced environment": "busy environment",
    "detail-oriented": "careful",
    "team player": "collaborator",
    "hard-working": "",
    "spearheaded": "led",
    "cutting-edge": "modern",
    "seamlessly": "",
    "delve into": "explore",
    "in today's": "in the",
    "robust": "reliable",
    "utilize": "use",
}

_PHRASE_RE = re.compile(
    r"\b(?:" + "|".join(re.escape(phrase) for phrase in sorted(AI_TELL_PHRASES, key=len, reverse=True)) + r")\b",
    re.IGNORECASE,
)


def detect_ai_tell_phrases(text: str) -> list[AITellRewrite]:
    found: dict[str, AITellRewrite] = {}
    for match in _PHRASE_RE.finditer(text or ""):
        key = match.group(0).lower()
        if key not in found:
            found[key] = AITellRewrite(detected=match.group(0), rewritten=AI_TELL_PHRASES[key])
    return list(found.values())

