from __future__ import annotations

import math
import re

_BULLET_CHARS = "•◦▪▫●○■□◆◇▶►-–—*·"
_BULLET_PATTERN = re.compile(rf"^\s*(?:[{re.escape(_BULLET_CHARS)}]|(?:\d+[\.\)]))\s+")
_EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
_PHONE_RE = re.compile(r"\+?\d[\d\s().-]{7,}\d")
_LINKEDIN_RE = re.compile(r"linkedin\.com/", re.IGNORECASE)
_GITHUB_RE = re.compile(r"github\.com/", re.IGNORECASE)
_WORD_RE = re.compile(r"[A-Za-z0-9][A-Za-z0-9+#./-]*")
_STOPWORDS = {
    "a", "an", "and", "or", "the", "of", "for", "to", "in", "on", "with", "at", "by", "as", "is", "be",
}


def normalize_line(line: str) -> str:
    return re.sub(r"\s+", " ", line or "").strip()


def is_bullet_like(line: str) -> bool:
    return bool(_BULLET_PATTERN.match(line))


def strip_bullet_prefix(line: str) -> str:
    return _BULLET_PATTERN.sub("", line).strip()


def has_email(text: str) -> bool:
    return bool(_EMAIL_RE.search(text or ""))


def has_phone(text: str) -> bool:
    return bool(_PHONE_RE.search(text or ""))


def has_linkedin(text: str) -> bool:
    return bool(_LINKEDIN_RE.search(text or ""))


def has_github(text: str) -> bool:
    return bool(_GITHUB_RE.search(text or ""))


def tokens(text: str) -> list[str]:
    output: list[str] = []
    for token in _WORD_RE.findall(text or ""):
        cleaned = token.lower().strip(".,;:()[]{}/-")
        if cleaned:
            output.append(cleaned)
    return output


def significant_tokens(text: str) -> list[str]:
    return [token for token in tokens(text) if token not in _STOPWORDS and len(token) > 1]


def stem(token: str) -> str:
    word = token.lower()
    for suffix in ("ing", "ed", "s"):
        if len(word) > len(suffix) + 2 and word.endswith(suffix) and not word.endswith("ss"):
            word = word[: -len(suffix)]
            break
    if len(word) > 3 and word.endswith("e"):
        word = word[:-1]
    return word


def term_pattern(term: str) -> re.Pattern[str]:
    """Case-insensitive whole-term match that treats '+', '#' and '.' as part of the term."""
    escaped = re.escape(normalize_line(term))
    escaped = escaped.replace(r"\ ", r"\s+")
    return re.compile(rf"(?<![A-Za-z0-9+#]){escaped}(?![A-Za-z0-9+#])", re.IGNORECASE)


def snippet(text: str, start: int, end: int, max_chars: int = 100) -> str:
    if len(text) <= max_chars:
        return normalize_line(text)
    pad = max(0, (max_chars - (end - start)) // 2)
    left = max(0, start - pad)
    return normalize_line(text[left : left + max_chars])


def word_count(text: str) -> int:
    return len(re.findall(r"\b\w+\b", text or ""))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
