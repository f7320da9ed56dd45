from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

KeywordCategory = Literal[
    "skills",
    "technologies",
    "qualifications",
    "experience",
    "soft_skills",
    "certifications",
]
Importance = Literal["high", "medium", "low"]
MatchType = Literal["exact", "synonym", "partial"]
ResumeLocation = Literal[
    "skills_section",
    "summary",
    "experience_bullet",
    "experience_paragraph",
    "education",
    "projects",
    "certifications",
    "other",
]
GapCategory = Literal["terminology", "potential", "unfixable"]
GapPriority = Literal["critical", "high", "medium", "low"]

IMPORTANCE_RANK: dict[str, int] = {"high": 3, "medium": 2, "low": 1}


def normalize_keyword_text(text: str) -> str:
    return re.sub(r"\s+", " ", (text or "").strip().lower())


class ExtractedKeyword(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str = Field(min_length=1)
    category: KeywordCategory
    importance: Importance
    required: bool = False

    @field_validator("text")
    @classmethod
    def _strip_text(cls, value: str) -> str:
        cleaned = re.sub(r"\s+", " ", value.strip())
        if not cleaned:
            raise ValueError("keyword text must not be blank")
        return cleaned

    @property
    def key(self) -> str:
        return normalize_keyword_text(self.text)


class MatchedKeyword(BaseModel):
    model_config = ConfigDict(frozen=True)

    keyword: ExtractedKeyword
    match_type: MatchType
    resume_location: ResumeLocation
    context: str = ""
    matched_term: str = ""


class KeywordAnalysisResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    matched: list[MatchedKeyword] = Field(default_factory=list)
    missing: list[ExtractedKeyword] = Field(default_factory=list)
    match_percentage: int = Field(ge=0, le=100)
    required_total: int = 0
    required_matched: int = 0
    preferred_total: int = 0
    preferred_matched: int = 0

    @model_validator(mode="after")
    def _matched_and_missing_disjoint(self) -> "KeywordAnalysisResult":
        matched_keys = {item.keyword.key for item in self.matched}
        missing_keys = {item.key for item in self.missing}
        overlap = matched_keys & missing_keys
        if overlap:
            raise ValueError(f"keywords reported as both matched and missing: {sorted(overlap)}")
        return self

    @property
    def total(self) -> int:
        return len(self.matched) + len(self.missing)

    def all_keywords(self) -> list[ExtractedKeyword]:
        return [item.keyword for item in self.matched] + list(self.missing)


class ClassifiedGap(BaseModel):
    model_config = ConfigDict(frozen=True)

    keyword: ExtractedKeyword
    category: GapCategory
    priority: GapPriority
    potential_impact: float
    evidence: str | None = None
    target_sections: list[str] = Field(default_factory=list)
    instruction: str = ""
    reason: str = ""


class GapClassificationResult(BaseModel):
    gaps: list[ClassifiedGap] = Field(default_factory=list)

    def by_category(self, category: GapCategory) -> list[ClassifiedGap]:
        return [gap for gap in self.gaps if gap.category == category]

    @property
    def addressable(self) -> list[ClassifiedGap]:
        return [gap for gap in self.gaps if gap.category != "unfixable"]

    @property
    def unfixable_keys(self) -> set[str]:
        return {gap.keyword.key for gap in self.gaps if gap.category == "unfixable"}
