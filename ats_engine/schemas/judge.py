from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Recommendation = Literal["pass", "fail", "borderline"]
Criterion = Literal["authenticity", "clarity", "ats_relevance", "actionability"]
CRITERIA: tuple[str, ...] = ("authenticity", "clarity", "ats_relevance", "actionability")


class JudgeCriteriaScores(BaseModel):
    model_config = ConfigDict(frozen=True)

    authenticity: int = Field(ge=0, le=25)
    clarity: int = Field(ge=0, le=25)
    ats_relevance: int = Field(ge=0, le=25)
    actionability: int = Field(ge=0, le=25)

    def as_dict(self) -> dict[str, int]:
        return {criterion: getattr(self, criterion) for criterion in CRITERIA}

    def total(self) -> int:
        return sum(self.as_dict().values())


class JudgeResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    suggestion_id: str
    section: str
    criteria_scores: JudgeCriteriaScores
    overall_score: int = Field(ge=0, le=100)
    recommendation: Recommendation
    reasoning: str = ""
    short_circuited: bool = False

    @property
    def passed(self) -> bool:
        return self.recommendation == "pass"


class SuggestionContext(BaseModel):
    suggestion_id: str
    section: str
    original_text: str = ""
    suggested_text: str
    job_description: str
    matched_keywords: list[str] = Field(default_factory=list)
    missing_keywords: list[str] = Field(default_factory=list)
    ats_overall: int | None = None
    job_type: str = "fulltime"
    modification_level: str = "moderate"
