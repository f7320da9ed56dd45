from __future__ import annotations

import uuid
from typing import Literal, Union

from pydantic import BaseModel, Field

from .judge import JudgeResult
from .resume import SectionName

SuggestionStatus = Literal["pending", "accepted", "rejected"]
SuggestionType = Literal[
    "rewrite",
    "bullet_rewrite",
    "skill_addition",
    "skill_removal",
    "education_detail",
    "project_rewrite",
]
ImpactTier = Literal["critical", "high", "moderate"]


def _suggestion_id() -> str:
    return uuid.uuid4().hex


class AITellRewrite(BaseModel):
    detected: str
    rewritten: str = ""


class Suggestion(BaseModel):
    suggestion_id: str = Field(default_factory=_suggestion_id)
    section: SectionName
    item_index: int = Field(default=0, ge=0)
    original_text: str = ""
    suggested_text: str
    suggestion_type: SuggestionType = "rewrite"
    reasoning: str = ""
    status: SuggestionStatus = "pending"
    keywords_added: list[str] = Field(default_factory=list)
    metrics_added: list[str] = Field(default_factory=list)
    impact: ImpactTier = "moderate"
    ai_tell_phrases: list[AITellRewrite] = Field(default_factory=list)
    judged: bool = False
    low_confidence: bool = False
    judge: JudgeResult | None = None


class SectionSuggestions(BaseModel):
    section: SectionName
    suggestions: list[Suggestion] = Field(default_factory=list)
    explanation: str = ""


class SummarySuggestions(SectionSuggestions):
    section: Literal["summary"] = "summary"


class SkillsSuggestions(SectionSuggestions):
    section: Literal["skills"] = "skills"
    existing_skills: list[str] = Field(default_factory=list)
    skill_additions: list[str] = Field(default_factory=list)
    skill_removals: list[str] = Field(default_factory=list)


class ExperienceSuggestions(SectionSuggestions):
    section: Literal["experience"] = "experience"


class EducationSuggestions(SectionSuggestions):
    section: Literal["education"] = "education"


class ProjectsSuggestions(SectionSuggestions):
    section: Literal["projects"] = "projects"
    heading_suggestion: str | None = None


AnySectionSuggestions = Union[
    SummarySuggestions,
    SkillsSuggestions,
    ExperienceSuggestions,
    EducationSuggestions,
    ProjectsSuggestions,
]


class SectionError(BaseModel):
    code: str
    message: str


class SectionOutcome(BaseModel):
    section: SectionName
    status: Literal["success", "failure"]
    payload: AnySectionSuggestions | None = None
    error: SectionError | None = None

    @property
    def ok(self) -> bool:
        return self.status == "success"


class OrchestrationResult(BaseModel):
    outcomes: dict[str, SectionOutcome] = Field(default_factory=dict)
    skipped: list[str] = Field(default_factory=list)

    @property
    def successes(self) -> dict[str, SectionOutcome]:
        return {name: outcome for name, outcome in self.outcomes.items() if outcome.ok}

    @property
    def failures(self) -> dict[str, SectionOutcome]:
        return {name: outcome for name, outcome in self.outcomes.items() if not outcome.ok}
