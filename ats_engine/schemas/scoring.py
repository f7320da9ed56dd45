from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

Dimension = Literal["keywords", "qualification_fit", "content_quality", "sections", "format"]
DIMENSIONS: tuple[str, ...] = ("keywords", "qualification_fit", "content_quality", "sections", "format")
DegreeLevel = Literal["high_school", "associate", "bachelor", "master", "phd"]
ScoreTier = Literal["excellent", "strong", "moderate", "weak"]
JobRole = Literal[
    "software_engineer",
    "data_scientist",
    "data_analyst",
    "product_manager",
    "designer",
    "marketing",
    "finance",
    "operations",
    "general",
]
SeniorityLevel = Literal["entry", "mid", "senior", "lead", "executive"]
ActionPriority = Literal["critical", "high", "medium", "low"]


class WeightProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    keywords: float = Field(ge=0.0, le=1.0)
    qualification_fit: float = Field(ge=0.0, le=1.0)
    content_quality: float = Field(ge=0.0, le=1.0)
    sections: float = Field(ge=0.0, le=1.0)
    format: float = Field(ge=0.0, le=1.0)

    def weights(self) -> dict[str, float]:
        return {dimension: getattr(self, dimension) for dimension in DIMENSIONS}

    def total(self) -> float:
        return sum(self.weights().values())


class SubScore(BaseModel):
    score: float = Field(ge=0.0, le=100.0)
    details: dict[str, Any] = Field(default_factory=dict)


class ScoreBreakdown(BaseModel):
    keywords: SubScore
    qualification_fit: SubScore
    content_quality: SubScore
    sections: SubScore
    format: SubScore

    def scores(self) -> dict[str, float]:
        return {dimension: getattr(self, dimension).score for dimension in DIMENSIONS}


class ActionItem(BaseModel):
    dimension: Dimension
    priority: ActionPriority
    message: str
    potential_gain: float = 0.0


class ATSScore(BaseModel):
    overall: int = Field(ge=0, le=100)
    breakdown: ScoreBreakdown
    weight_profile: WeightProfile
    tier: ScoreTier
    candidate_type: str
    role: JobRole = "general"
    seniority: SeniorityLevel = "mid"
    action_items: list[ActionItem] = Field(default_factory=list)
    algorithm_version: str


class DegreeRequirement(BaseModel):
    level: DegreeLevel
    fields: list[str] = Field(default_factory=list)
    required: bool = True


class ExperienceRequirement(BaseModel):
    min_years: float = Field(default=0, ge=0)
    max_years: float | None = Field(default=None, ge=0)
    required: bool = True


class CertificationRequirement(BaseModel):
    certifications: list[str] = Field(default_factory=list)
    required: bool = False


class JDQualifications(BaseModel):
    degree: DegreeRequirement | None = None
    experience: ExperienceRequirement | None = None
    certifications: CertificationRequirement | None = None

    def is_empty(self) -> bool:
        return self.degree is None and self.experience is None and self.certifications is None


class ResumeQualifications(BaseModel):
    degree_level: DegreeLevel | None = None
    degree_fields: list[str] = Field(default_factory=list)
    total_experience_years: float | None = None
    certifications: list[str] = Field(default_factory=list)
