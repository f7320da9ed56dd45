from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

Tone = Literal["professional", "technical", "casual"]
Verbosity = Literal["concise", "detailed", "comprehensive"]
Emphasis = Literal["skills", "impact", "keywords"]
Industry = Literal["tech", "finance", "healthcare", "generic"]
ExperienceLevel = Literal["entry", "mid", "senior"]
JobType = Literal["coop", "fulltime"]
ModificationLevel = Literal["conservative", "moderate", "aggressive"]
CandidateType = Literal["coop", "fulltime", "career_changer"]
CareerGoal = Literal["first-job", "switching-careers", "advancing", "returning"]
DetectionSource = Literal["user_selection", "onboarding", "resume_analysis", "default"]


class OptimizationPreferences(BaseModel):
    tone: Tone = "professional"
    verbosity: Verbosity = "detailed"
    emphasis: Emphasis = "impact"
    industry: Industry = "generic"
    experience_level: ExperienceLevel = "mid"
    job_type: JobType = "fulltime"
    modification_level: ModificationLevel = "moderate"


class CandidateTypeInput(BaseModel):
    user_job_type: JobType | None = None
    career_goal: CareerGoal | None = None
    resume_role_count: int | None = Field(default=None, ge=0)
    has_active_education: bool | None = None
    total_experience_years: float | None = Field(default=None, ge=0)


class CandidateTypeResult(BaseModel):
    candidate_type: CandidateType
    confidence: float = Field(ge=0.0, le=1.0)
    detected_from: DetectionSource
