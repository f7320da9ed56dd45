from __future__ import annotations

from pydantic import BaseModel, Field

from .keywords import ExtractedKeyword, GapClassificationResult, KeywordAnalysisResult
from .preferences import CandidateTypeInput, CandidateTypeResult, OptimizationPreferences
from .resume import StructuredResume
from .scoring import ATSScore, JDQualifications
from .suggestions import SectionOutcome


class ResumeRequest(BaseModel):
    job_description: str = Field(min_length=1, max_length=50_000)
    resume: StructuredResume
    preferences: OptimizationPreferences = Field(default_factory=OptimizationPreferences)
    candidate: CandidateTypeInput | None = None


class ResumeAnalysis(BaseModel):
    candidate: CandidateTypeResult
    keywords: list[ExtractedKeyword] = Field(default_factory=list)
    keyword_analysis: KeywordAnalysisResult
    gaps: GapClassificationResult
    jd_qualifications: JDQualifications
    score: ATSScore


class SectionJudgeSummary(BaseModel):
    evaluated: int = 0
    passed: int = 0
    borderline: int = 0
    withheld: int = 0
    unjudged: int = 0
    retried: bool = False


class OptimizationResponse(BaseModel):
    optimization_id: str
    analysis: ResumeAnalysis
    sections: dict[str, SectionOutcome] = Field(default_factory=dict)
    skipped: list[str] = Field(default_factory=list)
    judge: dict[str, SectionJudgeSummary] = Field(default_factory=dict)
