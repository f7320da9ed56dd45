from .judge import JudgeCriteriaScores, JudgeResult, SuggestionContext
from .keywords import (
    ClassifiedGap,
    ExtractedKeyword,
    GapClassificationResult,
    KeywordAnalysisResult,
    MatchedKeyword,
)
from .metrics import FailurePattern, MetricsSummary, QualityHealth, QualityMetricLog
from .preferences import CandidateTypeInput, CandidateTypeResult, OptimizationPreferences
from .resume import ContactInfo, EducationEntry, ExperienceEntry, ProjectEntry, StructuredResume
from .scoring import ATSScore, JDQualifications, ResumeQualifications, ScoreBreakdown, SubScore, WeightProfile
from .suggestions import OrchestrationResult, SectionOutcome, SectionSuggestions, Suggestion

__all__ = [
    "ATSScore",
    "CandidateTypeInput",
    "CandidateTypeResult",
    "ClassifiedGap",
    "ContactInfo",
    "EducationEntry",
    "ExperienceEntry",
    "ExtractedKeyword",
    "FailurePattern",
    "GapClassificationResult",
    "JDQualifications",
    "JudgeCriteriaScores",
    "JudgeResult",
    "KeywordAnalysisResult",
    "MatchedKeyword",
    "MetricsSummary",
    "OptimizationPreferences",
    "OrchestrationResult",
    "ProjectEntry",
    "QualityHealth",
    "QualityMetricLog",
    "ResumeQualifications",
    "ScoreBreakdown",
    "SectionOutcome",
    "SectionSuggestions",
    "StructuredResume",
    "SubScore",
    "Suggestion",
    "SuggestionContext",
    "WeightProfile",
]
