from __future__ import annotations

from ats_engine.schemas.preferences import CandidateTypeInput, CandidateTypeResult


def detect_candidate_type(data: CandidateTypeInput) -> CandidateTypeResult:
    """Resolve the candidate type; explicit user choices win over resume signals."""
    roles = data.resume_role_count
    years = data.total_experience_years

    if data.user_job_type == "coop":
        return CandidateTypeResult(candidate_type="coop", confidence=1.0, detected_from="user_selection")

    if data.user_job_type == "fulltime":
        if data.career_goal == "switching-careers":
            return CandidateTypeResult(candidate_type="career_changer", confidence=0.95, detected_from="onboarding")
        if data.has_active_education and roles is not None and roles < 3:
            return CandidateTypeResult(candidate_type="career_changer", confidence=0.7, detected_from="resume_analysis")
        return CandidateTypeResult(candidate_type="fulltime", confidence=0.9, detected_from="user_selection")

    if data.has_active_education and roles is not None and roles < 2:
        return CandidateTypeResult(candidate_type="coop", confidence=0.8, detected_from="resume_analysis")

    if roles is not None and roles >= 3 and years is not None and years >= 3:
        return CandidateTypeResult(candidate_type="fulltime", confidence=0.85, detected_from="resume_analysis")

    return CandidateTypeResult(candidate_type="fulltime", confidence=0.5, detected_from="default")
