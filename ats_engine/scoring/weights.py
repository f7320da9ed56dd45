from __future__ import annotations

import re
from types import MappingProxyType
from typing import Mapping

from ats_engine.core.errors import ComputationError
from ats_engine.schemas.scoring import JobRole, SeniorityLevel, WeightProfile

WEIGHT_TOLERANCE = 1e-5

WEIGHT_PROFILES: Mapping[str, WeightProfile] = MappingProxyType(
    {
        "coop_entry": WeightProfile(
            name="coop_entry",
            keywords=0.42,
            qualification_fit=0.10,
            content_quality=0.18,
            sections=0.20,
            format=0.10,
        ),
        "mid": WeightProfile(
            name="mid",
            keywords=0.40,
            qualification_fit=0.15,
            content_quality=0.20,
            sections=0.15,
            format=0.10,
        ),
        "senior_executive": WeightProfile(
            name="senior_executive",
            keywords=0.35,
            qualification_fit=0.20,
            content_quality=0.25,
            sections=0.10,
            format=0.10,
        ),
        "career_changer": WeightProfile(
            name="career_changer",
            keywords=0.40,
            qualification_fit=0.14,
            content_quality=0.18,
            sections=0.18,
            format=0.10,
        ),
    }
)

# Shifts applied on top of the selected profile; each pair nets to zero.
ROLE_ADJUSTMENTS: Mapping[str, dict[str, float]] = MappingProxyType(
    {
        "designer": {"format": 0.05, "keywords": -0.05},
        "software_engineer": {"keywords": 0.03, "sections": -0.03},
        "data_scientist": {"keywords": 0.03, "sections": -0.03},
    }
)

_ROLE_PATTERNS: tuple[tuple[JobRole, tuple[str, ...]], ...] = (
    ("software_engineer", (r"software\s+engineer", r"developer", r"frontend", r"backend", r"full\s*stack", r"\bswe\b")),
    ("data_scientist", (r"data\s+scientist", r"machine\s+learning", r"\bml\s+engineer", r"\bai\s+engineer")),
    ("data_analyst", (r"data\s+analyst", r"business\s+analyst", r"\banalytics\b", r"\bbi\s+analyst")),
    ("product_manager", (r"product\s+manager", r"program\s+manager", r"project\s+manager", r"\bpm\b")),
    ("designer", (r"designer", r"\bux\b", r"\bui\b", r"user\s+experience")),
    ("marketing", (r"marketing", r"\bgrowth\b", r"content\s+(?:manager|strategist)")),
    ("finance", (r"finance", r"accounting", r"financial\s+analyst")),
    ("operations", (r"operations", r"supply\s+chain", r"logistics")),
)


def validate_weight_profile(profile: WeightProfile) -> WeightProfile:
    total = profile.total()
    if abs(total - 1.0) > WEIGHT_TOLERANCE:
        raise ComputationError(
            f"Weight profile '{profile.name}' sums to {total:.6f}, expected 1.0",
            code="WEIGHT_PROFILE_INVALID",
        )
    return profile


def validate_weight_profiles(profiles: Mapping[str, WeightProfile] = WEIGHT_PROFILES) -> None:
    for profile in profiles.values():
        validate_weight_profile(profile)
        for role in ROLE_ADJUSTMENTS:
            validate_weight_profile(apply_role_adjustment(profile, role))


def get_weight_profile(name: str) -> WeightProfile:
    try:
        return WEIGHT_PROFILES[name]
    except KeyError as exc:
        raise ComputationError(f"Unknown weight profile '{name}'", code="WEIGHT_PROFILE_UNKNOWN") from exc


def apply_role_adjustment(profile: WeightProfile, role: str) -> WeightProfile:
    shifts = ROLE_ADJUSTMENTS.get(role)
    if not shifts:
        return profile
    weights = profile.weights()
    for dimension, delta in shifts.items():
        weights[dimension] = round(weights[dimension] + delta, 10)
    return WeightProfile(name=f"{profile.name}+{role}", **weights)


def detect_job_role(job_description: str) -> JobRole:
    lowered = (job_description or "").lower()
    for role, patterns in _ROLE_PATTERNS:
        if any(re.search(pattern, lowered) for pattern in patterns):
            return role
    return "general"


def detect_seniority(job_description: str, candidate_type: str) -> SeniorityLevel:
    if candidate_type in {"coop", "career_changer"}:
        return "mid"
    lowered = (job_description or "").lower()
    if re.search(r"\b(?:director|vp|vice\s+president|head\s+of|chief|principal)\b", lowered):
        return "executive"
    if re.search(r"\b(?:senior|sr\.?|lead|staff)\b", lowered):
        return "senior"
    if re.search(r"\b(?:junior|jr\.?|entry|associate|intern|co-?op)\b", lowered):
        return "entry"
    if re.search(r"\b(?:7|8|9|10|12|15)\+?\s*years?\b", lowered):
        return "senior"
    return "mid"


def select_weight_profile(candidate_type: str, seniority: SeniorityLevel, role: JobRole = "general") -> WeightProfile:
    if candidate_type == "coop":
        name = "coop_entry"
    elif candidate_type == "career_changer":
        name = "career_changer"
    elif seniority in {"senior", "lead", "executive"}:
        name = "senior_executive"
    elif seniority == "entry":
        name = "coop_entry"
    else:
        name = "mid"
    return validate_weight_profile(apply_role_adjustment(get_weight_profile(name), role))


validate_weight_profiles()
