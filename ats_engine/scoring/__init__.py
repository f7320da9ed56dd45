from .ats_score import ALGORITHM_VERSION, calculate_ats_score, combine_scores, score_tier
from .weights import WEIGHT_PROFILES, get_weight_profile, select_weight_profile, validate_weight_profile

__all__ = [
    "ALGORITHM_VERSION",
    "WEIGHT_PROFILES",
    "calculate_ats_score",
    "combine_scores",
    "get_weight_profile",
    "score_tier",
    "select_weight_profile",
    "validate_weight_profile",
]
