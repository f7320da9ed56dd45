from .candidate_type import detect_candidate_type
from .gap_addressability import classify_gaps, filter_gaps_for_section
from .keyword_extractor import extract_keywords, validate_job_description
from .keyword_matcher import match_keywords
from .qualifications import extract_jd_qualifications, resume_qualifications

__all__ = [
    "classify_gaps",
    "detect_candidate_type",
    "extract_jd_qualifications",
    "extract_keywords",
    "filter_gaps_for_section",
    "match_keywords",
    "resume_qualifications",
    "validate_job_description",
]
