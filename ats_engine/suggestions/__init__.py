from .context import GenerationInputs, build_section_context
from .generators import (
    SECTION_GENERATORS,
    generate_education_suggestions,
    generate_experience_suggestions,
    generate_projects_suggestions,
    generate_skills_suggestions,
    generate_summary_suggestions,
)
from .orchestrator import applicable_sections, generate_all_suggestions

__all__ = [
    "GenerationInputs",
    "SECTION_GENERATORS",
    "applicable_sections",
    "build_section_context",
    "generate_all_suggestions",
    "generate_education_suggestions",
    "generate_experience_suggestions",
    "generate_projects_suggestions",
    "generate_skills_suggestions",
    "generate_summary_suggestions",
]
