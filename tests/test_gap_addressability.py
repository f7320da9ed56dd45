import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from ats_engine.analysis.gap_addressability import classify_gaps, filter_gaps_for_section  # noqa: E402
from ats_engine.analysis.keyword_matcher import match_keywords  # noqa: E402
from ats_engine.schemas.keywords import ExtractedKeyword  # noqa: E402
from ats_engine.schemas.resume import ExperienceEntry, StructuredResume  # noqa: E402
from ats_engine.suggestions.context import GenerationInputs, build_section_context  # noqa: E402
from ats_engine.suggestions.integrity import apply_integrity_filter  # noqa: E402
from ats_engine.schemas.suggestions import ExperienceSuggestions, SkillsSuggestions, Suggestion  # noqa: E402


def _keyword(text, category="technologies", importance="high", required=True):
    return ExtractedKeyword(text=text, category=category, importance=importance, required=required)


JOB_DESCRIPTION = (
    "Data Engineer. Required: Python, Kubernetes, Unit Testing and a Bachelor's degree in Computer Science. "
    "Nice to have: Terraform."
)


class GapAddressabilityTests(unittest.TestCase):
    def setUp(self):
        self.resume = StructuredResume(
            skills=["Python", "SQL", "Git"],
            experience=[
                ExperienceEntry(
                    title="Data Analyst",
                    company="Northwind",
                    bullets=[
                        "Built Python ETL jobs that cut report time by 40%",
                        "Wrote pytest suites for the reporting library",
                    ],
                )
            ],
        )
        self.keywords = [
            _keyword("Python"),
            _keyword("Kubernetes"),
            _keyword("Unit Testing", category="skills"),
            _keyword("Bachelor's degree in Computer Science", category="qualifications"),
            _keyword("Terraform", importance="low", required=False),
        ]
        self.analysis = match_keywords(self.keywords, self.resume)
        self.gaps = classify_gaps(self.analysis.missing, self.resume)

    def _gap(self, text):
        return next(gap for gap in self.gaps.gaps if gap.keyword.text == text)

    def test_every_missing_keyword_gets_exactly_one_category(self):
        self.assertEqual(len(self.gaps.gaps), len(self.analysis.missing))
        for gap in self.gaps.gaps:
            self.assertIn(gap.category, {"terminology", "potential", "unfixable"})

    def test_unrelated_technology_is_unfixable(self):
        gap = self._gap("Kubernetes")
        self.assertEqual(gap.category, "unfixable")
        self.assertEqual(gap.target_sections, [])
        self.assertEqual(gap.priority, "critical")

    def test_equivalent_wording_is_terminology(self):
        gap = self._gap("Unit Testing")
        self.assertEqual(gap.category, "terminology")
        self.assertEqual(gap.evidence, "pytest")
        self.assertIn("experience", gap.target_sections)

    def test_qualification_is_unfixable(self):
        self.assertEqual(self._gap("Bachelor's degree in Computer Science").category, "unfixable")

    def test_family_sibling_is_potential(self):
        resume = self.resume.model_copy(update={"skills": ["Python", "Docker"]})
        gaps = classify_gaps([_keyword("Kubernetes")], resume)
        self.assertEqual(gaps.gaps[0].category, "potential")
        self.assertEqual(gaps.gaps[0].evidence, "docker")

    def test_section_filter_excludes_unfixable(self):
        experience_gaps = filter_gaps_for_section(self.gaps, "experience")
        texts = {gap.keyword.text for gap in experience_gaps}
        self.assertIn("Unit Testing", texts)
        self.assertNotIn("Kubernetes", texts)

    def test_unfixable_keyword_never_reaches_the_experience_context(self):
        inputs = GenerationInputs(
            job_description=JOB_DESCRIPTION,
            resume=self.resume,
            analysis=self.analysis,
            gaps=self.gaps,
        )
        context = build_section_context("experience", inputs)
        self.assertIn("Unit Testing", context)
        self.assertNotIn("Kubernetes", context)
        self.assertNotIn("Bachelor", context)

    def test_integrity_filter_strips_unfixable_keyword_credit(self):
        payload = ExperienceSuggestions(
            suggestions=[
                Suggestion(
                    section="experience",
                    original_text="Built Python ETL jobs that cut report time by 40%",
                    suggested_text="Built Python ETL jobs on Kubernetes that cut report time by 40%",
                    keywords_added=["Kubernetes", "Python"],
                )
            ]
        )
        cleaned = apply_integrity_filter(payload, self.gaps)
        self.assertEqual(cleaned.suggestions[0].keywords_added, ["Python"])

    def test_integrity_filter_drops_unfixable_skill_additions(self):
        payload = SkillsSuggestions(
            suggestions=[
                Suggestion(section="skills", suggested_text="Kubernetes", suggestion_type="skill_addition"),
                Suggestion(section="skills", suggested_text="Unit Testing", suggestion_type="skill_addition"),
            ],
            skill_additions=["Kubernetes", "Unit Testing"],
        )
        cleaned = apply_integrity_filter(payload, self.gaps)
        self.assertEqual([item.suggested_text for item in cleaned.suggestions], ["Unit Testing"])
        self.assertEqual(cleaned.skill_additions, ["Unit Testing"])


if __name__ == "__main__":
    unittest.main()
