import sys
import unittest
from datetime import date
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from ats_engine.analysis.keyword_matcher import match_keywords  # noqa: E402
from ats_engine.schemas.keywords import ExtractedKeyword, KeywordAnalysisResult  # noqa: E402
from ats_engine.schemas.resume import (  # noqa: E402
    ContactInfo,
    EducationEntry,
    ExperienceEntry,
    ProjectEntry,
    StructuredResume,
)
from ats_engine.schemas.scoring import (  # noqa: E402
    DegreeRequirement,
    ExperienceRequirement,
    JDQualifications,
    ResumeQualifications,
)
from ats_engine.scoring import ALGORITHM_VERSION, calculate_ats_score  # noqa: E402
from ats_engine.scoring.content_quality import (  # noqa: E402
    classify_action_verb,
    quantification_tier,
    score_content_quality,
)
from ats_engine.scoring.format_score import score_format  # noqa: E402
from ats_engine.scoring.keyword_score import score_keywords  # noqa: E402
from ats_engine.scoring.qualification_fit import score_qualification_fit  # noqa: E402
from ats_engine.scoring.section_score import score_sections  # noqa: E402

JOB_DESCRIPTION = (
    "Backend Developer. Required: Python, PostgreSQL and REST APIs. "
    "Bachelor's degree in Computer Science and 3+ years of experience. Nice to have: Docker."
)


def _keyword(text, importance="high", required=True, category="technologies"):
    return ExtractedKeyword(text=text, category=category, importance=importance, required=required)


def sample_resume():
    return StructuredResume(
        contact=ContactInfo(
            name="Sam Rivera",
            email="sam@example.com",
            phone="+1 555 010 2000",
            linkedin="linkedin.com/in/samrivera",
        ),
        summary="Backend developer with five years building Python services and PostgreSQL data models.",
        skills=["Python", "PostgreSQL", "Flask", "Redis", "Git", "Linux", "Celery", "pytest"],
        experience=[
            ExperienceEntry(
                title="Backend Developer",
                company="Acme",
                start_date="2019",
                end_date="Present",
                bullets=[
                    "Built Python REST APIs serving 12,000 users",
                    "Reduced PostgreSQL query latency by 45%",
                    "Helped with on-call rotation",
                ],
            ),
        ],
        education=[
            EducationEntry(degree="Bachelor of Science", field_of_study="Computer Science", institution="State University"),
        ],
        projects=[ProjectEntry(name="Job queue", bullets=["Designed a Redis-backed job queue"])],
    )


class SubScoreTests(unittest.TestCase):
    def test_no_keywords_scores_full_marks(self):
        analysis = KeywordAnalysisResult(match_percentage=100)
        self.assertEqual(score_keywords(analysis).score, 100.0)

    def test_missing_required_keywords_are_penalized(self):
        resume = sample_resume()
        full = score_keywords(match_keywords([_keyword("Python"), _keyword("PostgreSQL")], resume))
        partial = score_keywords(match_keywords([_keyword("Python"), _keyword("Kafka")], resume))
        self.assertGreater(full.score, partial.score)
        self.assertEqual(partial.details["missing_required"], ["Kafka"])

    def test_qualification_fit_is_neutral_without_requirements(self):
        result = score_qualification_fit(JDQualifications(), ResumeQualifications())
        self.assertEqual(result.score, 50.0)

    def test_qualification_fit_rewards_met_requirements(self):
        jd = JDQualifications(
            degree=DegreeRequirement(level="bachelor", fields=["Computer Science"]),
            experience=ExperienceRequirement(min_years=3),
        )
        met = ResumeQualifications(degree_level="bachelor", degree_fields=["Computer Science"], total_experience_years=5)
        unmet = ResumeQualifications(degree_level="high_school", total_experience_years=0.5)
        self.assertGreater(score_qualification_fit(jd, met).score, score_qualification_fit(jd, unmet).score)

    def test_content_quality_signals(self):
        self.assertEqual(quantification_tier("Reduced PostgreSQL query latency by 45%"), "low")
        self.assertEqual(quantification_tier("Grew revenue to $2M"), "high")
        self.assertIsNone(quantification_tier("Maintained the build"))
        self.assertEqual(classify_action_verb("Built Python REST APIs"), "strong")
        self.assertEqual(classify_action_verb("Helped with on-call rotation"), "weak")
        self.assertEqual(classify_action_verb("Was responsible for deployments"), "weak")

        result = score_content_quality(sample_resume(), ["Python", "PostgreSQL"], "fulltime")
        self.assertGreater(result.score, 0)
        self.assertLessEqual(result.score, 100)

    def test_content_quality_without_bullets(self):
        self.assertEqual(score_content_quality(StructuredResume(summary="Hi"), [], "fulltime").score, 0.0)

    def test_sections_depend_on_candidate_type(self):
        resume = sample_resume()
        fulltime = score_sections(resume, "fulltime")
        self.assertIn("experience", fulltime.details["sections"])
        coop_resume = resume.model_copy(update={"projects": []})
        coop = score_sections(coop_resume, "coop")
        self.assertFalse(coop.details["sections"]["projects"]["present"])
        self.assertLess(coop.score, 100)

    def test_format_flags(self):
        result = score_format(StructuredResume(objective="Seeking a role", skills=["Python"]))
        self.assertIn("no_email", result.details["flags"])
        self.assertIn("objective_without_summary", result.details["flags"])
        self.assertLess(result.score, score_format(sample_resume()).score)


class CalculateATSScoreTests(unittest.TestCase):
    def test_overall_score_contract(self):
        resume = sample_resume()
        keywords = [
            _keyword("Python"),
            _keyword("PostgreSQL"),
            _keyword("REST APIs", category="skills"),
            _keyword("Docker", importance="low", required=False),
        ]
        analysis = match_keywords(keywords, resume)
        score = calculate_ats_score(
            analysis,
            resume,
            job_description=JOB_DESCRIPTION,
            jd_qualifications=JDQualifications(
                degree=DegreeRequirement(level="bachelor", fields=["Computer Science"]),
                experience=ExperienceRequirement(min_years=3),
            ),
            candidate_type="fulltime",
            today=date(2026, 1, 15),
        )
        self.assertIsInstance(score.overall, int)
        self.assertGreaterEqual(score.overall, 0)
        self.assertLessEqual(score.overall, 100)
        self.assertEqual(score.algorithm_version, ALGORITHM_VERSION)
        self.assertEqual(score.role, "software_engineer")
        self.assertEqual(score.weight_profile.name, "mid+software_engineer")
        self.assertLessEqual(len(score.action_items), 8)
        self.assertIn(score.tier, {"excellent", "strong", "moderate", "weak"})

    def test_empty_keyword_set_still_scores(self):
        resume = sample_resume()
        score = calculate_ats_score(
            KeywordAnalysisResult(match_percentage=100),
            resume,
            job_description=JOB_DESCRIPTION,
            candidate_type="career_changer",
        )
        self.assertEqual(score.breakdown.keywords.score, 100.0)
        self.assertEqual(score.weight_profile.name, "career_changer+software_engineer")


if __name__ == "__main__":
    unittest.main()
