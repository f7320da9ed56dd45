import math
import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from ats_engine.core.errors import ComputationError  # noqa: E402
from ats_engine.schemas.scoring import ScoreBreakdown, SubScore, WeightProfile  # noqa: E402
from ats_engine.scoring import combine_scores, score_tier  # noqa: E402
from ats_engine.scoring.weights import (  # noqa: E402
    ROLE_ADJUSTMENTS,
    WEIGHT_PROFILES,
    apply_role_adjustment,
    detect_job_role,
    detect_seniority,
    get_weight_profile,
    select_weight_profile,
    validate_weight_profile,
)


def _breakdown(keywords, qualification_fit, content_quality, sections, format_score):
    return ScoreBreakdown(
        keywords=SubScore(score=keywords),
        qualification_fit=SubScore(score=qualification_fit),
        content_quality=SubScore(score=content_quality),
        sections=SubScore(score=sections),
        format=SubScore(score=format_score),
    )


class WeightProfileTests(unittest.TestCase):
    def test_every_profile_and_role_variant_sums_to_one(self):
        for profile in WEIGHT_PROFILES.values():
            self.assertAlmostEqual(profile.total(), 1.0, delta=1e-5)
            for role in ROLE_ADJUSTMENTS:
                self.assertAlmostEqual(apply_role_adjustment(profile, role).total(), 1.0, delta=1e-5)

    def test_invalid_profile_is_rejected(self):
        broken = WeightProfile(
            name="broken",
            keywords=0.5,
            qualification_fit=0.2,
            content_quality=0.2,
            sections=0.2,
            format=0.1,
        )
        with self.assertRaises(ComputationError) as ctx:
            validate_weight_profile(broken)
        self.assertEqual(ctx.exception.code, "WEIGHT_PROFILE_INVALID")

    def test_unknown_profile_name(self):
        with self.assertRaises(ComputationError):
            get_weight_profile("intern")

    def test_profile_selection(self):
        self.assertEqual(select_weight_profile("coop", "mid").name, "coop_entry")
        self.assertEqual(select_weight_profile("career_changer", "senior").name, "career_changer")
        self.assertEqual(select_weight_profile("fulltime", "executive").name, "senior_executive")
        self.assertEqual(select_weight_profile("fulltime", "entry").name, "coop_entry")
        self.assertEqual(select_weight_profile("fulltime", "mid").name, "mid")
        adjusted = select_weight_profile("fulltime", "mid", "designer")
        self.assertEqual(adjusted.name, "mid+designer")
        self.assertAlmostEqual(adjusted.format, 0.15)

    def test_role_and_seniority_detection(self):
        jd = "Senior Backend Developer to own our payment APIs."
        self.assertEqual(detect_job_role(jd), "software_engineer")
        self.assertEqual(detect_seniority(jd, "fulltime"), "senior")
        self.assertEqual(detect_seniority(jd, "coop"), "mid")
        self.assertEqual(detect_job_role("Keep the warehouse tidy and friendly."), "general")


class CombineScoresTests(unittest.TestCase):
    def test_career_changer_worked_example(self):
        profile = get_weight_profile("career_changer")
        overall = combine_scores(_breakdown(80, 60, 70, 90, 100), profile)
        self.assertEqual(overall, 79)

    def test_overall_is_integer_in_range(self):
        for profile in WEIGHT_PROFILES.values():
            for scores in ((0, 0, 0, 0, 0), (100, 100, 100, 100, 100), (55.5, 12.25, 99.9, 0.1, 63)):
                overall = combine_scores(_breakdown(*scores), profile)
                self.assertIsInstance(overall, int)
                self.assertGreaterEqual(overall, 0)
                self.assertLessEqual(overall, 100)

    def test_half_values_round_up(self):
        profile = WeightProfile(
            name="even",
            keywords=0.5,
            qualification_fit=0.5,
            content_quality=0.0,
            sections=0.0,
            format=0.0,
        )
        self.assertEqual(combine_scores(_breakdown(70, 71, 0, 0, 0), profile), 71)

    def test_nan_sub_score_is_a_computation_error(self):
        breakdown = _breakdown(80, 60, 70, 90, 100)
        breakdown.keywords.score = math.nan
        with self.assertRaises(ComputationError):
            combine_scores(breakdown, get_weight_profile("mid"))

    def test_tiers(self):
        self.assertEqual(score_tier(85), "excellent")
        self.assertEqual(score_tier(84), "strong")
        self.assertEqual(score_tier(55), "moderate")
        self.assertEqual(score_tier(54), "weak")


if __name__ == "__main__":
    unittest.main()
