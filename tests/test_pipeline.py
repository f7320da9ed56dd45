import asyncio
import sys
import threading
import unittest
from pathlib import Path
from unittest.mock import patch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from ats_engine.core.errors import ExtractionError, GenerationError, ValidationError  # noqa: E402
from ats_engine.schemas.api import ResumeRequest  # noqa: E402
from ats_engine.schemas.keywords import GapClassificationResult, KeywordAnalysisResult  # noqa: E402
from ats_engine.schemas.resume import ContactInfo, EducationEntry, ExperienceEntry, StructuredResume  # noqa: E402
from ats_engine.schemas.suggestions import (  # noqa: E402
    ExperienceSuggestions,
    SectionOutcome,
    SkillsSuggestions,
    Suggestion,
)
from ats_engine.services.pipeline import JudgePolicy, analyze_resume, apply_judge_policy, optimize_resume  # noqa: E402
from ats_engine.suggestions import SECTION_GENERATORS, GenerationInputs  # noqa: E402

JUDGE_MARKER = "Evaluate whether this resume suggestion"

POLICY_JD = "Backend Developer role building internal data services with a small platform team."

PIPELINE_JD = (
    "Backend Developer. Required: Python, PostgreSQL and Kubernetes. "
    "Bachelor's degree in Computer Science. Nice to have: Docker."
)


def _scores(authenticity, clarity, ats_relevance, actionability):
    return {
        "authenticity": authenticity,
        "clarity": clarity,
        "ats_relevance": ats_relevance,
        "actionability": actionability,
        "reasoning": "scored",
    }


PASS = _scores(20, 18, 17, 15)
BORDERLINE = _scores(12, 12, 12, 12)
FAIL = _scores(0, 10, 10, 10)


class RoutingLLMClient:
    """Answers by the first marker found in the user prompt."""

    model = "fake-model"

    def __init__(self, routes):
        self.routes = routes
        self.prompts = []

    async def complete_json(self, messages, *, temperature=0.2, max_tokens=1500):
        prompt = messages[-1].content
        self.prompts.append(prompt)
        for marker, response in self.routes:
            if marker in prompt:
                if isinstance(response, BaseException):
                    raise response
                if callable(response):
                    return response(prompt)
                return response
        raise LookupError(f"no route for prompt: {prompt[:60]}")

    def count(self, marker):
        return sum(1 for prompt in self.prompts if marker in prompt)


def judge_by_text(prompt):
    if "Automated billing" in prompt or "Scheduled nightly" in prompt or "PostgreSQL" in prompt:
        return PASS
    if "Airflow" in prompt:
        return BORDERLINE
    if "tripled" in prompt or "Kubernetes" in prompt:
        return FAIL
    return {"clarity": 5}


def policy_inputs():
    return GenerationInputs(
        job_description=POLICY_JD,
        resume=StructuredResume(skills=["Python", "Perl"]),
        analysis=KeywordAnalysisResult(match_percentage=100),
        gaps=GapClassificationResult(),
    )


def _bullet(index, original, suggested):
    return Suggestion(
        section="experience",
        item_index=index,
        original_text=original,
        suggested_text=suggested,
        suggestion_type="bullet_rewrite",
    )


def experience_outcome():
    return SectionOutcome(
        section="experience",
        status="success",
        payload=ExperienceSuggestions(
            suggestions=[
                _bullet(0, "Did billing", "Automated billing exports for 40 clients"),
                _bullet(1, "Ran jobs", "Migrated reporting jobs to Airflow"),
                _bullet(2, "Sold things", "Single-handedly tripled company revenue"),
                _bullet(3, "Wrote docs", "Documented the release checklist"),
            ]
        ),
    )


def _regenerating(*suggestions):
    async def generator(inputs, *, client):
        await asyncio.sleep(0)
        return ExperienceSuggestions(suggestions=list(suggestions))

    return generator


class JudgePolicyTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.judge = RoutingLLMClient([(JUDGE_MARKER, judge_by_text)])

    async def _apply(self, outcome, policy, generator=None):
        return await apply_judge_policy(
            outcome,
            policy_inputs(),
            client=RoutingLLMClient([]),
            judge_client=self.judge,
            policy=policy,
            generator=generator,
        )

    async def test_pass_borderline_fail_and_unjudged(self):
        updated, summary, results = await self._apply(
            experience_outcome(),
            JudgePolicy(retry_borderline=False, show_unjudged=True),
        )
        shown = {item.suggested_text: item for item in updated.payload.suggestions}

        self.assertEqual(
            list(shown),
            [
                "Automated billing exports for 40 clients",
                "Migrated reporting jobs to Airflow",
                "Documented the release checklist",
            ],
        )
        self.assertTrue(shown["Automated billing exports for 40 clients"].judged)
        self.assertEqual(shown["Automated billing exports for 40 clients"].judge.overall_score, 70)
        self.assertTrue(shown["Migrated reporting jobs to Airflow"].low_confidence)
        self.assertFalse(shown["Documented the release checklist"].judged)
        self.assertIsNone(shown["Documented the release checklist"].judge)

        self.assertEqual(summary.evaluated, 3)
        self.assertEqual(summary.passed, 1)
        self.assertEqual(summary.borderline, 1)
        self.assertEqual(summary.withheld, 1)
        self.assertEqual(summary.unjudged, 1)
        self.assertFalse(summary.retried)
        self.assertEqual(len(results), 3)

    async def test_unjudged_suggestions_can_be_withheld(self):
        updated, summary, _ = await self._apply(
            experience_outcome(),
            JudgePolicy(retry_borderline=False, show_unjudged=False),
        )
        texts = [item.suggested_text for item in updated.payload.suggestions]
        self.assertNotIn("Documented the release checklist", texts)
        self.assertEqual(summary.withheld, 2)

    async def test_borderline_is_replaced_by_a_passing_retry(self):
        generator = _regenerating(_bullet(1, "Ran jobs", "Scheduled nightly reporting jobs with cron"))
        updated, summary, results = await self._apply(experience_outcome(), JudgePolicy(), generator=generator)

        texts = [item.suggested_text for item in updated.payload.suggestions]
        self.assertIn("Scheduled nightly reporting jobs with cron", texts)
        self.assertNotIn("Migrated reporting jobs to Airflow", texts)
        replacement = next(item for item in updated.payload.suggestions if item.item_index == 1)
        self.assertTrue(replacement.judged)
        self.assertFalse(replacement.low_confidence)
        self.assertTrue(summary.retried)
        self.assertEqual(summary.passed, 2)
        self.assertEqual(summary.borderline, 0)
        self.assertEqual(summary.evaluated, 4)
        self.assertEqual(len(results), 4)

    async def test_borderline_kept_when_retry_does_not_pass(self):
        generator = _regenerating(_bullet(1, "Ran jobs", "Moved reporting jobs to Airflow DAGs"))
        updated, summary, _ = await self._apply(experience_outcome(), JudgePolicy(), generator=generator)

        kept = next(item for item in updated.payload.suggestions if item.item_index == 1)
        self.assertEqual(kept.suggested_text, "Migrated reporting jobs to Airflow")
        self.assertTrue(kept.low_confidence)
        self.assertTrue(summary.retried)
        self.assertEqual(summary.borderline, 1)

    async def test_retry_ignores_other_slots(self):
        generator = _regenerating(_bullet(5, "Other bullet", "Scheduled nightly reporting jobs with cron"))
        updated, summary, _ = await self._apply(experience_outcome(), JudgePolicy(), generator=generator)
        texts = [item.suggested_text for item in updated.payload.suggestions]
        self.assertIn("Migrated reporting jobs to Airflow", texts)
        self.assertEqual(summary.borderline, 1)

    async def test_skill_removals_skip_the_judge(self):
        outcome = SectionOutcome(
            section="skills",
            status="success",
            payload=SkillsSuggestions(
                suggestions=[
                    Suggestion(section="skills", suggested_text="PostgreSQL", suggestion_type="skill_addition"),
                    Suggestion(section="skills", suggested_text="Kubernetes", suggestion_type="skill_addition"),
                    Suggestion(section="skills", original_text="Perl", suggested_text="", suggestion_type="skill_removal"),
                ],
                skill_additions=["PostgreSQL", "Kubernetes"],
                skill_removals=["Perl"],
            ),
        )
        updated, summary, _ = await self._apply(outcome, JudgePolicy())

        self.assertEqual(self.judge.count(JUDGE_MARKER), 2)
        self.assertEqual(updated.payload.skill_additions, ["PostgreSQL"])
        self.assertEqual(updated.payload.skill_removals, ["Perl"])
        removal = next(item for item in updated.payload.suggestions if item.suggestion_type == "skill_removal")
        self.assertFalse(removal.judged)
        self.assertEqual(summary.withheld, 1)

    async def test_failed_section_passes_through(self):
        outcome = SectionOutcome(section="education", status="failure")
        updated, summary, results = await self._apply(outcome, JudgePolicy())
        self.assertIs(updated, outcome)
        self.assertEqual(summary.evaluated, 0)
        self.assertEqual(results, [])

    async def test_retry_crash_keeps_borderline_suggestions(self):
        async def crashing(inputs, *, client):
            raise RuntimeError("boom")

        with self.assertLogs("ats_engine.services.pipeline", level="ERROR") as logs:
            updated, summary, _ = await self._apply(experience_outcome(), JudgePolicy(), generator=crashing)

        kept = next(item for item in updated.payload.suggestions if item.item_index == 1)
        self.assertEqual(kept.suggested_text, "Migrated reporting jobs to Airflow")
        self.assertTrue(kept.low_confidence)
        self.assertTrue(summary.retried)
        self.assertEqual(summary.borderline, 1)
        self.assertTrue(any("borderline_retry_crashed section=experience" in line for line in logs.output))


def _skill(name, reasoning=""):
    return Suggestion(section="skills", suggested_text=name, suggestion_type="skill_addition", reasoning=reasoning)


class SkillRetryTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        seen = []

        def judge_skill(prompt):
            # Docker and Airflow are borderline the first time they are judged and pass afterwards.
            for name in ("Docker", "Airflow"):
                if name in prompt:
                    seen.append(name)
                    return BORDERLINE if seen.count(name) == 1 else PASS
            return PASS

        self.judge = RoutingLLMClient([(JUDGE_MARKER, judge_skill)])

    def _skills_outcome(self):
        return SectionOutcome(
            section="skills",
            status="success",
            payload=SkillsSuggestions(
                suggestions=[_skill("Docker"), _skill("Airflow")],
                skill_additions=["Docker", "Airflow"],
            ),
        )

    async def _apply(self, *regenerated):
        async def generator(inputs, *, client):
            return SkillsSuggestions(suggestions=list(regenerated), skill_additions=[s.suggested_text for s in regenerated])

        return await apply_judge_policy(
            self._skills_outcome(),
            policy_inputs(),
            client=RoutingLLMClient([]),
            judge_client=self.judge,
            policy=JudgePolicy(),
            generator=generator,
        )

    async def test_different_skill_never_replaces_a_borderline_skill(self):
        updated, summary, _ = await self._apply(_skill("Terraform"))

        kept = [(item.suggested_text, item.low_confidence) for item in updated.payload.suggestions]
        self.assertEqual(kept, [("Docker", True), ("Airflow", True)])
        self.assertEqual(updated.payload.skill_additions, ["Docker", "Airflow"])
        self.assertEqual(summary.borderline, 2)
        self.assertEqual(summary.passed, 0)

    async def test_same_skill_replaces_only_its_own_slot(self):
        updated, summary, _ = await self._apply(_skill("docker", "Listed under projects"), _skill("Terraform"))

        kept = [(item.suggested_text, item.low_confidence) for item in updated.payload.suggestions]
        self.assertEqual(kept, [("docker", False), ("Airflow", True)])
        self.assertEqual(updated.payload.skill_additions, ["docker", "Airflow"])
        self.assertEqual(summary.passed, 1)
        self.assertEqual(summary.borderline, 1)


def pipeline_resume():
    return StructuredResume(
        contact=ContactInfo(name="Sam Rivera", email="sam@example.com"),
        summary="Backend developer building Python services.",
        skills=["Python", "PostgreSQL", "Flask", "Git"],
        experience=[
            ExperienceEntry(
                title="Backend Developer",
                company="Acme",
                start_date="2021",
                end_date="Present",
                bullets=["Wrote pytest suites for the billing service"],
            )
        ],
        education=[EducationEntry(degree="BSc", field_of_study="Computer Science", institution="State University")],
    )


def pipeline_routes(judge_response=PASS):
    return [
        (JUDGE_MARKER, judge_response),
        (
            "Extract the keywords from this job description",
            {
                "keywords": [
                    {"keyword": "Python", "category": "technologies", "importance": "high", "required": True},
                    {"keyword": "PostgreSQL", "category": "technologies", "importance": "high", "required": True},
                    {"keyword": "Kubernetes", "category": "technologies", "importance": "high", "required": True},
                    {"keyword": "Docker", "category": "technologies", "importance": "low", "required": False},
                ]
            },
        ),
        (
            "Extract the qualification requirements",
            {"degree": {"level": "bachelor", "fields": ["Computer Science"], "required": True}},
        ),
        (
            "Rewrite the candidate's professional summary",
            {
                "suggested": "Backend developer with 5 years shipping Python and PostgreSQL services for 12,000 users.",
                "keywords_added": ["PostgreSQL"],
            },
        ),
        (
            "Review the candidate's skills section",
            {"skill_additions": [{"skill": "REST APIs", "reason": "Flask services"}], "skill_removals": []},
        ),
        (
            "Improve the candidate's experience bullets",
            {
                "entries": [
                    {
                        "entry_index": 0,
                        "bullets": [
                            {
                                "original": "Wrote pytest suites for the billing service",
                                "suggested": "Wrote pytest unit tests covering 85% of the billing service",
                                "keywords_added": [],
                            }
                        ],
                    }
                ]
            },
        ),
        (
            "Improve the candidate's education section",
            {
                "suggestions": [
                    {
                        "entry_index": 0,
                        "original": "BSc, Computer Science, State University",
                        "suggested": "B.Sc. in Computer Science (distributed systems coursework), State University",
                    }
                ]
            },
        ),
    ]


class OptimizeResumeTests(unittest.IsolatedAsyncioTestCase):
    def _request(self, **overrides):
        values = {"job_description": PIPELINE_JD, "resume": pipeline_resume()}
        values.update(overrides)
        return ResumeRequest(**values)

    async def test_analysis_only(self):
        analysis = await analyze_resume(self._request(), client=RoutingLLMClient(pipeline_routes()))
        self.assertEqual(analysis.candidate.candidate_type, "fulltime")
        self.assertEqual({item.keyword.text for item in analysis.keyword_analysis.matched}, {"Python", "PostgreSQL"})
        kubernetes = next(gap for gap in analysis.gaps.gaps if gap.keyword.text == "Kubernetes")
        self.assertEqual(kubernetes.category, "unfixable")
        self.assertEqual(analysis.jd_qualifications.degree.level, "bachelor")
        self.assertIsInstance(analysis.score.overall, int)

    async def test_full_run_with_judge_and_metrics(self):
        client = RoutingLLMClient(pipeline_routes())
        with patch("ats_engine.services.pipeline.append_metric_log") as append:
            response = await optimize_resume(self._request(), client=client, policy=JudgePolicy())

        self.assertEqual(set(response.sections), {"summary", "skills", "experience", "education"})
        self.assertEqual(response.skipped, ["projects"])
        for section, outcome in response.sections.items():
            self.assertTrue(outcome.ok, section)
            self.assertTrue(all(item.judged for item in outcome.payload.suggestions))
            self.assertEqual(response.judge[section].passed, len(outcome.payload.suggestions))
        self.assertEqual(client.count(JUDGE_MARKER), 4)
        self.assertEqual(append.call_count, 4)
        logged_sections = {call.args[0].section for call in append.call_args_list}
        self.assertEqual(logged_sections, {"summary", "skills", "experience", "education"})
        self.assertTrue(all(call.args[0].optimization_id == response.optimization_id for call in append.call_args_list))

    async def test_metric_writes_run_off_the_event_loop(self):
        loop_thread = threading.get_ident()
        write_threads = []
        with patch(
            "ats_engine.services.pipeline.append_metric_log",
            side_effect=lambda entry: write_threads.append(threading.get_ident()),
        ):
            await optimize_resume(self._request(), client=RoutingLLMClient(pipeline_routes()), policy=JudgePolicy())
        self.assertEqual(len(write_threads), 4)
        self.assertNotIn(loop_thread, write_threads)

    async def test_section_failure_is_isolated(self):
        async def broken_education(inputs, *, client):
            raise GenerationError("education generation failed")

        generators = dict(SECTION_GENERATORS, education=broken_education)
        with patch("ats_engine.services.pipeline.append_metric_log"):
            response = await optimize_resume(
                self._request(),
                client=RoutingLLMClient(pipeline_routes()),
                policy=JudgePolicy(),
                generators=generators,
            )
        self.assertEqual(response.sections["education"].status, "failure")
        self.assertEqual(response.sections["education"].error.code, "GENERATION_ERROR")
        self.assertNotIn("education", response.judge)
        self.assertTrue(response.sections["summary"].ok)

    async def test_judge_disabled(self):
        client = RoutingLLMClient(pipeline_routes())
        with patch("ats_engine.services.pipeline.append_metric_log") as append:
            response = await optimize_resume(self._request(), client=client, policy=JudgePolicy(enabled=False))
        self.assertEqual(client.count(JUDGE_MARKER), 0)
        self.assertEqual(response.judge, {})
        self.assertFalse(append.called)
        summary = response.sections["summary"].payload.suggestions[0]
        self.assertFalse(summary.judged)

    async def test_separate_judge_client(self):
        client = RoutingLLMClient(pipeline_routes(judge_response=LookupError("judge should not be used")))
        judge_client = RoutingLLMClient([(JUDGE_MARKER, PASS)])
        with patch("ats_engine.services.pipeline.append_metric_log"):
            response = await optimize_resume(
                self._request(),
                client=client,
                judge_client=judge_client,
                policy=JudgePolicy(),
            )
        self.assertEqual(client.count(JUDGE_MARKER), 0)
        self.assertEqual(judge_client.count(JUDGE_MARKER), 4)
        self.assertEqual(response.judge["summary"].passed, 1)

    async def test_extraction_failure_propagates(self):
        routes = pipeline_routes()
        routes[1] = ("Extract the keywords from this job description", RuntimeError("provider down"))
        with self.assertRaises(ExtractionError):
            await optimize_resume(self._request(), client=RoutingLLMClient(routes), policy=JudgePolicy())

    async def test_short_job_description_is_rejected(self):
        client = RoutingLLMClient(pipeline_routes())
        with self.assertRaises(ValidationError):
            await optimize_resume(self._request(job_description="Python dev"), client=client, policy=JudgePolicy())
        self.assertEqual(client.prompts, [])


if __name__ == "__main__":
    unittest.main()
