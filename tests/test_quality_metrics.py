import sqlite3
import sys
import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import patch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from ats_engine.core.errors import AggregationError  # noqa: E402
from ats_engine.metrics.health import NO_DATA_ALERT, emit_quality_alerts, evaluate_quality_health  # noqa: E402
from ats_engine.metrics.quality import (  # noqa: E402
    collect_quality_metrics,
    extract_failure_patterns,
    failure_breakdown,
    score_bucket,
    score_distribution,
)
from ats_engine.metrics.query import (  # noqa: E402
    get_failure_patterns,
    get_pass_rate_trend,
    get_quality_health,
    get_section_metrics,
    get_today_metrics,
    get_weekly_metrics,
)
from ats_engine.metrics.store import append_metric_log, init_db, purge_old_records, read_metric_logs  # noqa: E402
from ats_engine.schemas.judge import JudgeCriteriaScores, JudgeResult  # noqa: E402
from ats_engine.schemas.metrics import QualityMetricLog  # noqa: E402

NOW = datetime(2026, 3, 10, 15, 30, tzinfo=timezone.utc)


def _result(authenticity, clarity, ats_relevance, actionability, reasoning="", index=0):
    criteria = JudgeCriteriaScores(
        authenticity=authenticity,
        clarity=clarity,
        ats_relevance=ats_relevance,
        actionability=actionability,
    )
    total = criteria.total()
    if total >= 60:
        recommendation = "pass"
    elif total >= 40:
        recommendation = "borderline"
    else:
        recommendation = "fail"
    return JudgeResult(
        suggestion_id=f"s-{index}",
        section="experience",
        criteria_scores=criteria,
        overall_score=total,
        recommendation=recommendation,
        reasoning=reasoning,
    )


def _log(**overrides):
    values = {
        "timestamp": NOW.isoformat(),
        "optimization_id": "opt-1",
        "section": "summary",
        "total_evaluated": 10,
        "passed": 8,
        "failed": 2,
        "pass_rate": 80.0,
        "avg_score": 75.0,
    }
    values.update(overrides)
    return QualityMetricLog(**values)


class CollectMetricsTests(unittest.TestCase):
    def setUp(self):
        self.results = [
            _result(22, 20, 20, 18, index=1),
            _result(20, 18, 16, 16, index=2),
            _result(10, 12, 10, 12, "Adds a tool the resume never mentions", index=3),
            _result(5, 10, 10, 5, "Adds a tool the resume never mentions", index=4),
        ]

    def test_collected_entry(self):
        entry = collect_quality_metrics(self.results, "experience", "opt-7", now=NOW)
        self.assertEqual(entry.total_evaluated, 4)
        self.assertEqual(entry.passed, 2)
        self.assertEqual(entry.failed, 2)
        self.assertEqual(entry.pass_rate, 50.0)
        self.assertEqual(entry.avg_score, 56.0)
        self.assertEqual(entry.optimization_id, "opt-7")
        self.assertEqual(entry.timestamp, NOW.isoformat())
        self.assertEqual(entry.criteria_averages["authenticity"], 14.25)

    def test_score_distribution_buckets(self):
        self.assertEqual(score_bucket(0), "0-20")
        self.assertEqual(score_bucket(20), "20-40")
        self.assertEqual(score_bucket(59), "40-60")
        self.assertEqual(score_bucket(100), "80-100")
        distribution = score_distribution(self.results)
        self.assertEqual(distribution, {"0-20": 0, "20-40": 1, "40-60": 1, "60-80": 1, "80-100": 1})

    def test_failure_breakdown_counts_only_non_passing(self):
        breakdown = failure_breakdown(self.results)
        self.assertEqual(breakdown, {"authenticity": 2, "clarity": 2, "ats_relevance": 2, "actionability": 2})

    def test_failure_patterns_group_by_weakest_criterion(self):
        patterns = extract_failure_patterns(self.results)
        self.assertEqual(len(patterns), 1)
        self.assertEqual(patterns[0].criterion, "authenticity")
        self.assertEqual(patterns[0].count, 2)
        self.assertEqual(patterns[0].reason, "Adds a tool the resume never mentions")

    def test_missing_reasoning_gets_a_placeholder(self):
        patterns = extract_failure_patterns([_result(5, 5, 5, 5)])
        self.assertEqual(patterns[0].reason, "No reasoning provided")

    def test_empty_results(self):
        entry = collect_quality_metrics([], "skills", now=NOW)
        self.assertEqual(entry.total_evaluated, 0)
        self.assertEqual(entry.pass_rate, 0.0)
        self.assertEqual(entry.failure_patterns, [])


class QualityHealthTests(unittest.TestCase):
    def test_empty_logs_are_healthy_with_no_data_alert(self):
        health = evaluate_quality_health([])
        self.assertEqual(health.status, "healthy")
        self.assertIn(NO_DATA_ALERT, health.alerts)

    def test_good_metrics_are_healthy(self):
        health = evaluate_quality_health([_log(avg_score=78)])
        self.assertEqual(health.status, "healthy")
        self.assertEqual(health.alerts, [])

    def test_warning_below_seventy(self):
        health = evaluate_quality_health([_log(passed=6, failed=4, pass_rate=60, avg_score=68)])
        self.assertEqual(health.status, "warning")
        self.assertTrue(any("Pass rate" in alert for alert in health.alerts))

    def test_critical_below_fifty(self):
        health = evaluate_quality_health([_log(passed=4, failed=6, pass_rate=40, avg_score=50)])
        self.assertEqual(health.status, "critical")
        self.assertTrue(any(alert.startswith("CRITICAL") for alert in health.alerts))
        self.assertTrue(any("Average score" in alert for alert in health.alerts))

    def test_low_average_alone_is_a_warning(self):
        health = evaluate_quality_health([_log(avg_score=60)])
        self.assertEqual(health.status, "warning")
        self.assertTrue(any("Average score" in alert for alert in health.alerts))

    def test_weighted_across_logs(self):
        health = evaluate_quality_health(
            [
                _log(total_evaluated=5, passed=5, failed=0, avg_score=85),
                _log(total_evaluated=5, passed=5, failed=0, avg_score=75),
            ]
        )
        self.assertEqual(health.status, "healthy")
        self.assertEqual(health.pass_rate, 100.0)
        self.assertEqual(health.avg_score, 80.0)

    def test_emit_alerts_logs_by_severity(self):
        with self.assertLogs("ats_engine.metrics.health", level="WARNING") as captured:
            alerts = emit_quality_alerts(_log(passed=4, failed=6, pass_rate=40, avg_score=50))
        self.assertEqual(len(alerts), 2)
        levels = sorted(record.levelname for record in captured.records)
        self.assertEqual(levels, ["ERROR", "WARNING"])


class MetricsStoreTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.db_path = Path(self.tmp.name) / "metrics.db"
        init_db(self.db_path)

    def tearDown(self):
        self.tmp.cleanup()

    def test_append_and_read_window(self):
        append_metric_log(_log(timestamp=(NOW - timedelta(days=3)).isoformat(), optimization_id="old"), db_path=self.db_path)
        append_metric_log(_log(optimization_id="today"), db_path=self.db_path)
        append_metric_log(_log(section="skills", optimization_id="today"), db_path=self.db_path)

        today_start = NOW.replace(hour=0, minute=0, second=0, microsecond=0)
        logs = read_metric_logs(today_start, db_path=self.db_path)
        self.assertEqual([log.optimization_id for log in logs], ["today", "today"])

        skills = read_metric_logs(today_start, section="skills", db_path=self.db_path)
        self.assertEqual([log.section for log in skills], ["skills"])

    def test_missing_database_reads_empty(self):
        self.assertEqual(read_metric_logs(NOW, db_path=Path(self.tmp.name) / "absent.db"), [])

    def test_corrupt_row_is_an_aggregation_error(self):
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                "INSERT INTO quality_metrics (created_at, section, total_evaluated, passed, failed, pass_rate, avg_score, log_json) "
                "VALUES (?, 'summary', 1, 1, 0, 100, 90, '{\"broken\": true}')",
                (NOW.isoformat(),),
            )
            conn.commit()
        with self.assertRaises(AggregationError) as ctx:
            read_metric_logs(NOW - timedelta(hours=1), db_path=self.db_path)
        self.assertEqual(ctx.exception.code, "METRICS_CORRUPT")

    def test_purge_respects_retention(self):
        append_metric_log(_log(timestamp=(NOW - timedelta(days=400)).isoformat()), db_path=self.db_path)
        append_metric_log(_log(), db_path=self.db_path)
        self.assertEqual(purge_old_records(db_path=self.db_path, now=NOW), 1)
        self.assertEqual(len(read_metric_logs(NOW - timedelta(days=1), db_path=self.db_path)), 1)


class MetricsQueryTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.db_path = Path(self.tmp.name) / "metrics.db"
        init_db(self.db_path)

    def tearDown(self):
        self.tmp.cleanup()

    def _append(self, **overrides):
        append_metric_log(_log(**overrides), db_path=self.db_path)

    def test_empty_store_reports_no_data(self):
        today = get_today_metrics(now=NOW, db_path=self.db_path)
        self.assertFalse(today.has_data)
        self.assertEqual(today.date, "2026-03-10")
        self.assertFalse(get_weekly_metrics(now=NOW, db_path=self.db_path).has_data)
        self.assertEqual(get_failure_patterns(now=NOW, db_path=self.db_path), [])
        self.assertIn(NO_DATA_ALERT, get_quality_health(now=NOW, db_path=self.db_path).alerts)

    def test_today_and_weekly_aggregates(self):
        self._append(optimization_id="a", section="summary", total_evaluated=4, passed=4, failed=0, avg_score=80)
        self._append(optimization_id="a", section="experience", total_evaluated=6, passed=3, failed=3, avg_score=60)
        self._append(
            timestamp=(NOW - timedelta(days=2)).isoformat(),
            optimization_id="b",
            section="summary",
            total_evaluated=10,
            passed=10,
            failed=0,
            avg_score=90,
        )

        today = get_today_metrics(now=NOW, db_path=self.db_path)
        self.assertTrue(today.has_data)
        self.assertEqual(today.total_optimizations, 1)
        self.assertEqual(today.total_evaluated, 10)
        self.assertEqual(today.overall_pass_rate, 70.0)
        self.assertEqual(today.overall_avg_score, 68.0)
        self.assertEqual(set(today.by_section), {"summary", "experience"})
        self.assertEqual(today.by_section["experience"].pass_rate, 50.0)

        weekly = get_weekly_metrics(now=NOW, db_path=self.db_path)
        self.assertEqual(weekly.total_optimizations, 2)
        self.assertEqual(weekly.total_evaluated, 20)
        self.assertEqual(weekly.overall_pass_rate, 85.0)

    def test_section_metrics_and_trend(self):
        self._append(
            section="experience",
            total_evaluated=4,
            passed=1,
            failed=3,
            avg_score=45,
            failure_patterns=[{"criterion": "authenticity", "reason": "Invented metric", "count": 3}],
        )
        self._append(timestamp=(NOW - timedelta(days=1)).isoformat(), section="experience", total_evaluated=2, passed=2, failed=0)

        section = get_section_metrics("experience", now=NOW, db_path=self.db_path)
        self.assertEqual(section.total_evaluated, 6)
        self.assertEqual(section.pass_rate, 50.0)
        self.assertEqual(section.top_failure, "Invented metric")

        trend = get_pass_rate_trend(days=3, now=NOW, db_path=self.db_path)
        self.assertEqual([point.date for point in trend], ["2026-03-08", "2026-03-09", "2026-03-10"])
        self.assertEqual([point.pass_rate for point in trend], [0.0, 100.0, 25.0])
        self.assertEqual(trend[0].total_evaluated, 0)

    def test_failure_patterns_merge_across_logs(self):
        self._append(failure_patterns=[{"criterion": "clarity", "reason": "Too long", "count": 2}])
        self._append(
            failure_patterns=[
                {"criterion": "clarity", "reason": "Too long", "count": 1},
                {"criterion": "authenticity", "reason": "New tool", "count": 1},
            ]
        )
        patterns = get_failure_patterns(now=NOW, db_path=self.db_path)
        self.assertEqual(patterns[0].reason, "Too long")
        self.assertEqual(patterns[0].count, 3)
        self.assertEqual(len(get_failure_patterns(limit=1, now=NOW, db_path=self.db_path)), 1)

    def test_read_failure_degrades_to_no_data(self):
        self._append()
        failure = AggregationError("disk gone", code="METRICS_READ_FAILED")
        with patch("ats_engine.metrics.query.read_metric_logs", side_effect=failure):
            today = get_today_metrics(now=NOW, db_path=self.db_path)
            health = get_quality_health(now=NOW, db_path=self.db_path)
        self.assertFalse(today.has_data)
        self.assertIn(NO_DATA_ALERT, health.alerts)


if __name__ == "__main__":
    unittest.main()
