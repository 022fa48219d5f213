import sys
import tempfile
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.analytics.benchmarks import load_benchmarks  # noqa: E402
from app.analytics.gaps import build_priority_insights, calculate_skill_gaps  # noqa: E402
from app.analytics.snapshot import RowTotals, build_snapshot_from_rows  # noqa: E402
from app.schemas.analytics import BenchmarkSkill, IndustryBenchmarks, SkillDetail, SkillGap  # noqa: E402


def _detail(name, coverage):
    return SkillDetail(
        name=name,
        total=1,
        beginner=1,
        intermediate=0,
        advanced=0,
        percentage_of_total=coverage,
    )


BENCHMARKS = [
    BenchmarkSkill(skill="Python", demand=82, growth=18),
    BenchmarkSkill(skill="JavaScript", demand=85, growth=12),
    BenchmarkSkill(skill="SQL", demand=55, growth=5),
]


class SkillGapTests(unittest.TestCase):
    def test_gaps_join_case_insensitively_and_sort(self):
        gaps = calculate_skill_gaps([_detail("python", 30), _detail("SQL", 60)], BENCHMARKS, total_students=10)
        self.assertEqual([gap.skill for gap in gaps], ["JavaScript", "Python", "SQL"])
        self.assertEqual([gap.gap for gap in gaps], [85, 52, 0])
        self.assertEqual(gaps[1].student_coverage, 30)
        self.assertEqual(gaps[0].students_needed, 9)
        self.assertEqual(gaps[1].students_needed, 6)
        self.assertEqual(gaps[2].students_needed, 0)

    def test_gaps_never_negative(self):
        gaps = calculate_skill_gaps([_detail("Python", 100)], BENCHMARKS)
        self.assertTrue(all(gap.gap >= 0 for gap in gaps))
        self.assertTrue(all(gap.students_needed == 0 for gap in gaps))


class PriorityInsightTests(unittest.TestCase):
    def _gaps(self):
        return [
            SkillGap(skill="JavaScript", student_coverage=0, industry_demand=85, gap=85),
            SkillGap(skill="Python", student_coverage=70, industry_demand=82, gap=12),
            SkillGap(skill="Docker", student_coverage=0, industry_demand=58, gap=58),
            SkillGap(skill="AWS", student_coverage=0, industry_demand=62, gap=62),
        ]

    def test_critical_gaps_only_from_top_three(self):
        insights = build_priority_insights(self._gaps(), profile_completion_rate=90, course_completion_rate=60)
        self.assertEqual([i.title for i in insights], ["Critical Skill Gap: JavaScript", "Critical Skill Gap: Docker"])
        self.assertEqual(insights[0].impact, "high")
        self.assertEqual(insights[0].description, "Only 0% of students have this skill, but industry needs 85%")

    def test_low_completion_warnings(self):
        insights = build_priority_insights([], profile_completion_rate=45.5, course_completion_rate=20)
        self.assertEqual([(i.type, i.title) for i in insights], [
            ("warning", "Low Profile Completion"),
            ("warning", "Low Course Completion Rate"),
        ])
        self.assertEqual(insights[0].impact, "medium")
        self.assertIn("45.5%", insights[0].description)

    def test_strong_course_engagement(self):
        insights = build_priority_insights([], profile_completion_rate=70, course_completion_rate=71)
        self.assertEqual(len(insights), 1)
        self.assertEqual(insights[0].type, "success")
        self.assertEqual(insights[0].impact, "positive")

    def test_thresholds_are_exclusive(self):
        gaps = [SkillGap(skill="Git", student_coverage=37, industry_demand=52, gap=15)]
        self.assertEqual(build_priority_insights(gaps, profile_completion_rate=70, course_completion_rate=70), [])
        self.assertEqual(build_priority_insights(gaps, profile_completion_rate=70, course_completion_rate=50), [])


class BenchmarksConfigTests(unittest.TestCase):
    def test_bundled_benchmarks_load(self):
        benchmarks = load_benchmarks()
        self.assertEqual(len(benchmarks.top_skills), 10)
        self.assertEqual(benchmarks.top_skills[0].skill, "JavaScript")
        self.assertEqual(benchmarks.avg_salary_growth, "12%")
        self.assertTrue(all(0 <= skill.demand <= 100 for skill in benchmarks.top_skills))

    def test_invalid_configs_raise(self):
        cases = {
            "broken.yaml": "top_skills: [unclosed",
            "list.yaml": "- skill: Python",
            "missing.yaml": "avg_salary_growth: '5%'",
            "range.yaml": "top_skills:\n  - skill: Python\n    demand: 150\n",
        }
        with tempfile.TemporaryDirectory() as tmp:
            for name, content in cases.items():
                path = Path(tmp) / name
                path.write_text(content, encoding="utf-8")
                with self.subTest(name=name):
                    with self.assertRaises(RuntimeError):
                        load_benchmarks(path)

            with self.assertRaises(RuntimeError):
                load_benchmarks(Path(tmp) / "absent.yaml")


class SnapshotTests(unittest.TestCase):
    def test_snapshot_from_raw_rows(self):
        profiles = [
            {"$id": "p1", "skills": '[{"name": "Python", "level": "advanced"}]', "completionPercentage": 80},
            {"$id": "p2", "skills": [{"name": "Python", "level": "beginner"}], "completionPercentage": 40},
        ]
        courses = [
            {"platform": "Udemy", "difficulty": "beginner", "completed": True, "bookmarked": True},
            {"platform": "Udemy", "difficulty": "beginner", "completed": False, "bookmarked": True},
        ]
        pathways = [{"category": "Data", "level": "beginner", "completed": True}]

        snapshot = build_snapshot_from_rows(
            profiles,
            courses,
            pathways,
            totals=RowTotals(profiles=120, courses=2, pathways=1),
            benchmarks=IndustryBenchmarks(top_skills=BENCHMARKS),
        )

        overview = snapshot.data.overview
        self.assertEqual(overview.total_students, 120)
        self.assertEqual(overview.avg_profile_completion, 60)
        self.assertEqual(overview.course_completion_rate, 50)
        self.assertEqual(overview.pathway_completion_rate, 100)
        self.assertEqual(snapshot.data.skills[0].count, 2)

        gaps = {gap.skill: gap for gap in snapshot.enhanced.skills_gap}
        self.assertEqual(gaps["Python"].gap, 0)
        self.assertEqual(gaps["JavaScript"].students_needed, 102)

        titles = [insight.title for insight in snapshot.enhanced.priority_insights]
        self.assertIn("Low Profile Completion", titles)
        self.assertNotIn("Critical Skill Gap: Python", titles)

        dumped = snapshot.model_dump(by_alias=True)
        self.assertIn("avgProfileCompletion", dumped["data"]["overview"])
        self.assertIn("skillsDetailed", dumped["enhanced"])
        self.assertIn("byLevel", dumped["data"]["skills"][0])

    def test_non_finite_values_degrade_per_row(self):
        snapshot = build_snapshot_from_rows(
            [
                {"assessmentScores": '{"technical": NaN}', "completionPercentage": float("inf")},
                {"assessmentScores": '{"technical": 3}', "completionPercentage": 50},
            ],
            [],
            [],
            benchmarks=IndustryBenchmarks(),
        )
        technical = {item.category: item for item in snapshot.data.assessments}["technical"]
        self.assertEqual((technical.average, technical.count), (3, 1))
        self.assertEqual(snapshot.data.overview.avg_profile_completion, 25)

    def test_empty_rows_produce_zeroed_snapshot(self):
        snapshot = build_snapshot_from_rows([], [], [], benchmarks=IndustryBenchmarks())
        self.assertEqual(snapshot.data.overview.total_students, 0)
        self.assertEqual(snapshot.data.overview.course_completion_rate, 0)
        self.assertEqual(snapshot.data.skills, [])
        self.assertEqual(snapshot.enhanced.skills_gap, [])


if __name__ == "__main__":
    unittest.main()
