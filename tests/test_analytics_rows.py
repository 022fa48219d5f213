import json
import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.analytics.rows import (  # noqa: E402
    ProfileRow,
    SkillEntry,
    decode_assessment_scores,
    decode_course,
    decode_pathway,
    decode_profile,
    decode_profiles,
    decode_skills,
)


class RowDecodingTests(unittest.TestCase):
    def test_skills_accept_json_encoded_text(self):
        raw = json.dumps([{"name": "Python", "level": "advanced"}, {"name": "SQL", "level": "beginner"}])
        self.assertEqual(
            decode_skills(raw),
            [SkillEntry(name="Python", level="advanced"), SkillEntry(name="SQL", level="beginner")],
        )

    def test_skills_drop_entries_without_name(self):
        raw = [{"name": "Go", "level": "intermediate"}, {"level": "advanced"}, None, "Rust", {"name": ""}]
        self.assertEqual(decode_skills(raw), [SkillEntry(name="Go", level="intermediate")])

    def test_malformed_skills_json_decodes_to_empty_list(self):
        with self.assertLogs("app.analytics.rows", level="WARNING"):
            self.assertEqual(decode_skills("[{not json", row_id="abc"), [])

    def test_assessment_scores_keep_numeric_categories_only(self):
        raw = json.dumps({"technical": 4, "creative": "high", "analytical": 0, "leadership": True, "extra": 3})
        self.assertEqual(decode_assessment_scores(raw), {"technical": 4, "analytical": 0})

    def test_assessment_scores_non_mapping_is_absent(self):
        self.assertIsNone(decode_assessment_scores([1, 2, 3]))
        self.assertIsNone(decode_assessment_scores(None))

    def test_non_finite_numbers_are_dropped(self):
        raw = '{"technical": NaN, "creative": Infinity, "analytical": 3}'
        self.assertEqual(decode_assessment_scores(raw), {"analytical": 3})
        self.assertEqual(decode_profile({"completionPercentage": float("inf")}).completion_percentage, 0)
        self.assertEqual(decode_profile({"completionPercentage": float("nan")}).completion_percentage, 0)

    def test_profile_completion_defaults_to_zero(self):
        profile = decode_profile({"completionPercentage": "eighty", "dominantType": "Builder"})
        self.assertEqual(profile.completion_percentage, 0)
        self.assertEqual(profile.dominant_type, "Builder")
        self.assertEqual(profile.skills, [])

    def test_non_mapping_rows_keep_population_size(self):
        profiles = decode_profiles([{"completionPercentage": 50}, "garbage", None])
        self.assertEqual(len(profiles), 3)
        self.assertEqual(profiles[1], ProfileRow())

    def test_course_and_pathway_flags(self):
        course = decode_course({"platform": "Udemy", "completed": 1, "bookmarked": None, "difficulty": "beginner"})
        self.assertTrue(course.completed)
        self.assertFalse(course.bookmarked)
        self.assertIsNone(course.category)

        pathway = decode_pathway({"category": "", "level": "advanced", "completed": False})
        self.assertIsNone(pathway.category)
        self.assertEqual(pathway.level, "advanced")


if __name__ == "__main__":
    unittest.main()
