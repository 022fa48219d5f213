import json
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.core.cache import InMemoryTTLCache  # noqa: E402
from app.schemas.insights import InsightProfile  # noqa: E402
from app.services.insights_llm import InsightsLLMError  # noqa: E402
from app.services.insights_service import (  # noqa: E402
    GENERAL_CACHE_KEY,
    GENERAL_USER_PROMPT,
    IndustryInsightsService,
    InsightsError,
    build_cache_key,
    build_user_prompt,
    clean_citations,
    parse_insights,
)

VALID_PAYLOAD = {
    "insights": [
        {
            "trend": "AI engineering demand [1]",
            "description": "Postings for ML engineers grew 35% in 2024 [2][3].",
            "relevance": "HIGH",
            "category": "Job_Demand",
        },
        {
            "trend": "Cloud salaries climb",
            "description": "Cloud architects saw 9% raises [1, 2].",
            "relevance": "medium",
            "category": "salary_growth",
        },
    ],
    "jobMarketTrend": "Hiring is steady with strong AI demand [4].",
    "topSkillsDemand": ["Python", "AWS", "SQL", "Kubernetes", "TypeScript"],
    "avgSalaryGrowth": "8-12% in 2024-2025",
}


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class FakeCompletion:
    def __init__(self, text=None, error=None):
        self.text = text if text is not None else "Here you go:\n" + json.dumps(VALID_PAYLOAD) + "\nThanks."
        self.error = error
        self.calls = []

    def __call__(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.text


class TTLCacheTests(unittest.TestCase):
    def test_entries_expire_after_ttl(self):
        clock = FakeClock()
        cache = InMemoryTTLCache(ttl_s=60, clock=clock)
        cache.set("k", "v")
        clock.now += 59
        self.assertEqual(cache.get("k"), "v")
        clock.now += 1
        self.assertIsNone(cache.get("k"))
        self.assertEqual(len(cache), 0)

    def test_overwrite_refreshes_timestamp(self):
        clock = FakeClock()
        cache = InMemoryTTLCache(ttl_s=10, clock=clock)
        cache.set("k", 1)
        clock.now += 8
        cache.set("k", 2)
        clock.now += 8
        self.assertEqual(cache.get("k"), 2)

    def test_non_positive_ttl_rejected(self):
        with self.assertRaises(ValueError):
            InMemoryTTLCache(ttl_s=0)


class InsightParsingTests(unittest.TestCase):
    def test_clean_citations(self):
        self.assertEqual(clean_citations("Demand grew 20% [1][2] in 2024 [3, 4]."), "Demand grew 20% in 2024 .")
        self.assertEqual(clean_citations(""), "")

    def test_parse_normalizes_and_strips_citations(self):
        data = parse_insights(json.dumps(VALID_PAYLOAD), profile_based=False)
        first = data.insights[0]
        self.assertEqual(first.trend, "AI engineering demand")
        self.assertEqual(first.description, "Postings for ML engineers grew 35% in 2024 .")
        self.assertEqual(first.relevance, "high")
        self.assertEqual(first.category, "job_demand")
        self.assertEqual(data.job_market_trend, "Hiring is steady with strong AI demand .")
        self.assertFalse(data.is_profile_based)

    def test_parse_failures(self):
        cases = {
            "no json at all": "Failed to parse industry insights data",
            "{not: valid}": "Failed to parse industry insights data",
            json.dumps({**VALID_PAYLOAD, "insights": "none"}): "Invalid response structure from AI",
            json.dumps({**VALID_PAYLOAD, "avgSalaryGrowth": ""}): "Incomplete data from AI",
            json.dumps({**VALID_PAYLOAD, "topSkillsDemand": []}): "Incomplete data from AI",
            json.dumps({**VALID_PAYLOAD, "insights": [{"trend": "x", "description": "y", "relevance": "urgent"}]}): (
                "Invalid response structure from AI"
            ),
        }
        for text, message in cases.items():
            with self.subTest(text=text[:40]):
                with self.assertRaises(InsightsError) as ctx:
                    parse_insights(text, profile_based=False)
                self.assertEqual(str(ctx.exception), message)


class PromptAndKeyTests(unittest.TestCase):
    def setUp(self):
        self.profile = InsightProfile.model_validate(
            {
                "userId": "u-1",
                "skills": [
                    {"name": "Python", "level": "advanced"},
                    {"name": "Docker", "level": "intermediate"},
                ],
                "experience": [{"title": "Backend Engineer", "techStack": ["FastAPI", "Postgres"]}],
                "education": [{"degree": "BSc Computer Science", "school": "State University"}],
                "dominantType": "Investigative",
            }
        )

    def test_cache_keys(self):
        self.assertEqual(build_cache_key(None), GENERAL_CACHE_KEY)
        self.assertEqual(build_cache_key(self.profile), "profile_u-1_Python,Docker_Investigative")
        self.assertEqual(build_cache_key(InsightProfile(user_id="u-2")), "profile_u-2__general")

    def test_profile_prompt_lists_context(self):
        prompt = build_user_prompt(self.profile)
        self.assertIn("Advanced skills: Python", prompt)
        self.assertIn("Intermediate skills: Docker", prompt)
        self.assertIn("Current/Recent role: Backend Engineer", prompt)
        self.assertIn("Tech stack experience: FastAPI, Postgres", prompt)
        self.assertIn("Education: BSc Computer Science in State University", prompt)
        self.assertIn("Career aptitude: Investigative", prompt)

    def test_empty_profile_falls_back_to_general_prompt(self):
        self.assertEqual(build_user_prompt(None), GENERAL_USER_PROMPT)
        self.assertEqual(build_user_prompt(InsightProfile(user_id="u-3")), GENERAL_USER_PROMPT)


@patch("app.services.insights_service.log_insight_run")
class IndustryInsightsServiceTests(unittest.TestCase):
    def setUp(self):
        self.cache = InMemoryTTLCache(ttl_s=3600)

    def test_second_call_is_served_from_cache(self, log_run):
        completion = FakeCompletion()
        service = IndustryInsightsService(cache=self.cache, completion=completion)

        data, cached = service.get_insights()
        self.assertFalse(cached)
        self.assertEqual(len(data.insights), 2)

        again, cached = service.get_insights()
        self.assertTrue(cached)
        self.assertEqual(again, data)
        self.assertEqual(len(completion.calls), 1)
        self.assertEqual(log_run.call_args.kwargs["status"], "success")

    def test_force_refresh_bypasses_cache(self, log_run):
        completion = FakeCompletion()
        service = IndustryInsightsService(cache=self.cache, completion=completion)
        service.get_insights()
        _, cached = service.get_insights(force_refresh=True)
        self.assertFalse(cached)
        self.assertEqual(len(completion.calls), 2)

    def test_profile_request_is_marked_profile_based(self, log_run):
        profile = InsightProfile(user_id="u-1", skills=[{"name": "Go", "level": "advanced"}])
        completion = FakeCompletion()
        service = IndustryInsightsService(cache=self.cache, completion=completion)
        data, _ = service.get_insights(profile)
        self.assertTrue(data.is_profile_based)
        self.assertIn("Advanced skills: Go", completion.calls[0]["user_prompt"])
        self.assertIsNotNone(self.cache.get("profile_u-1_Go_general"))

    def test_missing_api_key_maps_to_503(self, log_run):
        completion = FakeCompletion(error=InsightsLLMError("no key", code="llm_disabled"))
        service = IndustryInsightsService(cache=self.cache, completion=completion)
        with self.assertRaises(InsightsError) as ctx:
            service.get_insights()
        self.assertEqual(ctx.exception.status_code, 503)
        self.assertEqual(str(ctx.exception), "API key not configured")
        self.assertEqual(log_run.call_args.kwargs["error_code"], "llm_disabled")

    def test_upstream_failure_maps_to_500(self, log_run):
        completion = FakeCompletion(error=InsightsLLMError("boom", code="llm_exception"))
        service = IndustryInsightsService(cache=self.cache, completion=completion)
        with self.assertRaises(InsightsError) as ctx:
            service.get_insights()
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertEqual(str(ctx.exception), "Failed to fetch industry insights from AI")

    def test_unparseable_output_is_not_cached(self, log_run):
        service = IndustryInsightsService(cache=self.cache, completion=FakeCompletion(text="sorry, no data"))
        with self.assertRaises(InsightsError):
            service.get_insights()
        self.assertIsNone(self.cache.get(GENERAL_CACHE_KEY))
        self.assertEqual(log_run.call_args.kwargs["status"], "invalid_schema")


if __name__ == "__main__":
    unittest.main()
