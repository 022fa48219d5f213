from __future__ import annotations

import hashlib
import json
import logging
import re
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Callable

from pydantic import ValidationError

from app.core.cache import TTLCache
from app.core.insight_runs_store import log_insight_run
from app.schemas.insights import InsightProfile, IndustryInsightsData
from app.services.insights_llm import InsightsLLMError, chat_completion, model_name

logger = logging.getLogger(__name__)

GENERAL_CACHE_KEY = "general_trends"

INDUSTRY_INSIGHTS_PROMPT = """You are an industry trends analyst writing insights for a career platform.

Formatting rules:
1. Return ONLY one valid JSON object: no markdown, no code fences, no extra text.
2. Never include citation markers such as [1] or [2][3].
3. Use complete sentences with concrete numbers, percentages and timeframes.

Produce 10 to 15 insights:
- 5 to 7 about job demand (category "job_demand")
- 2 to 3 about salary growth (category "salary_growth")
- 3 to 5 about emerging skills (category "emerging_skill")

Each insight has the shape:
{"trend": "title, max 60 characters", "description": "one sentence with data",
 "relevance": "high" | "medium" | "low", "category": "job_demand" | "salary_growth" | "emerging_skill"}

The object also carries:
- "jobMarketTrend": one sentence on the overall tech job market outlook
- "topSkillsDemand": exactly 5 skill names
- "avgSalaryGrowth": a short figure such as "8-12% in 2024-2025"

Shape:
{"insights": [...], "jobMarketTrend": "...", "topSkillsDemand": ["..."], "avgSalaryGrowth": "..."}"""

GENERAL_USER_PROMPT = """Provide general industry insights for the technology and professional job market. Cover broad trends across:
- Software Development (Web, Mobile, Backend)
- Data Science & AI/ML
- Cloud Computing & DevOps
- Cybersecurity
- Emerging technologies

Focus on entry-level to mid-level opportunities and skills."""

_JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)
_CITATION_RE = re.compile(r"\[\d+\]")
_CITATION_LIST_RE = re.compile(r"\[[\d,\s]+\]")
_WHITESPACE_RE = re.compile(r"\s+")


class InsightsError(RuntimeError):
    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


CompletionFn = Callable[..., str]


def has_profile_context(profile: InsightProfile | None) -> bool:
    if profile is None:
        return False
    return bool(profile.skills or profile.experience or profile.education)


def build_cache_key(profile: InsightProfile | None) -> str:
    if profile is None:
        return GENERAL_CACHE_KEY
    skills = ",".join(skill.name for skill in profile.skills)
    return f"profile_{profile.user_id}_{skills}_{profile.dominant_type or 'general'}"


def build_user_prompt(profile: InsightProfile | None) -> str:
    if profile is None or not has_profile_context(profile):
        return GENERAL_USER_PROMPT

    context: list[str] = []

    advanced = [s.name for s in profile.skills if s.level == "advanced"]
    intermediate = [s.name for s in profile.skills if s.level == "intermediate"]
    if advanced:
        context.append(f"Advanced skills: {', '.join(advanced[:5])}")
    if intermediate:
        context.append(f"Intermediate skills: {', '.join(intermediate[:3])}")

    if profile.experience:
        recent = profile.experience[0]
        context.append(f"Current/Recent role: {recent.title}")
        if recent.tech_stack:
            context.append(f"Tech stack experience: {', '.join(recent.tech_stack[:5])}")

    if profile.education:
        latest = profile.education[0]
        context.append(f"Education: {latest.degree} in {latest.school}")

    if profile.dominant_type:
        context.append(f"Career aptitude: {profile.dominant_type}")

    return (
        "Provide highly personalized industry insights for a professional with the following profile:\n\n"
        + "\n".join(context)
        + "\n\nFocus on:\n"
        "1. Job market trends specifically relevant to their skill set and experience level\n"
        "2. Salary growth projections for their career path and skills\n"
        "3. Emerging skills they should learn next based on their current expertise\n"
        "4. Career advancement opportunities in their domain\n\n"
        "Make insights actionable and directly relevant to their profile."
    )


def clean_citations(text: str) -> str:
    if not text:
        return text
    cleaned = _CITATION_RE.sub("", text)
    cleaned = _CITATION_LIST_RE.sub("", cleaned)
    return _WHITESPACE_RE.sub(" ", cleaned).strip()


def extract_json_object(text: str) -> dict[str, Any]:
    match = _JSON_OBJECT_RE.search(text or "")
    if not match:
        raise InsightsError("Failed to parse industry insights data")
    try:
        parsed = json.loads(match.group(0))
    except ValueError as exc:
        raise InsightsError("Failed to parse industry insights data") from exc
    if not isinstance(parsed, dict):
        raise InsightsError("Failed to parse industry insights data")
    return parsed


def parse_insights(text: str, *, profile_based: bool) -> IndustryInsightsData:
    parsed = extract_json_object(text)

    insights = parsed.get("insights")
    if not isinstance(insights, list):
        raise InsightsError("Invalid response structure from AI")

    cleaned_insights = [
        {
            **item,
            "trend": clean_citations(str(item.get("trend") or "")),
            "description": clean_citations(str(item.get("description") or "")),
            "relevance": str(item.get("relevance") or "medium").strip().lower(),
            "category": str(item.get("category") or "job_demand").strip().lower(),
        }
        for item in insights
        if isinstance(item, dict)
    ]
    job_market_trend = clean_citations(str(parsed.get("jobMarketTrend") or ""))
    avg_salary_growth = clean_citations(str(parsed.get("avgSalaryGrowth") or ""))
    top_skills = parsed.get("topSkillsDemand")
    if not job_market_trend or not avg_salary_growth or not top_skills:
        raise InsightsError("Incomplete data from AI")

    try:
        return IndustryInsightsData(
            insights=cleaned_insights,
            job_market_trend=job_market_trend,
            top_skills_demand=top_skills,
            avg_salary_growth=avg_salary_growth,
            generated_at=datetime.now(timezone.utc),
            is_profile_based=profile_based,
        )
    except ValidationError as exc:
        raise InsightsError("Invalid response structure from AI") from exc


def _short_hash(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()[:12]


class IndustryInsightsService:
    def __init__(
        self,
        cache: TTLCache[IndustryInsightsData],
        completion: CompletionFn = chat_completion,
    ):
        self._cache = cache
        self._completion = completion

    def _record_run(
        self,
        *,
        run_id: str,
        cache_key: str,
        profile_based: bool,
        status: str,
        started: float,
        error_code: str | None = None,
    ) -> None:
        try:
            log_insight_run(
                run_id=run_id,
                cache_key_hash=_short_hash(cache_key),
                model=model_name(),
                profile_based=profile_based,
                status=status,
                error_code=error_code,
                latency_ms=int((time.perf_counter() - started) * 1000),
            )
        except Exception:  # pragma: no cover - run logging must not break insights
            logger.debug("insight_run_logging_failed", exc_info=True)

    def get_insights(
        self,
        profile: InsightProfile | None = None,
        *,
        force_refresh: bool = False,
    ) -> tuple[IndustryInsightsData, bool]:
        """Return insights and whether they came from the cache."""
        cache_key = build_cache_key(profile)
        if not force_refresh:
            cached = self._cache.get(cache_key)
            if cached is not None:
                logger.info("industry_insights_cache_hit key=%s", _short_hash(cache_key))
                return cached, True

        run_id = uuid.uuid4().hex
        started = time.perf_counter()
        profile_based = profile is not None

        try:
            text = self._completion(
                system_prompt=INDUSTRY_INSIGHTS_PROMPT,
                user_prompt=build_user_prompt(profile),
                temperature=0.3,
                max_output_tokens=2500,
            )
        except InsightsLLMError as exc:
            self._record_run(
                run_id=run_id,
                cache_key=cache_key,
                profile_based=profile_based,
                status="error",
                started=started,
                error_code=exc.code,
            )
            if exc.code == "llm_disabled":
                raise InsightsError("API key not configured", status_code=503) from exc
            raise InsightsError("Failed to fetch industry insights from AI") from exc

        try:
            data = parse_insights(text, profile_based=profile_based)
        except InsightsError as exc:
            logger.warning("industry_insights_parse_failed run=%s: %s", run_id, exc)
            self._record_run(
                run_id=run_id,
                cache_key=cache_key,
                profile_based=profile_based,
                status="invalid_schema",
                started=started,
                error_code="invalid_schema",
            )
            raise

        self._record_run(
            run_id=run_id,
            cache_key=cache_key,
            profile_based=profile_based,
            status="success",
            started=started,
        )
        self._cache.set(cache_key, data)
        return data, False
