from __future__ import annotations

from typing import Sequence

from app.schemas.analytics import (
    AssessmentSummary,
    CareerTypeSummary,
    CategoryCount,
    CourseCompletionTrend,
    CourseSummary,
    DifficultyCount,
    LevelCount,
    PathwayCompletionStats,
    PathwaySummary,
    PlatformCount,
    SkillLevelBreakdown,
    SkillSummary,
)

from .rows import ASSESSMENT_CATEGORIES, SKILL_LEVELS, CourseRow, PathwayRow, ProfileRow
from .utils import percent_of, population, ranked_counts, round_one_decimal

TOP_SKILLS_LIMIT = 20
TOP_CATEGORIES_LIMIT = 10
UNKNOWN_LABEL = "unknown"


def aggregate_skills(profiles: Sequence[ProfileRow], limit: int = TOP_SKILLS_LIMIT) -> list[SkillSummary]:
    # Entries with an unrecognised level are skipped so per-level counts sum to the total.
    by_skill: dict[str, dict[str, int]] = {}
    for profile in profiles:
        for skill in profile.skills:
            if skill.level not in SKILL_LEVELS:
                continue
            levels = by_skill.setdefault(skill.name, {level: 0 for level in SKILL_LEVELS})
            levels[skill.level] += 1

    total_students = population(len(profiles))
    summaries = [
        SkillSummary(
            name=name,
            count=sum(levels.values()),
            percentage=percent_of(sum(levels.values()), total_students),
            by_level=SkillLevelBreakdown(**levels),
        )
        for name, levels in by_skill.items()
    ]
    summaries.sort(key=lambda item: item.count, reverse=True)
    return summaries[:limit]


def aggregate_careers(profiles: Sequence[ProfileRow]) -> list[CareerTypeSummary]:
    total = population(len(profiles))
    return [
        CareerTypeSummary(type=career_type, count=count, percentage=percent_of(count, total))
        for career_type, count in ranked_counts(p.dominant_type for p in profiles if p.dominant_type)
    ]


def collect_assessment_scores(profiles: Sequence[ProfileRow]) -> dict[str, list[float]]:
    scores: dict[str, list[float]] = {category: [] for category in ASSESSMENT_CATEGORIES}
    for profile in profiles:
        if not profile.assessment_scores:
            continue
        for category, value in profile.assessment_scores.items():
            scores[category].append(value)
    return scores


def aggregate_assessments(profiles: Sequence[ProfileRow]) -> list[AssessmentSummary]:
    return [
        AssessmentSummary(
            category=category,
            average=round_one_decimal(sum(values) / len(values)) if values else 0,
            count=len(values),
        )
        for category, values in collect_assessment_scores(profiles).items()
    ]


def aggregate_courses(courses: Sequence[CourseRow]) -> CourseSummary:
    completed = sum(1 for course in courses if course.completed)
    bookmarked = sum(1 for course in courses if course.bookmarked)
    return CourseSummary(
        by_platform=[
            PlatformCount(platform=platform, count=count)
            for platform, count in ranked_counts(c.platform or UNKNOWN_LABEL for c in courses)
        ],
        by_difficulty=[
            DifficultyCount(difficulty=difficulty, count=count)
            for difficulty, count in ranked_counts(c.difficulty or UNKNOWN_LABEL for c in courses)
        ],
        by_category=[
            CategoryCount(category=category, count=count)
            for category, count in ranked_counts(
                (c.category for c in courses if c.category), limit=TOP_CATEGORIES_LIMIT
            )
        ],
        # inProgress mirrors the dashboard definition and can go negative when
        # completed courses were never bookmarked.
        completion_trend=CourseCompletionTrend(
            completed=completed,
            in_progress=bookmarked - completed,
            bookmarked=bookmarked,
        ),
    )


def aggregate_pathways(pathways: Sequence[PathwayRow]) -> PathwaySummary:
    completed = sum(1 for pathway in pathways if pathway.completed)
    return PathwaySummary(
        by_category=[
            CategoryCount(category=category, count=count)
            for category, count in ranked_counts(p.category for p in pathways if p.category)
        ],
        by_level=[
            LevelCount(level=level, count=count)
            for level, count in ranked_counts(p.level for p in pathways if p.level)
        ],
        completion_stats=PathwayCompletionStats(
            completed=completed,
            in_progress=len(pathways) - completed,
        ),
    )


def calculate_average_completion(profiles: Sequence[ProfileRow]) -> float:
    if not profiles:
        return 0
    return round_one_decimal(sum(p.completion_percentage for p in profiles) / len(profiles))


def calculate_completion_rate(rows: Sequence[CourseRow] | Sequence[PathwayRow]) -> int:
    return percent_of(sum(1 for row in rows if row.completed), len(rows))
