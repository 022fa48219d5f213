"""Detailed dashboard metrics: level breakdowns, score distributions, engagement and funnel."""

from __future__ import annotations

from itertools import combinations
from typing import Callable, Sequence

from app.schemas.analytics import (
    AssessmentDistribution,
    CategoryTrend,
    CourseEngagement,
    DifficultyStat,
    DistributionBucket,
    FunnelStage,
    PlatformStat,
    SkillCombination,
    SkillDetail,
)

from .aggregate import TOP_CATEGORIES_LIMIT, TOP_SKILLS_LIMIT, UNKNOWN_LABEL, collect_assessment_scores
from .rows import SKILL_LEVELS, CourseRow, ProfileRow
from .utils import percent_of, population, ranked_counts, round_one_decimal

SCORE_BUCKETS: tuple[tuple[str, float, float], ...] = (
    ("0-1", 0, 1),
    ("1-2", 1, 2),
    ("2-3", 2, 3),
    ("3-4", 3, 4),
    ("4-5", 4, 5),
)

FUNNEL_STAGES: tuple[tuple[str, int], ...] = (
    ("Signed Up", 0),
    ("Basic Info Added", 20),
    ("Education Added", 40),
    ("Skills Added", 60),
    ("Assessment Completed", 80),
    ("Profile Complete", 100),
)

MAX_SKILLS_PER_COMBINATION_PROFILE = 5
TOP_COMBINATIONS_LIMIT = 10


def calculate_skill_trends(profiles: Sequence[ProfileRow], limit: int = TOP_SKILLS_LIMIT) -> list[SkillDetail]:
    totals: dict[str, dict[str, int]] = {}
    for profile in profiles:
        for skill in profile.skills:
            entry = totals.setdefault(skill.name, {"total": 0, **{level: 0 for level in SKILL_LEVELS}})
            entry["total"] += 1
            if skill.level in SKILL_LEVELS:
                entry[skill.level] += 1

    total_profiles = population(len(profiles))
    details = [
        SkillDetail(
            name=name,
            percentage_of_total=percent_of(entry["total"], total_profiles),
            **entry,
        )
        for name, entry in totals.items()
    ]
    details.sort(key=lambda item: item.total, reverse=True)
    return details[:limit]


def _median(sorted_scores: list[float]) -> float:
    # Upper-middle element on even length, no interpolation.
    return sorted_scores[len(sorted_scores) // 2]


def calculate_assessment_distribution(profiles: Sequence[ProfileRow]) -> list[AssessmentDistribution]:
    results: list[AssessmentDistribution] = []
    for category, scores in collect_assessment_scores(profiles).items():
        if not scores:
            results.append(AssessmentDistribution(category=category))
            continue

        ordered = sorted(scores)
        distribution = []
        for label, low, high in SCORE_BUCKETS:
            count = sum(1 for score in ordered if low <= score < high)
            distribution.append(
                DistributionBucket(range=label, count=count, percentage=percent_of(count, len(ordered)))
            )

        results.append(
            AssessmentDistribution(
                category=category,
                average=round_one_decimal(sum(ordered) / len(ordered)),
                median=round_one_decimal(_median(ordered)),
                min=ordered[0],
                max=ordered[-1],
                distribution=distribution,
            )
        )
    return results


def _completion_groups(
    courses: Sequence[CourseRow], key: Callable[[CourseRow], str | None]
) -> list[tuple[str, int, int]]:
    groups: dict[str, list[int]] = {}
    for course in courses:
        bucket = groups.setdefault(key(course) or UNKNOWN_LABEL, [0, 0])
        bucket[0] += 1
        if course.completed:
            bucket[1] += 1
    ordered = sorted(groups.items(), key=lambda item: item[1][0], reverse=True)
    return [(name, total, completed) for name, (total, completed) in ordered]


def calculate_course_engagement(courses: Sequence[CourseRow]) -> CourseEngagement:
    return CourseEngagement(
        platform_stats=[
            PlatformStat(
                platform=platform,
                total=total,
                completed=completed,
                completion_rate=percent_of(completed, total),
            )
            for platform, total, completed in _completion_groups(courses, lambda c: c.platform)
        ],
        difficulty_stats=[
            DifficultyStat(
                difficulty=difficulty,
                total=total,
                completed=completed,
                completion_rate=percent_of(completed, total),
            )
            for difficulty, total, completed in _completion_groups(courses, lambda c: c.difficulty)
        ],
        # TODO: compute growth once course rows carry enrolment timestamps.
        category_trends=[
            CategoryTrend(category=category, count=count, growth=0)
            for category, count in ranked_counts(
                (c.category for c in courses if c.category), limit=TOP_CATEGORIES_LIMIT
            )
        ],
    )


def calculate_profile_funnel(profiles: Sequence[ProfileRow]) -> list[FunnelStage]:
    """Count profiles at or above each completion threshold.

    Stages are cumulative: a fully complete profile is counted in every stage, so
    dropoff is the number of profiles that stopped between two thresholds.
    """
    stages: list[FunnelStage] = []
    previous_count: int | None = None
    for stage, threshold in FUNNEL_STAGES:
        count = sum(1 for p in profiles if p.completion_percentage >= threshold)
        stages.append(
            FunnelStage(
                stage=stage,
                count=count,
                percentage=percent_of(count, len(profiles)),
                dropoff=0 if previous_count is None else previous_count - count,
            )
        )
        previous_count = count
    return stages


def calculate_skill_combinations(
    profiles: Sequence[ProfileRow], limit: int = TOP_COMBINATIONS_LIMIT
) -> list[SkillCombination]:
    pairs: list[tuple[str, str]] = []
    for profile in profiles:
        names = sorted(skill.name for skill in profile.skills)[:MAX_SKILLS_PER_COMBINATION_PROFILE]
        pairs.extend(combinations(names, 2))

    total_profiles = population(len(profiles))
    return [
        SkillCombination(skills=list(pair), count=count, percentage=percent_of(count, total_profiles))
        for pair, count in ranked_counts(pairs, limit=limit)
    ]
