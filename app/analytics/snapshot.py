from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Sequence

from app.schemas.analytics import (
    AnalyticsData,
    AnalyticsOverview,
    AnalyticsSnapshot,
    EnhancedAnalyticsData,
    IndustryBenchmarks,
)

from .aggregate import (
    aggregate_assessments,
    aggregate_careers,
    aggregate_courses,
    aggregate_pathways,
    aggregate_skills,
    calculate_average_completion,
    calculate_completion_rate,
)
from .benchmarks import get_industry_benchmarks
from .enhanced import (
    calculate_assessment_distribution,
    calculate_course_engagement,
    calculate_profile_funnel,
    calculate_skill_combinations,
    calculate_skill_trends,
)
from .gaps import TOP_GAPS_LIMIT, build_priority_insights, calculate_skill_gaps
from .rows import CourseRow, PathwayRow, ProfileRow, decode_courses, decode_pathways, decode_profiles

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RowTotals:
    """Row counts reported upstream, which can exceed the number of rows fetched."""

    profiles: int
    courses: int
    pathways: int


def build_analytics_snapshot(
    profiles: Sequence[ProfileRow],
    courses: Sequence[CourseRow],
    pathways: Sequence[PathwayRow],
    *,
    totals: RowTotals | None = None,
    benchmarks: IndustryBenchmarks | None = None,
) -> AnalyticsSnapshot:
    if totals is None:
        totals = RowTotals(profiles=len(profiles), courses=len(courses), pathways=len(pathways))
    if benchmarks is None:
        benchmarks = get_industry_benchmarks()

    overview = AnalyticsOverview(
        total_students=totals.profiles,
        avg_profile_completion=calculate_average_completion(profiles),
        total_courses=totals.courses,
        course_completion_rate=calculate_completion_rate(courses),
        total_pathways=totals.pathways,
        pathway_completion_rate=calculate_completion_rate(pathways),
    )
    data = AnalyticsData(
        overview=overview,
        skills=aggregate_skills(profiles),
        careers=aggregate_careers(profiles),
        assessments=aggregate_assessments(profiles),
        courses=aggregate_courses(courses),
        pathways=aggregate_pathways(pathways),
    )

    skills_detailed = calculate_skill_trends(profiles)
    gaps = calculate_skill_gaps(skills_detailed, benchmarks.top_skills, total_students=overview.total_students)
    enhanced = EnhancedAnalyticsData(
        skills_detailed=skills_detailed,
        assessment_distribution=calculate_assessment_distribution(profiles),
        course_engagement=calculate_course_engagement(courses),
        profile_funnel=calculate_profile_funnel(profiles),
        skill_combinations=calculate_skill_combinations(profiles),
        skills_gap=gaps[:TOP_GAPS_LIMIT],
        priority_insights=build_priority_insights(
            gaps,
            profile_completion_rate=overview.avg_profile_completion,
            course_completion_rate=overview.course_completion_rate,
        ),
    )

    logger.info(
        "analytics_snapshot_built profiles=%s courses=%s pathways=%s skills=%s",
        len(profiles),
        len(courses),
        len(pathways),
        len(data.skills),
    )
    return AnalyticsSnapshot(data=data, enhanced=enhanced)


def build_snapshot_from_rows(
    profile_rows: list[Any],
    course_rows: list[Any],
    pathway_rows: list[Any],
    *,
    totals: RowTotals | None = None,
    benchmarks: IndustryBenchmarks | None = None,
) -> AnalyticsSnapshot:
    """Decode raw table rows and aggregate them."""
    return build_analytics_snapshot(
        decode_profiles(profile_rows),
        decode_courses(course_rows),
        decode_pathways(pathway_rows),
        totals=totals,
        benchmarks=benchmarks,
    )
