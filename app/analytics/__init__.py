from .aggregate import (
    aggregate_assessments,
    aggregate_careers,
    aggregate_courses,
    aggregate_pathways,
    aggregate_skills,
    calculate_average_completion,
    calculate_completion_rate,
)
from .benchmarks import get_industry_benchmarks, load_benchmarks
from .enhanced import (
    calculate_assessment_distribution,
    calculate_course_engagement,
    calculate_profile_funnel,
    calculate_skill_combinations,
    calculate_skill_trends,
)
from .gaps import build_priority_insights, calculate_skill_gaps
from .rows import CourseRow, PathwayRow, ProfileRow, SkillEntry
from .snapshot import RowTotals, build_analytics_snapshot, build_snapshot_from_rows

__all__ = [
    "ProfileRow",
    "CourseRow",
    "PathwayRow",
    "SkillEntry",
    "aggregate_skills",
    "aggregate_careers",
    "aggregate_assessments",
    "aggregate_courses",
    "aggregate_pathways",
    "calculate_average_completion",
    "calculate_completion_rate",
    "calculate_skill_trends",
    "calculate_assessment_distribution",
    "calculate_course_engagement",
    "calculate_profile_funnel",
    "calculate_skill_combinations",
    "calculate_skill_gaps",
    "build_priority_insights",
    "get_industry_benchmarks",
    "load_benchmarks",
    "RowTotals",
    "build_analytics_snapshot",
    "build_snapshot_from_rows",
]
