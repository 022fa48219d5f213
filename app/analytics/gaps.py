from __future__ import annotations

import math
from typing import Sequence

from app.schemas.analytics import BenchmarkSkill, PriorityInsight, SkillDetail, SkillGap

CRITICAL_GAP_THRESHOLD = 15
PROFILE_COMPLETION_WARNING = 70
COURSE_COMPLETION_WARNING = 50
COURSE_COMPLETION_SUCCESS = 70
TOP_GAPS_LIMIT = 8
PRIORITY_GAPS_LIMIT = 3


def calculate_skill_gaps(
    skills: Sequence[SkillDetail],
    benchmarks: Sequence[BenchmarkSkill],
    total_students: int = 0,
) -> list[SkillGap]:
    coverage = {skill.name.lower(): skill.percentage_of_total for skill in skills}

    gaps: list[SkillGap] = []
    for benchmark in benchmarks:
        student_coverage = coverage.get(benchmark.skill.lower(), 0)
        gap = max(0, benchmark.demand - student_coverage)
        gaps.append(
            SkillGap(
                skill=benchmark.skill or "Unknown",
                student_coverage=student_coverage,
                industry_demand=benchmark.demand,
                gap=gap,
                students_needed=math.ceil(gap * total_students / 100),
            )
        )
    gaps.sort(key=lambda item: item.gap, reverse=True)
    return gaps


def build_priority_insights(
    gaps: Sequence[SkillGap],
    profile_completion_rate: float,
    course_completion_rate: float,
    limit: int = PRIORITY_GAPS_LIMIT,
) -> list[PriorityInsight]:
    insights: list[PriorityInsight] = []

    for gap in gaps[:limit]:
        if gap.gap > CRITICAL_GAP_THRESHOLD:
            insights.append(
                PriorityInsight(
                    type="critical",
                    title=f"Critical Skill Gap: {gap.skill}",
                    description=(
                        f"Only {gap.student_coverage}% of students have this skill, "
                        f"but industry needs {gap.industry_demand}%"
                    ),
                    action=f"Add {gap.skill} courses to curriculum",
                    impact="high",
                )
            )

    if profile_completion_rate < PROFILE_COMPLETION_WARNING:
        insights.append(
            PriorityInsight(
                type="warning",
                title="Low Profile Completion",
                description=f"Only {profile_completion_rate}% average completion - students need guidance",
                action="Simplify onboarding and provide tutorials",
                impact="medium",
            )
        )

    if course_completion_rate < COURSE_COMPLETION_WARNING:
        insights.append(
            PriorityInsight(
                type="warning",
                title="Low Course Completion Rate",
                description=f"{course_completion_rate}% course completion - content may be too difficult",
                action="Review course difficulty and add support materials",
                impact="high",
            )
        )
    elif course_completion_rate > COURSE_COMPLETION_SUCCESS:
        insights.append(
            PriorityInsight(
                type="success",
                title="Strong Course Engagement",
                description=f"{course_completion_rate}% course completion rate - students are engaged!",
                action="Maintain current quality standards",
                impact="positive",
            )
        )

    return insights
