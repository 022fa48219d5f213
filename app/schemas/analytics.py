from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field

from app.schemas.base import CamelModel

SkillTrend = Literal["rising", "stable", "falling"]
InsightType = Literal["critical", "warning", "success"]
InsightImpact = Literal["high", "medium", "positive"]


class SkillLevelBreakdown(CamelModel):
    beginner: int = 0
    intermediate: int = 0
    advanced: int = 0


class SkillSummary(CamelModel):
    name: str
    count: int
    percentage: int
    by_level: SkillLevelBreakdown


class CareerTypeSummary(CamelModel):
    type: str
    count: int
    percentage: int


class AssessmentSummary(CamelModel):
    category: str
    average: float
    count: int


class PlatformCount(CamelModel):
    platform: str
    count: int


class DifficultyCount(CamelModel):
    difficulty: str
    count: int


class CategoryCount(CamelModel):
    category: str
    count: int


class LevelCount(CamelModel):
    level: str
    count: int


class CourseCompletionTrend(CamelModel):
    completed: int = 0
    in_progress: int = 0
    bookmarked: int = 0


class CourseSummary(CamelModel):
    by_platform: list[PlatformCount] = Field(default_factory=list)
    by_difficulty: list[DifficultyCount] = Field(default_factory=list)
    by_category: list[CategoryCount] = Field(default_factory=list)
    completion_trend: CourseCompletionTrend = Field(default_factory=CourseCompletionTrend)


class PathwayCompletionStats(CamelModel):
    completed: int = 0
    in_progress: int = 0


class PathwaySummary(CamelModel):
    by_category: list[CategoryCount] = Field(default_factory=list)
    by_level: list[LevelCount] = Field(default_factory=list)
    completion_stats: PathwayCompletionStats = Field(default_factory=PathwayCompletionStats)


class AnalyticsOverview(CamelModel):
    total_students: int = 0
    avg_profile_completion: float = 0
    total_courses: int = 0
    course_completion_rate: int = 0
    total_pathways: int = 0
    pathway_completion_rate: int = 0


class AnalyticsData(CamelModel):
    overview: AnalyticsOverview
    skills: list[SkillSummary] = Field(default_factory=list)
    careers: list[CareerTypeSummary] = Field(default_factory=list)
    assessments: list[AssessmentSummary] = Field(default_factory=list)
    courses: CourseSummary = Field(default_factory=CourseSummary)
    pathways: PathwaySummary = Field(default_factory=PathwaySummary)


class SkillDetail(CamelModel):
    name: str
    total: int
    beginner: int
    intermediate: int
    advanced: int
    percentage_of_total: int
    # Always "stable" until historical snapshots exist.
    trend: SkillTrend = "stable"


class DistributionBucket(CamelModel):
    range: str
    count: int
    percentage: int


class AssessmentDistribution(CamelModel):
    category: str
    average: float = 0
    median: float = 0
    min: float = 0
    max: float = 0
    distribution: list[DistributionBucket] = Field(default_factory=list)


class PlatformStat(CamelModel):
    platform: str
    total: int
    completed: int
    completion_rate: int


class DifficultyStat(CamelModel):
    difficulty: str
    total: int
    completed: int
    completion_rate: int


class CategoryTrend(CamelModel):
    category: str
    count: int
    growth: float = 0


class CourseEngagement(CamelModel):
    platform_stats: list[PlatformStat] = Field(default_factory=list)
    difficulty_stats: list[DifficultyStat] = Field(default_factory=list)
    category_trends: list[CategoryTrend] = Field(default_factory=list)


class FunnelStage(CamelModel):
    stage: str
    count: int
    percentage: int
    dropoff: int


class SkillCombination(CamelModel):
    skills: list[str]
    count: int
    percentage: int


class SkillGap(CamelModel):
    skill: str
    student_coverage: int
    industry_demand: int
    gap: int
    students_needed: int = 0


class PriorityInsight(CamelModel):
    type: InsightType
    title: str
    description: str
    action: str
    impact: InsightImpact


class EnhancedAnalyticsData(CamelModel):
    skills_detailed: list[SkillDetail] = Field(default_factory=list)
    assessment_distribution: list[AssessmentDistribution] = Field(default_factory=list)
    course_engagement: CourseEngagement = Field(default_factory=CourseEngagement)
    profile_funnel: list[FunnelStage] = Field(default_factory=list)
    skill_combinations: list[SkillCombination] = Field(default_factory=list)
    skills_gap: list[SkillGap] = Field(default_factory=list)
    priority_insights: list[PriorityInsight] = Field(default_factory=list)


class BenchmarkSkill(CamelModel):
    skill: str
    demand: int = Field(ge=0, le=100)
    growth: int = 0


class IndustryBenchmarks(CamelModel):
    top_skills: list[BenchmarkSkill] = Field(default_factory=list)
    avg_salary_growth: str = ""
    job_market_trend: str = ""


class UniversityUser(CamelModel):
    name: str = ""
    email: str = ""


class AnalyticsSnapshot(CamelModel):
    data: AnalyticsData
    enhanced: EnhancedAnalyticsData


class AnalyticsResponse(CamelModel):
    success: bool = True
    data: AnalyticsData
    enhanced: EnhancedAnalyticsData
    industry_benchmarks: IndustryBenchmarks
    generated_at: datetime
    university_user: UniversityUser
