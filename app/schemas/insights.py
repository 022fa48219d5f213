from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field

from app.schemas.base import CamelModel

Relevance = Literal["high", "medium", "low"]
InsightCategory = Literal["job_demand", "salary_growth", "emerging_skill"]


class ProfileSkill(CamelModel):
    name: str = Field(min_length=1, max_length=120)
    level: str = "beginner"


class ProfileExperience(CamelModel):
    title: str = Field(default="", max_length=200)
    tech_stack: list[str] = Field(default_factory=list, max_length=50)


class ProfileEducation(CamelModel):
    degree: str = Field(default="", max_length=200)
    school: str = Field(default="", max_length=200)


class InsightProfile(CamelModel):
    user_id: str = Field(default="", max_length=200)
    skills: list[ProfileSkill] = Field(default_factory=list, max_length=200)
    experience: list[ProfileExperience] = Field(default_factory=list, max_length=50)
    education: list[ProfileEducation] = Field(default_factory=list, max_length=20)
    dominant_type: str | None = Field(default=None, max_length=60)


class IndustryInsightsRequest(CamelModel):
    profile: InsightProfile | None = None
    force_refresh: bool = False


class IndustryInsight(CamelModel):
    trend: str
    description: str
    relevance: Relevance = "medium"
    category: InsightCategory = "job_demand"


class IndustryInsightsData(CamelModel):
    insights: list[IndustryInsight]
    job_market_trend: str = Field(min_length=1)
    top_skills_demand: list[str] = Field(min_length=1)
    avg_salary_growth: str = Field(min_length=1)
    generated_at: datetime
    is_profile_based: bool


class IndustryInsightsResponse(CamelModel):
    success: bool = True
    data: IndustryInsightsData
    cached: bool
