from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Mapping

logger = logging.getLogger(__name__)

SKILL_LEVELS = ("beginner", "intermediate", "advanced")
ASSESSMENT_CATEGORIES = ("technical", "creative", "analytical", "leadership", "communication")


@dataclass(slots=True, frozen=True)
class SkillEntry:
    name: str
    level: str | None = None


@dataclass(slots=True)
class ProfileRow:
    skills: list[SkillEntry] = field(default_factory=list)
    assessment_scores: dict[str, float] | None = None
    dominant_type: str | None = None
    completion_percentage: float = 0


@dataclass(slots=True)
class CourseRow:
    platform: str | None = None
    difficulty: str | None = None
    category: str | None = None
    completed: bool = False
    bookmarked: bool = False


@dataclass(slots=True)
class PathwayRow:
    category: str | None = None
    level: str | None = None
    completed: bool = False


def _load_json_field(raw: Any, *, field_name: str, row_id: str | None) -> Any:
    """Return the decoded value of a column that may hold JSON text, or None if it does not parse."""
    if not isinstance(raw, str):
        return raw
    if not raw.strip():
        return None
    try:
        return json.loads(raw)
    except ValueError as exc:
        logger.warning("row_field_parse_failed field=%s row=%s: %s", field_name, row_id or "?", exc)
        return None


def _is_number(value: Any) -> bool:
    # NaN and Infinity parse from JSON text but are not usable scores.
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text if text else None


def _row_id(raw: Mapping[str, Any]) -> str | None:
    value = raw.get("$id")
    return str(value) if value is not None else None


def decode_skills(raw: Any, *, row_id: str | None = None) -> list[SkillEntry]:
    value = _load_json_field(raw, field_name="skills", row_id=row_id)
    if not isinstance(value, list):
        return []

    skills: list[SkillEntry] = []
    for item in value:
        if not isinstance(item, Mapping):
            continue
        name = item.get("name")
        if not name or not isinstance(name, str):
            continue
        level = item.get("level")
        skills.append(SkillEntry(name=name, level=level if isinstance(level, str) else None))
    return skills


def decode_assessment_scores(raw: Any, *, row_id: str | None = None) -> dict[str, float] | None:
    value = _load_json_field(raw, field_name="assessmentScores", row_id=row_id)
    if not isinstance(value, Mapping):
        return None
    return {
        category: value[category]
        for category in ASSESSMENT_CATEGORIES
        if _is_number(value.get(category))
    }


def decode_profile(raw: Mapping[str, Any]) -> ProfileRow:
    row_id = _row_id(raw)
    completion = raw.get("completionPercentage")
    return ProfileRow(
        skills=decode_skills(raw.get("skills"), row_id=row_id),
        assessment_scores=decode_assessment_scores(raw.get("assessmentScores"), row_id=row_id),
        dominant_type=_optional_str(raw.get("dominantType")),
        completion_percentage=completion if _is_number(completion) else 0,
    )


def decode_course(raw: Mapping[str, Any]) -> CourseRow:
    return CourseRow(
        platform=_optional_str(raw.get("platform")),
        difficulty=_optional_str(raw.get("difficulty")),
        category=_optional_str(raw.get("category")),
        completed=bool(raw.get("completed")),
        bookmarked=bool(raw.get("bookmarked")),
    )


def decode_pathway(raw: Mapping[str, Any]) -> PathwayRow:
    return PathwayRow(
        category=_optional_str(raw.get("category")),
        level=_optional_str(raw.get("level")),
        completed=bool(raw.get("completed")),
    )


# Rows that are not mappings still count towards the population.
def decode_profiles(rows: list[Any]) -> list[ProfileRow]:
    return [decode_profile(row) if isinstance(row, Mapping) else ProfileRow() for row in rows]


def decode_courses(rows: list[Any]) -> list[CourseRow]:
    return [decode_course(row) if isinstance(row, Mapping) else CourseRow() for row in rows]


def decode_pathways(rows: list[Any]) -> list[PathwayRow]:
    return [decode_pathway(row) if isinstance(row, Mapping) else PathwayRow() for row in rows]
