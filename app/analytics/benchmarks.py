from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from app.schemas.analytics import IndustryBenchmarks

_BENCHMARKS_CACHE: IndustryBenchmarks | None = None
_BENCHMARKS_PATH = Path(__file__).resolve().parents[2] / "config" / "benchmarks.yaml"


def load_benchmarks(path: Path | None = None) -> IndustryBenchmarks:
    """Load industry benchmarks from config/benchmarks.yaml and validate the shape."""
    target = path or _BENCHMARKS_PATH
    if not target.exists():
        raise RuntimeError(
            f"Benchmarks config not found at '{target}'. "
            "Expected file: config/benchmarks.yaml"
        )

    try:
        raw = target.read_text(encoding="utf-8")
    except OSError as exc:
        raise RuntimeError(f"Failed to read benchmarks config '{target}': {exc}") from exc

    try:
        parsed: Any = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise RuntimeError(f"Invalid YAML in benchmarks config '{target}': {exc}") from exc

    if not isinstance(parsed, dict):
        raise RuntimeError(f"Invalid benchmarks config '{target}': expected a top-level mapping.")
    if not isinstance(parsed.get("top_skills"), list):
        raise RuntimeError(f"Invalid benchmarks config '{target}': 'top_skills' must be a list.")

    try:
        return IndustryBenchmarks.model_validate(parsed)
    except ValidationError as exc:
        raise RuntimeError(f"Invalid benchmarks config '{target}': {exc}") from exc


def get_industry_benchmarks() -> IndustryBenchmarks:
    global _BENCHMARKS_CACHE

    if _BENCHMARKS_CACHE is None:
        _BENCHMARKS_CACHE = load_benchmarks()
    return _BENCHMARKS_CACHE
