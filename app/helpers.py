from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import pandas as pd

from src.ingest.scorecard import API_KEY_SIGNUP_URL
from src.normalize.codes import SCHOOL_TYPE_LABELS
from src.normalize.schema import NormalizedCollege

NOT_AVAILABLE = "N/A"


def format_percent(value: Any) -> str:
    numeric = _coerce_float(value)
    if numeric is None:
        return NOT_AVAILABLE
    # Halves round up: 0.125 -> 13%.
    percent = (Decimal(str(numeric)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return f"{percent}%"


def format_money(value: Any) -> str:
    numeric = _coerce_float(value)
    if numeric is None:
        return NOT_AVAILABLE
    return f"${numeric:,.0f}"


def format_number(value: Any) -> str:
    numeric = _coerce_float(value)
    if numeric is None:
        return NOT_AVAILABLE
    if numeric.is_integer():
        return f"{int(numeric):,}"
    return f"{numeric:,.1f}"


def website_href(url: str | None) -> str | None:
    if not url:
        return None
    if url.startswith("http"):
        return url
    return f"https://{url}"


def school_type_label(college: NormalizedCollege) -> str:
    return SCHOOL_TYPE_LABELS.get(college.school_type, college.school_type)


def format_location(college: NormalizedCollege) -> str:
    place = ", ".join(part for part in (college.city, college.state) if part)
    return f"{place} • {college.region}" if place else college.region


def results_summary(count: int) -> str:
    if count == 0:
        return "No colleges found. Try a different search."
    return f"Found {count} college{'' if count == 1 else 's'}"


def api_key_hint(error_message: str | None) -> str | None:
    if not error_message or "API key" not in error_message:
        return None
    return f"Get a free API key at {API_KEY_SIGNUP_URL}"


def _coerce_float(value: Any) -> float | None:
    if value is None:
        return None
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return None
    if pd.isna(numeric):
        return None
    return numeric
