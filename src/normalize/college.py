from __future__ import annotations

from typing import Any, Mapping, Optional

from src.normalize.codes import (
    MIN_ENROLLMENT,
    PROGRAM_CATEGORIES,
    STRONG_PROGRAM_THRESHOLD,
    location_type,
    region_name,
    school_type,
)
from src.normalize.schema import NormalizedCollege, ScorecardSchool


def strong_programs(school: ScorecardSchool) -> tuple[str, ...]:
    percentages = (
        school.pct_computer,
        school.pct_engineering,
        school.pct_business_marketing,
        school.pct_health,
        school.pct_biological,
    )
    return tuple(
        label
        for label, pct in zip(PROGRAM_CATEGORIES, percentages)
        if (pct or 0.0) > STRONG_PROGRAM_THRESHOLD
    )


def normalize_school(raw: Mapping[str, Any] | ScorecardSchool) -> Optional[NormalizedCollege]:
    """Map one raw Scorecard result to a `NormalizedCollege`.

    Returns None when the record has no name, no id, or fewer than 100 students.
    Locale, ownership and region never reject a record; unknown codes fall back
    to Suburban, Private and "Unknown".
    """

    school = raw if isinstance(raw, ScorecardSchool) else ScorecardSchool.from_raw(raw)

    enrollment = school.student_size
    if enrollment is None or enrollment < MIN_ENROLLMENT:
        return None
    if school.name is None:
        return None
    if school.id is None:
        return None

    return NormalizedCollege(
        scorecard_id=school.id,
        name=school.name,
        city=school.city or "",
        state=school.state or "",
        region=region_name(school.region_id),
        website_url=school.school_url,
        location_type=location_type(school.locale),
        school_type=school_type(school.ownership),
        enrollment_size=enrollment,
        acceptance_rate=school.admission_rate,
        avg_sat=school.sat_average,
        avg_act=school.act_midpoint,
        estimated_cost=school.avg_net_price,
        in_state_tuition=school.tuition_in_state,
        out_of_state_tuition=school.tuition_out_of_state,
        strong_programs=strong_programs(school),
        graduation_rate=school.completion_rate,
        median_earnings=school.median_earnings,
        student_faculty_ratio=school.student_faculty_ratio,
    )


def normalize_results(results: list[Any]) -> list[NormalizedCollege]:
    normalized: list[NormalizedCollege] = []
    for item in results:
        if not isinstance(item, Mapping):
            continue
        college = normalize_school(item)
        if college is not None:
            normalized.append(college)
    return normalized
