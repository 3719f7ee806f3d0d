from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from src.normalize.codes import OWNERSHIP_CODES, LocationType, SchoolType, SelectableSchoolType


def _as_int(value: Any) -> Optional[int]:
    number = _as_float(value)
    if number is None:
        return None
    return int(number)


def _as_code(value: Any) -> Optional[int]:
    """Whole-number codes only: a locale of 13.5 is unknown, not 13."""
    number = _as_float(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


def _as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        numeric = float(value)
    elif isinstance(value, str):
        try:
            numeric = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(numeric):
        return None
    return numeric


def _as_number(value: Any) -> Optional[float | int]:
    """Keep ints as ints so pass-through values stay as the API reported them."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return _as_float(value)


def _as_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


def _passthrough_str(value: Any) -> Optional[str]:
    if not isinstance(value, str) or not value:
        return None
    return value


@dataclass(frozen=True, slots=True)
class ScorecardSchool:
    """Typed view of one raw Scorecard result keyed by dotted field paths."""

    id: Optional[int]
    name: Optional[str]
    city: Optional[str]
    state: Optional[str]
    zip: Optional[str]
    school_url: Optional[str]
    region_id: Optional[int]
    locale: Optional[int]
    ownership: Optional[int]
    carnegie_basic: Optional[int]
    student_size: Optional[int]
    admission_rate: Optional[float | int]
    sat_average: Optional[float | int]
    act_midpoint: Optional[float | int]
    avg_net_price: Optional[float | int]
    tuition_in_state: Optional[float | int]
    tuition_out_of_state: Optional[float | int]
    student_faculty_ratio: Optional[float | int]
    completion_rate: Optional[float | int]
    median_earnings: Optional[float | int]
    pct_computer: Optional[float]
    pct_engineering: Optional[float]
    pct_business_marketing: Optional[float]
    pct_health: Optional[float]
    pct_biological: Optional[float]

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> ScorecardSchool:
        return cls(
            id=_as_code(raw.get("id")),
            name=_as_str(raw.get("school.name")),
            city=_as_str(raw.get("school.city")),
            state=_as_str(raw.get("school.state")),
            zip=_as_str(raw.get("school.zip")),
            school_url=_passthrough_str(raw.get("school.school_url")),
            region_id=_as_code(raw.get("school.region_id")),
            locale=_as_code(raw.get("school.locale")),
            ownership=_as_code(raw.get("school.ownership")),
            carnegie_basic=_as_code(raw.get("school.carnegie_basic")),
            student_size=_as_int(raw.get("latest.student.size")),
            admission_rate=_as_number(raw.get("latest.admissions.admission_rate.overall")),
            sat_average=_as_number(raw.get("latest.admissions.sat_scores.average.overall")),
            act_midpoint=_as_number(raw.get("latest.admissions.act_scores.midpoint.cumulative")),
            avg_net_price=_as_number(raw.get("latest.cost.avg_net_price.overall")),
            tuition_in_state=_as_number(raw.get("latest.cost.tuition.in_state")),
            tuition_out_of_state=_as_number(raw.get("latest.cost.tuition.out_of_state")),
            student_faculty_ratio=_as_number(
                raw.get("latest.student.demographics.student_faculty_ratio")
            ),
            completion_rate=_as_number(raw.get("latest.completion.rate_suppressed.overall")),
            median_earnings=_as_number(raw.get("latest.earnings.10_yrs_after_entry.median")),
            pct_computer=_as_float(raw.get("latest.academics.program_percentage.computer")),
            pct_engineering=_as_float(raw.get("latest.academics.program_percentage.engineering")),
            pct_business_marketing=_as_float(
                raw.get("latest.academics.program_percentage.business_marketing")
            ),
            pct_health=_as_float(raw.get("latest.academics.program_percentage.health")),
            pct_biological=_as_float(raw.get("latest.academics.program_percentage.biological")),
        )


@dataclass(frozen=True, slots=True)
class NormalizedCollege:
    """Canonical college record handed to presentation layers."""

    scorecard_id: int
    name: str
    city: str
    state: str
    region: str
    website_url: Optional[str]
    location_type: LocationType
    school_type: SchoolType
    enrollment_size: int
    acceptance_rate: Optional[float | int]
    avg_sat: Optional[float | int]
    avg_act: Optional[float | int]
    estimated_cost: Optional[float | int]
    in_state_tuition: Optional[float | int]
    out_of_state_tuition: Optional[float | int]
    strong_programs: tuple[str, ...]
    graduation_rate: Optional[float | int]
    median_earnings: Optional[float | int]
    student_faculty_ratio: Optional[float | int]

    def to_dict(self) -> dict[str, Any]:
        return {
            "scorecardId": self.scorecard_id,
            "name": self.name,
            "city": self.city,
            "state": self.state,
            "region": self.region,
            "websiteUrl": self.website_url,
            "locationType": self.location_type,
            "schoolType": self.school_type,
            "enrollmentSize": self.enrollment_size,
            "acceptanceRate": self.acceptance_rate,
            "avgSAT": self.avg_sat,
            "avgACT": self.avg_act,
            "estimatedCost": self.estimated_cost,
            "inStateTuition": self.in_state_tuition,
            "outOfStateTuition": self.out_of_state_tuition,
            "strongPrograms": list(self.strong_programs),
            "graduationRate": self.graduation_rate,
            "medianEarnings": self.median_earnings,
            "studentFacultyRatio": self.student_faculty_ratio,
        }


@dataclass(frozen=True, slots=True)
class SchoolSearchFilters:
    query: Optional[str] = None
    states: tuple[str, ...] = ()
    min_enrollment: Optional[int] = None
    max_enrollment: Optional[int] = None
    school_type: tuple[SelectableSchoolType, ...] = ()
    page: int = 0
    per_page: int = 20

    def __post_init__(self) -> None:
        object.__setattr__(self, "states", tuple(self.states))
        object.__setattr__(self, "school_type", tuple(self.school_type))
        for value in self.school_type:
            if value not in OWNERSHIP_CODES:
                raise ValueError(
                    f"school_type must be one of {sorted(OWNERSHIP_CODES)} (received {value!r})."
                )
        if self.page < 0:
            raise ValueError("page must be zero or greater.")
        if self.per_page <= 0:
            raise ValueError("per_page must be a positive integer.")


@dataclass(frozen=True, slots=True)
class SearchResult:
    colleges: list[NormalizedCollege] = field(default_factory=list)
    total: int = 0
    page: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "colleges": [college.to_dict() for college in self.colleges],
            "total": self.total,
            "page": self.page,
        }
