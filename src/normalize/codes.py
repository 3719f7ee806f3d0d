from __future__ import annotations

from types import MappingProxyType
from typing import Literal, Mapping

LocationType = Literal["Urban", "Suburban", "Town", "Rural"]
SchoolType = Literal["Public", "Private", "PrivateForProfit"]
SelectableSchoolType = Literal["Public", "Private"]

UNKNOWN_REGION = "Unknown"
DEFAULT_LOCATION_TYPE: LocationType = "Suburban"
DEFAULT_SCHOOL_TYPE: SchoolType = "Private"

MIN_ENROLLMENT = 100
STRONG_PROGRAM_THRESHOLD = 0.10

REGION_MAP: Mapping[int, str] = MappingProxyType(
    {
        1: "New England",
        2: "Mid East",
        3: "Great Lakes",
        4: "Plains",
        5: "Southeast",
        6: "Southwest",
        7: "Rocky Mountains",
        8: "Far West",
        9: "Outlying Areas",
    }
)

# Inclusive NCES locale code ranges.
LOCALE_BUCKETS: tuple[tuple[int, int, LocationType], ...] = (
    (11, 13, "Urban"),
    (21, 23, "Suburban"),
    (31, 33, "Town"),
    (41, 43, "Rural"),
)

OWNERSHIP_TYPES: Mapping[int, SchoolType] = MappingProxyType(
    {1: "Public", 2: "Private", 3: "PrivateForProfit"}
)

# Only Public and Private can be requested; for-profit schools show up as a classification.
OWNERSHIP_CODES: Mapping[str, int] = MappingProxyType({"Public": 1, "Private": 2})

SCHOOL_TYPE_LABELS: Mapping[str, str] = MappingProxyType(
    {"Public": "Public", "Private": "Private", "PrivateForProfit": "Private For-Profit"}
)

PROGRAM_CATEGORIES: tuple[str, ...] = (
    "Computer Science",
    "Engineering",
    "Business",
    "Health Sciences",
    "Biology",
)

US_STATES: Mapping[str, str] = MappingProxyType(
    {
        "AL": "Alabama", "AK": "Alaska", "AZ": "Arizona", "AR": "Arkansas", "CA": "California",
        "CO": "Colorado", "CT": "Connecticut", "DE": "Delaware", "FL": "Florida", "GA": "Georgia",
        "HI": "Hawaii", "ID": "Idaho", "IL": "Illinois", "IN": "Indiana", "IA": "Iowa",
        "KS": "Kansas", "KY": "Kentucky", "LA": "Louisiana", "ME": "Maine", "MD": "Maryland",
        "MA": "Massachusetts", "MI": "Michigan", "MN": "Minnesota", "MS": "Mississippi",
        "MO": "Missouri", "MT": "Montana", "NE": "Nebraska", "NV": "Nevada",
        "NH": "New Hampshire", "NJ": "New Jersey", "NM": "New Mexico", "NY": "New York",
        "NC": "North Carolina", "ND": "North Dakota", "OH": "Ohio", "OK": "Oklahoma",
        "OR": "Oregon", "PA": "Pennsylvania", "RI": "Rhode Island", "SC": "South Carolina",
        "SD": "South Dakota", "TN": "Tennessee", "TX": "Texas", "UT": "Utah", "VT": "Vermont",
        "VA": "Virginia", "WA": "Washington", "WV": "West Virginia", "WI": "Wisconsin",
        "WY": "Wyoming",
    }
)


def region_name(region_id: int | None) -> str:
    if region_id is None:
        return UNKNOWN_REGION
    return REGION_MAP.get(region_id, UNKNOWN_REGION)


def location_type(locale: int | None) -> LocationType:
    if locale is None:
        return DEFAULT_LOCATION_TYPE
    for low, high, label in LOCALE_BUCKETS:
        if low <= locale <= high:
            return label
    return DEFAULT_LOCATION_TYPE


def school_type(ownership: int | None) -> SchoolType:
    if ownership is None:
        return DEFAULT_SCHOOL_TYPE
    return OWNERSHIP_TYPES.get(ownership, DEFAULT_SCHOOL_TYPE)
