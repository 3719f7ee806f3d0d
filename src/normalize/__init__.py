"""Scorecard record typing, code tables and normalization."""

from src.normalize.college import normalize_results, normalize_school
from src.normalize.schema import NormalizedCollege, ScorecardSchool, SchoolSearchFilters, SearchResult

__all__ = [
    "NormalizedCollege",
    "SchoolSearchFilters",
    "ScorecardSchool",
    "SearchResult",
    "normalize_results",
    "normalize_school",
]
