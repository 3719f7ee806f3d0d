from __future__ import annotations

import logging
from typing import Any, Mapping

from src.ingest.scorecard import DEFAULT_PER_PAGE, ScorecardClient
from src.normalize.schema import SchoolSearchFilters, SearchResult

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Search failed"


def _split_csv(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    return tuple(part.strip() for part in str(value).split(",") if part.strip())


def _parse_int(value: Any, default: int | None) -> int | None:
    if value is None or str(value).strip() == "":
        return default
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def parse_search_params(params: Mapping[str, Any]) -> SchoolSearchFilters:
    """Build filters from query-string style parameters (`q`, `states`, `type`, ...)."""

    query = str(params.get("q") or "").strip()
    page = _parse_int(params.get("page"), 0)
    per_page = _parse_int(params.get("perPage"), DEFAULT_PER_PAGE)
    return SchoolSearchFilters(
        query=query or None,
        states=_split_csv(params.get("states")),
        min_enrollment=_parse_int(params.get("minEnrollment"), None),
        max_enrollment=_parse_int(params.get("maxEnrollment"), None),
        school_type=_split_csv(params.get("type")),
        page=page if page is not None and page >= 0 else 0,
        per_page=per_page if per_page is not None and per_page > 0 else DEFAULT_PER_PAGE,
    )


def is_simple_name_search(filters: SchoolSearchFilters) -> bool:
    return (
        bool(filters.query)
        and not filters.states
        and not filters.school_type
        and filters.min_enrollment is None
        and filters.max_enrollment is None
    )


def search(filters: SchoolSearchFilters, client: ScorecardClient | None = None) -> SearchResult:
    """Run a bare name query through the name search, anything else through the filtered search."""

    scorecard = client or ScorecardClient()
    if is_simple_name_search(filters):
        colleges = scorecard.search_by_name(filters.query or "", filters.per_page)
        return SearchResult(colleges=colleges, total=len(colleges), page=0)

    result = scorecard.search_colleges(filters)
    return SearchResult(colleges=result.colleges, total=result.total, page=filters.page)


def handle_search_request(
    params: Mapping[str, Any],
    client: ScorecardClient | None = None,
) -> tuple[dict[str, Any], int]:
    try:
        filters = parse_search_params(params)
        result = search(filters, client=client)
    except Exception as exc:
        logger.exception("School search error")
        return {"error": str(exc) or GENERIC_ERROR_MESSAGE}, 500
    return result.to_dict(), 200
