from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator, Mapping, Protocol

from src.ingest.errors import ScorecardAPIError, ScorecardConfigError
from src.ingest.http import ScorecardHttpClient, redact_params
from src.normalize.codes import OWNERSHIP_CODES
from src.normalize.college import normalize_results, normalize_school
from src.normalize.schema import NormalizedCollege, SchoolSearchFilters, SearchResult

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.data.gov/ed/collegescorecard/v1/schools"
API_KEY_ENV_VAR = "COLLEGE_SCORECARD_API_KEY"
API_KEY_PLACEHOLDERS = frozenset({"your-api-key-here"})
API_KEY_SIGNUP_URL = "https://api.data.gov/signup/"

# Carnegie basic classifications 14..23 are the four-year institutions.
FOUR_YEAR_CARNEGIE_RANGE = "14..23"
DEFAULT_PER_PAGE = 20
ENROLLMENT_RANGE_FLOOR = 0
ENROLLMENT_RANGE_CEILING = 100000

REQUESTED_FIELDS = ",".join(
    [
        "id",
        "school.name",
        "school.city",
        "school.state",
        "school.zip",
        "school.school_url",
        "school.region_id",
        "school.locale",
        "school.ownership",
        "school.carnegie_basic",
        "latest.student.size",
        "latest.admissions.admission_rate.overall",
        "latest.admissions.sat_scores.average.overall",
        "latest.admissions.act_scores.midpoint.cumulative",
        "latest.cost.avg_net_price.overall",
        "latest.cost.tuition.in_state",
        "latest.cost.tuition.out_of_state",
        "latest.student.demographics.student_faculty_ratio",
        "latest.completion.rate_suppressed.overall",
        "latest.earnings.10_yrs_after_entry.median",
        "latest.academics.program_percentage.computer",
        "latest.academics.program_percentage.engineering",
        "latest.academics.program_percentage.business_marketing",
        "latest.academics.program_percentage.health",
        "latest.academics.program_percentage.biological",
    ]
)


class JsonHttpClient(Protocol):
    def get_json(self, url: str, *, params: dict[str, Any] | None = None) -> Any: ...


@dataclass(slots=True)
class ScorecardResponse:
    total: int
    page: int
    per_page: int
    results: list[dict[str, Any]]

    @classmethod
    def from_payload(cls, payload: Any) -> ScorecardResponse:
        if not isinstance(payload, Mapping):
            return cls(total=0, page=0, per_page=0, results=[])
        metadata = payload.get("metadata")
        if not isinstance(metadata, Mapping):
            metadata = {}
        results = payload.get("results")
        if not isinstance(results, list):
            results = []
        return cls(
            total=_int_or_zero(metadata.get("total")),
            page=_int_or_zero(metadata.get("page")),
            per_page=_int_or_zero(metadata.get("per_page")),
            results=[item for item in results if isinstance(item, dict)],
        )


def _int_or_zero(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def get_api_key(environ: Mapping[str, str] | None = None) -> str:
    env = os.environ if environ is None else environ
    api_key = (env.get(API_KEY_ENV_VAR) or "").strip()
    if not api_key or api_key in API_KEY_PLACEHOLDERS:
        raise ScorecardConfigError(
            f"{API_KEY_ENV_VAR} is not set. Get a free API key at {API_KEY_SIGNUP_URL}"
        )
    return api_key


def build_name_params(api_key: str, name: str, limit: int) -> dict[str, str]:
    return {
        "api_key": api_key,
        "fields": REQUESTED_FIELDS,
        "school.name": name,
        "per_page": str(limit),
        "school.carnegie_basic__range": FOUR_YEAR_CARNEGIE_RANGE,
    }


def build_search_params(api_key: str, filters: SchoolSearchFilters) -> dict[str, str]:
    params = {
        "api_key": api_key,
        "fields": REQUESTED_FIELDS,
        "per_page": str(filters.per_page),
        "page": str(filters.page),
        "school.carnegie_basic__range": FOUR_YEAR_CARNEGIE_RANGE,
    }

    if filters.query:
        params["school.name"] = filters.query

    if filters.states:
        params["school.state"] = ",".join(filters.states)

    if filters.min_enrollment is not None or filters.max_enrollment is not None:
        low = filters.min_enrollment if filters.min_enrollment is not None else ENROLLMENT_RANGE_FLOOR
        high = filters.max_enrollment if filters.max_enrollment is not None else ENROLLMENT_RANGE_CEILING
        params["latest.student.size__range"] = f"{low}..{high}"

    if filters.school_type:
        params["school.ownership"] = ",".join(str(OWNERSHIP_CODES[value]) for value in filters.school_type)

    return params


def build_lookup_params(api_key: str, scorecard_id: int) -> dict[str, str]:
    return {
        "api_key": api_key,
        "fields": REQUESTED_FIELDS,
        "id": str(scorecard_id),
    }


class ScorecardClient:
    """Queries the College Scorecard API and normalizes its results.

    Every call reads the API key from the environment first and fails with
    `ScorecardConfigError` before touching the network when it is unusable.
    Without an injected `http_client`, each call opens and closes its own
    session, so instances hold no state between calls.
    """

    def __init__(
        self,
        http_client: JsonHttpClient | None = None,
        *,
        base_url: str = API_BASE_URL,
        timeout_seconds: float = 20.0,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._http_client = http_client
        self.base_url = base_url
        self.timeout_seconds = timeout_seconds
        self._environ = environ

    def search_by_name(self, name: str, limit: int = DEFAULT_PER_PAGE) -> list[NormalizedCollege]:
        if not name or not name.strip():
            raise ValueError("name must be a non-empty string.")
        if limit <= 0:
            raise ValueError("limit must be a positive integer.")

        api_key = get_api_key(self._environ)
        params = build_name_params(api_key, name, limit)
        response = self._get(params)
        colleges = normalize_results(response.results)
        logger.info(
            "Scorecard name search name=%r results=%d admitted=%d",
            name,
            len(response.results),
            len(colleges),
        )
        return colleges

    def search_colleges(self, filters: SchoolSearchFilters) -> SearchResult:
        api_key = get_api_key(self._environ)
        params = build_search_params(api_key, filters)
        try:
            response = self._get(params)
        except ScorecardAPIError as exc:
            logger.error("Scorecard API error: %s", exc.body)
            raise

        colleges = normalize_results(response.results)
        logger.info(
            "Scorecard filtered search page=%d total=%d results=%d admitted=%d",
            filters.page,
            response.total,
            len(response.results),
            len(colleges),
        )
        # total is the upstream match count; it does not account for records dropped by normalize_school.
        return SearchResult(colleges=colleges, total=response.total, page=filters.page)

    def get_college_by_id(self, scorecard_id: int) -> NormalizedCollege | None:
        api_key = get_api_key(self._environ)
        params = build_lookup_params(api_key, scorecard_id)
        try:
            response = self._get(params)
        except ScorecardAPIError as exc:
            logger.info("Scorecard lookup id=%s returned HTTP %d", scorecard_id, exc.status_code)
            return None

        if not response.results:
            return None
        return normalize_school(response.results[0])

    def _get(self, params: dict[str, str]) -> ScorecardResponse:
        logger.debug("GET %s %s", self.base_url, redact_params(params))
        with self._open_http() as http_client:
            payload = http_client.get_json(self.base_url, params=params)
        return ScorecardResponse.from_payload(payload)

    @contextmanager
    def _open_http(self) -> Iterator[JsonHttpClient]:
        if self._http_client is not None:
            yield self._http_client
            return
        with ScorecardHttpClient(timeout_seconds=self.timeout_seconds) as http_client:
            yield http_client
