from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from src.ingest.errors import ScorecardAPIError, ScorecardConfigError
from src.ingest.scorecard import (
    API_BASE_URL,
    API_KEY_ENV_VAR,
    REQUESTED_FIELDS,
    ScorecardClient,
    ScorecardResponse,
    get_api_key,
)
from src.normalize.schema import SchoolSearchFilters

TEST_ENV = {API_KEY_ENV_VAR: "test-key"}


def _load_payload() -> dict[str, Any]:
    fixture_path = Path(__file__).resolve().parent / "resources" / "scorecard_search_sample.json"
    return json.loads(fixture_path.read_text(encoding="utf-8"))


def _school(scorecard_id: int, name: str, *, size: int = 5000) -> dict[str, Any]:
    return {
        "id": scorecard_id,
        "school.name": name,
        "school.city": "Durham",
        "school.state": "NC",
        "school.region_id": 5,
        "school.locale": 12,
        "school.ownership": 2,
        "school.carnegie_basic": 15,
        "latest.student.size": size,
    }


class _FakeHttpClient:
    def __init__(self, payload: Any = None, *, error: Exception | None = None) -> None:
        self.payload = payload
        self.error = error
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def get_json(self, url: str, *, params: dict[str, Any] | None = None) -> Any:
        self.calls.append((url, dict(params or {})))
        if self.error is not None:
            raise self.error
        return self.payload


def test_requested_fields_is_fixed_allow_list() -> None:
    fields = REQUESTED_FIELDS.split(",")

    assert len(fields) == 25
    assert len(set(fields)) == 25
    assert fields[0] == "id"
    assert "latest.student.size" in fields
    assert "latest.academics.program_percentage.biological" in fields


@pytest.mark.parametrize("value", [None, "", "   ", "your-api-key-here"])
def test_get_api_key_rejects_missing_or_placeholder(value: str | None) -> None:
    environ = {} if value is None else {API_KEY_ENV_VAR: value}

    with pytest.raises(ScorecardConfigError, match="API key"):
        get_api_key(environ)


def test_get_api_key_reads_environment_at_call_time(monkeypatch) -> None:
    monkeypatch.setenv(API_KEY_ENV_VAR, "first-key")
    assert get_api_key() == "first-key"

    monkeypatch.setenv(API_KEY_ENV_VAR, "second-key")
    assert get_api_key() == "second-key"


@pytest.mark.parametrize("environ", [{}, {API_KEY_ENV_VAR: "your-api-key-here"}])
def test_every_operation_fails_before_network_without_credentials(environ: dict[str, str]) -> None:
    http_client = _FakeHttpClient(_load_payload())
    client = ScorecardClient(http_client, environ=environ)

    with pytest.raises(ScorecardConfigError):
        client.search_by_name("Duke", 5)
    with pytest.raises(ScorecardConfigError):
        client.search_colleges(SchoolSearchFilters(query="Stanford"))
    with pytest.raises(ScorecardConfigError):
        client.get_college_by_id(198419)

    assert http_client.calls == []


def test_search_by_name_returns_all_admitted_records() -> None:
    payload = {
        "metadata": {"total": 5, "page": 0, "per_page": 5},
        "results": [_school(1000 + index, f"Duke Campus {index}") for index in range(5)],
    }
    http_client = _FakeHttpClient(payload)
    client = ScorecardClient(http_client, environ=TEST_ENV)

    colleges = client.search_by_name("Duke", 5)

    assert len(colleges) == 5
    assert len(http_client.calls) == 1
    url, params = http_client.calls[0]
    assert url == API_BASE_URL
    assert params == {
        "api_key": "test-key",
        "fields": REQUESTED_FIELDS,
        "school.name": "Duke",
        "per_page": "5",
        "school.carnegie_basic__range": "14..23",
    }


def test_search_by_name_drops_rejected_records_without_backfilling() -> None:
    http_client = _FakeHttpClient(_load_payload())
    client = ScorecardClient(http_client, environ=TEST_ENV)

    colleges = client.search_by_name("Duke", 3)

    assert [college.name for college in colleges] == [
        "Duke University",
        "University of North Carolina at Chapel Hill",
    ]
    assert len(http_client.calls) == 1


@pytest.mark.parametrize(("name", "limit"), [("", 20), ("   ", 20), ("Duke", 0)])
def test_search_by_name_validates_inputs(name: str, limit: int) -> None:
    http_client = _FakeHttpClient(_load_payload())
    client = ScorecardClient(http_client, environ=TEST_ENV)

    with pytest.raises(ValueError):
        client.search_by_name(name, limit)
    assert http_client.calls == []


def test_search_colleges_reports_upstream_total() -> None:
    payload = {
        "metadata": {"total": 1, "page": 0, "per_page": 20},
        "results": [_school(243744, "Stanford University", size=7841)],
    }
    http_client = _FakeHttpClient(payload)
    client = ScorecardClient(http_client, environ=TEST_ENV)

    result = client.search_colleges(SchoolSearchFilters(query="Stanford"))

    assert len(result.colleges) == 1
    assert result.colleges[0].name == "Stanford University"
    assert result.total == 1
    _, params = http_client.calls[0]
    assert params["school.name"] == "Stanford"
    assert params["page"] == "0"
    assert params["per_page"] == "20"
    assert params["school.carnegie_basic__range"] == "14..23"
    assert "school.state" not in params
    assert "school.ownership" not in params
    assert "latest.student.size__range" not in params


def test_search_colleges_total_counts_records_before_admission() -> None:
    http_client = _FakeHttpClient(_load_payload())
    client = ScorecardClient(http_client, environ=TEST_ENV)

    result = client.search_colleges(SchoolSearchFilters(states=("NC",)))

    assert result.total == 3
    assert len(result.colleges) == 2


def test_search_colleges_combines_state_and_ownership_filters() -> None:
    http_client = _FakeHttpClient({"metadata": {"total": 0}, "results": []})
    client = ScorecardClient(http_client, environ=TEST_ENV)

    client.search_colleges(SchoolSearchFilters(states=("NC", "SC"), school_type=("Public",)))

    _, params = http_client.calls[0]
    assert params["school.state"] == "NC,SC"
    assert params["school.ownership"] == "1"
    assert params["school.carnegie_basic__range"] == "14..23"


def test_search_colleges_translates_both_ownership_types_and_paging() -> None:
    http_client = _FakeHttpClient({"metadata": {"total": 0}, "results": []})
    client = ScorecardClient(http_client, environ=TEST_ENV)

    result = client.search_colleges(
        SchoolSearchFilters(school_type=("Public", "Private"), page=2, per_page=50)
    )

    _, params = http_client.calls[0]
    assert params["school.ownership"] == "1,2"
    assert params["page"] == "2"
    assert params["per_page"] == "50"
    assert result.page == 2


@pytest.mark.parametrize(
    ("min_enrollment", "max_enrollment", "expected"),
    [
        (5000, None, "5000..100000"),
        (None, 2000, "0..2000"),
        (1000, 20000, "1000..20000"),
        (0, None, "0..100000"),
    ],
)
def test_search_colleges_enrollment_range_defaults_open_bounds(
    min_enrollment: int | None, max_enrollment: int | None, expected: str
) -> None:
    http_client = _FakeHttpClient({"metadata": {"total": 0}, "results": []})
    client = ScorecardClient(http_client, environ=TEST_ENV)

    client.search_colleges(
        SchoolSearchFilters(min_enrollment=min_enrollment, max_enrollment=max_enrollment)
    )

    _, params = http_client.calls[0]
    assert params["latest.student.size__range"] == expected


def test_search_filters_reject_for_profit_selection() -> None:
    with pytest.raises(ValueError):
        SchoolSearchFilters(school_type=("PrivateForProfit",))


def test_search_colleges_surfaces_upstream_status(caplog) -> None:
    http_client = _FakeHttpClient(error=ScorecardAPIError(503, body="Service Unavailable"))
    client = ScorecardClient(http_client, environ=TEST_ENV)

    with pytest.raises(ScorecardAPIError) as exc_info:
        client.search_colleges(SchoolSearchFilters(query="Duke"))

    assert exc_info.value.status_code == 503
    assert str(exc_info.value) == "API error: 503"
    assert "Service Unavailable" in caplog.text
    assert len(http_client.calls) == 1


def test_search_by_name_surfaces_upstream_status() -> None:
    http_client = _FakeHttpClient(error=ScorecardAPIError(429))
    client = ScorecardClient(http_client, environ=TEST_ENV)

    with pytest.raises(ScorecardAPIError) as exc_info:
        client.search_by_name("Duke")

    assert exc_info.value.status_code == 429


def test_get_college_by_id_returns_normalized_record() -> None:
    payload = _load_payload()
    payload["results"] = payload["results"][:1]
    http_client = _FakeHttpClient(payload)
    client = ScorecardClient(http_client, environ=TEST_ENV)

    college = client.get_college_by_id(198419)

    assert college is not None
    assert college.name == "Duke University"
    _, params = http_client.calls[0]
    assert params == {"api_key": "test-key", "fields": REQUESTED_FIELDS, "id": "198419"}


def test_get_college_by_id_returns_none_for_empty_results() -> None:
    http_client = _FakeHttpClient({"metadata": {"total": 0, "page": 0, "per_page": 20}, "results": []})
    client = ScorecardClient(http_client, environ=TEST_ENV)

    assert client.get_college_by_id(1) is None
    assert len(http_client.calls) == 1


def test_get_college_by_id_returns_none_for_upstream_failure() -> None:
    http_client = _FakeHttpClient(error=ScorecardAPIError(500))
    client = ScorecardClient(http_client, environ=TEST_ENV)

    assert client.get_college_by_id(198419) is None


def test_scorecard_response_tolerates_missing_sections() -> None:
    assert ScorecardResponse.from_payload({}).results == []
    assert ScorecardResponse.from_payload({}).total == 0
    assert ScorecardResponse.from_payload(None).total == 0

    response = ScorecardResponse.from_payload({"metadata": {"total": "7"}, "results": [1, {"id": 2}]})
    assert response.total == 7
    assert response.results == [{"id": 2}]


def test_client_opens_own_session_per_call_when_not_injected(monkeypatch) -> None:
    opened: list[object] = []
    closed: list[object] = []

    class _FakeSessionClient:
        def __init__(self, timeout_seconds: float) -> None:
            self.timeout_seconds = timeout_seconds
            opened.append(self)

        def __enter__(self) -> _FakeSessionClient:
            return self

        def __exit__(self, *exc_info: object) -> None:
            closed.append(self)

        def get_json(self, url: str, *, params: dict[str, Any] | None = None) -> Any:
            return {"metadata": {"total": 0}, "results": []}

    monkeypatch.setattr("src.ingest.scorecard.ScorecardHttpClient", _FakeSessionClient)
    client = ScorecardClient(environ=TEST_ENV, timeout_seconds=7.5)

    client.search_by_name("Duke")
    client.get_college_by_id(1)

    assert len(opened) == 2
    assert opened[0] is not opened[1]
    assert closed == opened
    assert all(item.timeout_seconds == 7.5 for item in opened)
