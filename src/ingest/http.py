from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any

import requests
from requests import Response
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from src.ingest.errors import ScorecardAPIError

DEFAULT_USER_AGENT = "AdmissionsGPS/0.1 (+https://localhost; contact=local)"
logger = logging.getLogger(__name__)
_SLOW_REQUEST_SECONDS = 5.0
_REDACTED_PARAMS = frozenset({"api_key"})


@dataclass(slots=True)
class ScorecardHttpClient:
    """One `requests.Session` per client; non-2xx responses raise `ScorecardAPIError`.

    Retries are off unless the caller opts in with `max_retries`.
    """

    timeout_seconds: float = 20.0
    user_agent: str = DEFAULT_USER_AGENT
    max_retries: int = 0
    backoff_factor: float = 0.5
    _session: requests.Session = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._session = requests.Session()
        self._session.headers.update({"User-Agent": self.user_agent})

        if self.max_retries > 0:
            retry = Retry(
                total=self.max_retries,
                connect=self.max_retries,
                read=self.max_retries,
                status=self.max_retries,
                backoff_factor=self.backoff_factor,
                status_forcelist=(429, 500, 502, 503, 504),
                allowed_methods=frozenset({"GET"}),
                raise_on_status=False,
            )
            adapter = HTTPAdapter(max_retries=retry)
            self._session.mount("http://", adapter)
            self._session.mount("https://", adapter)

    def __enter__(self) -> ScorecardHttpClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._session.close()

    def get_json(self, url: str, *, params: dict[str, Any] | None = None) -> Any:
        return self._request("GET", url, params=params).json()

    @property
    def timeout_tuple(self) -> tuple[float, float]:
        connect_timeout = max(1.0, min(self.timeout_seconds, 5.0))
        read_timeout = max(connect_timeout, self.timeout_seconds)
        return connect_timeout, read_timeout

    def _request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
    ) -> Response:
        started_at = time.monotonic()
        response = self._session.request(
            method=method,
            url=url,
            params=params,
            timeout=self.timeout_tuple,
        )
        elapsed = time.monotonic() - started_at
        if elapsed > _SLOW_REQUEST_SECONDS:
            logger.warning("Slow HTTP %s %.3fs %s %s", method, elapsed, url, redact_params(params))
        if not response.ok:
            raise ScorecardAPIError(response.status_code, body=response.text)
        return response


def redact_params(params: dict[str, Any] | None) -> dict[str, Any]:
    if not params:
        return {}
    return {key: ("***" if key in _REDACTED_PARAMS else value) for key, value in params.items()}
