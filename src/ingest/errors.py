from __future__ import annotations


class ScorecardError(Exception):
    """Base class for College Scorecard adapter failures."""


class ScorecardConfigError(ScorecardError):
    """Raised before any request when the API key is missing or a placeholder."""


class ScorecardAPIError(ScorecardError):
    def __init__(self, status_code: int, body: str | None = None) -> None:
        super().__init__(f"API error: {status_code}")
        self.status_code = status_code
        self.body = body
