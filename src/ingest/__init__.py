from __future__ import annotations

from .errors import ScorecardAPIError, ScorecardConfigError, ScorecardError
from .http import ScorecardHttpClient
from .scorecard import ScorecardClient, get_api_key

__all__ = [
    "ScorecardHttpClient",
    "ScorecardAPIError",
    "ScorecardClient",
    "ScorecardConfigError",
    "ScorecardError",
    "get_api_key",
]
