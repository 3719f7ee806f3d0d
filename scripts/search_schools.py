from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import pandas as pd
import requests

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app.helpers import (
    NOT_AVAILABLE,
    api_key_hint,
    format_location,
    format_money,
    format_number,
    format_percent,
    results_summary,
    school_type_label,
    website_href,
)
from src.api.schools import search
from src.ingest.errors import ScorecardError
from src.ingest.scorecard import ScorecardClient
from src.io.export import write_results
from src.normalize.codes import OWNERSHIP_CODES, US_STATES
from src.normalize.schema import SchoolSearchFilters, SearchResult

logger = logging.getLogger("search_schools")

TABLE_COLUMNS = [
    "scorecardId",
    "name",
    "location",
    "schoolType",
    "enrollmentSize",
    "acceptanceRate",
    "avgSAT",
    "estimatedCost",
    "website",
]


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Search four-year colleges in the College Scorecard API.")
    parser.add_argument("-q", "--query", type=str, default=None, help="College name to match.")
    parser.add_argument(
        "--state",
        dest="states",
        action="append",
        default=[],
        type=str.upper,
        choices=sorted(US_STATES),
        metavar="STATE",
        help="Two-letter state code. Repeat for several states.",
    )
    parser.add_argument(
        "--type",
        dest="school_types",
        action="append",
        default=[],
        choices=sorted(OWNERSHIP_CODES),
        help="Ownership filter. Repeat for both.",
    )
    parser.add_argument("--min-enrollment", type=int, default=None)
    parser.add_argument("--max-enrollment", type=int, default=None)
    parser.add_argument("--page", type=int, default=0)
    parser.add_argument("--per-page", type=int, default=20)
    parser.add_argument("--id", dest="scorecard_id", type=int, default=None, help="Look up one college by id.")
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write results to .csv, .json or .parquet instead of printing a table.",
    )
    parser.add_argument("--request-timeout-seconds", type=float, default=20.0)
    return parser.parse_args(argv)


def _filters_from_args(args: argparse.Namespace) -> SchoolSearchFilters:
    return SchoolSearchFilters(
        query=(args.query or "").strip() or None,
        states=tuple(dict.fromkeys(args.states)),
        min_enrollment=args.min_enrollment,
        max_enrollment=args.max_enrollment,
        school_type=tuple(dict.fromkeys(args.school_types)),
        page=args.page,
        per_page=args.per_page,
    )


def run_search(args: argparse.Namespace, client: ScorecardClient | None = None) -> SearchResult:
    scorecard = client or ScorecardClient(timeout_seconds=args.request_timeout_seconds)
    if args.scorecard_id is not None:
        college = scorecard.get_college_by_id(args.scorecard_id)
        colleges = [college] if college is not None else []
        return SearchResult(colleges=colleges, total=len(colleges), page=0)
    return search(_filters_from_args(args), client=scorecard)


def format_table(result: SearchResult) -> pd.DataFrame:
    rows = [
        {
            "scorecardId": college.scorecard_id,
            "name": college.name,
            "location": format_location(college),
            "schoolType": school_type_label(college),
            "enrollmentSize": format_number(college.enrollment_size),
            "acceptanceRate": format_percent(college.acceptance_rate),
            "avgSAT": format_number(college.avg_sat),
            "estimatedCost": format_money(college.estimated_cost),
            "website": website_href(college.website_url) or NOT_AVAILABLE,
        }
        for college in result.colleges
    ]
    return pd.DataFrame(rows, columns=TABLE_COLUMNS)


def main(argv: list[str] | None = None, client: ScorecardClient | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        result = run_search(args, client=client)
    except (ScorecardError, requests.RequestException, ValueError) as exc:
        logger.error("Search failed: %s", exc)
        print(f"Search failed: {exc}", file=sys.stderr)
        hint = api_key_hint(str(exc))
        if hint:
            print(hint, file=sys.stderr)
        return 1

    if args.output is not None:
        output_path = write_results(result.colleges, args.output, total=result.total, page=result.page)
        print(f"Wrote {len(result.colleges)} colleges to {output_path}")
        return 0

    print(results_summary(len(result.colleges)))
    if result.colleges:
        print(format_table(result).to_string(index=False))
    print(f"Total matches: {result.total} (page {result.page})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
