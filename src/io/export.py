from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable
from uuid import uuid4

import pandas as pd

from src.normalize.schema import NormalizedCollege

COLLEGE_COLUMNS = [
    "scorecardId",
    "name",
    "city",
    "state",
    "region",
    "websiteUrl",
    "locationType",
    "schoolType",
    "enrollmentSize",
    "acceptanceRate",
    "avgSAT",
    "avgACT",
    "estimatedCost",
    "inStateTuition",
    "outOfStateTuition",
    "strongPrograms",
    "graduationRate",
    "medianEarnings",
    "studentFacultyRatio",
]

SUPPORTED_SUFFIXES = (".csv", ".json", ".parquet")


def colleges_to_frame(colleges: Iterable[NormalizedCollege]) -> pd.DataFrame:
    rows = [college.to_dict() for college in colleges]
    if not rows:
        return pd.DataFrame(columns=COLLEGE_COLUMNS)
    df = pd.DataFrame(rows)
    return df[COLLEGE_COLUMNS]


def write_json_atomic(payload: dict[str, Any], output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = output_path.with_name(f".{output_path.name}.{uuid4().hex}.tmp")
    try:
        temp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        temp_path.replace(output_path)
    finally:
        if temp_path.exists():
            temp_path.unlink()


def write_results(
    colleges: list[NormalizedCollege],
    output_path: Path,
    *,
    total: int | None = None,
    page: int = 0,
) -> Path:
    suffix = output_path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise ValueError(
            f"Unsupported output format '{suffix}'. Expected one of {', '.join(SUPPORTED_SUFFIXES)}."
        )

    if suffix == ".json":
        write_json_atomic(
            {
                "colleges": [college.to_dict() for college in colleges],
                "total": len(colleges) if total is None else total,
                "page": page,
            },
            output_path,
        )
        return output_path

    output_path.parent.mkdir(parents=True, exist_ok=True)
    df = colleges_to_frame(colleges)
    if suffix == ".csv":
        df = df.assign(strongPrograms=df["strongPrograms"].apply(lambda items: "; ".join(items or [])))
        df.to_csv(output_path, index=False)
    else:
        df.to_parquet(output_path, index=False)
    return output_path
