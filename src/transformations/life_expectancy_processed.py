"""
Cleaning of the life-expectancy dataset (RAW -> PROCESSED).

- Standardize the Kaggle headers to snake_case (see `schema`).
- Coerce every non-text column to numeric; unparsable cells become NaN.
- Fill the analysis columns with fixed placeholders when missing:

      life_expectancy                  65.0
      income_composition_of_resources   0.5
      gdp                            5000.0
      adult_mortality                   0.0
      infant_deaths                     0.0
      schooling                         0.0

  Every other column keeps its NaN values.
- Persist a flat CSV plus Parquet partitions by year:

      processed/life_expectancy/cleaned_life_expectancy.csv
      processed/life_expectancy/year=<year>/cleaned_life_expectancy.parquet
"""

from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import IO, Dict, List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from adapters import LocalMetadataAdapter, LocalStorageAdapter, MetadataAdapter, StorageAdapter
from metadata import CLEANING_SCOPE, RUN_STATUS_FAILED, RUN_STATUS_SUCCESS
from .schema import (
    LIFE_EXPECTANCY_COLUMNS,
    REQUIRED_COLUMNS,
    TEXT_COLUMNS,
    LifeExpectancyRecord,
    life_expectancy_records,
    standardize_columns,
)

PROCESSED_OUTPUT_DIR = Path("processed") / "life_expectancy"
PROCESSED_BASE_PREFIX = "processed/life_expectancy"
CLEANED_CSV_NAME = "cleaned_life_expectancy.csv"
CLEANED_PARQUET_NAME = "cleaned_life_expectancy.parquet"

CLEANING_DEFAULTS: Dict[str, float] = {
    "life_expectancy": 65.0,
    "income_composition_of_resources": 0.5,
    "gdp": 5000.0,
    "adult_mortality": 0.0,
    "infant_deaths": 0.0,
    "schooling": 0.0,
}

CsvSource = Union[str, Path, IO[bytes], IO[str]]


def _parse_float(value: str) -> Optional[float]:
    try:
        return float(value)
    except ValueError:
        return None


def load_numeric_matrix(path: Union[str, Path]) -> np.ndarray:
    """
    Load the CSV as a dense float matrix.

    Each data row keeps only the cells that parse as numbers, in their
    original order; text cells (country, status) and empty cells are
    dropped. Rows are right-padded with NaN to the widest row, so column
    positions only line up for rows without gaps.
    """
    rows: List[List[float]] = []
    with Path(path).open("r", encoding="utf-8", newline="") as f:
        reader = csv.reader(f)
        next(reader, None)  # header
        for record in reader:
            rows.append([v for v in (_parse_float(cell) for cell in record) if v is not None])

    width = max((len(r) for r in rows), default=0)
    matrix = np.full((len(rows), width), np.nan, dtype=float)
    for i, row in enumerate(rows):
        matrix[i, : len(row)] = row
    return matrix


def coerce_dataset_types(df: pd.DataFrame) -> pd.DataFrame:
    out = df.copy()
    for col in out.columns:
        if col in TEXT_COLUMNS:
            out[col] = out[col].astype("string").str.strip()
        elif col == "year":
            out[col] = pd.to_numeric(out[col], errors="coerce").astype("Int64")
        else:
            out[col] = pd.to_numeric(out[col], errors="coerce")
    return out


def load_raw_dataset(source: CsvSource) -> pd.DataFrame:
    """
    Read the raw CSV into a typed DataFrame with standardized columns.

    Raises ValueError when country, year or status is missing.
    """
    df = standardize_columns(pd.read_csv(source))
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Life expectancy dataset is missing columns: {missing}")

    df = coerce_dataset_types(df)
    df = df.dropna(subset=["country", "year"])
    return df.reset_index(drop=True)


def fill_missing_values(
    df: pd.DataFrame,
    defaults: Optional[Dict[str, float]] = None,
) -> pd.DataFrame:
    """Fill the placeholder columns; returns a new frame."""
    defaults = CLEANING_DEFAULTS if defaults is None else defaults
    out = df.copy()
    for col, value in defaults.items():
        if col in out.columns:
            out[col] = out[col].fillna(value)
    return out


def clean_dataset(source: CsvSource) -> pd.DataFrame:
    return fill_missing_values(load_raw_dataset(source))


def to_records(df: pd.DataFrame) -> List[LifeExpectancyRecord]:
    return life_expectancy_records(df)


def _empty_cleaned_frame() -> pd.DataFrame:
    return coerce_dataset_types(pd.DataFrame(columns=LIFE_EXPECTANCY_COLUMNS))


def save_cleaned_dataset(
    df: pd.DataFrame,
    storage: Optional[StorageAdapter] = None,
    *,
    output_dir: Union[str, Path] = PROCESSED_OUTPUT_DIR,
) -> List[str]:
    """
    Write the cleaned CSV and one Parquet file per year.

    Without `storage`, files go under `output_dir`; with a StorageAdapter
    they go under PROCESSED_BASE_PREFIX. Returns the written locations.
    """
    if storage is None:
        storage = LocalStorageAdapter(output_dir)
        prefix = ""
    else:
        prefix = f"{PROCESSED_BASE_PREFIX}/"

    locations = [storage.write_csv(df, f"{prefix}{CLEANED_CSV_NAME}")]

    if df.empty or "year" not in df.columns:
        return locations

    for year_value, df_year in df.groupby("year"):
        if pd.isna(year_value):
            continue
        key = f"{prefix}year={int(year_value)}/{CLEANED_PARQUET_NAME}"
        locations.append(storage.write_parquet(df_year.reset_index(drop=True), key))

    return locations


def load_cleaned_dataset(
    storage: Optional[StorageAdapter] = None,
    *,
    processed_dir: Union[str, Path] = PROCESSED_OUTPUT_DIR,
) -> pd.DataFrame:
    """
    Load every year partition back into one frame sorted by (country, year).
    """
    if storage is None:
        storage = LocalStorageAdapter(processed_dir)
        keys = [k for k in storage.list_keys("") if k.endswith(CLEANED_PARQUET_NAME)]
    else:
        keys = [
            k for k in storage.list_keys(PROCESSED_BASE_PREFIX) if k.endswith(CLEANED_PARQUET_NAME)
        ]

    frames = [storage.read_parquet(k) for k in keys]
    if not frames:
        return _empty_cleaned_frame()

    df = coerce_dataset_types(pd.concat(frames, ignore_index=True))
    return df.sort_values(["country", "year"], kind="mergesort").reset_index(drop=True)


def process_life_expectancy_raw_file(
    raw_key: str,
    storage: StorageAdapter,
    *,
    metadata: Optional[MetadataAdapter] = None,
    run_scope: str = CLEANING_SCOPE,
) -> Tuple[pd.DataFrame, List[str]]:
    """
    Clean the RAW file stored at `raw_key` and write the PROCESSED layer.

    Returns the cleaned frame and the written locations.
    """
    meta = metadata or LocalMetadataAdapter()
    run_id = meta.start_run(run_scope)

    try:
        df = clean_dataset(io.BytesIO(storage.read_raw(raw_key)))
        locations = save_cleaned_dataset(df, storage)
        print(f"[cleaning] {len(df)} rows cleaned from {raw_key}")
        meta.end_run(
            run_id,
            status=RUN_STATUS_SUCCESS,
            rows_processed=int(df.shape[0]),
            last_checkpoint=raw_key,
        )
        return df, locations
    except Exception as exc:  # noqa: BLE001
        meta.end_run(run_id, status=RUN_STATUS_FAILED, error_message=str(exc))
        raise


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(
        description="Clean the life expectancy CSV and write the PROCESSED layer.",
    )
    parser.add_argument("raw_csv", help="Path to the raw 'Life Expectancy Data.csv'.")
    parser.add_argument(
        "--output-dir",
        type=str,
        default=str(PROCESSED_OUTPUT_DIR),
        help="Directory for the cleaned CSV and Parquet partitions.",
    )

    args = parser.parse_args()
    cleaned = clean_dataset(args.raw_csv)
    for location in save_cleaned_dataset(cleaned, output_dir=Path(args.output_dir)):
        print(location)
    print(f"Data cleaned and saved to '{Path(args.output_dir) / CLEANED_CSV_NAME}'.")


__all__ = [
    "PROCESSED_OUTPUT_DIR",
    "PROCESSED_BASE_PREFIX",
    "CLEANED_CSV_NAME",
    "CLEANED_PARQUET_NAME",
    "CLEANING_DEFAULTS",
    "load_numeric_matrix",
    "coerce_dataset_types",
    "load_raw_dataset",
    "fill_missing_values",
    "clean_dataset",
    "to_records",
    "save_cleaned_dataset",
    "load_cleaned_dataset",
    "process_life_expectancy_raw_file",
]
