"""
Supplementary World Happiness Report table (Country, Region,
Happiness Rank, Happiness Score, ...): rank statistics and a point plot.
"""

from __future__ import annotations

from pathlib import Path
from typing import IO, List, Optional, Union

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from adapters import StorageAdapter
from transformations.schema import HappinessRecord, happiness_records, standardize_columns
from .descriptive_statistics import DescriptiveStats, describe_series
from .figures import ANALYSIS_OUTPUT_DIR, save_figure

HAPPINESS_PLOT_NAME = "happiness_rank_plot.png"
HAPPINESS_REQUIRED_COLUMNS = ("country", "happiness_rank")


def load_happiness_dataset(source: Union[str, Path, IO[bytes], IO[str]]) -> pd.DataFrame:
    df = standardize_columns(pd.read_csv(source))
    missing = [c for c in HAPPINESS_REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Happiness dataset is missing columns: {missing}")

    for col in df.columns:
        if col in ("country", "region"):
            df[col] = df[col].astype("string").str.strip()
        else:
            df[col] = pd.to_numeric(df[col], errors="coerce")
    return df


def to_happiness_records(df: pd.DataFrame) -> List[HappinessRecord]:
    return happiness_records(df)


def rank_statistics(df: pd.DataFrame) -> DescriptiveStats:
    return describe_series(df["happiness_rank"])


def build_happiness_rank_plot(
    df: pd.DataFrame,
    *,
    output_dir: Union[str, Path] = ANALYSIS_OUTPUT_DIR,
    storage: Optional[StorageAdapter] = None,
) -> Union[Path, str]:
    """Ranks by row position; the y axis is fixed to 0-100."""
    ranks = df["happiness_rank"].to_numpy(dtype=float, na_value=np.nan)
    x = np.arange(len(ranks))

    fig, ax = plt.subplots(figsize=(8, 6))
    ax.scatter(x, ranks, s=25, color="blue")
    ax.set_xlim(0, max(len(ranks), 1))
    ax.set_ylim(0.0, 100.0)
    ax.set_title("Data Visualization")
    ax.set_ylabel("Happiness Rank")

    return save_figure(fig, HAPPINESS_PLOT_NAME, output_dir=output_dir, storage=storage)


def run_happiness_analysis(
    source: Union[str, Path],
    *,
    output_dir: Union[str, Path] = ANALYSIS_OUTPUT_DIR,
    storage: Optional[StorageAdapter] = None,
) -> Union[Path, str]:
    df = load_happiness_dataset(source)
    stats = rank_statistics(df)
    print(f"[analysis] Happiness rank over {stats.count} countries")
    print(f"Mean: {stats.mean:.2f}")
    print(f"Median: {stats.median:.2f}")
    print(f"Std Dev: {stats.std_dev:.2f}")
    print(f"Creating visualization: {HAPPINESS_PLOT_NAME}")
    return build_happiness_rank_plot(df, output_dir=output_dir, storage=storage)


__all__ = [
    "HAPPINESS_PLOT_NAME",
    "load_happiness_dataset",
    "to_happiness_records",
    "rank_statistics",
    "build_happiness_rank_plot",
    "run_happiness_analysis",
]
