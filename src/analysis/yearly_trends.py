"""
Per-year rankings and Developed vs Developing comparisons.

Artefacts:

- top_countries_by_year.csv
    year, rank, country, life_expectancy (top N per year).
- life_expectancy_by_status.csv
    Average life expectancy per development status.
- developed_vs_developing_plot_<feature>.png
    Yearly average of a feature per status (adult mortality, infant deaths).
- comparison_bar_plot.png
    Average of several health indicators, paired bars per status.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from adapters import StorageAdapter
from transformations.schema import STATUS_DEVELOPED, STATUS_DEVELOPING
from .figures import ANALYSIS_OUTPUT_DIR, save_figure, save_table

TOP_COUNTRIES_CSV_NAME = "top_countries_by_year.csv"
STATUS_AVERAGES_CSV_NAME = "life_expectancy_by_status.csv"
COMPARISON_BAR_PLOT_NAME = "comparison_bar_plot.png"

STATUSES = (STATUS_DEVELOPED, STATUS_DEVELOPING)
COMPARISON_FEATURES = ["measles", "polio", "bmi", "diphtheria", "hepatitis_b", "hiv_aids"]

# (feature, y-axis upper bound, label)
STATUS_TREND_FEATURES = [
    ("adult_mortality", 250.0, "Adult Mortality"),
    ("infant_deaths", 50.0, "Infant Mortality"),
]

DEVELOPED_BAR_COLOR = "#be5683"
DEVELOPING_BAR_COLOR = "#6e304b"


def _require_columns(df: pd.DataFrame, columns: Sequence[str]) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise KeyError(f"Unknown dataset columns: {missing}")


def top_countries_by_year(
    df: pd.DataFrame,
    n: int = 5,
    *,
    largest: bool = True,
) -> pd.DataFrame:
    """
    The `n` countries with the highest (or, with largest=False, lowest)
    life expectancy for each year. Ties are ordered by country name.
    """
    if n <= 0:
        raise ValueError("n must be positive")
    _require_columns(df, ["country", "year", "life_expectancy"])

    valid = df.dropna(subset=["country", "year", "life_expectancy"])[
        ["year", "country", "life_expectancy"]
    ]
    ranked = valid.sort_values(
        ["year", "life_expectancy", "country"],
        ascending=[True, not largest, True],
        kind="mergesort",
    )
    top = ranked.groupby("year", sort=True).head(n).copy()
    top["rank"] = top.groupby("year").cumcount() + 1
    top["year"] = top["year"].astype("int64")
    return top[["year", "rank", "country", "life_expectancy"]].reset_index(drop=True)


def print_top_countries(top: pd.DataFrame) -> None:
    for year, group in top.groupby("year", sort=True):
        print(f"Top {len(group)} countries in year {year}:")
        for country, value in zip(group["country"], group["life_expectancy"]):
            print(f"{country}: {value:.2f}")
        print()


def _with_status(df: pd.DataFrame) -> pd.DataFrame:
    status = df["status"].astype("string").str.strip()
    return df[status.notna() & (status != "")]


def average_life_expectancy_by_status(df: pd.DataFrame) -> pd.Series:
    _require_columns(df, ["status", "life_expectancy"])
    valid = _with_status(df).dropna(subset=["life_expectancy"])
    averages = valid.groupby("status")["life_expectancy"].mean().sort_index()
    averages.index = averages.index.astype(str)
    averages.name = "average_life_expectancy"
    return averages


def status_averages_by_year(df: pd.DataFrame, feature: str) -> pd.DataFrame:
    """
    Yearly mean of `feature` per status, columns Developed/Developing.

    Years where a status has no data report 0.0.
    """
    _require_columns(df, ["year", "status", feature])
    valid = _with_status(df).dropna(subset=["year"])
    table = valid.pivot_table(index="year", columns="status", values=feature, aggfunc="mean")
    years = sorted(int(y) for y in valid["year"].unique())
    table.index = table.index.astype("int64")
    table = table.reindex(index=years, columns=list(STATUSES)).fillna(0.0)
    table.columns.name = None
    return table.sort_index()


def feature_averages_by_status(df: pd.DataFrame, features: Sequence[str]) -> pd.DataFrame:
    """Mean of each feature per status; index feature, columns Developed/Developing."""
    _require_columns(df, ["status", *features])
    valid = _with_status(df)
    table = valid.groupby("status")[list(features)].mean().T
    table = table.reindex(columns=list(STATUSES)).fillna(0.0)
    table.columns.name = None
    return table


def build_status_trend_plot(
    df: pd.DataFrame,
    feature: str,
    *,
    y_max: float,
    label: Optional[str] = None,
    output_dir: Union[str, Path] = ANALYSIS_OUTPUT_DIR,
    storage: Optional[StorageAdapter] = None,
) -> Union[Path, str]:
    table = status_averages_by_year(df, feature)
    label = label or feature.replace("_", " ").title()
    years = [str(y) for y in table.index]
    x = np.arange(len(years))

    fig, ax = plt.subplots(figsize=(12.8, 7.2))
    ax.plot(x, table[STATUS_DEVELOPED].to_numpy(), color="red", label=STATUS_DEVELOPED)
    ax.plot(x, table[STATUS_DEVELOPING].to_numpy(), color="blue", label=STATUS_DEVELOPING)
    ax.set_xticks(x)
    ax.set_xticklabels(years, rotation=45)
    ax.set_ylim(0.0, y_max)
    ax.set_xlabel("Years")
    ax.set_ylabel(f"{label} Averages")
    ax.set_title(f"Developed vs Developing {label} Averages per Year")
    ax.legend(frameon=True, edgecolor="black")

    return save_figure(
        fig,
        f"developed_vs_developing_plot_{feature}.png",
        output_dir=output_dir,
        storage=storage,
    )


def build_feature_comparison_bar_plot(
    df: pd.DataFrame,
    features: Sequence[str] = COMPARISON_FEATURES,
    *,
    output_dir: Union[str, Path] = ANALYSIS_OUTPUT_DIR,
    storage: Optional[StorageAdapter] = None,
) -> Union[Path, str]:
    table = feature_averages_by_status(df, features)
    x = np.arange(len(features))
    width = 0.4

    fig, ax = plt.subplots(figsize=(12.8, 7.2))
    ax.bar(x - width / 2, table[STATUS_DEVELOPED], width, color=DEVELOPED_BAR_COLOR, label=STATUS_DEVELOPED)
    ax.bar(x + width / 2, table[STATUS_DEVELOPING], width, color=DEVELOPING_BAR_COLOR, label=STATUS_DEVELOPING)
    ax.set_xticks(x)
    ax.set_xticklabels(list(features))
    max_avg = float(np.nanmax(table.to_numpy())) if table.size else 0.0
    ax.set_ylim(0.0, max_avg * 1.2 if max_avg > 0 else 1.0)
    ax.set_xlabel("Features")
    ax.set_ylabel("Average")
    ax.set_title("Comparison of Features Between Developed and Developing Countries")
    ax.legend(frameon=True, edgecolor="black")

    return save_figure(fig, COMPARISON_BAR_PLOT_NAME, output_dir=output_dir, storage=storage)


def run_yearly_analysis(
    df: pd.DataFrame,
    *,
    output_dir: Union[str, Path] = ANALYSIS_OUTPUT_DIR,
    storage: Optional[StorageAdapter] = None,
    top_n: int = 5,
) -> Dict[str, List[Union[Path, str]]]:
    top = top_countries_by_year(df, top_n)
    print_top_countries(top)

    averages = average_life_expectancy_by_status(df)
    for status, value in averages.items():
        print(f"Average life expectancy for {status} countries: {value:.2f}")

    tables = [
        save_table(top, TOP_COUNTRIES_CSV_NAME, output_dir=output_dir, storage=storage),
        save_table(
            averages.rename_axis("status").reset_index(),
            STATUS_AVERAGES_CSV_NAME,
            output_dir=output_dir,
            storage=storage,
        ),
    ]

    figures = [
        build_status_trend_plot(
            df, feature, y_max=y_max, label=label, output_dir=output_dir, storage=storage
        )
        for feature, y_max, label in STATUS_TREND_FEATURES
    ]
    figures.append(build_feature_comparison_bar_plot(df, output_dir=output_dir, storage=storage))

    return {"tables": tables, "figures": figures}


__all__ = [
    "TOP_COUNTRIES_CSV_NAME",
    "STATUS_AVERAGES_CSV_NAME",
    "COMPARISON_BAR_PLOT_NAME",
    "COMPARISON_FEATURES",
    "top_countries_by_year",
    "print_top_countries",
    "average_life_expectancy_by_status",
    "status_averages_by_year",
    "feature_averages_by_status",
    "build_status_trend_plot",
    "build_feature_comparison_bar_plot",
    "run_yearly_analysis",
]
