"""
Descriptive statistics and distribution plots for the cleaned dataset.

Artefacts:

- gdp_per_country_line_plot.png
    GDP values in dataset row order, labelled with a sample of countries.
- double_histogram.png
    Adult mortality (top) and infant deaths (bottom), values rounded to
    integers and counted in unit bins over [0, 100).

Statistics use the sample variance (n - 1), so a single observation has
an undefined (NaN) standard deviation.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from adapters import StorageAdapter
from .figures import ANALYSIS_OUTPUT_DIR, save_figure

GDP_LINE_PLOT_NAME = "gdp_per_country_line_plot.png"
MORTALITY_HISTOGRAM_NAME = "double_histogram.png"

ADULT_MORTALITY_COLOR = "#8ea604"
INFANT_DEATHS_COLOR = "#ff4e00"
HISTOGRAM_RANGE = (0, 100)
MAX_COUNTRY_LABELS = 40


@dataclass
class DescriptiveStats:
    count: int
    mean: float
    median: float
    std_dev: float
    variance: float
    minimum: float
    maximum: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    def format_lines(self) -> List[str]:
        return [
            f"Mean: {self.mean:.2f}",
            f"Median: {self.median:.2f}",
            f"Standard deviation: {self.std_dev:.2f}",
            f"Variance: {self.variance:.2f}",
        ]


def describe_series(values: Iterable[float]) -> DescriptiveStats:
    series = pd.to_numeric(pd.Series(list(values), dtype="object"), errors="coerce")
    arr = series.to_numpy(dtype=float, na_value=np.nan)
    arr = arr[~np.isnan(arr)]
    n = int(arr.size)
    if n == 0:
        nan = float("nan")
        return DescriptiveStats(0, nan, nan, nan, nan, nan, nan)

    variance = float(np.var(arr, ddof=1)) if n > 1 else float("nan")
    return DescriptiveStats(
        count=n,
        mean=float(np.mean(arr)),
        median=float(np.median(arr)),
        std_dev=float(np.sqrt(variance)) if n > 1 else float("nan"),
        variance=variance,
        minimum=float(np.min(arr)),
        maximum=float(np.max(arr)),
    )


def summarize_life_expectancy_and_gdp(df: pd.DataFrame) -> Dict[str, DescriptiveStats]:
    return {
        "life_expectancy": describe_series(df["life_expectancy"]),
        "gdp": describe_series(df["gdp"]),
    }


def build_gdp_line_plot(
    df: pd.DataFrame,
    *,
    output_dir: Union[str, Path] = ANALYSIS_OUTPUT_DIR,
    storage: Optional[StorageAdapter] = None,
    title: str = "GDP per Country Distribution",
) -> Optional[Union[Path, str]]:
    """
    Line plot of GDP in row order. Returns None when no row has GDP.
    """
    valid = df.dropna(subset=["gdp"])
    if valid.empty:
        print("[analysis] No valid GDP data available for the line plot.")
        return None

    gdp = valid["gdp"].to_numpy(dtype=float)
    countries = valid["country"].astype(str).tolist()
    x = np.arange(len(gdp))

    fig, ax = plt.subplots(figsize=(12, 8))
    ax.plot(x, gdp, color="blue", linewidth=0.8)

    step = max(1, len(countries) // MAX_COUNTRY_LABELS)
    ax.set_xticks(x[::step])
    ax.set_xticklabels(countries[::step], rotation=90, fontsize=7)
    ax.set_ylim(0, float(np.nanmax(gdp)) * 1.05 or 1.0)
    ax.set_ylabel("GDP")
    ax.set_title(title)
    ax.grid(True, linestyle="--", alpha=0.3)

    return save_figure(fig, GDP_LINE_PLOT_NAME, output_dir=output_dir, storage=storage)


def _rounded_in_range(values: pd.Series) -> np.ndarray:
    arr = np.rint(pd.to_numeric(values, errors="coerce").dropna().to_numpy(dtype=float))
    low, high = HISTOGRAM_RANGE
    return arr[(arr >= low) & (arr < high)]


def build_mortality_histograms(
    df: pd.DataFrame,
    *,
    output_dir: Union[str, Path] = ANALYSIS_OUTPUT_DIR,
    storage: Optional[StorageAdapter] = None,
) -> Optional[Union[Path, str]]:
    """
    Stacked histograms for adult mortality and infant deaths.

    Values are rounded to the nearest integer; values outside [0, 100)
    fall outside the plotted axis and are not counted.
    """
    adult = df["adult_mortality"].dropna()
    infant = df["infant_deaths"].dropna()
    if adult.empty or infant.empty:
        print("[analysis] No valid data for Adult Mortality or Infant Deaths.")
        return None

    bins = np.arange(HISTOGRAM_RANGE[0], HISTOGRAM_RANGE[1] + 1)
    fig, (ax_top, ax_bottom) = plt.subplots(2, 1, figsize=(12, 8))

    ax_top.hist(_rounded_in_range(adult), bins=bins, color=ADULT_MORTALITY_COLOR)
    ax_top.set_title("Adult Mortality Distribution")
    ax_top.set_xlim(*HISTOGRAM_RANGE)

    ax_bottom.hist(_rounded_in_range(infant), bins=bins, color=INFANT_DEATHS_COLOR)
    ax_bottom.set_title("Infant Deaths Distribution")
    ax_bottom.set_xlim(*HISTOGRAM_RANGE)

    return save_figure(fig, MORTALITY_HISTOGRAM_NAME, output_dir=output_dir, storage=storage)


def run_eda(
    df: pd.DataFrame,
    *,
    output_dir: Union[str, Path] = ANALYSIS_OUTPUT_DIR,
    storage: Optional[StorageAdapter] = None,
) -> Dict[str, object]:
    """
    Figures plus life expectancy / GDP statistics, printed to the console.
    """
    figures = [
        build_gdp_line_plot(df, output_dir=output_dir, storage=storage),
        build_mortality_histograms(df, output_dir=output_dir, storage=storage),
    ]

    stats = summarize_life_expectancy_and_gdp(df)
    if stats["life_expectancy"].count and stats["gdp"].count:
        print("Life Expectancy vs GDP Statistics:")
        print("Life Expectancy Statistics:")
        for line in stats["life_expectancy"].format_lines():
            print(line)
        print("GDP per Country Statistics:")
        for line in stats["gdp"].format_lines():
            print(line)

    return {"stats": stats, "figures": [f for f in figures if f is not None]}


__all__ = [
    "GDP_LINE_PLOT_NAME",
    "MORTALITY_HISTOGRAM_NAME",
    "DescriptiveStats",
    "describe_series",
    "summarize_life_expectancy_and_gdp",
    "build_gdp_line_plot",
    "build_mortality_histograms",
    "run_eda",
]
