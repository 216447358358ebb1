"""
Correlation analysis of the health and socioeconomic indicators.

Artefacts:

- correlation_heatmap.png     Pearson matrix of the numeric indicators.
- correlation_matrix.csv      Same matrix as a table (optional .xlsx).
- correlation_summary.csv     Each indicator against life expectancy,
                              strongest first.
- scatter_plot.png            Income composition of resources vs schooling.

Undefined coefficients (an indicator that never varies) are reported
as 0.0 in the matrix, diagonal included.
"""

from __future__ import annotations

import io
import math
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from adapters import StorageAdapter
from .figures import ANALYSIS_OUTPUT_DIR, analytics_key, save_figure, save_table

HEATMAP_PNG_NAME = "correlation_heatmap.png"
CORRELATION_MATRIX_CSV_NAME = "correlation_matrix.csv"
CORRELATION_MATRIX_XLSX_NAME = "correlation_matrix.xlsx"
CORRELATION_SUMMARY_CSV_NAME = "correlation_summary.csv"
SCATTER_PNG_NAME = "scatter_plot.png"

DEFAULT_EXCLUDED_COLUMNS = ("country", "year", "status")
TARGET_COLUMN = "life_expectancy"
MAX_ANNOTATED_FEATURES = 25


def pearson_correlation(x: Sequence[float], y: Sequence[float]) -> Optional[float]:
    """
    Pearson's r over the pairs where both values are present.

    Returns None for inputs of different length, fewer than two complete
    pairs, or a side with zero variance.
    """
    x_arr = pd.to_numeric(pd.Series(list(x), dtype="object"), errors="coerce").to_numpy(
        dtype=float, na_value=np.nan
    )
    y_arr = pd.to_numeric(pd.Series(list(y), dtype="object"), errors="coerce").to_numpy(
        dtype=float, na_value=np.nan
    )
    if x_arr.shape != y_arr.shape:
        return None

    mask = ~(np.isnan(x_arr) | np.isnan(y_arr))
    x_arr, y_arr = x_arr[mask], y_arr[mask]
    if x_arr.size < 2:
        return None
    # checked on the raw values: [0.1] * 3 leaves rounding noise after centering
    if np.ptp(x_arr) == 0.0 or np.ptp(y_arr) == 0.0:
        return None

    dx = x_arr - x_arr.mean()
    dy = y_arr - y_arr.mean()
    denominator = math.sqrt(float(np.sum(dx * dx))) * math.sqrt(float(np.sum(dy * dy)))
    if denominator == 0.0:
        return None
    return float(np.sum(dx * dy) / denominator)


def numeric_feature_columns(
    df: pd.DataFrame,
    exclude: Sequence[str] = DEFAULT_EXCLUDED_COLUMNS,
) -> List[str]:
    return [c for c in df.select_dtypes(include="number").columns if c not in exclude]


def correlation_matrix(
    df: pd.DataFrame,
    *,
    exclude: Sequence[str] = DEFAULT_EXCLUDED_COLUMNS,
) -> pd.DataFrame:
    cols = numeric_feature_columns(df, exclude)
    if not cols:
        raise ValueError("No numeric columns to correlate")

    data = df[cols].astype(float)
    return data.corr(method="pearson").fillna(0.0)


def build_correlation_heatmap(
    matrix: pd.DataFrame,
    *,
    output_dir: Union[str, Path] = ANALYSIS_OUTPUT_DIR,
    storage: Optional[StorageAdapter] = None,
) -> Union[Path, str]:
    labels = [str(c) for c in matrix.columns]
    n = len(labels)

    fig, ax = plt.subplots(figsize=(10.24, 10.24))
    image = ax.imshow(matrix.to_numpy(dtype=float), cmap="coolwarm", vmin=-1.0, vmax=1.0)
    fig.colorbar(image, ax=ax, fraction=0.046, pad=0.04, label="Pearson r")

    ax.set_xticks(np.arange(n))
    ax.set_yticks(np.arange(n))
    ax.set_xticklabels(labels, rotation=90, fontsize=8)
    ax.set_yticklabels(labels, fontsize=8)
    ax.set_xlabel("Features")
    ax.set_ylabel("Features")
    ax.set_title("Feature Correlation Heatmap")

    if n <= MAX_ANNOTATED_FEATURES:
        values = matrix.to_numpy(dtype=float)
        for i in range(n):
            for j in range(n):
                ax.text(j, i, f"{values[i, j]:.2f}", ha="center", va="center", fontsize=6)

    return save_figure(fig, HEATMAP_PNG_NAME, output_dir=output_dir, storage=storage)


def save_correlation_matrix(
    matrix: pd.DataFrame,
    *,
    output_dir: Union[str, Path] = ANALYSIS_OUTPUT_DIR,
    storage: Optional[StorageAdapter] = None,
    write_xlsx: bool = False,
) -> List[Union[Path, str]]:
    table = matrix.rename_axis("feature")
    locations = [
        save_table(table, CORRELATION_MATRIX_CSV_NAME, output_dir=output_dir, storage=storage, index=True)
    ]

    if not write_xlsx:
        return locations

    try:
        import openpyxl  # noqa: F401
    except ImportError as e:
        target = "to storage" if storage is not None else "(dependency missing)"
        print(f"[analysis] Skipping XLSX export {target}: {e}")
        return locations

    if storage is None:
        xlsx_path = Path(output_dir) / CORRELATION_MATRIX_XLSX_NAME
        table.to_excel(xlsx_path, sheet_name="correlation")
        locations.append(xlsx_path)
    else:
        buf = io.BytesIO()
        with pd.ExcelWriter(buf, engine="openpyxl") as writer:
            table.to_excel(writer, sheet_name="correlation")
        locations.append(storage.write_raw(analytics_key(CORRELATION_MATRIX_XLSX_NAME), buf.getvalue()))

    return locations


def build_correlation_summary(
    df: pd.DataFrame,
    *,
    target: str = TARGET_COLUMN,
    exclude: Sequence[str] = DEFAULT_EXCLUDED_COLUMNS,
) -> pd.DataFrame:
    """
    Correlation of every numeric indicator with `target`, sorted by
    absolute strength; undefined correlations are listed last.
    """
    if target not in df.columns:
        raise KeyError(f"Unknown target column: {target!r}")

    rows = []
    for col in numeric_feature_columns(df, exclude):
        if col == target:
            continue
        pairs = df[[col, target]].dropna()
        rows.append(
            {
                "feature": col,
                f"pearson_correlation_{target}": pearson_correlation(pairs[col], pairs[target]),
                "n_pairs": int(pairs.shape[0]),
            }
        )

    summary = pd.DataFrame(rows, columns=["feature", f"pearson_correlation_{target}", "n_pairs"])
    if summary.empty:
        return summary

    strength = pd.to_numeric(summary[f"pearson_correlation_{target}"], errors="coerce").abs()
    summary = summary.assign(_strength=strength).sort_values(
        "_strength", ascending=False, na_position="last", kind="mergesort"
    )
    return summary.drop(columns="_strength").reset_index(drop=True)


def build_income_schooling_scatter(
    df: pd.DataFrame,
    *,
    x_col: str = "income_composition_of_resources",
    y_col: str = "schooling",
    output_dir: Union[str, Path] = ANALYSIS_OUTPUT_DIR,
    storage: Optional[StorageAdapter] = None,
) -> Optional[Union[Path, str]]:
    pairs = df[[x_col, y_col]].dropna()
    if pairs.empty:
        print(f"[analysis] No rows with both {x_col} and {y_col}; scatter skipped.")
        return None

    x = pairs[x_col].to_numpy(dtype=float)
    y = pairs[y_col].to_numpy(dtype=float)

    fig, ax = plt.subplots(figsize=(10.24, 7.68))
    ax.scatter(x, y, s=12, color=(190 / 255, 86 / 255, 131 / 255), alpha=0.5, edgecolors="none")
    ax.set_xlim(0.0, max(float(x.max()), 0.0) * 1.05 or 1.0)
    ax.set_ylim(0.0, max(float(y.max()), 0.0) * 1.05 or 1.0)
    ax.set_xlabel("Income")
    ax.set_ylabel("Schooling Rates")
    ax.set_title("Income vs. Schooling Rates")
    ax.grid(True, linestyle="--", alpha=0.3)

    return save_figure(fig, SCATTER_PNG_NAME, output_dir=output_dir, storage=storage)


def run_correlation_analysis(
    df: pd.DataFrame,
    *,
    output_dir: Union[str, Path] = ANALYSIS_OUTPUT_DIR,
    storage: Optional[StorageAdapter] = None,
    write_xlsx: bool = False,
) -> Dict[str, List[Union[Path, str]]]:
    matrix = correlation_matrix(df)
    figures = [build_correlation_heatmap(matrix, output_dir=output_dir, storage=storage)]
    scatter = build_income_schooling_scatter(df, output_dir=output_dir, storage=storage)
    if scatter is not None:
        figures.append(scatter)
    print(f"[analysis] Heatmap saved to {figures[0]}")

    tables = save_correlation_matrix(
        matrix, output_dir=output_dir, storage=storage, write_xlsx=write_xlsx
    )
    summary = build_correlation_summary(df)
    tables.append(
        save_table(summary, CORRELATION_SUMMARY_CSV_NAME, output_dir=output_dir, storage=storage)
    )
    return {"tables": tables, "figures": figures}


__all__ = [
    "HEATMAP_PNG_NAME",
    "CORRELATION_MATRIX_CSV_NAME",
    "CORRELATION_MATRIX_XLSX_NAME",
    "CORRELATION_SUMMARY_CSV_NAME",
    "SCATTER_PNG_NAME",
    "pearson_correlation",
    "numeric_feature_columns",
    "correlation_matrix",
    "build_correlation_heatmap",
    "save_correlation_matrix",
    "build_correlation_summary",
    "build_income_schooling_scatter",
    "run_correlation_analysis",
]
