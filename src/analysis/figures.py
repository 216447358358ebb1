from __future__ import annotations

import io
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402

from adapters import StorageAdapter  # noqa: E402

ANALYSIS_OUTPUT_DIR = Path("analysis")
ANALYTICS_BASE_PREFIX = "analytics"


def analytics_key(name: str, *, snapshot_date: Optional[str] = None) -> str:
    snapshot_date = snapshot_date or datetime.now(timezone.utc).strftime("%Y%m%d")
    return f"{ANALYTICS_BASE_PREFIX}/{snapshot_date}/{name}"


def save_figure(
    fig: plt.Figure,
    name: str,
    *,
    output_dir: Union[str, Path] = ANALYSIS_OUTPUT_DIR,
    storage: Optional[StorageAdapter] = None,
    dpi: int = 100,
) -> Union[Path, str]:
    """
    Save and close `fig`.

    Locally the PNG lands in `output_dir/name`; with a StorageAdapter it
    is written under analytics/<YYYYMMDD>/name and the location string
    is returned.
    """
    try:
        fig.tight_layout()
        if storage is None:
            output_root = Path(output_dir)
            output_root.mkdir(parents=True, exist_ok=True)
            output_path = output_root / name
            fig.savefig(output_path, dpi=dpi)
            return output_path

        buf = io.BytesIO()
        fig.savefig(buf, format="png", dpi=dpi)
        return storage.write_raw(analytics_key(name), buf.getvalue())
    finally:
        plt.close(fig)


def save_table(
    df: pd.DataFrame,
    name: str,
    *,
    output_dir: Union[str, Path] = ANALYSIS_OUTPUT_DIR,
    storage: Optional[StorageAdapter] = None,
    index: bool = False,
) -> Union[Path, str]:
    if storage is None:
        output_root = Path(output_dir)
        output_root.mkdir(parents=True, exist_ok=True)
        output_path = output_root / name
        df.to_csv(output_path, index=index)
        return output_path

    if index:
        df = df.reset_index()
    return storage.write_csv(df, analytics_key(name))


__all__ = [
    "ANALYSIS_OUTPUT_DIR",
    "ANALYTICS_BASE_PREFIX",
    "analytics_key",
    "save_figure",
    "save_table",
]
