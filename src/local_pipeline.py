"""
Orchestration entrypoint for the life-expectancy analysis.

Runs, in order:

1. RAW ingestion of the CSV (local file or URL)
2. Cleaning (RAW -> PROCESSED CSV + Parquet by year)
3. Descriptive statistics and distribution plots
4. Per-year rankings and Developed vs Developing comparisons
5. Correlation matrix, heatmap, summary and income/schooling scatter
6. Similarity graph clustering
7. (optional) Happiness rank statistics

Intended usage:

    PYTHONPATH=src python -m local_pipeline --source "Life Expectancy Data.csv"

Settings fall back to environment variables (or a .env file):
LIFE_EXPECTANCY_SOURCE, PIPELINE_OUTPUT_ROOT, GRAPH_SIMILARITY_THRESHOLD,
GRAPH_TOP_K, PIPELINE_S3_BUCKET, PIPELINE_S3_BASE_PREFIX.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Union

from adapters import (
    InMemoryMetadataAdapter,
    LocalMetadataAdapter,
    LocalStorageAdapter,
    MetadataAdapter,
    S3StorageAdapter,
    StorageAdapter,
)
from analysis import run_correlation_analysis, run_eda, run_happiness_analysis, run_yearly_analysis
from clustering import DEFAULT_SIMILARITY_THRESHOLD, DEFAULT_TOP_K, run_graph_clustering
from env_loader import env_float, env_int, env_str, load_dotenv_if_present
from ingestion_api.life_expectancy_ingestion import ingest_life_expectancy_raw, resolve_source
from transformations import process_life_expectancy_raw_file

DEFAULT_OUTPUT_ROOT = Path("output")
ANALYSIS_SUBDIR = "analysis"


def build_storage(output_root: Union[str, Path]) -> StorageAdapter:
    """S3 when PIPELINE_S3_BUCKET is set, otherwise the local output root."""
    bucket = env_str("PIPELINE_S3_BUCKET")
    if bucket:
        return S3StorageAdapter(bucket, base_prefix=env_str("PIPELINE_S3_BASE_PREFIX"))
    return LocalStorageAdapter(output_root)


def build_metadata(*, keep_history: bool = True) -> MetadataAdapter:
    """JSON run store, or an in-memory one that is discarded after the run."""
    if keep_history:
        return LocalMetadataAdapter()
    return InMemoryMetadataAdapter()


def run_local_pipeline(
    *,
    source: Union[str, Path, None] = None,
    output_root: Union[str, Path, None] = None,
    threshold: Optional[float] = None,
    top_k: Optional[int] = None,
    scale: str = "none",
    happiness_source: Union[str, Path, None] = None,
    write_xlsx: bool = False,
    storage: Optional[StorageAdapter] = None,
    metadata: Optional[MetadataAdapter] = None,
) -> Dict[str, List[Union[Path, str]]]:
    """
    Run every stage end-to-end.

    Returns
    -------
    artefacts:
        Step name -> generated locations (local Paths or storage URIs).
    """
    load_dotenv_if_present()
    source = resolve_source(source)
    output_root = Path(output_root or env_str("PIPELINE_OUTPUT_ROOT", str(DEFAULT_OUTPUT_ROOT)))
    threshold = env_float("GRAPH_SIMILARITY_THRESHOLD", DEFAULT_SIMILARITY_THRESHOLD) if threshold is None else threshold
    top_k = env_int("GRAPH_TOP_K", DEFAULT_TOP_K) if top_k is None else top_k

    storage = storage or build_storage(output_root)
    metadata = metadata or build_metadata()
    # Analysis artefacts go to the local output tree unless storage is remote.
    analysis_storage = None if isinstance(storage, LocalStorageAdapter) else storage
    analysis_dir = output_root / ANALYSIS_SUBDIR
    total = 7 if happiness_source else 6

    artefacts: Dict[str, List[Union[Path, str]]] = {}

    print(f"[1/{total}] Ingesting life expectancy RAW from {source}...")
    raw_key = ingest_life_expectancy_raw(storage, metadata, source=source)
    artefacts["raw"] = [raw_key]
    print(f"      RAW key: {raw_key}")

    print(f"[2/{total}] Cleaning RAW -> PROCESSED...")
    df, processed = process_life_expectancy_raw_file(raw_key, storage, metadata=metadata)
    artefacts["processed"] = list(processed)
    print(f"      {len(df)} rows, {len(processed)} files written.")

    print(f"[3/{total}] Descriptive statistics...")
    eda = run_eda(df, output_dir=analysis_dir, storage=analysis_storage)
    artefacts["eda"] = list(eda["figures"])

    print(f"[4/{total}] Yearly rankings and status comparisons...")
    yearly = run_yearly_analysis(df, output_dir=analysis_dir, storage=analysis_storage)
    artefacts["yearly"] = yearly["tables"] + yearly["figures"]

    print(f"[5/{total}] Correlation analysis...")
    correlation = run_correlation_analysis(
        df, output_dir=analysis_dir, storage=analysis_storage, write_xlsx=write_xlsx
    )
    artefacts["correlation"] = correlation["tables"] + correlation["figures"]

    print(f"[6/{total}] Similarity graph clustering (threshold={threshold}, scale={scale})...")
    graph = run_graph_clustering(
        df,
        threshold=threshold,
        scale=scale,
        top_k=top_k,
        output_dir=analysis_dir,
        storage=analysis_storage,
        metadata=metadata,
    )
    artefacts["clustering"] = list(graph["tables"])

    if happiness_source:
        print(f"[7/{total}] Happiness rank statistics...")
        artefacts["happiness"] = [
            run_happiness_analysis(happiness_source, output_dir=analysis_dir, storage=analysis_storage)
        ]

    print("\nPipeline completed successfully.")
    return artefacts


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(
        description="Run the life expectancy analysis pipeline end-to-end.",
    )
    parser.add_argument(
        "--source",
        type=str,
        default=None,
        help="Path or URL of 'Life Expectancy Data.csv' (default: LIFE_EXPECTANCY_SOURCE).",
    )
    parser.add_argument(
        "--output-root",
        type=str,
        default=None,
        help="Root directory for raw/, processed/ and analysis/ (default: output).",
    )
    parser.add_argument(
        "--threshold",
        type=float,
        default=None,
        help="Cosine similarity threshold for graph edges (default: 0.8).",
    )
    parser.add_argument(
        "--top-k",
        type=int,
        default=None,
        help="Number of cluster representatives to report (default: 5).",
    )
    parser.add_argument(
        "--scale",
        choices=("none", "minmax"),
        default="none",
        help="Feature scaling applied before computing similarities.",
    )
    parser.add_argument(
        "--happiness",
        type=str,
        default=None,
        help="Optional World Happiness Report CSV.",
    )
    parser.add_argument(
        "--xlsx",
        action="store_true",
        help="Also export the correlation matrix as XLSX (requires openpyxl).",
    )
    parser.add_argument(
        "--no-history",
        action="store_true",
        help="Keep run records and checkpoints in memory instead of the JSON run store.",
    )

    args = parser.parse_args()
    run_local_pipeline(
        source=args.source,
        output_root=args.output_root,
        threshold=args.threshold,
        top_k=args.top_k,
        scale=args.scale,
        happiness_source=args.happiness,
        write_xlsx=args.xlsx,
        metadata=build_metadata(keep_history=not args.no_history),
    )


__all__ = ["run_local_pipeline", "build_storage", "build_metadata"]
