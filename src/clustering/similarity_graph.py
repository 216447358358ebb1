"""
Country similarity graph and clustering.

Every dataset row (a country-year) becomes a node. Two rows are joined
by an undirected edge when the cosine similarity of their feature
vectors (by default life expectancy, GDP and population) is at least
`threshold`; the edge weight is that similarity. Clusters are the
connected components of the graph, and each cluster is represented by
its highest-degree node.

Artefacts:

- graph_edge_list.csv       Source,Target,Weight (country names)
- cluster_assignments.csv   node, country, year, cluster_id
- cluster_summary.csv       cluster_id, representative, size, n_countries

Cosine similarity on unscaled features is dominated by the largest
magnitudes (population); `scale="minmax"` puts every feature in [0, 1]
first.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import networkx as nx
import numpy as np
import pandas as pd

from adapters import LocalMetadataAdapter, MetadataAdapter, StorageAdapter
from analysis.figures import ANALYSIS_OUTPUT_DIR, save_table
from metadata import RUN_STATUS_FAILED, RUN_STATUS_SUCCESS, SIMILARITY_GRAPH_SCOPE

DEFAULT_GRAPH_FEATURES = ["life_expectancy", "gdp", "population"]
DEFAULT_SIMILARITY_THRESHOLD = 0.8
DEFAULT_TOP_K = 5
SCALING_MODES = ("none", "minmax")

EDGE_LIST_CSV_NAME = "graph_edge_list.csv"
CLUSTER_ASSIGNMENTS_CSV_NAME = "cluster_assignments.csv"
CLUSTER_SUMMARY_CSV_NAME = "cluster_summary.csv"


@dataclass
class Cluster:
    cluster_id: int
    representative: str
    representative_node: int
    size: int
    members: List[int] = field(default_factory=list)
    countries: List[str] = field(default_factory=list)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """dot(a, b) / (|a| |b|), or 0.0 when either vector has zero length."""
    a_arr = np.asarray(a, dtype=float)
    b_arr = np.asarray(b, dtype=float)
    if a_arr.shape != b_arr.shape:
        raise ValueError(f"Vectors differ in shape: {a_arr.shape} vs {b_arr.shape}")

    norm_a = float(np.linalg.norm(a_arr))
    norm_b = float(np.linalg.norm(b_arr))
    if norm_a > 0.0 and norm_b > 0.0:
        return float(np.dot(a_arr, b_arr) / (norm_a * norm_b))
    return 0.0


def _minmax_scale(matrix: np.ndarray) -> np.ndarray:
    low = matrix.min(axis=0)
    span = matrix.max(axis=0) - low
    span[span == 0.0] = 1.0
    return (matrix - low) / span


def _unit_rows(matrix: np.ndarray) -> np.ndarray:
    norms = np.linalg.norm(matrix, axis=1)
    unit = np.zeros_like(matrix)
    nonzero = norms > 0.0
    unit[nonzero] = matrix[nonzero] / norms[nonzero, None]
    return unit


def build_similarity_graph(
    df: pd.DataFrame,
    features: Sequence[str] = DEFAULT_GRAPH_FEATURES,
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    *,
    scale: str = "none",
    block_size: int = 512,
) -> nx.Graph:
    """
    Build the thresholded cosine-similarity graph over the rows of `df`.

    Node ids are row positions in `df`; nodes carry `country` and `year`.
    Rows missing any feature are left out of the graph.
    """
    if not -1.0 <= threshold <= 1.0:
        raise ValueError(f"threshold must be within [-1, 1], got {threshold}")
    if scale not in SCALING_MODES:
        raise ValueError(f"scale must be one of {SCALING_MODES}, got {scale!r}")
    if block_size <= 0:
        raise ValueError("block_size must be positive")
    missing = [f for f in features if f not in df.columns]
    if missing:
        raise KeyError(f"Unknown feature columns: {missing}")

    graph = nx.Graph(features=list(features), threshold=threshold, scale=scale)

    values = df[list(features)].apply(pd.to_numeric, errors="coerce")
    complete = ~values.isna().any(axis=1).to_numpy()
    positions = np.flatnonzero(complete)
    skipped = int(len(df) - positions.size)
    if skipped:
        print(f"[graph] {skipped} rows with missing {list(features)} left out of the graph")

    countries = df["country"].astype(str).to_numpy() if "country" in df.columns else None
    years = df["year"].to_numpy() if "year" in df.columns else None
    for pos in positions:
        year = years[pos] if years is not None else None
        graph.add_node(
            int(pos),
            country=str(countries[pos]) if countries is not None else str(pos),
            year=None if year is None or pd.isna(year) else int(year),
        )

    if positions.size < 2:
        return graph

    matrix = values.to_numpy(dtype=float, na_value=np.nan)[positions]
    if scale == "minmax":
        matrix = _minmax_scale(matrix)
    unit = _unit_rows(matrix)

    n = unit.shape[0]
    for start in range(0, n, block_size):
        stop = min(start + block_size, n)
        sims = np.clip(unit[start:stop] @ unit.T, -1.0, 1.0)
        rows, cols = np.nonzero(sims >= threshold)
        upper = cols > rows + start
        rows, cols = rows[upper], cols[upper]
        graph.add_weighted_edges_from(
            zip(
                positions[start + rows].tolist(),
                positions[cols].tolist(),
                sims[rows, cols].tolist(),
            )
        )

    return graph


def cluster_graph(graph: nx.Graph) -> List[Cluster]:
    """
    Connected components as clusters, largest first.

    `cluster_id` is the smallest node id of the component; the
    representative is the node with the most edges (smallest id on ties).
    """
    clusters: List[Cluster] = []
    for component in nx.connected_components(graph):
        members = sorted(component)
        representative = max(members, key=lambda node: (graph.degree(node), -node))
        countries = sorted({graph.nodes[node].get("country", str(node)) for node in members})
        clusters.append(
            Cluster(
                cluster_id=members[0],
                representative=graph.nodes[representative].get("country", str(representative)),
                representative_node=representative,
                size=len(members),
                members=members,
                countries=countries,
            )
        )

    clusters.sort(key=lambda c: (-c.size, c.cluster_id))
    return clusters


def top_representatives(clusters: Sequence[Cluster], k: int = DEFAULT_TOP_K) -> List[Cluster]:
    if k <= 0:
        raise ValueError("k must be positive")
    return sorted(clusters, key=lambda c: (-c.size, c.cluster_id))[:k]


def cluster_assignments(graph: nx.Graph, clusters: Sequence[Cluster]) -> pd.DataFrame:
    rows = [
        {
            "node": node,
            "country": graph.nodes[node].get("country"),
            "year": graph.nodes[node].get("year"),
            "cluster_id": cluster.cluster_id,
        }
        for cluster in clusters
        for node in cluster.members
    ]
    df = pd.DataFrame(rows, columns=["node", "country", "year", "cluster_id"])
    df["year"] = df["year"].astype("Int64")
    return df.sort_values("node").reset_index(drop=True)


def cluster_summary(clusters: Sequence[Cluster]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "cluster_id": c.cluster_id,
                "representative": c.representative,
                "size": c.size,
                "n_countries": len(c.countries),
            }
            for c in clusters
        ],
        columns=["cluster_id", "representative", "size", "n_countries"],
    )


def edge_list_frame(graph: nx.Graph) -> pd.DataFrame:
    """Source, Target, Weight; weights are text with 6 decimals for every writer."""
    rows = []
    for u, v, weight in graph.edges(data="weight"):
        source, target = (u, v) if u <= v else (v, u)
        rows.append((source, target, weight))
    rows.sort(key=lambda r: (r[0], r[1]))

    return pd.DataFrame(
        {
            "Source": [graph.nodes[s].get("country", str(s)) for s, _, _ in rows],
            "Target": [graph.nodes[t].get("country", str(t)) for _, t, _ in rows],
            "Weight": [f"{float(w):.6f}" for _, _, w in rows],
        },
        columns=["Source", "Target", "Weight"],
    )


def export_graph_to_csv(graph: nx.Graph, output_path: Union[str, Path]) -> Path:
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    edge_list_frame(graph).to_csv(path, index=False)
    return path


def run_graph_clustering(
    df: pd.DataFrame,
    *,
    features: Sequence[str] = DEFAULT_GRAPH_FEATURES,
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    scale: str = "none",
    top_k: int = DEFAULT_TOP_K,
    output_dir: Union[str, Path] = ANALYSIS_OUTPUT_DIR,
    storage: Optional[StorageAdapter] = None,
    metadata: Optional[MetadataAdapter] = None,
) -> Dict[str, object]:
    """
    Build the graph, cluster it, write the edge list and cluster tables,
    and print the representatives of the `top_k` largest clusters.
    """
    meta = metadata or LocalMetadataAdapter()
    run_id = meta.start_run(SIMILARITY_GRAPH_SCOPE)

    try:
        graph = build_similarity_graph(df, features, threshold, scale=scale)
        clusters = cluster_graph(graph)
        print(
            f"[graph] {graph.number_of_nodes()} nodes, {graph.number_of_edges()} edges, "
            f"{len(clusters)} clusters (threshold={threshold})"
        )

        if storage is None:
            edge_location = export_graph_to_csv(graph, Path(output_dir) / EDGE_LIST_CSV_NAME)
        else:
            edge_location = save_table(edge_list_frame(graph), EDGE_LIST_CSV_NAME, storage=storage)
        print(f"Edge list exported to {edge_location}")

        tables = [
            edge_location,
            save_table(
                cluster_assignments(graph, clusters),
                CLUSTER_ASSIGNMENTS_CSV_NAME,
                output_dir=output_dir,
                storage=storage,
            ),
            save_table(
                cluster_summary(clusters),
                CLUSTER_SUMMARY_CSV_NAME,
                output_dir=output_dir,
                storage=storage,
            ),
        ]

        top = top_representatives(clusters, top_k) if clusters else []
        print(f"Top {top_k} representatives:")
        for cluster in top:
            print(f"Cluster {cluster.cluster_id}: {cluster.representative}")

        meta.end_run(
            run_id,
            status=RUN_STATUS_SUCCESS,
            rows_processed=graph.number_of_nodes(),
            last_checkpoint=f"clusters={len(clusters)}",
        )
        return {"graph": graph, "clusters": clusters, "top": top, "tables": tables}
    except Exception as exc:  # noqa: BLE001
        meta.end_run(run_id, status=RUN_STATUS_FAILED, error_message=str(exc))
        raise


if __name__ == "__main__":
    import argparse

    from transformations.life_expectancy_processed import clean_dataset

    parser = argparse.ArgumentParser(
        description="Cluster countries through a cosine-similarity graph.",
    )
    parser.add_argument("csv", help="Path to the raw 'Life Expectancy Data.csv'.")
    parser.add_argument("--threshold", type=float, default=DEFAULT_SIMILARITY_THRESHOLD)
    parser.add_argument("--top-k", type=int, default=DEFAULT_TOP_K)
    parser.add_argument("--scale", choices=SCALING_MODES, default="none")
    parser.add_argument("--output-dir", type=str, default=str(ANALYSIS_OUTPUT_DIR))

    args = parser.parse_args()
    run_graph_clustering(
        clean_dataset(args.csv),
        threshold=args.threshold,
        scale=args.scale,
        top_k=args.top_k,
        output_dir=Path(args.output_dir),
    )


__all__ = [
    "DEFAULT_GRAPH_FEATURES",
    "DEFAULT_SIMILARITY_THRESHOLD",
    "DEFAULT_TOP_K",
    "EDGE_LIST_CSV_NAME",
    "CLUSTER_ASSIGNMENTS_CSV_NAME",
    "CLUSTER_SUMMARY_CSV_NAME",
    "Cluster",
    "cosine_similarity",
    "build_similarity_graph",
    "cluster_graph",
    "top_representatives",
    "cluster_assignments",
    "cluster_summary",
    "edge_list_frame",
    "export_graph_to_csv",
    "run_graph_clustering",
]
