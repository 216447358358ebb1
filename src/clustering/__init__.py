"""
Clustering layer
----------------

Country clustering through a thresholded cosine-similarity graph.
"""

from .similarity_graph import (  # noqa: F401
    DEFAULT_GRAPH_FEATURES,
    DEFAULT_SIMILARITY_THRESHOLD,
    DEFAULT_TOP_K,
    Cluster,
    build_similarity_graph,
    cluster_assignments,
    cluster_graph,
    cluster_summary,
    cosine_similarity,
    export_graph_to_csv,
    run_graph_clustering,
    top_representatives,
)

__all__ = [
    "DEFAULT_GRAPH_FEATURES",
    "DEFAULT_SIMILARITY_THRESHOLD",
    "DEFAULT_TOP_K",
    "Cluster",
    "build_similarity_graph",
    "cluster_assignments",
    "cluster_graph",
    "cluster_summary",
    "cosine_similarity",
    "export_graph_to_csv",
    "run_graph_clustering",
    "top_representatives",
]
