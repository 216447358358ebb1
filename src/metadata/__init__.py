"""
Metadata module
---------------

Local JSON store recording pipeline runs and checkpoints.

    from metadata import start_run, end_run, CLEANING_SCOPE

    run_id = start_run(CLEANING_SCOPE)
    # ... clean the dataset ...
    end_run(run_id, status="SUCCESS", rows_processed=2938)
"""

from .store import (
    DEFAULT_METADATA_FILE,
    METADATA_LOCAL_FILE_ENV,
    RUN_STATUS_FAILED,
    RUN_STATUS_RUNNING,
    RUN_STATUS_SUCCESS,
    end_run,
    get_all_checkpoints,
    get_last_run,
    list_runs,
    load_checkpoint,
    reset_local_store,
    save_checkpoint,
    start_run,
)

# Run scopes, one per pipeline stage
RAW_INGESTION_SCOPE = "life_expectancy_raw"
CLEANING_SCOPE = "life_expectancy_cleaning"
SIMILARITY_GRAPH_SCOPE = "similarity_graph"

__all__ = [
    "DEFAULT_METADATA_FILE",
    "METADATA_LOCAL_FILE_ENV",
    "RUN_STATUS_RUNNING",
    "RUN_STATUS_SUCCESS",
    "RUN_STATUS_FAILED",
    "RAW_INGESTION_SCOPE",
    "CLEANING_SCOPE",
    "SIMILARITY_GRAPH_SCOPE",
    "start_run",
    "end_run",
    "save_checkpoint",
    "load_checkpoint",
    "get_last_run",
    "list_runs",
    "get_all_checkpoints",
    "reset_local_store",
]
