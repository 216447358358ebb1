import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4


# Environment variable to override the local JSON path (tests, CI)
METADATA_LOCAL_FILE_ENV = "METADATA_LOCAL_FILE"

DEFAULT_METADATA_FILE = Path("pipeline_runs.json")

RUN_STATUS_RUNNING = "RUNNING"
RUN_STATUS_SUCCESS = "SUCCESS"
RUN_STATUS_FAILED = "FAILED"


def _now_utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _get_metadata_file() -> Path:
    env_value = os.getenv(METADATA_LOCAL_FILE_ENV)
    if env_value:
        return Path(env_value)
    return DEFAULT_METADATA_FILE


def _empty_store() -> Dict[str, Any]:
    return {"runs": [], "checkpoints": {}}


def _load_store() -> Dict[str, Any]:
    """
    Load the run store from the local JSON file.

    Structure:
    {
      "runs": [
        {
          "run_id": str,
          "run_scope": str,
          "start_ts": str,
          "end_ts": Optional[str],
          "status": "RUNNING" | "SUCCESS" | "FAILED",
          "rows_processed": Optional[int],
          "last_checkpoint": Optional[str],
          "error_message": Optional[str]
        },
        ...
      ],
      "checkpoints": {"<source>": "<value>"}
    }
    """
    path = _get_metadata_file()
    if not path.exists():
        return _empty_store()

    with path.open("r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as exc:
            raise RuntimeError(f"Metadata file {path} is corrupted") from exc

    if not isinstance(data, dict):
        raise RuntimeError(f"Metadata file {path} has invalid format (expected object)")

    data.setdefault("runs", [])
    data.setdefault("checkpoints", {})
    if not isinstance(data["runs"], list) or not isinstance(data["checkpoints"], dict):
        raise RuntimeError(f"Metadata file {path} has invalid structure")

    return data


def _save_store(store: Dict[str, Any]) -> None:
    """Write the store atomically (temp file + replace)."""
    path = _get_metadata_file()
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with tmp_path.open("w", encoding="utf-8") as f:
        json.dump(store, f, indent=2, ensure_ascii=False)

    tmp_path.replace(path)


def start_run(run_scope: str) -> str:
    """
    Register the start of a pipeline stage and return its run id.

    `run_scope` names the stage, e.g. "life_expectancy_raw",
    "life_expectancy_cleaning" or "similarity_graph".
    """
    store = _load_store()

    run_id = str(uuid4())
    store["runs"].append(
        {
            "run_id": run_id,
            "run_scope": run_scope,
            "start_ts": _now_utc_iso(),
            "end_ts": None,
            "status": RUN_STATUS_RUNNING,
            "rows_processed": None,
            "last_checkpoint": None,
            "error_message": None,
        }
    )
    _save_store(store)
    return run_id


def end_run(
    run_id: str,
    status: str = RUN_STATUS_SUCCESS,
    *,
    rows_processed: Optional[int] = None,
    last_checkpoint: Optional[str] = None,
    error_message: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Close a run opened by start_run() and return the updated record.

    Raises KeyError when no run with `run_id` exists.
    """
    store = _load_store()

    target: Optional[Dict[str, Any]] = None
    for run in reversed(store["runs"]):
        if run.get("run_id") == run_id:
            target = run
            break

    if target is None:
        raise KeyError(f"No pipeline run found with id={run_id!r}")

    target["end_ts"] = _now_utc_iso()
    target["status"] = status
    if rows_processed is not None:
        target["rows_processed"] = int(rows_processed)
    if last_checkpoint is not None:
        target["last_checkpoint"] = str(last_checkpoint)
    if error_message is not None:
        target["error_message"] = error_message

    _save_store(store)
    return target


def save_checkpoint(source: str, value: Any) -> None:
    store = _load_store()
    store["checkpoints"][source] = value
    _save_store(store)


def load_checkpoint(source: str, default: Optional[Any] = None) -> Any:
    return _load_store()["checkpoints"].get(source, default)


def get_last_run(run_scope: Optional[str] = None) -> Optional[Dict[str, Any]]:
    runs = list_runs(run_scope)
    return runs[-1] if runs else None


def list_runs(run_scope: Optional[str] = None) -> List[Dict[str, Any]]:
    runs: List[Dict[str, Any]] = _load_store()["runs"]
    if run_scope is None:
        return list(runs)
    return [r for r in runs if r.get("run_scope") == run_scope]


def get_all_checkpoints() -> Dict[str, Any]:
    return dict(_load_store()["checkpoints"])


def reset_local_store() -> Tuple[int, int]:
    """
    Clear all runs and checkpoints. Returns (runs_cleared, checkpoints_cleared).
    """
    store = _load_store()
    counts = (len(store["runs"]), len(store["checkpoints"]))
    _save_store(_empty_store())
    return counts
