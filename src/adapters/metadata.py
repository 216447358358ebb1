from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from metadata import (
    RUN_STATUS_RUNNING,
    RUN_STATUS_SUCCESS,
    end_run as local_end_run,
    list_runs as local_list_runs,
    load_checkpoint as local_load_checkpoint,
    save_checkpoint as local_save_checkpoint,
    start_run as local_start_run,
)


class MetadataAdapter(ABC):
    """
    Abstraction over the run/checkpoint store.
    """

    @abstractmethod
    def start_run(self, run_scope: str) -> str:
        """Register the start of a run and return its identifier."""

    @abstractmethod
    def end_run(
        self,
        run_id: str,
        status: str = RUN_STATUS_SUCCESS,
        *,
        rows_processed: Optional[int] = None,
        last_checkpoint: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Mark a run as finished and persist its final state."""

    @abstractmethod
    def save_checkpoint(self, source: str, value: Any) -> None:
        """Persist a checkpoint value for a given logical source."""

    @abstractmethod
    def load_checkpoint(self, source: str, default: Optional[Any] = None) -> Any:
        """Load the checkpoint value for the given source."""

    @abstractmethod
    def list_runs(self, run_scope: Optional[str] = None) -> List[Dict[str, Any]]:
        """List runs, optionally filtered by scope."""


class LocalMetadataAdapter(MetadataAdapter):
    """
    Adapter backed by the JSON store in `src/metadata`.
    """

    def start_run(self, run_scope: str) -> str:
        return local_start_run(run_scope)

    def end_run(
        self,
        run_id: str,
        status: str = RUN_STATUS_SUCCESS,
        *,
        rows_processed: Optional[int] = None,
        last_checkpoint: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> Dict[str, Any]:
        return local_end_run(
            run_id,
            status=status,
            rows_processed=rows_processed,
            last_checkpoint=last_checkpoint,
            error_message=error_message,
        )

    def save_checkpoint(self, source: str, value: Any) -> None:
        local_save_checkpoint(source, value)

    def load_checkpoint(self, source: str, default: Optional[Any] = None) -> Any:
        return local_load_checkpoint(source, default)

    def list_runs(self, run_scope: Optional[str] = None) -> List[Dict[str, Any]]:
        return local_list_runs(run_scope)


class InMemoryMetadataAdapter(MetadataAdapter):
    """
    Non-persistent adapter: run records and checkpoints live only for the
    process (`local_pipeline --no-history`).
    """

    def __init__(self) -> None:
        self._runs: List[Dict[str, Any]] = []
        self._checkpoints: Dict[str, Any] = {}

    def start_run(self, run_scope: str) -> str:
        run_id = str(uuid4())
        self._runs.append(
            {
                "run_id": run_id,
                "run_scope": run_scope,
                "start_ts": datetime.now(timezone.utc).isoformat(),
                "end_ts": None,
                "status": RUN_STATUS_RUNNING,
                "rows_processed": None,
                "last_checkpoint": None,
                "error_message": None,
            }
        )
        return run_id

    def end_run(
        self,
        run_id: str,
        status: str = RUN_STATUS_SUCCESS,
        *,
        rows_processed: Optional[int] = None,
        last_checkpoint: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> Dict[str, Any]:
        for run in reversed(self._runs):
            if run["run_id"] == run_id:
                run["end_ts"] = datetime.now(timezone.utc).isoformat()
                run["status"] = status
                if rows_processed is not None:
                    run["rows_processed"] = int(rows_processed)
                if last_checkpoint is not None:
                    run["last_checkpoint"] = str(last_checkpoint)
                if error_message is not None:
                    run["error_message"] = error_message
                return run
        raise KeyError(f"No pipeline run found with id={run_id!r}")

    def save_checkpoint(self, source: str, value: Any) -> None:
        self._checkpoints[source] = value

    def load_checkpoint(self, source: str, default: Optional[Any] = None) -> Any:
        return self._checkpoints.get(source, default)

    def list_runs(self, run_scope: Optional[str] = None) -> List[Dict[str, Any]]:
        if run_scope is None:
            return list(self._runs)
        return [r for r in self._runs if r["run_scope"] == run_scope]
