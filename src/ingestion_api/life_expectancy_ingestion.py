"""
RAW ingestion of the WHO life-expectancy CSV.

The source is either a local file (the Kaggle export, usually
"Life Expectancy Data.csv") or an http(s) URL serving the same CSV.
The bytes are stored untouched under RAW_BASE_PREFIX through a
StorageAdapter, so the rest of the pipeline never reads the source
location directly.

A SHA-1 of the payload is kept as checkpoint: re-running the ingestion
on an unchanged source returns the previous raw key without writing a
new file.
"""

from __future__ import annotations

import hashlib
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from adapters import MetadataAdapter, StorageAdapter
from common.retry import download_bytes
from env_loader import env_str, load_dotenv_if_present
from metadata import RAW_INGESTION_SCOPE, RUN_STATUS_FAILED, RUN_STATUS_SUCCESS

load_dotenv_if_present()

SOURCE_ENV = "LIFE_EXPECTANCY_SOURCE"
DEFAULT_SOURCE = "Life Expectancy Data.csv"
RAW_BASE_PREFIX = "raw/life_expectancy"
RAW_HASH_CHECKPOINT_KEY = "life_expectancy_raw_sha1"
RAW_KEY_CHECKPOINT_KEY = "life_expectancy_raw_key"


def resolve_source(source: Union[str, Path, None] = None) -> Union[str, Path]:
    """Explicit source, else LIFE_EXPECTANCY_SOURCE (read at call time), else DEFAULT_SOURCE."""
    return source or env_str(SOURCE_ENV, DEFAULT_SOURCE)


def _is_url(source: str) -> bool:
    return source.startswith("http://") or source.startswith("https://")


def read_source_bytes(source: Union[str, Path], *, timeout: int = 60) -> bytes:
    """Read the CSV payload from a local path or URL."""
    source_str = str(source)
    if _is_url(source_str):
        content = download_bytes(source_str, timeout=timeout)
    else:
        path = Path(source_str)
        if not path.is_file():
            raise FileNotFoundError(f"Life expectancy source not found: {path}")
        content = path.read_bytes()

    if not content.strip():
        raise RuntimeError(f"Life expectancy source {source_str!r} is empty")
    return content


def compute_content_hash(content: bytes) -> str:
    return hashlib.sha1(content).hexdigest()


def ingest_life_expectancy_raw(
    storage: StorageAdapter,
    metadata: MetadataAdapter,
    *,
    source: Union[str, Path, None] = None,
    run_scope: str = RAW_INGESTION_SCOPE,
    force: bool = False,
) -> str:
    """
    Copy the source CSV into the RAW layer.

    Returns
    -------
    raw_key:
        Logical key of the stored file, e.g.
        "raw/life_expectancy/life_expectancy_raw_20240101T000000Z.csv".
        When the payload hash matches the last ingested one (and `force`
        is False) the previous key is returned.
    """
    source = resolve_source(source)
    run_id = metadata.start_run(run_scope)

    try:
        content = read_source_bytes(source)
        content_hash = compute_content_hash(content)

        previous_hash: Optional[str] = metadata.load_checkpoint(RAW_HASH_CHECKPOINT_KEY)
        previous_key: Optional[str] = metadata.load_checkpoint(RAW_KEY_CHECKPOINT_KEY)
        if (
            not force
            and previous_hash == content_hash
            and previous_key
            and storage.exists(previous_key)
        ):
            print(f"[ingestion] Source unchanged (sha1={content_hash[:12]}); reusing {previous_key}")
            metadata.end_run(
                run_id,
                status=RUN_STATUS_SUCCESS,
                rows_processed=0,
                last_checkpoint=content_hash,
            )
            return previous_key

        timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        key = f"{RAW_BASE_PREFIX}/life_expectancy_raw_{timestamp}.csv"
        storage.write_raw(key, content)

        # Header excluded; a trailing newline does not count as a row.
        rows = max(0, len(content.decode("utf-8", errors="replace").strip().splitlines()) - 1)

        metadata.save_checkpoint(RAW_HASH_CHECKPOINT_KEY, content_hash)
        metadata.save_checkpoint(RAW_KEY_CHECKPOINT_KEY, key)
        metadata.end_run(
            run_id,
            status=RUN_STATUS_SUCCESS,
            rows_processed=rows,
            last_checkpoint=content_hash,
        )
        return key
    except Exception as exc:  # noqa: BLE001
        metadata.end_run(run_id, status=RUN_STATUS_FAILED, error_message=str(exc))
        raise


__all__ = [
    "DEFAULT_SOURCE",
    "SOURCE_ENV",
    "resolve_source",
    "RAW_BASE_PREFIX",
    "read_source_bytes",
    "compute_content_hash",
    "ingest_life_expectancy_raw",
]
