from __future__ import annotations

import io
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, List, Optional

import pandas as pd


class StorageAdapter(ABC):
    """
    Abstraction over where pipeline artefacts live (local FS, S3).

    Keys are logical, slash-separated paths such as
    "raw/life_expectancy/life_expectancy_raw_<ts>.csv" or
    "processed/life_expectancy/year=2015/cleaned_life_expectancy.parquet".
    """

    @abstractmethod
    def write_raw(self, key: str, content: bytes) -> str:
        """
        Persist bytes at the given key.

        Returns the fully-qualified location (local path or s3:// URI).
        """

    @abstractmethod
    def read_raw(self, key: str) -> bytes:
        """Read bytes previously stored at the given key."""

    @abstractmethod
    def list_keys(self, prefix: str) -> List[str]:
        """List logical keys under the given prefix."""

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Whether an object is stored at the given key."""

    def write_parquet(self, df: pd.DataFrame, key: str) -> str:
        buffer = io.BytesIO()
        df.to_parquet(buffer, index=False)
        return self.write_raw(key, buffer.getvalue())

    def read_parquet(self, key: str) -> pd.DataFrame:
        return pd.read_parquet(io.BytesIO(self.read_raw(key)))

    def write_csv(self, df: pd.DataFrame, key: str) -> str:
        buffer = io.StringIO()
        df.to_csv(buffer, index=False)
        return self.write_raw(key, buffer.getvalue().encode("utf-8"))

    def read_csv(self, key: str) -> pd.DataFrame:
        return pd.read_csv(io.BytesIO(self.read_raw(key)))


class LocalStorageAdapter(StorageAdapter):
    """
    Filesystem-backed storage; keys are relative paths under `root_dir`.
    """

    def __init__(self, root_dir: Path | str = ".") -> None:
        self.root_dir = Path(root_dir)

    def path_for(self, key: str) -> Path:
        return self.root_dir / key.lstrip("/")

    def write_raw(self, key: str, content: bytes) -> str:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return str(path)

    def read_raw(self, key: str) -> bytes:
        return self.path_for(key).read_bytes()

    def write_parquet(self, df: pd.DataFrame, key: str) -> str:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        df.to_parquet(path, index=False)
        return str(path)

    def read_parquet(self, key: str) -> pd.DataFrame:
        return pd.read_parquet(self.path_for(key))

    def list_keys(self, prefix: str) -> List[str]:
        base = self.path_for(prefix)
        if not base.exists():
            return []

        keys: List[str] = []
        for path in sorted(base.rglob("*")):
            if path.is_file():
                rel = path.relative_to(self.root_dir)
                keys.append(str(rel).replace(os.sep, "/"))
        return keys

    def exists(self, key: str) -> bool:
        return self.path_for(key).is_file()


class S3StorageAdapter(StorageAdapter):
    """
    S3-backed storage using boto3. Keys map to object keys under
    `base_prefix` in `bucket`.
    """

    def __init__(
        self,
        bucket: str,
        *,
        base_prefix: Optional[str] = None,
        boto3_client: Optional["boto3.client"] = None,
    ) -> None:
        if boto3_client is None:
            import boto3  # lazy import to keep local-only runs lighter

            boto3_client = boto3.client("s3")
        self.bucket = bucket
        self.base_prefix = (base_prefix or "").strip("/")
        self._s3 = boto3_client

    def _full_key(self, key: str) -> str:
        key = key.lstrip("/")
        if self.base_prefix:
            return f"{self.base_prefix}/{key}"
        return key

    def _logical_key(self, full_key: str) -> str:
        if self.base_prefix and full_key.startswith(self.base_prefix + "/"):
            return full_key[len(self.base_prefix) + 1 :]
        return full_key

    def write_raw(self, key: str, content: bytes) -> str:
        full_key = self._full_key(key)
        self._s3.put_object(Bucket=self.bucket, Key=full_key, Body=content)
        return f"s3://{self.bucket}/{full_key}"

    def read_raw(self, key: str) -> bytes:
        resp = self._s3.get_object(Bucket=self.bucket, Key=self._full_key(key))
        return resp["Body"].read()

    def list_keys(self, prefix: str) -> List[str]:
        full_prefix = self._full_key(prefix).rstrip("/") + "/"
        paginator = self._s3.get_paginator("list_objects_v2")
        keys: List[str] = []
        for page in paginator.paginate(Bucket=self.bucket, Prefix=full_prefix):
            contents: Iterable[dict] = page.get("Contents") or []
            keys.extend(self._logical_key(obj["Key"]) for obj in contents)
        return sorted(keys)

    def exists(self, key: str) -> bool:
        resp = self._s3.list_objects_v2(Bucket=self.bucket, Prefix=self._full_key(key), MaxKeys=1)
        return any(obj["Key"] == self._full_key(key) for obj in resp.get("Contents") or [])


__all__ = ["StorageAdapter", "LocalStorageAdapter", "S3StorageAdapter"]
