"""
Adapters package
----------------

Storage and run-metadata abstractions, so the same analysis code can
read/write the local filesystem or S3 and record runs in a JSON file
or in memory.
"""

from .storage import (  # noqa: F401
    LocalStorageAdapter,
    S3StorageAdapter,
    StorageAdapter,
)
from .metadata import (  # noqa: F401
    InMemoryMetadataAdapter,
    LocalMetadataAdapter,
    MetadataAdapter,
)

__all__ = [
    "StorageAdapter",
    "LocalStorageAdapter",
    "S3StorageAdapter",
    "MetadataAdapter",
    "LocalMetadataAdapter",
    "InMemoryMetadataAdapter",
]
