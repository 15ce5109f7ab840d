"""Public re‑exports so callers can simply ``from fsmirror.utils import atomic_write_bytes``."""

from .io import atomic_write_bytes, ensure_parent  # noqa: F401
from .http_session import FileStoreClient, RemoteResponse  # noqa: F401
from .concurrent_download import (  # noqa: F401
    ConcurrentDownloadManager,
    ConcurrentResult,
)
from .run_summary import Summary  # noqa: F401

__all__ = [
    "atomic_write_bytes",
    "ensure_parent",
    "FileStoreClient",
    "RemoteResponse",
    "ConcurrentDownloadManager",
    "ConcurrentResult",
    "Summary",
]
