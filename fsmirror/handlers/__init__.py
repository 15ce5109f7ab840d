# handlers/__init__.py
from __future__ import annotations

from .download import FileStoreDownloadHandler, parse_api_error

__all__ = ["FileStoreDownloadHandler", "parse_api_error"]
