"""Exception hierarchy for file store mirroring.

Per-entry failures are classified into three kinds:

1. NetworkError - connection, timeout, TLS and cancellation failures
2. APIError - the remote API answered with a non-success status
3. FilesystemError - directory creation or file write failures

ConfigurationError and ValidationError cover bad configuration and catalogs.
"""
from __future__ import annotations

from .core import (
    APIError,
    ConfigurationError,
    ErrorContext,
    ErrorKind,
    ErrorSeverity,
    FileStoreError,
    FilesystemError,
    NetworkError,
    ValidationError,
    classify_exception,
    format_error_context,
    format_error_for_logging,
)

__all__ = [
    "APIError",
    "ConfigurationError",
    "ErrorContext",
    "ErrorKind",
    "ErrorSeverity",
    "FileStoreError",
    "FilesystemError",
    "NetworkError",
    "ValidationError",
    "classify_exception",
    "format_error_context",
    "format_error_for_logging",
]
