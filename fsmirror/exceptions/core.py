"""Core exception hierarchy for the file store mirror."""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

import requests


class ErrorSeverity(Enum):
    """Error severity levels for proper handling."""
    LOW = "low"           # Warnings, can continue
    MEDIUM = "medium"     # Errors, entry failed but the batch continues
    HIGH = "high"         # Critical errors, the run should stop
    CRITICAL = "critical" # Misconfiguration, nothing can run


class ErrorKind(Enum):
    """Kinds a per-entry failure is classified into."""
    NETWORK = "network"
    API = "api"
    FILESYSTEM = "filesystem"
    CONFIGURATION = "configuration"


@dataclass
class ErrorContext:
    """Structured information about the entry an error belongs to."""
    identifier: Optional[str] = None
    operation: Optional[str] = None
    destination: Optional[str] = None
    url: Optional[str] = None
    timestamp: float = field(default_factory=time.time)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "identifier": self.identifier,
            "operation": self.operation,
            "destination": self.destination,
            "url": self.url,
            "timestamp": self.timestamp,
            "metadata": self.metadata,
        }


class FileStoreError(Exception):
    """Base exception for all file store mirror errors."""

    kind: ErrorKind = ErrorKind.FILESYSTEM

    def __init__(
        self,
        message: str,
        *,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        context: Optional[ErrorContext] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.severity = severity
        self.context = context or ErrorContext()
        self.cause = cause

        if cause:
            self.__cause__ = cause

    def __str__(self) -> str:
        parts = [self.message]

        if self.context.identifier:
            parts.append(f"[entry: {self.context.identifier}]")

        if self.context.operation:
            parts.append(f"[operation: {self.context.operation}]")

        return " ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "kind": self.kind.value,
            "message": self.message,
            "severity": self.severity.value,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
        }


# 1. NETWORK ERRORS (connection refused, timeout, TLS, cancellation)
class NetworkError(FileStoreError):
    """Transport-level failure while talking to the remote file store."""

    kind = ErrorKind.NETWORK

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        cancelled: bool = False,
        **kwargs,
    ):
        context = kwargs.pop("context", None) or ErrorContext()
        context.url = url or context.url
        if timeout:
            context.metadata["timeout"] = timeout
        if cancelled:
            context.metadata["cancelled"] = True

        super().__init__(message, severity=ErrorSeverity.MEDIUM, context=context, **kwargs)

        self.url = url
        self.timeout = timeout
        self.cancelled = cancelled


# 2. API ERRORS (the remote API answered with a non-success status)
class APIError(FileStoreError):
    """The remote API rejected a download request."""

    kind = ErrorKind.API
    PREFIX = "API error downloading file"

    def __init__(
        self,
        status: int,
        message: str,
        correlation_id: Optional[str] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", None) or ErrorContext()
        context.metadata["status"] = status
        if correlation_id:
            context.metadata["correlation_id"] = correlation_id

        text = f"{self.PREFIX}: status {status}: {message}"
        if correlation_id:
            text += f" (correlationId: {correlation_id})"

        super().__init__(text, severity=ErrorSeverity.MEDIUM, context=context, **kwargs)

        self.status = status
        self.api_message = message
        self.correlation_id = correlation_id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, APIError):
            return NotImplemented
        return (self.status, self.api_message, self.correlation_id) == (
            other.status,
            other.api_message,
            other.correlation_id,
        )

    __hash__ = FileStoreError.__hash__


# 3. FILESYSTEM ERRORS (mkdir/write failures)
class FilesystemError(FileStoreError):
    """Local directory creation or file write failure."""

    kind = ErrorKind.FILESYSTEM

    def __init__(self, message: str, *, path: Optional[str] = None, **kwargs):
        context = kwargs.pop("context", None) or ErrorContext()
        context.destination = path or context.destination

        super().__init__(message, severity=ErrorSeverity.HIGH, context=context, **kwargs)

        self.path = path


# 4. CONFIGURATION ERRORS
class ConfigurationError(FileStoreError):
    """Configuration or catalog file problems."""

    kind = ErrorKind.CONFIGURATION

    def __init__(
        self,
        message: str,
        *,
        config_file: Optional[str] = None,
        config_key: Optional[str] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", None) or ErrorContext()
        if config_file:
            context.metadata["config_file"] = config_file
        if config_key:
            context.metadata["config_key"] = config_key

        super().__init__(message, severity=ErrorSeverity.CRITICAL, context=context, **kwargs)

        self.config_file = config_file
        self.config_key = config_key


class ValidationError(ConfigurationError):
    """A value failed validation (config field, catalog entry, scope)."""

    def __init__(self, message: str, *, field_name: Optional[str] = None, **kwargs):
        super().__init__(message, config_key=field_name, **kwargs)
        self.field_name = field_name


# Utility functions for error handling
def classify_exception(
    exc: BaseException, context: Optional[ErrorContext] = None
) -> FileStoreError:
    """Classify any exception into the NetworkError/APIError/FilesystemError taxonomy."""
    if isinstance(exc, FileStoreError):
        if context is not None:
            _merge_context(exc.context, context)
        return exc

    if isinstance(exc, requests.exceptions.Timeout):
        return NetworkError(f"Request timed out: {exc}", cause=exc, context=context)

    if isinstance(exc, requests.exceptions.RequestException):
        url = getattr(getattr(exc, "request", None), "url", None)
        return NetworkError(f"Network error: {exc}", url=url, cause=exc, context=context)

    # Builtin TimeoutError/ConnectionError are OSError subclasses, check them first
    if isinstance(exc, (TimeoutError, ConnectionError)):
        return NetworkError(f"Network error: {exc}", cause=exc, context=context)

    if isinstance(exc, OSError):
        return FilesystemError(
            f"Filesystem error: {exc}",
            path=exc.filename if isinstance(exc.filename, str) else None,
            cause=exc,
            context=context,
        )

    return FilesystemError(f"Unexpected error: {exc}", cause=exc, context=context)


def _merge_context(target: ErrorContext, extra: ErrorContext) -> None:
    for name in ("identifier", "operation", "destination", "url"):
        if getattr(target, name) is None and getattr(extra, name) is not None:
            setattr(target, name, getattr(extra, name))
    for key, value in extra.metadata.items():
        target.metadata.setdefault(key, value)


def format_error_for_logging(error: BaseException) -> Dict[str, Any]:
    """Format error for structured logging."""
    if isinstance(error, FileStoreError):
        return error.to_dict()

    return {
        "error_type": error.__class__.__name__,
        "message": str(error),
        "severity": "medium",
        "kind": classify_exception(error).kind.value,
        "context": {"operation": "unknown"},
    }


def format_error_context(error: BaseException) -> str:
    """One-line description of an error for log messages."""
    if not isinstance(error, FileStoreError):
        return str(error)

    parts = [f"{error.kind.value}: {error}"]
    if error.context.destination:
        parts.append(f"→ {error.context.destination}")
    return " ".join(parts)
