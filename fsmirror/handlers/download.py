# fsmirror/handlers/download.py
from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Optional, Tuple

from ..exceptions import (
    APIError,
    ErrorContext,
    FileStoreError,
    classify_exception,
    format_error_context,
    format_error_for_logging,
)
from ..models import CatalogEntry, Downloaded, Failed, FetchResult, ScopeContext
from ..utils.http_session import FileStoreClient, RemoteResponse
from ..utils.io import _format_bytes, atomic_write_bytes

log = logging.getLogger(__name__)


def parse_api_error(response: RemoteResponse) -> Tuple[str, Optional[str]]:
    """Pull ``message`` and ``correlationId`` out of an error body.

    Bodies that are not the structured ``{"status":"ERROR",...}`` document fall
    back to the raw text, then to the HTTP reason phrase.
    """
    text = response.body.decode("utf-8", errors="replace").strip()
    try:
        payload = json.loads(text) if text else None
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        message = payload.get("message") or payload.get("status") or response.reason
        return str(message or f"HTTP {response.status_code}"), payload.get("correlationId")

    return text or response.reason or f"HTTP {response.status_code}", None


class FileStoreDownloadHandler:
    """
    Fetches one file store entry and writes it to its destination.

    Failures never propagate: they come back as ``Failed`` results carrying a
    classified error so the caller can decide whether the batch continues.
    """

    def __init__(self, client: FileStoreClient, scope: ScopeContext):
        self.client = client
        self.scope = scope

    def download(
        self,
        entry: CatalogEntry,
        destination: Path,
        *,
        cancel_event: Optional[threading.Event] = None,
    ) -> FetchResult:
        url = self.client.download_url(entry.identifier)
        context = ErrorContext(
            identifier=entry.identifier,
            operation="download",
            destination=str(destination),
            url=url,
        )

        try:
            response = self.client.fetch(
                url,
                params=self.scope.query_params(),
                cancel_event=cancel_event,
            )
            if not response.ok:
                message, correlation_id = parse_api_error(response)
                raise APIError(response.status_code, message, correlation_id, context=context)

            written = atomic_write_bytes(destination, response.body)
        except (FileStoreError, OSError, ValueError) as exc:
            return self._failed(entry, destination, classify_exception(exc, context))

        log.info("✅ %s → %s (%s)", entry.name, destination, _format_bytes(written))
        return Downloaded(entry=entry, destination=destination, bytes_written=written)

    def _failed(self, entry: CatalogEntry, destination: Path, error: FileStoreError) -> Failed:
        log.error("❌ %s (%s): %s", entry.name, entry.identifier, format_error_context(error))
        log.debug("error details: %s", format_error_for_logging(error))
        return Failed(entry=entry, error=error, destination=destination)
