# fsmirror/pipeline.py
from __future__ import annotations

import logging
import threading
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from .classify import EntryKind, classify_entry
from .config import GlobalConfig, load_config
from .exceptions import ErrorContext, ErrorKind, FilesystemError, ValidationError, classify_exception
from .handlers import FileStoreDownloadHandler
from .models import CatalogBatch, CatalogEntry, Failed, FetchResult, ScopeContext, Skipped
from .scope import destination_for
from .utils import ConcurrentDownloadManager, ConcurrentResult, FileStoreClient, Summary

log = logging.getLogger(__name__)

WorkItem = Tuple[ScopeContext, CatalogEntry]

SKIP_REASON = "no file extension (folder or placeholder node)"


def process_entry(
    client: FileStoreClient,
    scope: ScopeContext,
    entry: CatalogEntry,
    root_dir: Path | str,
    *,
    cancel_event: Optional[threading.Event] = None,
) -> FetchResult:
    """Classify, resolve and download one entry. Never raises for per-entry failures."""
    if classify_entry(entry) is EntryKind.SKIP:
        log.debug("⏭️ %s (%s): %s", entry.name, entry.identifier, SKIP_REASON)
        return Skipped(entry=entry, reason=SKIP_REASON)

    try:
        destination = destination_for(root_dir, scope, entry.remote_path)
    except ValidationError as exc:
        error = FilesystemError(
            f"Invalid destination for {entry.remote_path!r}: {exc.message}",
            cause=exc,
            context=ErrorContext(identifier=entry.identifier, operation="resolve"),
        )
        log.error("❌ %s (%s): %s", entry.name, entry.identifier, error)
        return Failed(entry=entry, error=error)

    log.debug("⬇ %s [%s %s] → %s", entry.name, scope.level.value, scope, destination)
    return FileStoreDownloadHandler(client, scope).download(
        entry, destination, cancel_event=cancel_event
    )


class Pipeline:
    """Materialise a supplied catalog: classify → resolve → download, per entry."""

    def __init__(
        self,
        catalog_yaml: Optional[Path] = None,
        *,
        batches: Optional[Sequence[CatalogBatch]] = None,
        config: Optional[GlobalConfig] = None,
        client: Optional[FileStoreClient] = None,
        summary: Optional[Summary] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        if batches is None and catalog_yaml is None:
            raise ValueError("Pipeline needs a catalog file or catalog batches")

        self.config = config or load_config()
        self.batches: List[CatalogBatch] = (
            list(batches) if batches is not None else CatalogBatch.load_all(catalog_yaml)
        )
        self.root_dir = Path(self.config.paths.root_dir)
        self.summary = summary or Summary()
        self.cancel_event = cancel_event or threading.Event()
        self._client = client
        self._owns_client = client is None

    # ------------------------------------------------------------------ setup
    @property
    def client(self) -> FileStoreClient:
        if self._client is None:
            api = self.config.api
            self._client = FileStoreClient(
                api.base_url,
                self.config.require_api_key(),
                timeout=api.timeout,
                pool_maxsize=max(self.config.processing.workers, 10),
                verify_ssl=api.verify_ssl,
            )
        return self._client

    def work_items(self) -> List[WorkItem]:
        return [(batch.scope, entry) for batch in self.batches for entry in batch.entries]

    def _warn_duplicate_destinations(self, items: Sequence[WorkItem]) -> None:
        """Entries resolving to one path would overwrite each other (last write wins)."""
        seen: Dict[Path, List[str]] = defaultdict(list)
        for scope, entry in items:
            if classify_entry(entry) is EntryKind.SKIP:
                continue
            try:
                seen[destination_for(self.root_dir, scope, entry.remote_path)].append(entry.identifier)
            except ValidationError:
                continue
        for dest, identifiers in seen.items():
            if len(identifiers) > 1:
                log.warning("⚠️  %d entries resolve to %s: %s", len(identifiers), dest, ", ".join(identifiers))

    # ------------------------------------------------------------------ run
    def _process(self, item: WorkItem) -> FetchResult:
        scope, entry = item
        return process_entry(self.client, scope, entry, self.root_dir, cancel_event=self.cancel_event)

    def _to_fetch_result(self, res: ConcurrentResult) -> FetchResult:
        if res.success:
            return res.result
        _, entry = res.item
        error = classify_exception(res.error, ErrorContext(identifier=entry.identifier, operation="process"))
        return Failed(entry=entry, error=error)

    def _is_fatal(self, res: ConcurrentResult) -> bool:
        if not self.config.processing.abort_on_filesystem_error:
            return False
        result = self._to_fetch_result(res)
        return isinstance(result, Failed) and result.error.kind is ErrorKind.FILESYSTEM

    def run(self) -> Summary:
        items = self.work_items()
        lg = logging.getLogger("summary")
        lg.info("🚀 Materialising %d entries into %s (%d workers)",
                len(items), self.root_dir, self.config.processing.workers)

        self._warn_duplicate_destinations(items)
        # Fail before spawning workers when credentials are missing
        _ = self.client

        stop_event = threading.Event()
        manager = ConcurrentDownloadManager(self.config.processing.workers)
        try:
            results = manager.execute_concurrent(
                items,
                self._process,
                should_stop=self._is_fatal,
                stop_event=stop_event,
            )
        finally:
            if self._owns_client and self._client is not None:
                self._client.close()

        for res in results:
            scope, _ = res.item
            self.summary.record(scope, self._to_fetch_result(res))

        if stop_event.is_set() and len(results) < len(items):
            self.summary.aborted = True
            log.error("🛑 Aborted after a filesystem error: %d of %d entries not attempted",
                      len(items) - len(results), len(items))

        if self.config.processing.failed_report:
            self.summary.write_failed_report(self.config.processing.failed_report)

        return self.summary
