# fsmirror/utils/run_summary.py
from __future__ import annotations

import logging
import threading
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from ..models import CatalogBatch, CatalogEntry, Downloaded, Failed, FetchResult, ScopeContext, Skipped

MAX_LOGGED_ERRORS = 10


@dataclass(slots=True)
class FailureRecord:
    scope: ScopeContext
    identifier: str
    name: str
    remote_path: str
    destination: Optional[str]
    kind: str
    message: str
    correlation_id: Optional[str] = None


@dataclass(slots=True)
class Summary:
    downloads: Counter = field(default_factory=Counter)
    bytes_written: int = 0
    failures: List[FailureRecord] = field(default_factory=list)
    aborted: bool = False
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    # ------------------------------------------------------------------ API
    def record(self, scope: ScopeContext, result: FetchResult) -> None:
        """Count one per-entry result; safe to call from worker threads."""
        with self._lock:
            if isinstance(result, Downloaded):
                self.downloads["done"] += 1
                self.bytes_written += result.bytes_written
            elif isinstance(result, Skipped):
                self.downloads["skip"] += 1
            elif isinstance(result, Failed):
                self.downloads["error"] += 1
                self.failures.append(
                    FailureRecord(
                        scope=scope,
                        identifier=result.entry.identifier,
                        name=result.entry.name,
                        remote_path=result.entry.remote_path,
                        destination=str(result.destination) if result.destination else None,
                        kind=result.error.kind.value,
                        message=result.error.message,
                        correlation_id=getattr(result.error, "correlation_id", None),
                    )
                )

    @property
    def total(self) -> int:
        return sum(self.downloads.values())

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)

    # ------------------------------------------------------------------ dump
    def dump(self) -> None:
        lg = logging.getLogger("summary")
        lg.info("📥 Download summary ▸ done=%d skip=%d error=%d total=%d bytes=%d",
                self.downloads["done"], self.downloads["skip"],
                self.downloads["error"], self.total, self.bytes_written)

        if self.aborted:
            lg.info("🛑 Run aborted after a filesystem error")

        if self.failures:
            lg.info("🚨 First errors:")
            for rec in self.failures[:MAX_LOGGED_ERRORS]:
                lg.info("    • %s [%s] → %s: %s", rec.identifier, rec.kind,
                        rec.destination or "-", rec.message)
            if len(self.failures) > MAX_LOGGED_ERRORS:
                lg.info("    … and %d more", len(self.failures) - MAX_LOGGED_ERRORS)

    def failed_batches(self) -> List[CatalogBatch]:
        """Failed entries regrouped by scope, in the catalog input format."""
        grouped: Dict[ScopeContext, List[CatalogEntry]] = {}
        for rec in self.failures:
            grouped.setdefault(rec.scope, []).append(
                CatalogEntry(identifier=rec.identifier, name=rec.name, remote_path=rec.remote_path)
            )
        return [CatalogBatch(scope=scope, entries=entries) for scope, entries in grouped.items()]

    def write_failed_report(self, path: Path | str) -> Optional[Path]:
        """Write failed entries as a catalog so just that subset can be re-run."""
        if not self.failures:
            return None
        out = CatalogBatch.dump_all(self.failed_batches(), path)
        logging.getLogger("summary").info("📝 %d failed entries written to %s", len(self.failures), out)
        return out
