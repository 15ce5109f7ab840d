"""
Bounded worker pool for per-entry downloads.

Every worker runs the full classify → resolve → download pipeline for one
item; workers share nothing but the HTTP client and the filesystem.
"""
from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

log = logging.getLogger(__name__)

DEFAULT_WORKERS = 4


@dataclass
class ConcurrentResult:
    """Result of one processed item."""
    success: bool
    item: Any
    result: Any = None
    error: Optional[BaseException] = None
    duration: float = 0.0


class ConcurrentDownloadManager:
    """
    Run a processor over items with at most ``max_workers`` in flight.

    Items are submitted lazily, so a stop request (``stop_event`` or the
    ``should_stop`` predicate) prevents not-yet-started items from being
    scheduled while in-flight ones are allowed to finish.
    """

    def __init__(self, default_max_workers: Optional[int] = None):
        """
        Args:
            default_max_workers: Worker count used when ``execute_concurrent``
                is not given one.
        """
        self.default_max_workers = default_max_workers or DEFAULT_WORKERS
        log.debug("🚀 ConcurrentDownloadManager initialized with default_max_workers=%s",
                  self.default_max_workers)

    def execute_concurrent(
        self,
        items: Iterable[Any],
        processor: Callable[[Any], Any],
        max_workers: Optional[int] = None,
        should_stop: Optional[Callable[[ConcurrentResult], bool]] = None,
        stop_event: Optional[threading.Event] = None,
    ) -> List[ConcurrentResult]:
        """
        Execute ``processor`` on every item with bounded concurrency.

        Args:
            items: Items to process.
            processor: Function to process each item.
            max_workers: Number of worker threads (overrides default).
            should_stop: Called with each finished result; returning True
                stops scheduling of further items.
            stop_event: Set by the caller (or by ``should_stop``) to stop
                scheduling further items.

        Returns:
            One ConcurrentResult per started item, in completion order.
        """
        workers = max_workers or self.default_max_workers
        stop_event = stop_event or threading.Event()
        pending_items = iter(items)
        results: List[ConcurrentResult] = []
        in_flight: Dict[Future, Tuple[Any, float]] = {}

        def submit_next(executor: ThreadPoolExecutor) -> bool:
            if stop_event.is_set():
                return False
            try:
                item = next(pending_items)
            except StopIteration:
                return False
            in_flight[executor.submit(processor, item)] = (item, time.monotonic())
            return True

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="fsmirror") as executor:
            while len(in_flight) < workers and submit_next(executor):
                pass

            while in_flight:
                done, _ = wait(set(in_flight), return_when=FIRST_COMPLETED)
                for future in done:
                    item, started = in_flight.pop(future)
                    result = self._collect(future, item, time.monotonic() - started)
                    results.append(result)

                    if should_stop is not None and should_stop(result):
                        if not stop_event.is_set():
                            log.warning("💥 Stop requested, no further items will be scheduled")
                        stop_event.set()

                    submit_next(executor)

        success_count = sum(1 for r in results if r.success)
        log.debug("📊 Concurrent execution completed: %d/%d successful", success_count, len(results))
        return results

    def _collect(self, future: Future, item: Any, duration: float) -> ConcurrentResult:
        try:
            return ConcurrentResult(success=True, item=item, result=future.result(), duration=duration)
        except Exception as e:
            log.error("❌ Processor failed for item %s (%.2fs) - %s", self._get_item_name(item), duration, e)
            return ConcurrentResult(success=False, item=item, error=e, duration=duration)

    def _get_item_name(self, item: Any) -> str:
        """Get a readable name for an item."""
        if hasattr(item, "identifier"):
            return str(item.identifier)
        if isinstance(item, tuple) and item and hasattr(item[-1], "identifier"):
            return str(item[-1].identifier)
        return str(item)
