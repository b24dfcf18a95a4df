"""WorkerPool: drain a WorkQueue with a fixed number of concurrent workers."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Sequence
from pathlib import Path

import structlog

from ravenscan.engines.batch.models import ScanRecord
from ravenscan.engines.batch.queue import WorkItem, WorkQueue
from ravenscan.engines.detector.models import ProjectResult

log = structlog.get_logger("ravenscan.engine")

ScannerFn = Callable[[Path], Sequence[ProjectResult]]
ProgressFn = Callable[[int, int, ScanRecord], None]


class WorkerPool:
    """Run *scanner_fn* over every queued repository.

    Each worker is an asyncio task that takes paths until the queue reports
    empty and runs the (blocking) scanner in a thread via
    ``asyncio.to_thread``. Workers write only to their own record list;
    lists are merged after every worker has exited.
    """

    def __init__(
        self,
        scanner_fn: ScannerFn,
        worker_count: int = 4,
        on_record: ProgressFn | None = None,
    ) -> None:
        if worker_count < 1:
            raise ValueError(f"worker_count must be >= 1, got {worker_count}")
        self._scanner_fn = scanner_fn
        self._worker_count = worker_count
        self._on_record = on_record

    async def run(self, queue: WorkQueue) -> list[ScanRecord]:
        """Return one record per queued path, in input order."""
        outputs: list[list[tuple[int, ScanRecord]]] = [[] for _ in range(self._worker_count)]
        tasks = [
            asyncio.create_task(self._worker(i, queue, outputs[i]), name=f"scan-worker-{i}")
            for i in range(self._worker_count)
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)
        for worker_id, outcome in enumerate(results):
            if isinstance(outcome, BaseException):
                log.error("pool.worker_died", worker=worker_id, error=repr(outcome))

        merged = [pair for out in outputs for pair in out]
        for item in queue.in_flight():
            merged.append((item.index, _error_record(item, "worker exited before completing scan")))
        if queue.closed:
            undispatched = "scan cancelled before dispatch"
        else:
            undispatched = "no worker left to scan repository"
        for item in queue.pending():
            merged.append((item.index, _error_record(item, undispatched)))

        merged.sort(key=lambda pair: pair[0])
        return [record for _, record in merged]

    async def _worker(
        self, worker_id: int, queue: WorkQueue, out: list[tuple[int, ScanRecord]]
    ) -> None:
        while True:
            item = queue.take()
            if item is None:
                return
            record = await self._scan_one(worker_id, item)
            out.append((item.index, record))
            completed = queue.complete(item)
            log.debug(
                "pool.record",
                worker=worker_id,
                repository=item.path,
                status=record.status.value,
                elapsed_ms=record.elapsed_ms,
            )
            if self._on_record is not None:
                try:
                    self._on_record(completed, len(queue), record)
                except Exception:
                    log.exception("pool.progress_callback_failed", repository=item.path)

    async def _scan_one(self, worker_id: int, item: WorkItem) -> ScanRecord:
        start = time.monotonic()
        try:
            results = await asyncio.to_thread(self._scanner_fn, Path(item.path))
        except Exception as exc:
            log.exception("pool.worker_fault", worker=worker_id, repository=item.path)
            return ScanRecord(
                repository_path=item.path,
                elapsed_ms=_elapsed_ms(start),
                error_detail=f"{type(exc).__name__}: {exc}",
            )
        return ScanRecord(
            repository_path=item.path,
            results=tuple(results),
            elapsed_ms=_elapsed_ms(start),
        )


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def _error_record(item: WorkItem, detail: str) -> ScanRecord:
    return ScanRecord(repository_path=item.path, error_detail=detail)


def run_batch(
    paths: Sequence[str | Path],
    scanner_fn: ScannerFn,
    worker_count: int = 4,
    on_record: ProgressFn | None = None,
) -> list[ScanRecord]:
    """Synchronous entry point: queue *paths* and scan them to completion."""
    queue = WorkQueue(paths)
    pool = WorkerPool(scanner_fn, worker_count, on_record=on_record)
    return asyncio.run(pool.run(queue))
