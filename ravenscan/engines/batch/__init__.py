"""Batch engine: scan many repositories concurrently and report once."""

from ravenscan.engines.batch.aggregator import exit_code, summarize
from ravenscan.engines.batch.models import BatchSummary, ScanRecord
from ravenscan.engines.batch.pool import WorkerPool, run_batch
from ravenscan.engines.batch.queue import WorkQueue

__all__ = [
    "BatchSummary",
    "ScanRecord",
    "WorkQueue",
    "WorkerPool",
    "exit_code",
    "run_batch",
    "summarize",
]
