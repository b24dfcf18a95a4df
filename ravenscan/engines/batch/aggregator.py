"""ResultAggregator: fold ScanRecords into a BatchSummary."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone

import structlog

from ravenscan.engines.batch.models import BatchSummary, RepositoryEntry, ScanRecord
from ravenscan.engines.detector.models import ProjectStatus

log = structlog.get_logger("ravenscan.engine")

EXIT_CLEAN = 0
EXIT_INFECTED = 1
EXIT_ERROR = 2


def summarize(
    records: Iterable[ScanRecord],
    total: int | None = None,
    duration_seconds: int = 0,
    scan_date: datetime | None = None,
) -> BatchSummary:
    """Build a summary whose lists are sorted by path, independent of record order.

    *total* defaults to the number of records; when given it should be the
    number of repositories submitted, so a dropped record shows up as a
    ``scanned != total`` mismatch.
    """
    ordered = sorted(records, key=lambda r: r.repository_path)
    if total is None:
        total = len(ordered)

    infected: list[RepositoryEntry] = []
    errors: list[RepositoryEntry] = []
    clean: list[str] = []
    for record in ordered:
        status = record.status
        if status is ProjectStatus.INFECTED:
            infected.append(RepositoryEntry(record.repository_path, record.condensed()))
        elif status is ProjectStatus.ERROR:
            errors.append(RepositoryEntry(record.repository_path, record.condensed()))
        else:
            clean.append(record.repository_path)

    if len(ordered) != total:
        log.warning("aggregator.record_count_mismatch", total=total, scanned=len(ordered))

    when = scan_date or datetime.now(timezone.utc)
    return BatchSummary(
        total=total,
        scanned=len(ordered),
        clean=len(clean),
        infected=len(infected),
        errors=len(errors),
        duration_seconds=duration_seconds,
        scan_date=when.strftime("%Y-%m-%dT%H:%M:%SZ"),
        infected_list=tuple(infected),
        error_list=tuple(errors),
        clean_list=tuple(clean),
    )


def exit_code(summary: BatchSummary) -> int:
    """0 all clean, 1 any infected, 2 errors without infections."""
    if summary.infected:
        return EXIT_INFECTED
    if summary.errors:
        return EXIT_ERROR
    return EXIT_CLEAN
