"""Data models for batch scanning."""

from __future__ import annotations

from dataclasses import dataclass

from ravenscan.engines.detector.models import Finding, ProjectResult, ProjectStatus

MAX_CONDENSED_FINDINGS = 3


@dataclass(frozen=True)
class ScanRecord:
    """Outcome for one repository, produced exactly once by one worker.

    A repository with several manifests collapses to one record: infected if
    any manifest is infected, error if any errored and none is infected.
    ``error_detail`` is set when the worker itself failed.
    """

    repository_path: str
    results: tuple[ProjectResult, ...] = ()
    elapsed_ms: int = 0
    error_detail: str | None = None

    @property
    def status(self) -> ProjectStatus:
        statuses = {r.status for r in self.results}
        if ProjectStatus.INFECTED in statuses:
            return ProjectStatus.INFECTED
        if self.error_detail is not None or ProjectStatus.ERROR in statuses:
            return ProjectStatus.ERROR
        return ProjectStatus.CLEAN

    @property
    def no_manifest(self) -> bool:
        return self.error_detail is None and not self.results

    @property
    def findings(self) -> list[Finding]:
        return [f for r in self.results for f in r.findings]

    def condensed(self, limit: int = MAX_CONDENSED_FINDINGS) -> str:
        """Up to *limit* findings, or the error diagnostic, on one line."""
        if self.status is ProjectStatus.INFECTED:
            return "; ".join(f.summary() for f in self.findings[:limit])
        if self.status is ProjectStatus.ERROR:
            if self.error_detail is not None:
                return self.error_detail
            return "; ".join(r.error_detail for r in self.results if r.error_detail)
        return ""


@dataclass(frozen=True)
class RepositoryEntry:
    path: str
    findings_summary: str


@dataclass(frozen=True)
class BatchSummary:
    total: int
    scanned: int
    clean: int
    infected: int
    errors: int
    duration_seconds: int
    scan_date: str
    infected_list: tuple[RepositoryEntry, ...] = ()
    error_list: tuple[RepositoryEntry, ...] = ()
    clean_list: tuple[str, ...] = ()
