"""ProjectScanner: discover manifests under a project and run detection."""

from __future__ import annotations

from pathlib import Path

import structlog

# Ensure lock parsers are registered before any scan runs.
import ravenscan.engines.detector.lockfiles  # noqa: F401
from ravenscan.engines.detector.manifest import extract_manifest
from ravenscan.engines.detector.models import LockContents, ManifestContents, ProjectResult
from ravenscan.engines.detector.registry import co_located_locks, discover_manifests, extract_lock
from ravenscan.engines.detector.rules import detect
from ravenscan.engines.detector.signatures import DEFAULT_SIGNATURE, Signature
from ravenscan.exceptions import ParseError

log = structlog.get_logger("ravenscan.engine")


class ProjectScanner:
    """Scan one project root; one :class:`ProjectResult` per manifest found."""

    def __init__(self, signature: Signature = DEFAULT_SIGNATURE) -> None:
        self._signature = signature

    def __call__(self, project_root: Path) -> list[ProjectResult]:
        return self.scan(project_root)

    def scan(self, project_root: Path) -> list[ProjectResult]:
        """Return an empty list when the root holds no manifest at all."""
        project_root = Path(project_root)
        manifests = discover_manifests(project_root)
        if not manifests:
            log.info("scanner.no_manifest", project=str(project_root))
            return []
        return [self.scan_manifest(project_root, m) for m in manifests]

    def scan_manifest(self, project_root: Path, manifest_path: Path) -> ProjectResult:
        rel = manifest_path.relative_to(project_root).as_posix()
        result = ProjectResult(project_path=str(project_root), manifest_path=rel)

        try:
            manifest = extract_manifest(manifest_path, rel)
        except ParseError as exc:
            log.warning("scanner.manifest_parse_failed", manifest=rel, reason=exc.reason)
            result.error_detail = str(exc)
            result.parse_errors.append(str(exc))
            manifest = ManifestContents()

        locks: list[LockContents] = []
        for lock_path in co_located_locks(manifest_path):
            lock = self._extract_lock(project_root, lock_path, result)
            if lock is not None:
                locks.append(lock)

        result.findings = detect(
            manifest.dependencies,
            manifest.scripts,
            locks,
            self._signature,
            source_file=rel,
        )
        log.debug(
            "scanner.manifest_scanned",
            manifest=rel,
            locks=[lock.source_file for lock in locks],
            findings=len(result.findings),
        )
        return result

    @staticmethod
    def _extract_lock(
        project_root: Path, lock_path: Path, result: ProjectResult
    ) -> LockContents | None:
        """Extract one lock file, recording read and parse failures on *result*."""
        rel = lock_path.relative_to(project_root).as_posix()
        try:
            lock = extract_lock(lock_path, rel)
        except ParseError as exc:
            log.warning("scanner.lock_unreadable", lock=rel, reason=exc.reason)
            result.parse_errors.append(str(exc))
            return None
        if lock.parse_error is not None:
            log.warning("scanner.lock_parse_failed", lock=rel, reason=lock.parse_error)
            result.parse_errors.append(lock.parse_error)
        return lock


def scan_project(
    project_root: Path, signature: Signature = DEFAULT_SIGNATURE
) -> list[ProjectResult]:
    """Scan a local project directory (module-level convenience)."""
    return ProjectScanner(signature).scan(project_root)
