"""Lock parser registry and manifest discovery."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Protocol, runtime_checkable

from ravenscan.engines.detector.manifest import MANIFEST_FILENAME
from ravenscan.engines.detector.models import LockContents, LockFormat
from ravenscan.exceptions import ParseError

# Dependency-install trees and framework build/cache output.
EXCLUDED_DIRS = frozenset({"node_modules", ".next", "dist", "build", ".nuxt", ".output", ".git"})


@runtime_checkable
class LockParser(Protocol):
    """Interface that every lock file parser must satisfy."""

    format: LockFormat
    filename: str

    def parse(self, content: str, source: str) -> LockContents: ...


LOCK_PARSERS: dict[str, LockParser] = {}


def register_lock_parser(parser: LockParser) -> None:
    """Register a parser instance by the lock filename it handles."""
    LOCK_PARSERS[parser.filename] = parser


def lock_parser_for(filename: str) -> LockParser | None:
    return LOCK_PARSERS.get(filename)


def extract_lock(path: Path, source: str | None = None) -> LockContents:
    """Read a lock file and parse it with the parser matching its filename.

    Malformed content does not raise: the result carries only the raw text
    and ``parse_error`` is set. Raises :class:`ParseError` for unreadable
    files and unknown filenames.
    """
    label = source or path.name
    parser = lock_parser_for(path.name)
    if parser is None:
        raise ParseError(label, "unsupported lock file format")
    raw = _read_lock(path, label)
    try:
        return parser.parse(raw, label)
    except ParseError as exc:
        return LockContents(
            source_file=label, format=parser.format, raw_text=raw, parse_error=str(exc)
        )


def _read_lock(path: Path, source: str) -> str:
    try:
        return path.read_text(encoding="utf-8-sig", errors="replace")
    except OSError as exc:
        raise ParseError(source, str(exc)) from exc


def discover_manifests(project_root: Path) -> list[Path]:
    """Return every package.json under *project_root*, sorted.

    Directories are excluded by exact path-segment match below the root, so
    a root that itself lives under ``build/`` is still scanned, and a
    directory such as ``builder`` is not skipped.
    """
    found: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(project_root):
        dirnames[:] = sorted(d for d in dirnames if d not in EXCLUDED_DIRS)
        if MANIFEST_FILENAME in filenames:
            found.append(Path(dirpath) / MANIFEST_FILENAME)
    return sorted(found)


def co_located_locks(manifest: Path) -> list[Path]:
    """Lock files next to *manifest*, in registry order."""
    return [
        manifest.parent / filename
        for filename in LOCK_PARSERS
        if (manifest.parent / filename).is_file()
    ]
