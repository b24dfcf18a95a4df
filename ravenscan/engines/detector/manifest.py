"""Extractor for package.json manifests."""

from __future__ import annotations

import json
from pathlib import Path

import structlog

from ravenscan.engines.detector.models import (
    DependencyEntry,
    DependencySection,
    InstallScript,
    ManifestContents,
    ScriptKind,
)
from ravenscan.exceptions import ParseError

log = structlog.get_logger("ravenscan.engine")

MANIFEST_FILENAME = "package.json"


def parse_manifest(content: str, source: str = MANIFEST_FILENAME) -> ManifestContents:
    """Normalize manifest text into dependencies and install scripts.

    Missing or mistyped sections yield empty results; only invalid JSON
    raises :class:`ParseError`.
    """
    try:
        data = json.loads(content)
    except (ValueError, RecursionError) as exc:
        raise ParseError(source, f"invalid JSON: {exc}") from exc

    if not isinstance(data, dict):
        log.warning("manifest.not_an_object", source=source)
        return ManifestContents()

    deps: list[DependencyEntry] = []
    for section in DependencySection:
        block = data.get(section.value)
        if not isinstance(block, dict):
            continue
        for name, specifier in block.items():
            if not isinstance(specifier, str):
                continue
            deps.append(DependencyEntry(name=name, specifier=specifier, source_section=section))

    scripts: list[InstallScript] = []
    block = data.get("scripts")
    if isinstance(block, dict):
        for kind in ScriptKind:
            command = block.get(kind.value)
            if isinstance(command, str):
                scripts.append(InstallScript(kind=kind, command=command))

    return ManifestContents(dependencies=tuple(deps), scripts=tuple(scripts))


def extract_manifest(path: Path, source: str | None = None) -> ManifestContents:
    """Read and parse the manifest at *path*; raises :class:`ParseError`."""
    label = source or path.name
    try:
        content = path.read_text(encoding="utf-8-sig", errors="replace")
    except OSError as exc:
        raise ParseError(label, str(exc)) from exc
    return parse_manifest(content, label)
