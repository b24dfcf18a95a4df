"""Shared fixtures for ravenscan tests: throwaway npm projects on disk."""

from __future__ import annotations

import json
from pathlib import Path

import pytest


@pytest.fixture
def make_project(tmp_path):
    """Factory: write a package.json (and optional lock files) into a directory."""

    def _make(
        name: str = "app",
        manifest: dict | str | None = None,
        locks: dict[str, str] | None = None,
        root: Path | None = None,
    ) -> Path:
        project = (root or tmp_path) / name
        project.mkdir(parents=True, exist_ok=True)
        if manifest is not None:
            text = manifest if isinstance(manifest, str) else json.dumps(manifest, indent=2)
            (project / "package.json").write_text(text)
        for filename, content in (locks or {}).items():
            (project / filename).write_text(content)
        return project

    return _make
