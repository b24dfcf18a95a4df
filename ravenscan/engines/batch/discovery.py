"""Repository discovery: turn a directory or list file into repository paths."""

from __future__ import annotations

import os
from pathlib import Path

import structlog

log = structlog.get_logger("ravenscan.engine")


def read_repository_list(list_file: Path) -> list[str]:
    """One path per line; blank and ``#`` lines are ignored."""
    repos: list[str] = []
    for raw_line in list_file.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if not Path(line).is_dir():
            log.warning("discovery.not_a_directory", path=line, list_file=str(list_file))
            continue
        repos.append(line)
    return repos


def find_git_repositories(root: Path, max_depth: int = 3) -> list[str]:
    """Parents of ``.git`` directories at most *max_depth* levels below *root*."""
    root = Path(root)
    repos: list[str] = []
    for dirpath, dirnames, _ in os.walk(root):
        depth = len(Path(dirpath).relative_to(root).parts)
        if ".git" in dirnames and depth + 1 <= max_depth:
            repos.append(dirpath)
        dirnames[:] = [d for d in dirnames if d != ".git" and depth + 1 < max_depth]
    return sorted(repos)


def discover_repositories(target: Path, max_depth: int = 3) -> list[str]:
    target = Path(target)
    if target.is_file():
        log.info("discovery.list_file", path=str(target))
        return read_repository_list(target)
    if target.is_dir():
        log.info("discovery.directory", path=str(target), max_depth=max_depth)
        return find_git_repositories(target, max_depth)
    return []
