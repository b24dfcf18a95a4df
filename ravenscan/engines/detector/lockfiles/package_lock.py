"""Parser for npm package-lock.json files (lockfileVersion 1, 2 and 3)."""

from __future__ import annotations

import json

from ravenscan.engines.detector.models import LockContents, LockFormat, ResolvedURL
from ravenscan.engines.detector.registry import register_lock_parser
from ravenscan.exceptions import ParseError

_PREFIX = "node_modules/"


def _name_from_key(key: str) -> str:
    # "node_modules/a/node_modules/@scope/b" -> "@scope/b"
    idx = key.rfind(_PREFIX)
    return key[idx + len(_PREFIX):] if idx != -1 else key


class PackageLockParser:
    format = LockFormat.PACKAGE_LOCK_JSON
    filename = "package-lock.json"

    def parse(self, content: str, source: str) -> LockContents:
        try:
            data = json.loads(content)
        except (ValueError, RecursionError) as exc:
            raise ParseError(source, f"invalid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise ParseError(source, "top-level value is not an object")

        names: dict[str, None] = {}
        urls: dict[str, None] = {}
        try:
            self._collect(data, names, urls)
        except RecursionError as exc:
            raise ParseError(source, "dependency tree nested too deeply") from exc

        return LockContents(
            source_file=source,
            format=self.format,
            urls=tuple(ResolvedURL(url=u, origin=self.format) for u in urls),
            package_names=tuple(names),
            raw_text=content,
        )

    def _collect(self, data: dict, names: dict[str, None], urls: dict[str, None]) -> None:
        # v2/v3: flat "packages" map keyed by install path; "" is the root.
        packages = data.get("packages")
        if isinstance(packages, dict):
            for key, info in packages.items():
                if key:
                    names[_name_from_key(key)] = None
                if isinstance(info, dict) and isinstance(info.get("name"), str) and key:
                    names[info["name"]] = None

        # v1 (and v2 compat): nested "dependencies" tree.
        self._walk_dependencies(data.get("dependencies"), names)

        self._collect_resolved(data, urls)

    def _walk_dependencies(self, deps, names: dict[str, None]) -> None:
        if not isinstance(deps, dict):
            return
        for name, info in deps.items():
            names[name] = None
            if isinstance(info, dict):
                self._walk_dependencies(info.get("dependencies"), names)

    def _collect_resolved(self, node, urls: dict[str, None]) -> None:
        """Collect every ``resolved`` string anywhere in the tree."""
        if isinstance(node, dict):
            for key, value in node.items():
                if key == "resolved" and isinstance(value, str):
                    urls[value] = None
                else:
                    self._collect_resolved(value, urls)
        elif isinstance(node, list):
            for item in node:
                self._collect_resolved(item, urls)


register_lock_parser(PackageLockParser())
