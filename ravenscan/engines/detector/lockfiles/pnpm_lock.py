"""Parser for pnpm-lock.yaml files."""

from __future__ import annotations

import re

import yaml

from ravenscan.engines.detector.models import LockContents, LockFormat, ResolvedURL
from ravenscan.engines.detector.registry import register_lock_parser
from ravenscan.exceptions import ParseError

# Package keys across lockfile versions:
#   v5:  /name/1.0.0   /@scope/name/1.0.0_peer
#   v6:  /name@1.0.0   /@scope/name@1.0.0(peer@1.0.0)
#   v9:  name@1.0.0    @scope/name@1.0.0
_KEY_RE = re.compile(r"^/?((?:@[^/@]+/)?[^/@(]+)[/@]")


class PnpmLockParser:
    format = LockFormat.PNPM_LOCK_YAML
    filename = "pnpm-lock.yaml"

    def parse(self, content: str, source: str) -> LockContents:
        try:
            data = yaml.safe_load(content)
        except (yaml.YAMLError, ValueError, RecursionError) as exc:
            # ValueError: out-of-range scalars such as "2020-13-45".
            raise ParseError(source, f"invalid YAML: {exc}") from exc
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ParseError(source, "top-level value is not a mapping")

        names: dict[str, None] = {}
        urls: dict[str, None] = {}

        for section in ("packages", "snapshots"):
            block = data.get(section)
            if not isinstance(block, dict):
                continue
            for key in block:
                m = _KEY_RE.match(str(key))
                if m:
                    names[m.group(1)] = None

        try:
            self._collect_tarballs(data, urls)
        except RecursionError as exc:
            # Self-referencing aliases.
            raise ParseError(source, "document nested too deeply") from exc

        return LockContents(
            source_file=source,
            format=self.format,
            urls=tuple(ResolvedURL(url=u, origin=self.format) for u in urls),
            package_names=tuple(names),
            raw_text=content,
        )

    def _collect_tarballs(self, node, urls: dict[str, None]) -> None:
        """Collect ``tarball`` values, including those nested in ``resolution``."""
        if isinstance(node, dict):
            for key, value in node.items():
                if key == "tarball" and isinstance(value, str):
                    urls[value] = None
                else:
                    self._collect_tarballs(value, urls)
        elif isinstance(node, list):
            for item in node:
                self._collect_tarballs(item, urls)


register_lock_parser(PnpmLockParser())
