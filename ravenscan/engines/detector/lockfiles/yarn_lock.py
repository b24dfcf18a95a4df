"""Parser for yarn.lock files (classic v1 and berry)."""

from __future__ import annotations

import re

from ravenscan.engines.detector.models import LockContents, LockFormat, ResolvedURL
from ravenscan.engines.detector.registry import register_lock_parser

# resolved "https://registry.yarnpkg.com/x/-/x-1.0.0.tgz#sha"  (berry: resolved: "...")
_RESOLVED_RE = re.compile(r'^\s+resolved:?\s+"?([^"\s]+)"?\s*$')


def _name_from_descriptor(descriptor: str) -> str | None:
    """``"@scope/pkg@npm:^1.0.0"`` -> ``@scope/pkg``; ``left-pad@^1.3.0`` -> ``left-pad``."""
    descriptor = descriptor.strip().strip('"')
    if not descriptor:
        return None
    if descriptor.startswith("@"):
        name, sep, _ = descriptor[1:].partition("@")
        return f"@{name}" if sep else None
    name, sep, _ = descriptor.partition("@")
    return name if sep and name else None


class YarnLockParser:
    format = LockFormat.YARN_LOCK
    filename = "yarn.lock"

    def parse(self, content: str, source: str) -> LockContents:
        names: dict[str, None] = {}
        urls: dict[str, None] = {}

        for line in content.splitlines():
            if not line.strip() or line.lstrip().startswith("#"):
                continue
            if not line[0].isspace() and line.rstrip().endswith(":"):
                # Entry header: one or more comma-separated descriptors.
                for descriptor in line.rstrip()[:-1].split(","):
                    name = _name_from_descriptor(descriptor)
                    if name:
                        names[name] = None
                continue
            m = _RESOLVED_RE.match(line)
            if m:
                urls[m.group(1)] = None

        return LockContents(
            source_file=source,
            format=self.format,
            urls=tuple(ResolvedURL(url=u, origin=self.format) for u in urls),
            package_names=tuple(names),
            raw_text=content,
        )


register_lock_parser(YarnLockParser())
