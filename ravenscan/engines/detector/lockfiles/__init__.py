"""Lock file parsers: auto-registered on import, in lookup order."""

from ravenscan.engines.detector.lockfiles import (
    package_lock,  # noqa: F401
    yarn_lock,  # noqa: F401
    pnpm_lock,  # noqa: F401
)
