"""Data models for the detection engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class DependencySection(str, Enum):
    DEPENDENCIES = "dependencies"
    DEV_DEPENDENCIES = "devDependencies"
    OPTIONAL_DEPENDENCIES = "optionalDependencies"


class ScriptKind(str, Enum):
    PREINSTALL = "preinstall"
    POSTINSTALL = "postinstall"
    INSTALL = "install"


class LockFormat(str, Enum):
    PACKAGE_LOCK_JSON = "packageLockJSON"
    YARN_LOCK = "yarnLock"
    PNPM_LOCK_YAML = "pnpmLockYAML"


class FindingKind(str, Enum):
    MALICIOUS_PACKAGE = "MaliciousPackage"
    REMOTE_DYNAMIC_DEPENDENCY = "RemoteDynamicDependency"
    SUSPICIOUS_GIT_DEPENDENCY = "SuspiciousGitDependency"
    MALICIOUS_DOMAIN_MATCH = "MaliciousDomainMatch"
    SUSPICIOUS_INSTALL_SCRIPT = "SuspiciousInstallScript"
    MALICIOUS_DOMAIN_IN_LOCK = "MaliciousDomainInLock"


class Severity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"


class ProjectStatus(str, Enum):
    CLEAN = "clean"
    INFECTED = "infected"
    ERROR = "error"


@dataclass(frozen=True)
class DependencyEntry:
    """One dependency declared in a manifest, in any of the three sections."""

    name: str
    specifier: str
    source_section: DependencySection


@dataclass(frozen=True)
class InstallScript:
    kind: ScriptKind
    command: str


@dataclass(frozen=True)
class ResolvedURL:
    url: str
    origin: LockFormat


@dataclass(frozen=True)
class ManifestContents:
    """Normalized view of one package.json."""

    dependencies: tuple[DependencyEntry, ...] = ()
    scripts: tuple[InstallScript, ...] = ()


@dataclass(frozen=True)
class LockContents:
    """Normalized view of one lock file.

    When structured parsing failed, ``parse_error`` holds the diagnostic and
    only ``raw_text`` is populated, so the raw malicious-domain check still
    runs.
    """

    source_file: str
    format: LockFormat
    urls: tuple[ResolvedURL, ...] = ()
    package_names: tuple[str, ...] = ()
    raw_text: str = ""
    parse_error: str | None = None


_LABELS = {
    FindingKind.MALICIOUS_PACKAGE: "Malicious package",
    FindingKind.REMOTE_DYNAMIC_DEPENDENCY: "Remote Dynamic Dependency",
    FindingKind.SUSPICIOUS_GIT_DEPENDENCY: "Suspicious git dependency",
    FindingKind.MALICIOUS_DOMAIN_MATCH: "Malicious domain",
    FindingKind.SUSPICIOUS_INSTALL_SCRIPT: "Suspicious install script",
    FindingKind.MALICIOUS_DOMAIN_IN_LOCK: "Malicious domain in lock file",
}


@dataclass(frozen=True)
class Finding:
    kind: FindingKind
    detail: str
    severity: Severity
    source_file: str

    def summary(self) -> str:
        """One-line condensed description, e.g. ``Malicious package: fq-ui (package.json)``."""
        marker = "CRITICAL " if self.severity is Severity.CRITICAL else ""
        return f"{marker}{_LABELS[self.kind]}: {self.detail} ({self.source_file})"

    def to_dict(self) -> dict[str, str]:
        return {
            "kind": self.kind.value,
            "detail": self.detail,
            "severity": self.severity.value,
            "source_file": self.source_file,
        }


@dataclass
class ProjectResult:
    """Outcome of scanning one manifest and its co-located lock files."""

    project_path: str
    manifest_path: str
    findings: list[Finding] = field(default_factory=list)
    error_detail: str | None = None
    parse_errors: list[str] = field(default_factory=list)

    @property
    def status(self) -> ProjectStatus:
        if self.findings:
            return ProjectStatus.INFECTED
        if self.error_detail is not None:
            return ProjectStatus.ERROR
        return ProjectStatus.CLEAN
