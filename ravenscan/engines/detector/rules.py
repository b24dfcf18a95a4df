"""Detection rules: pure functions from extracted data to findings.

Every rule takes already-extracted data plus a :class:`Signature` and
returns a list of :class:`Finding`. Nothing here touches the filesystem or
the network, so the same inputs always produce the same findings in the
same order.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from urllib.parse import urlsplit

from ravenscan.engines.detector.models import (
    DependencyEntry,
    Finding,
    FindingKind,
    InstallScript,
    LockContents,
    Severity,
)
from ravenscan.engines.detector.signatures import DEFAULT_SIGNATURE, Signature

_HTTP_RE = re.compile(r"^https?://", re.IGNORECASE)
_GIT_RE = re.compile(r"^git(\+https?|\+ssh)?://")
_GITHUB_ARCHIVE_RE = re.compile(r"^/[^/]+/[^/]+/(tarball|zipball)/")

ALLOWED_REGISTRY_HOSTS = frozenset({"registry.npmjs.org", "registry.yarnpkg.com"})
TRUSTED_GIT_HOSTS = frozenset({"github.com", "gitlab.com", "bitbucket.org"})


def is_remote_url(specifier: str) -> bool:
    return bool(_HTTP_RE.match(specifier))


def is_allowed_url(url: str) -> bool:
    """True for public registry URLs and GitHub tarball/zipball archives."""
    try:
        parts = urlsplit(url)
        host = (parts.hostname or "").lower()
    except ValueError:
        return False
    if host in ALLOWED_REGISTRY_HOSTS:
        return True
    return host == "github.com" and bool(_GITHUB_ARCHIVE_RE.match(parts.path))


def mentions_malicious_host(text: str, signature: Signature) -> bool:
    return signature.domain in text or signature.ip in text


def _git_host(specifier: str) -> str:
    try:
        return (urlsplit(specifier).hostname or "").lower()
    except ValueError:
        return ""


def check_malicious_packages(
    deps: Sequence[DependencyEntry],
    signature: Signature,
    source_file: str,
) -> list[Finding]:
    """Exact-name matches only; ``unused-imports-x`` is not ``unused-imports``."""
    return [
        Finding(FindingKind.MALICIOUS_PACKAGE, dep.name, Severity.CRITICAL, source_file)
        for dep in deps
        if dep.name in signature.package_names
    ]


def check_remote_dependencies(
    deps: Sequence[DependencyEntry],
    signature: Signature,
    source_file: str,
) -> list[Finding]:
    findings: list[Finding] = []
    for dep in deps:
        finding = _remote_url_finding(dep.specifier, signature, source_file)
        if finding is not None:
            findings.append(finding)
    return findings


def _remote_url_finding(url: str, signature: Signature, source_file: str) -> Finding | None:
    if not is_remote_url(url) or is_allowed_url(url):
        return None
    severity = Severity.CRITICAL if mentions_malicious_host(url, signature) else Severity.WARNING
    return Finding(FindingKind.REMOTE_DYNAMIC_DEPENDENCY, url, severity, source_file)


def check_malicious_domain(
    deps: Sequence[DependencyEntry],
    scripts: Sequence[InstallScript],
    signature: Signature,
    source_file: str,
) -> list[Finding]:
    """Any specifier or install command naming the malicious domain or IP."""
    findings = [
        Finding(FindingKind.MALICIOUS_DOMAIN_MATCH, dep.specifier, Severity.CRITICAL, source_file)
        for dep in deps
        if mentions_malicious_host(dep.specifier, signature)
    ]
    findings.extend(
        Finding(
            FindingKind.MALICIOUS_DOMAIN_MATCH,
            f"{script.kind.value}: {script.command}",
            Severity.CRITICAL,
            source_file,
        )
        for script in scripts
        if mentions_malicious_host(script.command, signature)
    )
    return findings


def check_git_dependencies(deps: Sequence[DependencyEntry], source_file: str) -> list[Finding]:
    """Git specifiers on hosts other than GitHub/GitLab/Bitbucket.

    Heuristic: legitimate private git servers are flagged too.
    """
    return [
        Finding(FindingKind.SUSPICIOUS_GIT_DEPENDENCY, dep.specifier, Severity.WARNING, source_file)
        for dep in deps
        if _GIT_RE.match(dep.specifier) and _git_host(dep.specifier) not in TRUSTED_GIT_HOSTS
    ]


def check_install_scripts(
    scripts: Sequence[InstallScript],
    signature: Signature,
    source_file: str,
) -> list[Finding]:
    findings: list[Finding] = []
    for script in scripts:
        if any(p.search(script.command) for p in signature.script_patterns):
            findings.append(
                Finding(
                    FindingKind.SUSPICIOUS_INSTALL_SCRIPT,
                    f"{script.kind.value}: {script.command}",
                    Severity.WARNING,
                    source_file,
                )
            )
    return findings


def check_lock_file(lock: LockContents, signature: Signature) -> list[Finding]:
    findings = [
        Finding(FindingKind.MALICIOUS_PACKAGE, name, Severity.CRITICAL, lock.source_file)
        for name in lock.package_names
        if name in signature.package_names
    ]
    for resolved in lock.urls:
        finding = _remote_url_finding(resolved.url, signature, lock.source_file)
        if finding is not None:
            findings.append(finding)
    # Raw scan, independent of how well the structured parse went.
    if signature.domain in lock.raw_text:
        findings.append(
            Finding(
                FindingKind.MALICIOUS_DOMAIN_IN_LOCK,
                signature.domain,
                Severity.CRITICAL,
                lock.source_file,
            )
        )
    return findings


def detect(
    deps: Sequence[DependencyEntry],
    scripts: Sequence[InstallScript],
    locks: Sequence[LockContents] = (),
    signature: Signature = DEFAULT_SIGNATURE,
    *,
    source_file: str = "package.json",
) -> list[Finding]:
    """Run every rule over one manifest and its lock files."""
    findings: list[Finding] = []
    findings += check_malicious_packages(deps, signature, source_file)
    findings += check_remote_dependencies(deps, signature, source_file)
    findings += check_malicious_domain(deps, scripts, signature, source_file)
    findings += check_git_dependencies(deps, source_file)
    findings += check_install_scripts(scripts, signature, source_file)
    for lock in locks:
        findings += check_lock_file(lock, signature)
    return findings
