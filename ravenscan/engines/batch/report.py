"""Report renderers for batch summaries and single-project scans."""

from __future__ import annotations

import csv
import io
import json

from ravenscan.engines.batch.models import BatchSummary, ScanRecord
from ravenscan.engines.detector.models import ProjectStatus, Severity

_RULE = "=" * 48

REMEDIATION_STEPS = (
    "Remove malicious packages from package.json",
    "Delete node_modules and lock files",
    "Rotate ALL credentials: npm, GitHub, CI/CD tokens",
    "Check ~/.npmrc and ~/.gitconfig",
    "Review CI/CD secrets and environment variables",
    "Reinstall dependencies from clean sources",
)


def render_text(summary: BatchSummary) -> str:
    lines = [
        _RULE,
        "Scan Summary",
        _RULE,
        f"Scanned: {summary.scanned} | Clean: {summary.clean} | "
        f"Infected: {summary.infected} | Errors: {summary.errors}",
        f"Duration: {summary.duration_seconds}s",
        "",
    ]
    if summary.infected_list:
        lines.append("INFECTED REPOSITORIES:")
        for entry in summary.infected_list:
            suffix = f": {entry.findings_summary}" if entry.findings_summary else ""
            lines.append(f"  ✗ {entry.path}{suffix}")
        lines.append("")
    if summary.error_list:
        lines.append(f"Errors: {summary.errors} repositories")
        for entry in summary.error_list:
            lines.append(f"  ! {entry.path}: {entry.findings_summary}")
        lines.append("")
    if summary.infected:
        lines.append("ACTION REQUIRED!")
        lines.append("Review infected repositories and follow remediation steps")
    else:
        lines.append("✓ All repositories are clean!")
    return "\n".join(lines)


def render_json(summary: BatchSummary) -> str:
    payload = {
        "scan_date": summary.scan_date,
        "total": summary.total,
        "clean": summary.clean,
        "infected": summary.infected,
        "errors": summary.errors,
        "duration_seconds": summary.duration_seconds,
        "infected_repositories": [
            {"path": e.path, "findings": e.findings_summary} for e in summary.infected_list
        ],
    }
    return json.dumps(payload, indent=2)


def render_csv(summary: BatchSummary) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    buf.write("Repository,Status,Findings\n")
    for path in summary.clean_list:
        writer.writerow([path, ProjectStatus.CLEAN.value, ""])
    for entry in summary.infected_list:
        writer.writerow([entry.path, ProjectStatus.INFECTED.value, entry.findings_summary])
    for entry in summary.error_list:
        writer.writerow([entry.path, ProjectStatus.ERROR.value, entry.findings_summary])
    return buf.getvalue().rstrip("\n")


RENDERERS = {
    "text": render_text,
    "json": render_json,
    "csv": render_csv,
}


def render(summary: BatchSummary, fmt: str = "text") -> str:
    try:
        renderer = RENDERERS[fmt]
    except KeyError:
        raise ValueError(f"unknown report format: {fmt!r}") from None
    return renderer(summary)


def render_project(record: ScanRecord) -> str:
    """Detailed per-manifest listing for single-project mode."""
    lines = [_RULE, "PhantomRaven Scanner", _RULE, f"Scanning: {record.repository_path}", ""]
    if record.error_detail is not None:
        lines.append(f"Scan failed: {record.error_detail}")
        return "\n".join(lines)
    if record.no_manifest:
        lines.append("No package.json files found")
        return "\n".join(lines)

    count = len(record.results)
    lines.append(f"Found {count} package.json file(s)")
    lines.append("")
    for i, result in enumerate(record.results, start=1):
        lines.append(f"[{i}/{count}] Checking: {result.manifest_path}")
        for finding in result.findings:
            mark = "✗" if finding.severity is Severity.CRITICAL else "⚠"
            lines.append(f"  {mark} {finding.summary()}")
        for problem in result.parse_errors:
            lines.append(f"  ! {problem}")
        if result.status is ProjectStatus.CLEAN:
            lines.append("  ✓ Clean")
        elif result.status is ProjectStatus.INFECTED:
            lines.append("  ! Issues found")
        lines.append("")

    lines.append(_RULE)
    if record.status is ProjectStatus.INFECTED:
        lines.append("✗ WARNING: Malware detected!")
        lines.append("")
        lines.append("Recommended actions:")
        lines.extend(f"  {n}. {step}" for n, step in enumerate(REMEDIATION_STEPS, start=1))
    elif record.status is ProjectStatus.ERROR:
        lines.append("! Some manifests could not be parsed")
    else:
        lines.append("✓ All projects are clean")
    return "\n".join(lines)
