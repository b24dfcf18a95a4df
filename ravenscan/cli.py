"""CLI entry point: ravenscan.

Subcommands:
    ravenscan scan [PATH]                        # Scan one project (default: .)
    ravenscan batch ~/projects -w 8              # Scan every git repo under a directory
    ravenscan batch repos.txt -f json -o out.json

Exit codes: 0 clean, 1 infected, 2 errors without infections.
"""

from __future__ import annotations

import time
from pathlib import Path

import click

from ravenscan.core.config import REPORT_FORMATS, load_settings
from ravenscan.core.logging import setup_logging
from ravenscan.engines.batch.aggregator import EXIT_ERROR, exit_code, summarize
from ravenscan.engines.batch.discovery import discover_repositories
from ravenscan.engines.batch.models import ScanRecord
from ravenscan.engines.batch.pool import run_batch
from ravenscan.engines.batch.report import render, render_project
from ravenscan.engines.detector.scanner import ProjectScanner
from ravenscan.engines.detector.signatures import Signature, load_signature
from ravenscan.exceptions import SignatureError


def _load_signature(signature_file: str | None) -> Signature:
    try:
        return load_signature(signature_file)
    except SignatureError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise click.exceptions.Exit(EXIT_ERROR) from exc


def _write_report(report: str, output: str | None) -> None:
    if output:
        Path(output).write_text(report + "\n", encoding="utf-8")
        click.echo(f"Report saved: {output}", err=True)
    click.echo(report)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
@click.option(
    "--signatures",
    "signature_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="JSON signature override (default: built-in PhantomRaven set)",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool, signature_file: str | None) -> None:
    """PhantomRaven scanner: detect malicious npm dependencies."""
    setup_logging("DEBUG" if verbose else None)
    settings = load_settings()
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["signature"] = _load_signature(signature_file or settings.signature_file)


@main.command("scan")
@click.argument("path", default=".", type=click.Path(exists=True, file_okay=False))
@click.pass_context
def scan(ctx: click.Context, path: str) -> None:
    """Scan a single project directory."""
    signature = ctx.obj["signature"]
    click.echo(f"Signature set: {signature.version}", err=True)
    scanner = ProjectScanner(signature)
    record = run_batch([path], scanner, worker_count=1)[0]
    click.echo(render_project(record))
    ctx.exit(exit_code(summarize([record], total=1)))


@main.command("batch")
@click.argument("target", type=click.Path(exists=True))
@click.option("-w", "--workers", type=click.IntRange(min=1), default=None, help="Parallel workers")
@click.option(
    "-f",
    "--format",
    "fmt",
    type=click.Choice(REPORT_FORMATS),
    default=None,
    help="Report format",
)
@click.option("-o", "--output", default=None, help="Also save the report to this file")
@click.option("--summary-only", is_flag=True, help="Show only the final summary")
@click.pass_context
def batch(
    ctx: click.Context,
    target: str,
    workers: int | None,
    fmt: str | None,
    output: str | None,
    summary_only: bool,
) -> None:
    """Scan many repositories: a directory of git repos or a list file."""
    settings = ctx.obj["settings"]
    workers = workers or settings.workers
    fmt = fmt or settings.report_format

    repos = discover_repositories(Path(target), settings.discovery_depth)
    if not repos:
        click.echo("No repositories found", err=True)
        ctx.exit(0)

    if not summary_only:
        click.echo(f"Total repositories: {len(repos)}", err=True)
        click.echo(f"Parallel workers: {workers}", err=True)
        click.echo(f"Signature set: {ctx.obj['signature'].version}", err=True)

    def _progress(completed: int, total: int, record: ScanRecord) -> None:
        if not summary_only:
            name = Path(record.repository_path).name
            click.echo(f"Progress: [{completed}/{total}] {name}", err=True)

    scanner = ProjectScanner(ctx.obj["signature"])
    start = time.monotonic()
    records = run_batch(repos, scanner, worker_count=workers, on_record=_progress)
    summary = summarize(records, total=len(repos), duration_seconds=int(time.monotonic() - start))

    _write_report(render(summary, fmt), output)
    ctx.exit(exit_code(summary))


if __name__ == "__main__":
    main()
