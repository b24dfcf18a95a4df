"""Environment-driven settings for the scanner."""

from __future__ import annotations

import os
from dataclasses import dataclass

import structlog

logger = structlog.get_logger("ravenscan.config")

REPORT_FORMATS = ("text", "json", "csv")


@dataclass(frozen=True)
class Settings:
    workers: int = 4
    discovery_depth: int = 3
    signature_file: str | None = None
    report_format: str = "text"


def _env_int(key: str, default: int) -> int:
    raw = os.environ.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("config.invalid_int", key=key, value=raw, default=default)
        return default
    if value < 1:
        logger.warning("config.non_positive", key=key, value=value, default=default)
        return default
    return value


def load_settings() -> Settings:
    """Build :class:`Settings` from ``RAVENSCAN_*`` environment variables."""
    report_format = os.environ.get("RAVENSCAN_FORMAT", "text").lower()
    if report_format not in REPORT_FORMATS:
        logger.warning("config.invalid_format", value=report_format, default="text")
        report_format = "text"

    return Settings(
        workers=_env_int("RAVENSCAN_WORKERS", 4),
        discovery_depth=_env_int("RAVENSCAN_DISCOVERY_DEPTH", 3),
        signature_file=os.environ.get("RAVENSCAN_SIGNATURE_FILE") or None,
        report_format=report_format,
    )
