"""Detection engine: classify npm projects against PhantomRaven signatures."""

from ravenscan.engines.detector.models import Finding, FindingKind, ProjectResult, Severity
from ravenscan.engines.detector.rules import detect
from ravenscan.engines.detector.scanner import ProjectScanner, scan_project
from ravenscan.engines.detector.signatures import DEFAULT_SIGNATURE, Signature, load_signature

__all__ = [
    "DEFAULT_SIGNATURE",
    "Finding",
    "FindingKind",
    "ProjectResult",
    "ProjectScanner",
    "Severity",
    "Signature",
    "detect",
    "load_signature",
    "scan_project",
]
