"""Custom exceptions for ravenscan."""


class RavenScanError(Exception):
    """Base exception for all scanner errors."""


class ParseError(RavenScanError):
    """Raised when a manifest or lock file cannot be read or parsed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"cannot parse {path}: {reason}")


class SignatureError(RavenScanError):
    """Raised when a signature override file is invalid."""
