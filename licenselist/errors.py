"""Exception and warning types raised while building license manifests."""

from __future__ import annotations


class LicenseListError(RuntimeError):
    """Base class for errors that abort a licenselist run."""


class ManifestParseError(LicenseListError):
    """Raised when a package manifest is not valid JSON."""

    def __init__(self, path: str, detail: str) -> None:
        super().__init__(f"Unable to parse package manifest {path}: {detail}")
        self.path = path


class FileSystemError(LicenseListError):
    """Raised when a manifest lookup, file copy or output write fails."""


class LicenseListWarning(UserWarning):
    """Base class for degraded but non-fatal license resolution."""

    def __init__(self, message: str, *, context: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context


class LicenseExpressionWarning(LicenseListWarning):
    """An expression could not be parsed or contains an AND operator."""


class UnknownLicenseWarning(LicenseListWarning):
    """A license identifier is missing from the license database."""


__all__ = [
    "FileSystemError",
    "LicenseExpressionWarning",
    "LicenseListError",
    "LicenseListWarning",
    "ManifestParseError",
    "UnknownLicenseWarning",
]
