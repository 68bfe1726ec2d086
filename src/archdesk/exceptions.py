"""Custom exception hierarchy for archdesk.

All exceptions that cross layer boundaries must inherit from
:class:`ArchdeskError`.  Raw ``subprocess`` and ``OSError`` exceptions
must NEVER propagate beyond the infrastructure layer; they must be
caught and re-raised as a typed subclass defined here.

Hierarchy
---------
ArchdeskError
├── UsageError
├── PreconditionError
├── MissingToolError
├── CommandFailedError
├── DownloadError
├── ExtractionError
├── VerificationError
├── BackupNotFoundError
└── EnvironmentError
"""

from __future__ import annotations

from collections.abc import Sequence


class ArchdeskError(Exception):
    """Base exception for all archdesk errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Invocation ------------------------------------------------------------

class UsageError(ArchdeskError):
    """Raised when the command line is well-formed but not meaningful.

    Mapped to exit code 2, the same code argparse uses for syntax errors.
    """

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        usage: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.usage: str | None = usage
        """Usage text printed after the error, when the command has one."""


# --- Preconditions ---------------------------------------------------------

class PreconditionError(ArchdeskError):
    """Raised when the system is not in a state the procedure can run in."""


class MissingToolError(PreconditionError):
    """Raised when required external programs are not on PATH."""


# --- External commands -----------------------------------------------------

class CommandFailedError(ArchdeskError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(
        self,
        argv: Sequence[str],
        returncode: int,
        *,
        stderr: str = "",
        message: str | None = None,
        hint: str | None = None,
    ) -> None:
        self.argv: tuple[str, ...] = tuple(argv)
        self.returncode: int = returncode
        self.stderr: str = stderr
        if message is None:
            message = f"Command failed with exit code {returncode}: {' '.join(self.argv)}"
        detail = stderr.strip()
        if detail:
            message = f"{message}\n{detail}"
        super().__init__(message, hint=hint)


class DownloadError(ArchdeskError):
    """Raised when a release archive cannot be fetched."""


class ExtractionError(ArchdeskError):
    """Raised when a downloaded archive cannot be unpacked."""


class VerificationError(ArchdeskError):
    """Raised when a post-install check shows the change did not land."""


class BackupNotFoundError(ArchdeskError):
    """Raised when a restore is requested but no backup exists."""


# --- Environment / tooling -------------------------------------------------

class EnvironmentError(ArchdeskError):
    """Raised when a required runtime dependency is not available."""


def pacman_install_hint(packages: Sequence[str]) -> str:
    """Return the pacman command that installs *packages*."""
    return f"Install them first. On Arch: sudo pacman -S {' '.join(packages)}"
