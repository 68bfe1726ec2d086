"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters and the CLI
layer must satisfy.  Core code depends ONLY on these protocols, never
on concrete implementations, preserving the dependency inversion
principle.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from archdesk.core.models import CommandResult


class CommandRunner(Protocol):
    """Contract for executing external programs.

    Implementations must map process-level failures (missing binary,
    ``OSError``) to :class:`~archdesk.exceptions.ArchdeskError`
    subclasses.
    """

    def run(
        self,
        argv: Sequence[str],
        *,
        check: bool = True,
        capture: bool = False,
        input_text: str | None = None,
        cwd: Path | None = None,
    ) -> CommandResult:
        """Run *argv* to completion.

        Parameters
        ----------
        argv:
            Program and arguments; never passed through a shell.
        check:
            Raise :class:`~archdesk.exceptions.CommandFailedError` on a
            non-zero exit status.
        capture:
            Capture stdout/stderr as text instead of letting them reach
            the terminal.
        input_text:
            Text fed to the process on stdin.
        cwd:
            Working directory for the process.

        Raises
        ------
        CommandFailedError
            When *check* is true and the command fails.
        MissingToolError
            When the program does not exist.
        """
        ...  # pragma: no cover

    def spawn(self, argv: Sequence[str]) -> None:
        """Start *argv* detached in the background and return immediately."""
        ...  # pragma: no cover

    def which(self, name: str) -> Path | None:
        """Return the resolved path of program *name*, or ``None``."""
        ...  # pragma: no cover


class FileStore(Protocol):
    """Contract for filesystem access.

    ``privileged=True`` marks operations on root-owned locations; the
    implementation decides whether they go through ``sudo``.
    """

    def exists(self, path: Path) -> bool: ...  # pragma: no cover

    def is_dir(self, path: Path) -> bool: ...  # pragma: no cover

    def read_text(self, path: Path, *, privileged: bool = False) -> str: ...  # pragma: no cover

    def write_text(
        self,
        path: Path,
        text: str,
        *,
        privileged: bool = False,
        mode: int | None = None,
    ) -> None: ...  # pragma: no cover

    def copy(self, source: Path, target: Path, *, privileged: bool = False) -> None:
        """Copy a file or a directory tree."""
        ...  # pragma: no cover

    def move(self, source: Path, target: Path, *, privileged: bool = False) -> None: ...  # pragma: no cover

    def remove(self, path: Path, *, privileged: bool = False) -> None:
        """Remove a file or a directory tree; missing paths are ignored."""
        ...  # pragma: no cover

    def make_dirs(self, path: Path, *, privileged: bool = False) -> None: ...  # pragma: no cover

    def chmod(
        self,
        path: Path,
        mode: int,
        *,
        privileged: bool = False,
        recursive: bool = False,
    ) -> None: ...  # pragma: no cover

    def take_ownership(self, path: Path) -> None:
        """Hand *path* (recursively) back to the invoking user."""
        ...  # pragma: no cover

    def find(
        self,
        directory: Path,
        pattern: str,
        *,
        recursive: bool = False,
        dirs_only: bool = False,
        files_only: bool = False,
    ) -> list[Path]:
        """Return sorted entries under *directory* matching glob *pattern*."""
        ...  # pragma: no cover


class Reporter(Protocol):
    """Contract for user-facing progress output.

    The CLI layer renders these as coloured ``[INFO]``/``[SUCCESS]``/
    ``[WARNING]``/``[ERROR]`` lines.
    """

    def info(self, message: str) -> None: ...  # pragma: no cover

    def success(self, message: str) -> None: ...  # pragma: no cover

    def warning(self, message: str) -> None: ...  # pragma: no cover

    def error(self, message: str) -> None: ...  # pragma: no cover

    def detail(self, text: str) -> None:
        """Print raw multi-line output (command output, listings)."""
        ...  # pragma: no cover

    def command(self, argv: Sequence[str]) -> None:
        """Announce an external command about to run (verbose mode)."""
        ...  # pragma: no cover


class Confirmer(Protocol):
    """Contract for yes/no questions put to the user."""

    def confirm(self, question: str, *, default: bool = False) -> bool: ...  # pragma: no cover
