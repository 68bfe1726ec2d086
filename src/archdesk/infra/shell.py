"""``subprocess`` backed implementation of :class:`~archdesk.core.protocols.CommandRunner`.

This module is the **only** place in the codebase that starts external
processes.  ``FileNotFoundError`` and other ``OSError`` failures are
caught here and re-raised as typed
:class:`~archdesk.exceptions.ArchdeskError` subclasses.
"""

from __future__ import annotations

import shutil
import subprocess
from collections.abc import Callable, Sequence
from pathlib import Path

from archdesk.core.models import CommandResult
from archdesk.exceptions import ArchdeskError, MissingToolError, pacman_install_hint


class SubprocessRunner:
    """Concrete :class:`CommandRunner` built on :func:`subprocess.run`.

    Parameters
    ----------
    echo:
        Optional callable invoked with each argv before it runs; the CLI
        passes the reporter's ``command`` method in verbose mode.
    """

    def __init__(self, *, echo: Callable[[Sequence[str]], None] | None = None) -> None:
        self._echo = echo

    # ------------------------------------------------------------------
    # Protocol methods
    # ------------------------------------------------------------------

    def run(
        self,
        argv: Sequence[str],
        *,
        check: bool = True,
        capture: bool = False,
        input_text: str | None = None,
        cwd: Path | None = None,
    ) -> CommandResult:
        args = [str(arg) for arg in argv]
        if self._echo is not None:
            self._echo(args)

        try:
            completed = subprocess.run(
                args,
                input=input_text,
                capture_output=capture,
                text=True,
                cwd=cwd,
                check=False,
            )
        except FileNotFoundError as exc:
            raise MissingToolError(
                f"Program not found: {args[0]}",
                hint=pacman_install_hint([args[0]]),
            ) from exc
        except OSError as exc:
            raise ArchdeskError(f"Could not run {args[0]}: {exc}") from exc

        result = CommandResult(
            argv=tuple(args),
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )
        if check:
            result.raise_for_status()
        return result

    def spawn(self, argv: Sequence[str]) -> None:
        args = [str(arg) for arg in argv]
        if self._echo is not None:
            self._echo(args)
        try:
            subprocess.Popen(
                args,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as exc:
            raise ArchdeskError(f"Could not start {args[0]}: {exc}") from exc

    def which(self, name: str) -> Path | None:
        found = shutil.which(name)
        return Path(found) if found is not None else None
