"""Rich rendering of service progress: the CLI side of ``Reporter``.

Lines keep the familiar shell-script shape::

    [INFO] Installing PipeWire audio stack...
    [SUCCESS] PipeWire packages installed
    [WARNING] Blacklist will take effect after reboot
    [ERROR] wireplumber failed to start

Errors go to stderr; everything else to stdout.
"""

from __future__ import annotations

import shlex
from collections.abc import Sequence

from archdesk.cli.console import console, error_console, escape


class ConsoleReporter:
    """Concrete :class:`~archdesk.core.protocols.Reporter` for the terminal.

    Parameters
    ----------
    quiet:
        Suppress everything except errors.
    verbose:
        Echo each external command before it runs.
    """

    def __init__(self, *, quiet: bool = False, verbose: bool = False) -> None:
        self.quiet = quiet
        self.verbose = verbose

    def _emit(self, label: str, style: str, message: str) -> None:
        if self.quiet:
            return
        console.print(f"[{style}]\\[{label}][/{style}] {escape(message)}")

    def info(self, message: str) -> None:
        self._emit("INFO", "bold blue", message)

    def success(self, message: str) -> None:
        self._emit("SUCCESS", "bold green", message)

    def warning(self, message: str) -> None:
        self._emit("WARNING", "bold yellow", message)

    def error(self, message: str) -> None:
        error_console.print(f"[bold red]\\[ERROR][/bold red] {escape(message)}")

    def detail(self, text: str) -> None:
        if self.quiet:
            return
        console.print(escape(text))

    def command(self, argv: Sequence[str]) -> None:
        if self.verbose and not self.quiet:
            console.print(f"[dim]$ {escape(shlex.join(argv))}[/dim]")
