"""Infrastructure: checks that gate each maintenance procedure.

Each check raises :class:`~archdesk.exceptions.PreconditionError` with
a user-facing hint; the CLI layer decides which checks an action needs.
"""

from __future__ import annotations

import os
from collections.abc import Callable

from archdesk.core.protocols import CommandRunner
from archdesk.exceptions import PreconditionError


def ensure_not_root(geteuid: Callable[[], int] = os.geteuid) -> None:
    """Refuse to run as root; privileged steps use sudo themselves."""
    if geteuid() == 0:
        raise PreconditionError(
            "archdesk should not be run as root",
            hint="It will use sudo when needed for system operations.",
        )


def ensure_arch(runner: CommandRunner) -> None:
    """Require an Arch-based system, detected by the presence of pacman."""
    if runner.which("pacman") is None:
        raise PreconditionError(
            "This command is designed for Arch Linux (pacman not found)",
        )


def ensure_sudo(runner: CommandRunner) -> None:
    """Require working sudo, prompting for the password when needed."""
    if runner.run(["sudo", "-n", "true"], check=False, capture=True).ok:
        return
    if runner.run(["sudo", "-v"], check=False).ok:
        return
    raise PreconditionError(
        "This command requires sudo access for system operations",
    )
