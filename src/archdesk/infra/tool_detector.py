"""Infrastructure: external tool detection and pacman install guidance.

This module is responsible for locating the programs the maintenance
procedures shell out to, and for naming the Arch package that provides
each one when it is missing.

Rules
-----
* Detection via :func:`shutil.which` only; no subprocess.
* No automatic installation.
* No ``print()``; callers handle user-facing output.
"""

from __future__ import annotations

import shutil
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from archdesk.exceptions import MissingToolError, pacman_install_hint


# Program → Arch package that ships it.
TOOL_PACKAGES: dict[str, str] = {
    "pacman": "pacman",
    "sudo": "sudo",
    "systemctl": "systemd",
    "pactl": "libpulse",
    "curl": "curl",
    "tar": "tar",
    "wget": "wget",
    "7z": "p7zip",
    "fc-cache": "fontconfig",
    "fc-list": "fontconfig",
    "locale-gen": "glibc",
    "localectl": "systemd",
    "gsettings": "glib2",
}


# ---------------------------------------------------------------------------
# Detection result
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ToolStatus:
    """Result of a detection probe for one program.

    Attributes
    ----------
    name : str
        Program name as looked up on PATH.
    found : bool
        Whether the program was located on PATH.
    path : Path | None
        Absolute path to the binary, or ``None``.
    package : str
        Arch package that provides the program.
    """

    name: str
    found: bool
    path: Path | None
    package: str

    @property
    def install_command(self) -> str:
        return f"sudo pacman -S {self.package}"


# ---------------------------------------------------------------------------
# Detection logic
# ---------------------------------------------------------------------------

def detect_tool(name: str) -> ToolStatus:
    """Probe PATH for *name*.

    Returns a :class:`ToolStatus` regardless of whether the program is
    present; the caller decides whether to abort or merely warn.
    """
    result = shutil.which(name)
    package = TOOL_PACKAGES.get(name, name)
    if result is not None:
        return ToolStatus(name=name, found=True, path=Path(result).resolve(), package=package)
    return ToolStatus(name=name, found=False, path=None, package=package)


def require_tools(names: Sequence[str]) -> list[Path]:
    """Locate every program in *names* or raise :class:`MissingToolError`.

    All missing programs are reported together, with one ``pacman -S``
    line naming their packages.
    """
    statuses = [detect_tool(name) for name in names]
    missing = [status for status in statuses if not status.found or status.path is None]
    if missing:
        packages = sorted({status.package for status in missing})
        raise MissingToolError(
            f"Missing required dependencies: {' '.join(s.name for s in missing)}",
            hint=pacman_install_hint(packages),
        )
    return [status.path for status in statuses if status.path is not None]
