"""Infrastructure layer: external system integration.

This layer wraps all interaction with external programs, the local
filesystem and PATH lookups.  Every raw ``subprocess``/``OSError``
exception must be caught here and re-raised as an
:class:`~archdesk.exceptions.ArchdeskError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from archdesk.infra.files import LocalFileStore
from archdesk.infra.preconditions import ensure_arch, ensure_not_root, ensure_sudo
from archdesk.infra.shell import SubprocessRunner
from archdesk.infra.tool_detector import ToolStatus, detect_tool, require_tools

__all__: list[str] = [
    "LocalFileStore",
    "SubprocessRunner",
    "ToolStatus",
    "detect_tool",
    "ensure_arch",
    "ensure_not_root",
    "ensure_sudo",
    "require_tools",
]
