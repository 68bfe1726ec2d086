"""Pure rendering and parsing of the ALSA module blacklist file.

Every function in this module is a **pure** transformation; no I/O,
no side effects, fully deterministic, and trivially unit-testable.

File layout::

    # ALSA module blacklist - created <date>
    # This file prevents specified ALSA kernel modules from loading
    #
    blacklist snd_hda_intel
    blacklist snd_usb_audio
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import datetime

from archdesk.exceptions import UsageError
from archdesk.utils.text import human_date

_MODULE_NAME = re.compile(r"^[A-Za-z0-9_-]+$")


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def normalize_modules(modules: Sequence[str]) -> list[str]:
    """Validate module names and drop repeats, keeping first-seen order.

    Raises
    ------
    UsageError
        If a name contains anything but letters, digits, ``_`` or ``-``.
    """
    result: list[str] = []
    for module in modules:
        if not _MODULE_NAME.match(module):
            raise UsageError(
                f"Invalid kernel module name: {module!r}",
                hint="Module names contain only letters, digits, '_' and '-'.",
            )
        if module not in result:
            result.append(module)
    return result


# ---------------------------------------------------------------------------
# Render / parse
# ---------------------------------------------------------------------------

def render_blacklist(modules: Sequence[str], created: datetime) -> str:
    """Build the full text of the blacklist configuration file."""
    lines = [
        f"# ALSA module blacklist - created {human_date(created)}",
        "# This file prevents specified ALSA kernel modules from loading",
        "#",
    ]
    lines.extend(f"blacklist {module}" for module in modules)
    return "\n".join(lines) + "\n"


def parse_blacklist(text: str) -> list[str]:
    """Return the module names listed in a modprobe blacklist file."""
    modules: list[str] = []
    for raw in text.splitlines():
        parts = raw.split()
        if len(parts) >= 2 and parts[0] == "blacklist":
            modules.append(parts[1])
    return modules
