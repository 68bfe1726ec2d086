"""Small pure helpers for shaping command output."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime


def head(text: str, lines: int) -> str:
    """Return the first *lines* lines of *text* (like ``head -n``)."""
    return "\n".join(text.splitlines()[:lines])


def indent(text: str, prefix: str = "  ") -> str:
    """Prefix every line of *text*, like ``sed 's/^/  /'``."""
    return "\n".join(f"{prefix}{line}" for line in text.splitlines())


def unique_sorted(items: Iterable[str]) -> list[str]:
    """Strip, drop empties, deduplicate and sort (``sort | uniq``)."""
    return sorted({item.strip() for item in items if item.strip()})


def stamp(moment: datetime) -> str:
    """Timestamp used in backup names: ``YYYYmmdd-HHMMSS``."""
    return moment.strftime("%Y%m%d-%H%M%S")


def human_date(moment: datetime) -> str:
    """Timestamp written into generated files, in ``date(1)`` style."""
    return moment.strftime("%a %b %d %H:%M:%S %Y")
