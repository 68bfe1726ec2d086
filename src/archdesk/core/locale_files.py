"""Pure editing of the system locale files.

Covers ``/etc/locale.gen`` (enable an entry), ``/etc/locale.conf``
(render), ``/etc/environment`` (merge) and ``locale -a`` output
(membership).  Nothing here touches the filesystem.
"""

from __future__ import annotations

import re
from collections.abc import Sequence


# ---------------------------------------------------------------------------
# /etc/locale.gen
# ---------------------------------------------------------------------------

def _entry_pattern(locale: str, charset: str) -> re.Pattern[str]:
    return re.compile(
        rf"^[ \t]*#?[ \t]*{re.escape(locale)}[ \t]+{re.escape(charset)}(?=\s|$)",
        re.MULTILINE,
    )


def enable_locale(text: str, locale: str, charset: str) -> tuple[str, bool]:
    """Uncomment the ``<locale> <charset>`` entry, or append one.

    Returns
    -------
    tuple[str, bool]
        The new file text, and whether an existing entry was found.
    """
    pattern = _entry_pattern(locale, charset)
    entry = f"{locale} {charset}"
    if pattern.search(text):
        return pattern.sub(entry, text), True
    if text and not text.endswith("\n"):
        text += "\n"
    return f"{text}{entry}\n", False


def is_locale_enabled(text: str, locale: str, charset: str) -> bool:
    """True when an uncommented entry for *locale* exists."""
    entry = re.compile(
        rf"^[ \t]*{re.escape(locale)}[ \t]+{re.escape(charset)}(?=\s|$)",
        re.MULTILINE,
    )
    return entry.search(text) is not None


# ---------------------------------------------------------------------------
# /etc/locale.conf and /etc/environment
# ---------------------------------------------------------------------------

def locale_assignments(locale: str, keys: Sequence[str]) -> list[str]:
    """``KEY=locale`` lines for each of *keys*."""
    return [f"{key}={locale}" for key in keys]


def render_locale_conf(locale: str, keys: Sequence[str]) -> str:
    """Full text of ``/etc/locale.conf``."""
    return "\n".join(locale_assignments(locale, keys)) + "\n"


def merge_environment(text: str, locale: str, keys: Sequence[str]) -> str:
    """Replace any *keys* assignments in ``/etc/environment`` text.

    All other lines are kept in order; the new assignments go last.
    """
    prefixes = tuple(f"{key}=" for key in keys)
    kept = [line for line in text.splitlines() if not line.startswith(prefixes)]
    kept.extend(locale_assignments(locale, keys))
    return "\n".join(kept) + "\n"


def has_assignments(text: str, locale: str, keys: Sequence[str]) -> bool:
    """True when every ``KEY=locale`` line is present in *text*."""
    lines = {line.strip() for line in text.splitlines()}
    return all(line in lines for line in locale_assignments(locale, keys))


# ---------------------------------------------------------------------------
# locale -a
# ---------------------------------------------------------------------------

def normalize_locale_name(name: str) -> str:
    """Canonical comparison form: ``en_GB.UTF-8`` → ``en_gb.utf8``.

    glibc lists generated locales as ``en_GB.utf8`` while configuration
    files spell them ``en_GB.UTF-8``.
    """
    return name.strip().lower().replace("-", "")


def is_locale_available(locale_list: str, locale: str) -> bool:
    """True when *locale* appears in ``locale -a`` output."""
    wanted = normalize_locale_name(locale)
    return any(
        normalize_locale_name(line) == wanted for line in locale_list.splitlines()
    )
