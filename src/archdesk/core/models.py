"""Domain models for archdesk.

All models are **frozen** dataclasses or enums: immutable value objects
with no behaviour beyond data access and parsing.  They carry zero I/O
and no dependencies on external packages.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from archdesk.exceptions import CommandFailedError, UsageError


# ---------------------------------------------------------------------------
# External command results
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class CommandResult:
    """Outcome of one external command invocation."""

    argv: tuple[str, ...]
    """The command line that was executed."""

    returncode: int
    """Process exit status."""

    stdout: str = ""
    """Captured standard output, empty when output was not captured."""

    stderr: str = ""
    """Captured standard error, empty when output was not captured."""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def raise_for_status(self) -> None:
        """Raise :class:`CommandFailedError` for a non-zero exit status."""
        if self.returncode != 0:
            raise CommandFailedError(self.argv, self.returncode, stderr=self.stderr)


# ---------------------------------------------------------------------------
# Audio
# ---------------------------------------------------------------------------

class AudioCommand(str, Enum):
    """Actions understood by ``archdesk audio``."""

    INSTALL = "install"
    BLACKLIST = "blacklist"
    REMOVE_BLACKLIST = "remove-blacklist"
    RESET = "reset"
    STATUS = "status"
    HELP = "help"

    @classmethod
    def parse(cls, raw: str | None, *, usage: str | None = None) -> AudioCommand:
        """Map a command-line word to an action.

        ``None`` and the empty string select :attr:`INSTALL`; ``-h`` and
        ``--help`` are aliases of :attr:`HELP`.

        Raises
        ------
        UsageError
            For any other unknown word.
        """
        if raw is None or raw == "":
            return cls.INSTALL
        if raw in ("-h", "--help"):
            return cls.HELP
        for member in cls:
            if member.value == raw:
                return member
        raise UsageError(f"Unknown command: {raw}", usage=usage)


@dataclass(frozen=True, slots=True)
class ServiceState:
    """Activity state of one systemd user unit."""

    name: str
    state: str
    """Raw ``systemctl is-active`` answer (``active``, ``inactive``, ...)."""

    @property
    def active(self) -> bool:
        return self.state == "active"


@dataclass(frozen=True, slots=True)
class AudioStatus:
    """Snapshot of the audio system shown by ``archdesk audio status``."""

    server_info: str | None
    """``pactl info`` output, or ``None`` when the server does not respond."""

    services: tuple[ServiceState, ...]
    sinks: str
    sources: str
    cards: str | None
    modules: str | None
    blacklist: str | None
    """Contents of the modprobe blacklist file, or ``None`` when it is absent
    or unreadable."""

    blacklisted: tuple[str, ...]

    @property
    def responding(self) -> bool:
        return self.server_info is not None


@dataclass(frozen=True, slots=True)
class ResetReport:
    """Result of an audio state reset."""

    backup_dir: Path
    services: tuple[ServiceState, ...]
    responding: bool

    @property
    def all_running(self) -> bool:
        return all(service.active for service in self.services)


# ---------------------------------------------------------------------------
# Installers
# ---------------------------------------------------------------------------

class InstallOutcome(str, Enum):
    """How an installer run ended without an error."""

    INSTALLED = "installed"
    CANCELLED = "cancelled"
    RESTORED = "restored"


@dataclass(frozen=True, slots=True)
class ThemeOptions:
    """Flags accepted by ``archdesk theme``."""

    force: bool = False
    backup: bool = True
    quiet: bool = False
    restore: bool = False


@dataclass(frozen=True, slots=True)
class ReleaseAsset:
    """A named archive published as a GitHub release asset."""

    name: str
    version: str
    url: str
    filename: str


# ---------------------------------------------------------------------------
# Locale
# ---------------------------------------------------------------------------

class LocaleVariant(str, Enum):
    """The two locale-switching procedures."""

    FULL = "full"
    """LANG and LC_COLLATE everywhere, plus /etc/environment and Thunar."""

    LANG = "lang"
    """LANG only, in locale.gen, locale.conf and localectl."""


@dataclass(frozen=True, slots=True)
class LocaleTarget:
    """The locale to enable and make the system default."""

    locale: str = "en_GB.UTF-8"
    charset: str = "UTF-8"
