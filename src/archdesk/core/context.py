"""The bundle of collaborators every service is constructed with."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from archdesk.core.config import Settings
from archdesk.core.protocols import CommandRunner, Confirmer, FileStore, Reporter


@dataclass(frozen=True, slots=True)
class ServiceContext:
    """Injected dependencies shared by the core services.

    ``sleep`` and ``now`` are injectable so tests run without real
    pauses and with fixed backup timestamps.
    """

    settings: Settings
    runner: CommandRunner
    files: FileStore
    reporter: Reporter
    confirmer: Confirmer
    sleep: Callable[[float], None] = field(default=time.sleep)
    now: Callable[[], datetime] = field(default=datetime.now)

    def elevated(self, *argv: str) -> list[str]:
        """Return *argv* prefixed with ``sudo`` when privileges are in use."""
        prefix = ["sudo"] if self.settings.use_sudo else []
        return [*prefix, *argv]
