"""Core / service layer: maintenance procedures and pure transformations.

Rules
-----
* No ``print()`` calls; output goes through the ``Reporter`` protocol.
* No direct subprocess or filesystem access; both go through injected
  protocols.
* No imports from ``cli`` or ``infra``.
"""

from archdesk.core.audio_service import AudioService
from archdesk.core.config import Settings
from archdesk.core.context import ServiceContext
from archdesk.core.font_service import FontService
from archdesk.core.locale_service import LocaleService
from archdesk.core.models import (
    AudioCommand,
    AudioStatus,
    CommandResult,
    InstallOutcome,
    LocaleTarget,
    LocaleVariant,
    ReleaseAsset,
    ResetReport,
    ServiceState,
    ThemeOptions,
)
from archdesk.core.protocols import CommandRunner, Confirmer, FileStore, Reporter
from archdesk.core.theme_service import ThemeService

__all__: list[str] = [
    "AudioCommand",
    "AudioService",
    "AudioStatus",
    "CommandResult",
    "CommandRunner",
    "Confirmer",
    "FileStore",
    "FontService",
    "InstallOutcome",
    "LocaleService",
    "LocaleTarget",
    "LocaleVariant",
    "ReleaseAsset",
    "Reporter",
    "ResetReport",
    "ServiceState",
    "Settings",
    "ServiceContext",
    "ThemeOptions",
    "ThemeService",
]
