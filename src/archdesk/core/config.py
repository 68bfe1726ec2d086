"""Runtime configuration: every filesystem location archdesk touches.

There is no configuration file.  :class:`Settings` is derived from the
process environment once, at CLI start-up, and passed down to every
service.  Tests construct it against a temporary directory.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class Settings:
    """Paths and privilege policy for one invocation.

    Parameters
    ----------
    home:
        The invoking user's home directory.
    root:
        Filesystem root that system paths are resolved against.
    use_sudo:
        Prefix privileged commands with ``sudo`` and route privileged
        file writes through it.
    """

    home: Path
    root: Path = Path("/")
    use_sudo: bool = True

    @classmethod
    def from_environment(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        home = env.get("HOME")
        return cls(home=Path(home) if home else Path.home())

    # ------------------------------------------------------------------
    # User paths
    # ------------------------------------------------------------------

    @property
    def config_dir(self) -> Path:
        return self.home / ".config"

    @property
    def fonts_dir(self) -> Path:
        return self.home / ".local" / "share" / "fonts"

    # ------------------------------------------------------------------
    # System paths
    # ------------------------------------------------------------------

    def system_path(self, relative: str) -> Path:
        """Resolve an absolute system path such as ``/etc/locale.gen``."""
        return self.root / relative.lstrip("/")

    @property
    def blacklist_file(self) -> Path:
        return self.system_path("/etc/modprobe.d/alsa-blacklist.conf")

    @property
    def asound_conf(self) -> Path:
        return self.system_path("/etc/asound.conf")

    @property
    def asound_cards(self) -> Path:
        return self.system_path("/proc/asound/cards")

    @property
    def asound_modules(self) -> Path:
        return self.system_path("/proc/asound/modules")

    @property
    def locale_gen(self) -> Path:
        return self.system_path("/etc/locale.gen")

    @property
    def locale_conf(self) -> Path:
        return self.system_path("/etc/locale.conf")

    @property
    def environment_file(self) -> Path:
        return self.system_path("/etc/environment")

    @property
    def themes_dir(self) -> Path:
        return self.system_path("/usr/share/themes")
