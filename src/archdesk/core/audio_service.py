"""Core audio service: PipeWire stack install, ALSA blacklist, reset, status.

Every operation is an ordered sequence of external commands issued
through the injected :class:`~archdesk.core.protocols.CommandRunner`,
with file access through the :class:`~archdesk.core.protocols.FileStore`
and all output through the :class:`~archdesk.core.protocols.Reporter`.

Guarantees
----------
* No ``print()`` and no direct subprocess or filesystem access.
* A failing required step raises an
  :class:`~archdesk.exceptions.ArchdeskError` subclass; best-effort
  steps (stopping units, backup copies) only warn.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from archdesk.core.blacklist import normalize_modules, parse_blacklist, render_blacklist
from archdesk.core.context import ServiceContext
from archdesk.core.models import AudioStatus, CommandResult, ResetReport, ServiceState
from archdesk.exceptions import (
    ArchdeskError,
    CommandFailedError,
    MissingToolError,
    PreconditionError,
    UsageError,
    VerificationError,
)
from archdesk.utils.text import head, human_date, indent, stamp

CONFLICTING_PACKAGES: tuple[str, ...] = (
    "pulseaudio",
    "pulseaudio-alsa",
    "pulseaudio-bluetooth",
    "pulseaudio-equalizer",
    "pulseaudio-jack",
    "pulseaudio-lirc",
    "pulseaudio-zeroconf",
)

PIPEWIRE_PACKAGES: tuple[str, ...] = (
    "pipewire",
    "pipewire-pulse",
    "pipewire-alsa",
    "pipewire-jack",
    "wireplumber",
    "alsa-utils",
    "pavucontrol",
)

# Start order matters: the pulse shim and the session manager need the daemon.
PIPEWIRE_UNITS: tuple[str, ...] = ("pipewire", "pipewire-pulse", "wireplumber")

RESET_STOP_ORDER: tuple[str, ...] = ("wireplumber", "pipewire-pulse", "pipewire", "pulseaudio")

SERVER_POLL_ATTEMPTS = 5
SERVER_POLL_INTERVAL = 2.0

JOURNAL_HINT = "journalctl --user -u pipewire -u pipewire-pulse -u wireplumber"


class AudioService:
    """Drives the audio-stack procedures.

    Parameters
    ----------
    context:
        Shared collaborators; see :class:`ServiceContext`.
    """

    def __init__(self, context: ServiceContext) -> None:
        self._ctx = context

    # ------------------------------------------------------------------
    # Command helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _systemctl(*args: str) -> list[str]:
        return ["systemctl", "--user", *args]

    def _probe(self, argv: Sequence[str]) -> CommandResult:
        """Run a read-only command whose failure is an answer, not an error.

        A program missing from PATH answers like the shell does, with
        exit status 127.
        """
        try:
            return self._ctx.runner.run(argv, check=False, capture=True)
        except MissingToolError as exc:
            return CommandResult(argv=tuple(argv), returncode=127, stderr=str(exc))

    def _required(self, argv: Sequence[str], failure: str) -> None:
        try:
            self._ctx.runner.run(argv)
        except CommandFailedError as exc:
            raise CommandFailedError(
                exc.argv,
                exc.returncode,
                stderr=exc.stderr,
                message=failure,
            ) from exc

    def _server_info(self) -> str | None:
        result = self._probe(["pactl", "info"])
        return result.stdout if result.ok else None

    def _listing(self, kind: str) -> str | None:
        result = self._probe(["pactl", "list", "short", kind])
        if not result.ok or not result.stdout.strip():
            return None
        return result.stdout.rstrip("\n")

    def _service_state(self, name: str) -> ServiceState:
        result = self._probe(self._systemctl("is-active", name))
        return ServiceState(name=name, state=result.stdout.strip() or "inactive")

    def _read_optional(self, path: Path) -> str | None:
        files = self._ctx.files
        if not files.exists(path):
            return None
        return files.read_text(path).rstrip("\n")

    # ------------------------------------------------------------------
    # Backup
    # ------------------------------------------------------------------

    def _backup_sources(self) -> list[tuple[Path, str, bool]]:
        """(source, name inside the backup, needs privileges)."""
        home = self._ctx.settings.home
        settings = self._ctx.settings
        return [
            (home / ".config" / "pulse", "pulse", False),
            (home / ".pulse", ".pulse", False),
            (home / ".config" / "wireplumber", "wireplumber", False),
            (home / ".local" / "state" / "wireplumber", "wireplumber-state", False),
            (home / ".cache" / "wireplumber", "wireplumber-cache", False),
            (home / ".asoundrc", ".asoundrc", False),
            (settings.asound_conf, settings.asound_conf.name, True),
            (settings.blacklist_file, settings.blacklist_file.name, True),
        ]

    def _status_snapshot(self) -> str:
        services = self._probe(self._systemctl("status", *PIPEWIRE_UNITS))
        sections = [
            "=== Audio System Status Before Changes ===",
            f"Date: {human_date(self._ctx.now())}",
            "",
            "=== PulseAudio Info ===",
            (self._server_info() or "PulseAudio not available").rstrip("\n"),
            "",
            "=== Audio Devices ===",
            self._listing("sinks") or "No sinks found",
            self._listing("sources") or "No sources found",
            "",
            "=== System Services ===",
            services.stdout.rstrip("\n") or "Services not found",
            "",
            "=== ALSA Cards ===",
            self._read_optional(self._ctx.settings.asound_cards) or "No ALSA cards",
            "",
            "=== ALSA Modules ===",
            self._read_optional(self._ctx.settings.asound_modules) or "No ALSA modules",
        ]
        return "\n".join(sections) + "\n"

    def create_backup(self) -> Path:
        """Copy the user's audio configuration into a timestamped directory.

        Returns
        -------
        Path
            The new ``~/.config/audio-backup-<stamp>`` directory.
        """
        files = self._ctx.files
        reporter = self._ctx.reporter
        backup_dir = self._ctx.settings.config_dir / f"audio-backup-{stamp(self._ctx.now())}"

        reporter.info("Creating backup of current audio configuration...")
        files.make_dirs(backup_dir)

        for source, name, privileged in self._backup_sources():
            if not files.exists(source):
                continue
            try:
                files.copy(source, backup_dir / name, privileged=privileged)
            except ArchdeskError as exc:
                reporter.warning(f"Could not back up {source}: {exc}")

        files.write_text(backup_dir / "audio-status.txt", self._status_snapshot())
        files.take_ownership(backup_dir)
        reporter.success(f"Backup created at: {backup_dir}")
        return backup_dir

    # ------------------------------------------------------------------
    # install
    # ------------------------------------------------------------------

    def _remove_conflicts(self) -> None:
        reporter = self._ctx.reporter
        installed = [
            pkg for pkg in CONFLICTING_PACKAGES if self._probe(["pacman", "-Qi", pkg]).ok
        ]
        if not installed:
            reporter.success("No conflicting packages found")
            return

        reporter.warning(f"Found conflicting packages: {' '.join(installed)}")
        if not self._ctx.confirmer.confirm("Remove these packages?"):
            raise PreconditionError(
                "Cannot proceed with conflicting packages installed",
                hint=f"Remove them manually: sudo pacman -Rns {' '.join(installed)}",
            )
        reporter.info("Removing legacy PulseAudio packages...")
        self._required(
            self._ctx.elevated("pacman", "-Rns", "--noconfirm", *installed),
            "Failed to remove conflicting packages",
        )
        reporter.success("Conflicting packages removed")

    def _wait_for_server(self) -> str | None:
        """Poll ``pactl info`` a fixed number of times."""
        for attempt in range(1, SERVER_POLL_ATTEMPTS + 1):
            info = self._server_info()
            if info is not None:
                return info
            self._ctx.reporter.info(
                f"Waiting for PipeWire to initialize "
                f"(attempt {attempt}/{SERVER_POLL_ATTEMPTS})..."
            )
            self._ctx.sleep(SERVER_POLL_INTERVAL)
        return self._server_info()

    def _show_devices(self) -> None:
        reporter = self._ctx.reporter
        sinks = self._listing("sinks")
        if sinks is None:
            reporter.warning("No output devices found")
        else:
            reporter.detail(sinks)
        sources = self._listing("sources")
        if sources is None:
            reporter.warning("No input devices found")
        else:
            reporter.detail(sources)

    def install(self) -> Path:
        """Replace PulseAudio with the PipeWire stack and start it.

        Returns
        -------
        Path
            The backup directory taken before any change.

        Raises
        ------
        PreconditionError
            If conflicting packages are installed and the user declines
            their removal.
        CommandFailedError
            If removing, installing, enabling or starting fails.
        VerificationError
            If the server never answers ``pactl info``.
        """
        reporter = self._ctx.reporter
        runner = self._ctx.runner

        reporter.info("Installing PipeWire audio stack...")
        backup_dir = self.create_backup()

        reporter.info("[1/6] Checking for conflicting packages...")
        self._remove_conflicts()

        reporter.info("[2/6] Installing PipeWire packages...")
        self._required(
            self._ctx.elevated("pacman", "-S", "--needed", "--noconfirm", *PIPEWIRE_PACKAGES),
            "Failed to install PipeWire packages",
        )
        reporter.success("PipeWire packages installed")

        reporter.info("[3/6] Stopping any running audio services...")
        runner.run(self._systemctl("stop", "pulseaudio.service", "pulseaudio.socket"), check=False, capture=True)
        runner.run(self._systemctl("stop", *PIPEWIRE_UNITS), check=False, capture=True)

        reporter.info("[4/6] Enabling PipeWire user services...")
        self._required(
            self._systemctl("enable", *(f"{unit}.service" for unit in PIPEWIRE_UNITS)),
            "Failed to enable services",
        )
        reporter.success("Services enabled")

        reporter.info("[5/6] Starting PipeWire services...")
        for index, unit in enumerate(PIPEWIRE_UNITS):
            if index:
                self._ctx.sleep(1)
            self._required(self._systemctl("start", f"{unit}.service"), f"Failed to start {unit}")
        reporter.success("All services started")

        reporter.info("[6/6] Verifying installation...")
        self._ctx.sleep(2)
        info = self._wait_for_server()
        if info is None:
            raise VerificationError(
                "PipeWire installation may have issues - not responding to pactl",
                hint=f"Check the logs with: {JOURNAL_HINT}",
            )

        reporter.success("PipeWire is running successfully!")
        reporter.info("Audio server information:")
        reporter.detail(head(info, 12))
        reporter.info("Available audio devices:")
        self._show_devices()

        reporter.success("PipeWire installation completed!")
        reporter.info(f"Backup created at: {backup_dir}")
        return backup_dir

    # ------------------------------------------------------------------
    # blacklist / remove-blacklist
    # ------------------------------------------------------------------

    def _show_optional(self, title: str, path: Path, missing: str) -> None:
        self._ctx.reporter.detail(title)
        text = self._read_optional(path)
        if text:
            self._ctx.reporter.detail(indent(text))
        else:
            self._ctx.reporter.warning(missing)

    def report_loaded_modules(self) -> None:
        """Print the ALSA modules currently loaded (``/proc/asound/modules``)."""
        self._ctx.reporter.info("Currently loaded ALSA modules:")
        text = self._read_optional(self._ctx.settings.asound_modules)
        if text:
            self._ctx.reporter.detail(text)
        else:
            self._ctx.reporter.warning("No ALSA modules currently loaded")

    def blacklist(self, modules: Sequence[str]) -> Path:
        """Write the blacklist file for *modules*, backing up any previous one.

        Raises
        ------
        UsageError
            If *modules* is empty or contains an invalid name.
        """
        names = normalize_modules(modules)
        if not names:
            raise UsageError("No modules specified for blacklisting")

        files = self._ctx.files
        reporter = self._ctx.reporter
        target = self._ctx.settings.blacklist_file
        now = self._ctx.now()

        reporter.info(f"Blacklisting ALSA modules: {' '.join(names)}")
        if files.exists(target):
            files.copy(target, target.with_name(f"{target.name}.backup-{stamp(now)}"), privileged=True)
            reporter.info("Backed up existing blacklist file")

        files.make_dirs(target.parent, privileged=True)
        files.write_text(target, render_blacklist(names, now), privileged=True)
        reporter.success(f"Created {target} with blacklisted modules: {' '.join(names)}")

        reporter.info("Current system information:")
        self._show_optional(
            "Loaded ALSA modules:",
            self._ctx.settings.asound_modules,
            "No ALSA modules currently loaded",
        )
        self._show_optional(
            "Sound cards:",
            self._ctx.settings.asound_cards,
            "No sound cards found",
        )

        reporter.warning("Blacklist will take effect after reboot")
        reporter.info("To apply immediately, you can also run: sudo modprobe -r <module_name>")
        reporter.info("To remove blacklist later, run: archdesk audio remove-blacklist")
        return target

    def remove_blacklist(self) -> bool:
        """Delete the blacklist file.  Returns ``False`` when there was none."""
        target = self._ctx.settings.blacklist_file
        reporter = self._ctx.reporter
        if not self._ctx.files.exists(target):
            reporter.info(f"No blacklist file found at {target}")
            return False
        reporter.info("Removing ALSA module blacklist...")
        self._ctx.files.remove(target, privileged=True)
        reporter.success("Blacklist file removed")
        reporter.info("Reboot to allow all ALSA modules to load normally")
        return True

    # ------------------------------------------------------------------
    # reset
    # ------------------------------------------------------------------

    def _state_paths(self) -> list[Path]:
        home = self._ctx.settings.home
        return [
            home / ".config" / "pulse",
            home / ".pulse",
            home / ".local" / "state" / "wireplumber",
            home / ".cache" / "wireplumber",
            home / ".config" / "wireplumber",
        ]

    def _start_after_reset(self) -> None:
        runner = self._ctx.runner
        reporter = self._ctx.reporter

        if not runner.run(self._systemctl("start", "pipewire.service"), check=False).ok:
            reporter.error("Failed to start PipeWire - checking if installed...")
            unit_files = self._probe(self._systemctl("list-unit-files")).stdout
            if "pipewire.service" not in unit_files:
                raise PreconditionError(
                    "PipeWire not installed",
                    hint="Run: archdesk audio install",
                )
            return

        for unit in PIPEWIRE_UNITS[1:]:
            self._ctx.sleep(1)
            if not runner.run(self._systemctl("start", f"{unit}.service"), check=False).ok:
                reporter.warning(f"Failed to start {unit}")

    def reset(self) -> ResetReport:
        """Stop the audio units, wipe their state and start them again."""
        files = self._ctx.files
        reporter = self._ctx.reporter

        reporter.info("Resetting PipeWire/WirePlumber state...")
        backup_dir = self.create_backup()

        reporter.info("[1/4] Stopping user audio services...")
        for unit in RESET_STOP_ORDER:
            if self._service_state(unit).active:
                stopped = self._ctx.runner.run(self._systemctl("stop", unit), check=False)
                if not stopped.ok:
                    reporter.warning(f"Failed to stop {unit}")
        self._ctx.sleep(2)

        reporter.info("[2/4] Clearing configuration and cache directories...")
        for path in self._state_paths():
            if files.is_dir(path):
                reporter.info(f"Removing: {path}")
                files.remove(path)
        pulse_dir = self._ctx.settings.home / ".pulse"
        files.remove(pulse_dir / "native")
        files.remove(pulse_dir / "pid")
        reporter.success("Configuration and cache cleared")

        reporter.info("[3/4] Starting audio services...")
        self._start_after_reset()

        reporter.info("[4/4] Waiting for services to initialize...")
        self._ctx.sleep(3)

        states = tuple(self._service_state(unit) for unit in PIPEWIRE_UNITS)
        for state in states:
            if state.active:
                reporter.success(f"{state.name} is running")
            else:
                reporter.error(f"{state.name} failed to start")

        responding = False
        if all(state.active for state in states):
            reporter.success("All services restarted successfully")
            info = self._server_info()
            if info is not None:
                responding = True
                reporter.success("PipeWire is responding to commands")
                reporter.info("Current audio server info:")
                reporter.detail(head(info, 12))
            else:
                reporter.warning("PipeWire started but not responding to pactl commands")
        else:
            reporter.error("Some services failed to start - check logs with:")
            reporter.detail(f"  {JOURNAL_HINT}")

        reporter.success("Reset completed!")
        reporter.info(f"Backup created at: {backup_dir}")
        reporter.info("If issues persist, try logging out and back in")
        return ResetReport(backup_dir=backup_dir, services=states, responding=responding)

    # ------------------------------------------------------------------
    # status
    # ------------------------------------------------------------------

    def _read_blacklist(self) -> str | None:
        path = self._ctx.settings.blacklist_file
        if not self._ctx.files.exists(path):
            return None
        try:
            return self._ctx.files.read_text(path, privileged=True).rstrip("\n")
        except ArchdeskError as exc:
            self._ctx.reporter.warning(f"Could not read the ALSA blacklist: {exc}")
            return None

    def collect_status(self) -> AudioStatus:
        """Gather the audio status snapshot.

        Nothing is printed except a warning when the blacklist file
        cannot be read.
        """
        settings = self._ctx.settings
        blacklist_text = self._read_blacklist()
        return AudioStatus(
            server_info=self._server_info(),
            services=tuple(self._service_state(unit) for unit in PIPEWIRE_UNITS),
            sinks=self._listing("sinks") or "",
            sources=self._listing("sources") or "",
            cards=self._read_optional(settings.asound_cards),
            modules=self._read_optional(settings.asound_modules),
            blacklist=blacklist_text,
            blacklisted=tuple(parse_blacklist(blacklist_text or "")),
        )

    def status(self) -> AudioStatus:
        """Print the current audio system status and return the snapshot."""
        reporter = self._ctx.reporter
        snapshot = self.collect_status()
        rule = "=" * 42

        reporter.info("Current Audio System Status")
        reporter.detail(rule)

        reporter.info("PipeWire/PulseAudio Status:")
        if snapshot.server_info is not None:
            reporter.detail(head(snapshot.server_info, 15))
        else:
            reporter.warning("PulseAudio/PipeWire not responding")

        reporter.info("User Services Status:")
        for service in snapshot.services:
            line = f"{service.name}: {service.state}"
            if service.active:
                reporter.success(line)
            else:
                reporter.warning(line)

        reporter.info("Audio Devices:")
        for title, listing, missing in (
            ("Sinks (output devices):", snapshot.sinks, "No sinks found"),
            ("Sources (input devices):", snapshot.sources, "No sources found"),
        ):
            reporter.detail(title)
            if listing:
                reporter.detail(indent(listing))
            else:
                reporter.warning(missing)

        reporter.info("ALSA Information:")
        reporter.detail("Sound cards:")
        if snapshot.cards:
            reporter.detail(indent(snapshot.cards))
        else:
            reporter.warning("No ALSA cards found")
        reporter.detail("Loaded modules:")
        if snapshot.modules:
            reporter.detail(indent(snapshot.modules))
        else:
            reporter.warning("No ALSA modules loaded")

        if snapshot.blacklist is not None:
            reporter.info("Current ALSA blacklist:")
            reporter.detail(indent(snapshot.blacklist))
        else:
            reporter.info("No ALSA modules blacklisted")

        reporter.detail(rule)
        return snapshot
