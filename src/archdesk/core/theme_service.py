"""Core theme service: download, install and activate a GTK theme.

The release archive is fetched with ``curl`` and unpacked with ``tar``
inside a scoped temporary directory that is removed on every exit path.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

from archdesk.core import gtk_settings
from archdesk.core.context import ServiceContext
from archdesk.core.models import InstallOutcome, ReleaseAsset, ThemeOptions
from archdesk.exceptions import (
    BackupNotFoundError,
    CommandFailedError,
    DownloadError,
    ExtractionError,
    VerificationError,
)
from archdesk.utils.text import stamp

NORDIC = ReleaseAsset(
    name="Nordic",
    version="v2.2.0",
    url="https://github.com/EliverLara/Nordic/releases/download/v2.2.0/Nordic.tar.xz",
    filename="Nordic.tar.xz",
)

REQUIRED_TOOLS: tuple[str, ...] = ("curl", "tar", "sudo")

BACKUP_PREFIX = "gtk-theme-backup-"

# Entries every GTK theme is expected to ship.
THEME_ENTRIES: tuple[str, ...] = ("gtk-3.0", "index.theme")


class ThemeService:
    """Installs :data:`NORDIC` (or another release asset) system-wide."""

    def __init__(self, context: ServiceContext, asset: ReleaseAsset = NORDIC) -> None:
        self._ctx = context
        self._asset = asset

    @property
    def target_dir(self) -> Path:
        return self._ctx.settings.themes_dir / self._asset.name

    # ------------------------------------------------------------------
    # Backup / restore
    # ------------------------------------------------------------------

    def backup_settings(self) -> Path:
        """Copy the user's GTK settings files into a timestamped directory."""
        files = self._ctx.files
        backup_dir = self._ctx.settings.config_dir / f"{BACKUP_PREFIX}{stamp(self._ctx.now())}"
        self._ctx.reporter.info("Creating backup of current GTK settings...")
        files.make_dirs(backup_dir)
        for entry in gtk_settings.settings_files(self._ctx.settings.home):
            if files.exists(entry.path):
                files.copy(entry.path, backup_dir / entry.backup_name)
        self._ctx.reporter.success(f"Backup created at: {backup_dir}")
        return backup_dir

    def latest_backup(self) -> Path | None:
        backups = self._ctx.files.find(
            self._ctx.settings.config_dir,
            f"{BACKUP_PREFIX}*",
            dirs_only=True,
        )
        return max(backups, key=lambda path: path.name) if backups else None

    def restore_backup(self) -> Path:
        """Copy the newest backup's files back into place.

        Raises
        ------
        BackupNotFoundError
            If no ``gtk-theme-backup-*`` directory exists.
        """
        files = self._ctx.files
        backup_dir = self.latest_backup()
        if backup_dir is None:
            raise BackupNotFoundError(
                "No backup found to restore from",
                hint=f"Backups are created in {self._ctx.settings.config_dir}/{BACKUP_PREFIX}*",
            )

        self._ctx.reporter.info(f"Restoring from backup: {backup_dir}")
        for entry in gtk_settings.settings_files(self._ctx.settings.home):
            saved = backup_dir / entry.backup_name
            if files.exists(saved):
                files.make_dirs(entry.path.parent)
                files.copy(saved, entry.path)
        self._ctx.reporter.success("Settings restored from backup")
        return backup_dir

    # ------------------------------------------------------------------
    # Install steps
    # ------------------------------------------------------------------

    def _download(self, workdir: Path) -> Path:
        archive = workdir / self._asset.filename
        try:
            self._ctx.runner.run(["curl", "-fsSL", self._asset.url, "-o", str(archive)])
        except CommandFailedError as exc:
            raise DownloadError(
                f"Failed to download theme from {self._asset.url}",
                hint="Check your network connection and try again.",
            ) from exc
        return archive

    def _extract(self, archive: Path, workdir: Path) -> Path:
        try:
            self._ctx.runner.run(["tar", "-xf", str(archive), "-C", str(workdir)])
        except CommandFailedError as exc:
            raise ExtractionError("Failed to extract theme archive") from exc

        candidates = self._ctx.files.find(workdir, f"*{self._asset.name}*", dirs_only=True)
        if not candidates:
            raise ExtractionError("Failed to find extracted theme directory")
        return candidates[0]

    def _install_tree(self, extracted: Path) -> None:
        files = self._ctx.files
        themes_dir = self._ctx.settings.themes_dir
        files.make_dirs(themes_dir, privileged=True)
        files.remove(self.target_dir, privileged=True)
        try:
            files.move(extracted, self.target_dir, privileged=True)
        except CommandFailedError as exc:
            raise CommandFailedError(
                exc.argv,
                exc.returncode,
                stderr=exc.stderr,
                message=f"Failed to install theme to {themes_dir}",
            ) from exc
        files.chmod(self.target_dir, 0o755, privileged=True, recursive=True)

    def verify(self) -> None:
        """Check the installed tree; missing entries only warn.

        Raises
        ------
        VerificationError
            If the theme directory does not exist at all.
        """
        files = self._ctx.files
        reporter = self._ctx.reporter
        if not files.is_dir(self.target_dir):
            raise VerificationError("Theme installation verification failed")
        reporter.success(f"Theme directory verified at {self.target_dir}")
        for entry in THEME_ENTRIES:
            if not files.exists(self.target_dir / entry):
                reporter.warning(f"Required file/directory missing: {entry}")

    def write_settings(self) -> None:
        files = self._ctx.files
        self._ctx.reporter.info(f"Configuring GTK settings for {self._ctx.settings.home}")
        for path, text in gtk_settings.render_all(self._ctx.settings.home, self._asset.name):
            files.make_dirs(path.parent)
            files.write_text(path, text)
        self._ctx.reporter.success("GTK configuration files updated")

    def refresh_session(self) -> None:
        """Best effort: apply the theme to the running desktop session."""
        runner = self._ctx.runner
        self._ctx.reporter.info("Attempting to refresh GTK theme for current session...")
        if runner.which("gsettings") is not None:
            interface = "org.gnome.desktop.interface"
            runner.run(["gsettings", "set", interface, "gtk-theme", self._asset.name], check=False, capture=True)
            runner.run(["gsettings", "set", interface, "color-scheme", "prefer-dark"], check=False, capture=True)
        if runner.run(["pgrep", "-x", "xsettingsd"], check=False, capture=True).ok:
            runner.run(["pkill", "-SIGUSR1", "xsettingsd"], check=False, capture=True)

    # ------------------------------------------------------------------
    # Public entry point
    # ------------------------------------------------------------------

    def install(self, options: ThemeOptions) -> InstallOutcome:
        """Run the full install, or a restore when ``options.restore`` is set."""
        if options.restore:
            self.restore_backup()
            return InstallOutcome.RESTORED

        reporter = self._ctx.reporter
        asset = self._asset
        reporter.info(f"Starting {asset.name} GTK Theme installation ({asset.version})")

        if self._ctx.files.is_dir(self.target_dir) and not options.force:
            reporter.warning(f"Theme already exists at {self.target_dir}")
            if not self._ctx.confirmer.confirm("Continue with installation?"):
                reporter.info("Installation cancelled")
                return InstallOutcome.CANCELLED

        backup_dir = self.backup_settings() if options.backup else None

        with tempfile.TemporaryDirectory(prefix="archdesk-theme-") as tmp:
            workdir = Path(tmp)
            reporter.info(f"[1/5] Downloading {asset.name} theme from GitHub...")
            archive = self._download(workdir)

            reporter.info("[2/5] Extracting theme archive...")
            extracted = self._extract(archive, workdir)

            reporter.info("[3/5] Installing theme to system directory...")
            self._install_tree(extracted)

        reporter.info("[4/5] Verifying installation...")
        self.verify()

        reporter.info("[5/5] Updating GTK configuration...")
        self.write_settings()
        self.refresh_session()

        reporter.success(f"{asset.name} GTK theme installation completed!")
        reporter.info(f"Theme installed to: {self.target_dir}")
        if backup_dir is not None:
            reporter.info(f"Backup created at: {backup_dir}")

        reporter.info("To fully apply the theme:")
        reporter.detail(
            "  • Log out and back in, or restart your desktop session\n"
            "  • For immediate effect in some apps, restart them\n"
            "  • Use your desktop environment's theme settings if available"
        )
        if backup_dir is not None:
            reporter.info("To restore previous settings:")
            reporter.detail("  archdesk theme --restore-backup")
        return InstallOutcome.INSTALLED
