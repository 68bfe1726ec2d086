"""Tests for ThemeService (core/theme_service.py).

``curl`` and ``tar`` are faked; a ``tar`` side effect materialises the
extracted theme directory inside the scoped working directory.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from archdesk.core.context import ServiceContext
from archdesk.core.models import InstallOutcome, ThemeOptions
from archdesk.core.theme_service import NORDIC, ThemeService
from archdesk.exceptions import BackupNotFoundError, DownloadError, ExtractionError
from conftest import FIXED_STAMP, FakeConfirmer, FakeReporter, FakeRunner


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _extracts_theme(*, complete: bool = True) -> Callable[[tuple[str, ...]], None]:
    """``tar -xf archive -C workdir`` side effect creating ``workdir/Nordic``."""

    def effect(argv: tuple[str, ...]) -> None:
        theme = Path(argv[4]) / "Nordic"
        (theme / "gtk-3.0").mkdir(parents=True)
        (theme / "gtk-3.0" / "gtk.css").write_text("/* nordic */\n")
        if complete:
            (theme / "index.theme").write_text("[Desktop Entry]\nName=Nordic\n")

    return effect


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


@pytest.fixture
def service(context: ServiceContext) -> ThemeService:
    return ThemeService(context)


# ---------------------------------------------------------------------------
# install
# ---------------------------------------------------------------------------

class TestInstall:
    def test_happy_path(
        self, service: ThemeService, runner: FakeRunner, context: ServiceContext
    ) -> None:
        runner.on("tar", effect=_extracts_theme())
        home = context.settings.home

        outcome = service.install(ThemeOptions())

        assert outcome is InstallOutcome.INSTALLED
        assert service.target_dir == context.settings.themes_dir / "Nordic"
        assert (service.target_dir / "index.theme").exists()
        assert (service.target_dir / "gtk-3.0" / "gtk.css").exists()
        gtk3 = (home / ".config" / "gtk-3.0" / "settings.ini").read_text()
        assert "gtk-theme-name=Nordic" in gtk3
        assert (home / ".gtkrc-2.0").read_text().startswith('gtk-theme-name="Nordic"')
        assert (context.settings.config_dir / f"gtk-theme-backup-{FIXED_STAMP}").is_dir()

    def test_downloads_release_asset(self, service: ThemeService, runner: FakeRunner) -> None:
        runner.on("tar", effect=_extracts_theme())
        service.install(ThemeOptions())

        (curl,) = runner.matching("curl")
        assert curl[:3] == ("curl", "-fsSL", NORDIC.url)
        assert curl[3] == "-o"
        assert curl[4].endswith("Nordic.tar.xz")

    def test_working_directory_is_removed(
        self, service: ThemeService, runner: FakeRunner
    ) -> None:
        runner.on("tar", effect=_extracts_theme())
        service.install(ThemeOptions())

        (curl,) = runner.matching("curl")
        assert not Path(curl[4]).parent.exists()

    def test_refreshes_session(self, service: ThemeService, runner: FakeRunner) -> None:
        runner.on("tar", effect=_extracts_theme())
        service.install(ThemeOptions())

        assert runner.called(
            "gsettings", "set", "org.gnome.desktop.interface", "gtk-theme", "Nordic"
        )
        assert runner.called("pkill", "-SIGUSR1", "xsettingsd")

    def test_session_refresh_is_best_effort(
        self, service: ThemeService, runner: FakeRunner
    ) -> None:
        runner.on("tar", effect=_extracts_theme())
        runner.missing.add("gsettings")
        runner.on("pgrep", returncode=1)

        assert service.install(ThemeOptions()) is InstallOutcome.INSTALLED
        assert not runner.called("gsettings")
        assert not runner.called("pkill")

    def test_no_backup_option(
        self, service: ThemeService, runner: FakeRunner, context: ServiceContext
    ) -> None:
        runner.on("tar", effect=_extracts_theme())
        service.install(ThemeOptions(backup=False))
        assert not list(context.settings.config_dir.glob("gtk-theme-backup-*"))

    def test_existing_theme_declined(
        self,
        service: ThemeService,
        runner: FakeRunner,
        confirmer: FakeConfirmer,
    ) -> None:
        _write(service.target_dir / "index.theme", "old\n")
        confirmer.answer = False

        assert service.install(ThemeOptions()) is InstallOutcome.CANCELLED
        assert confirmer.questions == ["Continue with installation?"]
        assert not runner.called("curl")

    def test_force_replaces_existing_theme(
        self,
        service: ThemeService,
        runner: FakeRunner,
        confirmer: FakeConfirmer,
    ) -> None:
        runner.on("tar", effect=_extracts_theme())
        _write(service.target_dir / "stale.css", "old\n")

        assert service.install(ThemeOptions(force=True)) is InstallOutcome.INSTALLED
        assert confirmer.questions == []
        assert not (service.target_dir / "stale.css").exists()
        assert (service.target_dir / "index.theme").exists()

    def test_missing_entries_only_warn(
        self, service: ThemeService, runner: FakeRunner, reporter: FakeReporter
    ) -> None:
        runner.on("tar", effect=_extracts_theme(complete=False))
        assert service.install(ThemeOptions()) is InstallOutcome.INSTALLED
        assert "Required file/directory missing: index.theme" in reporter.messages("warning")


class TestInstallFailures:
    def test_download_failure(self, service: ThemeService, runner: FakeRunner) -> None:
        runner.on("curl", returncode=22, stderr="curl: (22) 404")

        with pytest.raises(DownloadError, match="Failed to download theme"):
            service.install(ThemeOptions())

        (curl,) = runner.matching("curl")
        assert not Path(curl[4]).parent.exists()
        assert not runner.called("tar")

    def test_extraction_failure(self, service: ThemeService, runner: FakeRunner) -> None:
        runner.on("tar", returncode=2)
        with pytest.raises(ExtractionError, match="Failed to extract theme archive"):
            service.install(ThemeOptions())

    def test_archive_without_theme_directory(
        self, service: ThemeService, runner: FakeRunner
    ) -> None:
        with pytest.raises(ExtractionError, match="Failed to find extracted theme directory"):
            service.install(ThemeOptions())
        assert not service.target_dir.exists()


# ---------------------------------------------------------------------------
# Backup / restore
# ---------------------------------------------------------------------------

class TestBackupRestore:
    def test_backup_copies_existing_settings(
        self, service: ThemeService, context: ServiceContext
    ) -> None:
        home = context.settings.home
        _write(home / ".gtkrc-2.0", 'gtk-theme-name="Adwaita"\n')

        backup_dir = service.backup_settings()

        assert (backup_dir / "gtkrc-2.0").read_text() == 'gtk-theme-name="Adwaita"\n'
        assert not (backup_dir / "gtk-3.0-settings.ini").exists()

    def test_restore_uses_newest_backup(
        self, service: ThemeService, runner: FakeRunner, context: ServiceContext
    ) -> None:
        config = context.settings.config_dir
        _write(config / "gtk-theme-backup-20240101-000000" / "gtk-3.0-settings.ini", "old\n")
        _write(config / "gtk-theme-backup-20240202-000000" / "gtk-3.0-settings.ini", "newer\n")

        outcome = service.install(ThemeOptions(restore=True))

        assert outcome is InstallOutcome.RESTORED
        restored = context.settings.home / ".config" / "gtk-3.0" / "settings.ini"
        assert restored.read_text() == "newer\n"
        assert not runner.called("curl")

    def test_restore_without_backup(self, service: ThemeService) -> None:
        with pytest.raises(BackupNotFoundError, match="No backup found"):
            service.restore_backup()

    def test_latest_backup_ignores_files(
        self, service: ThemeService, context: ServiceContext
    ) -> None:
        _write(context.settings.config_dir / "gtk-theme-backup-20990101-000000", "not a dir\n")
        assert service.latest_backup() is None
