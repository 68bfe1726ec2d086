"""Core locale service: enable, generate and apply a system locale.

Two procedures share the same building blocks:

* :attr:`LocaleVariant.FULL` sets ``LANG`` and ``LC_COLLATE`` in
  ``/etc/locale.conf``, ``/etc/environment`` and ``localectl``, then
  restarts Thunar so file ordering follows the new collation.
* :attr:`LocaleVariant.LANG` sets ``LANG`` only and leaves
  ``/etc/environment`` and running applications alone.

Every edited system file is first copied to ``<file>.backup``.
"""

from __future__ import annotations

from pathlib import Path

from archdesk.core import locale_files
from archdesk.core.context import ServiceContext
from archdesk.core.models import LocaleTarget, LocaleVariant
from archdesk.exceptions import CommandFailedError, PreconditionError, VerificationError


def locale_keys(variant: LocaleVariant) -> tuple[str, ...]:
    """Environment variables the *variant* assigns."""
    if variant is LocaleVariant.FULL:
        return ("LANG", "LC_COLLATE")
    return ("LANG",)


class LocaleService:
    """Switches the system default locale."""

    def __init__(self, context: ServiceContext) -> None:
        self._ctx = context

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _backup(self, path: Path) -> Path | None:
        """Copy *path* to ``<path>.backup`` when it exists."""
        if not self._ctx.files.exists(path):
            return None
        backup = path.with_name(f"{path.name}.backup")
        self._ctx.files.copy(path, backup, privileged=True)
        return backup

    def _available_locales(self) -> str:
        return self._ctx.runner.run(["locale", "-a"], check=False, capture=True).stdout

    def current_lang(self, target: LocaleTarget) -> str:
        """The ``LANG=`` line reported by ``locale``, or the one just configured."""
        output = self._ctx.runner.run(["locale"], check=False, capture=True).stdout
        for line in output.splitlines():
            if line.startswith("LANG="):
                return line
        return f"LANG={target.locale}"

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def enable_in_locale_gen(self, target: LocaleTarget) -> bool:
        """Uncomment or append the entry; returns ``True`` if it existed."""
        files = self._ctx.files
        path = self._ctx.settings.locale_gen
        self._backup(path)
        text, existed = locale_files.enable_locale(
            files.read_text(path), target.locale, target.charset
        )
        files.write_text(path, text, privileged=True)
        if existed:
            self._ctx.reporter.success(f"Enabled existing {target.locale} entry")
        else:
            self._ctx.reporter.success(f"Added {target.locale} entry")
        return existed

    def generate(self, target: LocaleTarget) -> None:
        """Run ``locale-gen`` and confirm the locale was produced.

        Raises
        ------
        CommandFailedError
            If ``locale-gen`` fails.
        VerificationError
            If the locale is absent from ``locale -a`` afterwards.
        """
        try:
            self._ctx.runner.run(self._ctx.elevated("locale-gen"))
        except CommandFailedError as exc:
            raise CommandFailedError(
                exc.argv,
                exc.returncode,
                stderr=exc.stderr,
                message="Failed to generate locales",
            ) from exc
        self._ctx.reporter.success("Locales generated successfully")

        if not locale_files.is_locale_available(self._available_locales(), target.locale):
            raise VerificationError(
                f"Failed to generate {target.locale}",
                hint=f"Check {self._ctx.settings.locale_gen}",
            )

    def write_locale_conf(self, target: LocaleTarget, variant: LocaleVariant) -> None:
        path = self._ctx.settings.locale_conf
        self._backup(path)
        self._ctx.files.write_text(
            path,
            locale_files.render_locale_conf(target.locale, locale_keys(variant)),
            privileged=True,
        )
        self._ctx.reporter.success(f"Updated {path}")

    def write_environment(self, target: LocaleTarget, variant: LocaleVariant) -> None:
        files = self._ctx.files
        path = self._ctx.settings.environment_file
        current = files.read_text(path) if files.exists(path) else ""
        self._backup(path)
        merged = locale_files.merge_environment(current, target.locale, locale_keys(variant))
        files.write_text(path, merged, privileged=True, mode=0o644)
        self._ctx.reporter.success(f"Updated {path}")

    def apply_localectl(self, target: LocaleTarget, variant: LocaleVariant) -> None:
        runner = self._ctx.runner
        reporter = self._ctx.reporter
        if runner.which("localectl") is None:
            reporter.warning("localectl not available - skipping systemd update")
            return
        assignments = locale_files.locale_assignments(target.locale, locale_keys(variant))
        result = runner.run(self._ctx.elevated("localectl", "set-locale", *assignments), check=False)
        if result.ok:
            reporter.success("Updated systemd locale settings")
        else:
            reporter.warning("Failed to update systemd locale (continuing anyway)")

    def restart_thunar(self) -> bool:
        """Restart a running Thunar daemon; returns ``True`` if it was restarted."""
        runner = self._ctx.runner
        if runner.which("thunar") is None:
            return False
        if not runner.run(["pgrep", "-f", "thunar"], check=False, capture=True).ok:
            return False
        self._ctx.reporter.info("Restarting Thunar for immediate effect...")
        runner.run(["thunar", "-q"], check=False, capture=True)
        self._ctx.sleep(1)
        runner.spawn(["thunar", "--daemon"])
        self._ctx.reporter.success("Thunar restarted")
        return True

    def _read_or_empty(self, path: Path) -> str:
        files = self._ctx.files
        return files.read_text(path) if files.exists(path) else ""

    def verify(self, target: LocaleTarget, variant: LocaleVariant) -> None:
        """Re-read ``/etc/locale.gen``, ``/etc/locale.conf`` and ``locale -a``.

        Raises
        ------
        VerificationError
            If any of them does not reflect the new locale.
        """
        settings = self._ctx.settings
        gen = self._read_or_empty(settings.locale_gen)
        conf = self._read_or_empty(settings.locale_conf)
        if not (
            locale_files.is_locale_enabled(gen, target.locale, target.charset)
            and locale_files.has_assignments(conf, target.locale, locale_keys(variant))
            and locale_files.is_locale_available(self._available_locales(), target.locale)
        ):
            raise VerificationError("Verification failed - some settings may not be applied")
        self._ctx.reporter.success("All configuration files updated successfully")

    # ------------------------------------------------------------------
    # Public entry point
    # ------------------------------------------------------------------

    def switch(self, target: LocaleTarget, variant: LocaleVariant = LocaleVariant.FULL) -> None:
        """Make *target* the system locale using the *variant* procedure.

        Raises
        ------
        PreconditionError
            If ``/etc/locale.gen`` does not exist.
        """
        settings = self._ctx.settings
        reporter = self._ctx.reporter
        full = variant is LocaleVariant.FULL
        total = 5 if full else 4

        if not self._ctx.files.exists(settings.locale_gen):
            raise PreconditionError(
                f"{settings.locale_gen} not found - this command is for Arch-based systems",
            )

        reporter.info(f"Setting system locale to {target.locale}...")

        reporter.info(f"[1/{total}] Configuring {settings.locale_gen}...")
        self.enable_in_locale_gen(target)

        reporter.info(f"[2/{total}] Generating locales...")
        self.generate(target)

        reporter.info(f"[3/{total}] Updating {settings.locale_conf}...")
        self.write_locale_conf(target, variant)

        step = 4
        if full:
            reporter.info(f"[{step}/{total}] Updating {settings.environment_file}...")
            self.write_environment(target, variant)
            step += 1

        reporter.info(f"[{step}/{total}] Updating system configuration...")
        self.apply_localectl(target, variant)

        if full:
            self.restart_thunar()

        reporter.info("Verifying configuration...")
        self.verify(target, variant)

        keys = " and ".join(locale_keys(variant))
        reporter.success(f"Locale ({target.locale}) configuration completed!")
        changes = [
            f"  • {settings.locale_gen} - enabled {target.locale}",
            f"  • {settings.locale_conf} - set {keys}",
        ]
        backups = [
            f"  • {settings.locale_gen}.backup",
            f"  • {settings.locale_conf}.backup (if existed)",
        ]
        if full:
            changes.append(f"  • {settings.environment_file} - set {keys}")
            backups.append(f"  • {settings.environment_file}.backup (if existed)")
        changes.append("  • systemd locale settings updated")
        reporter.detail("Changes made:\n" + "\n".join(changes))
        reporter.detail("Backup files created:\n" + "\n".join(backups))
        reporter.warning("IMPORTANT: Log out and back in for all applications to use the new locale")
        reporter.info(f"Current locale will be: {self.current_lang(target)}")
