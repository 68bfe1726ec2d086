"""CLI application entry point and command routing for archdesk.

This module is the **sole error boundary** for the entire application.
It catches :class:`~archdesk.exceptions.ArchdeskError`,
``KeyboardInterrupt``, and any unexpected ``Exception``, rendering
user-friendly messages via Rich and returning well-defined exit codes.

Architecture notes
------------------
* No business logic lives here; all work is delegated to the core
  services and infrastructure layers.
* Precondition checks per subcommand are decided here, the way the
  services are wired.
* This module is the only place that translates between the domain world
  and the OS process exit code.
"""

from __future__ import annotations

import argparse
import sys

from archdesk.cli import exit_codes
from archdesk.cli.console import console, error_console, escape
from archdesk.core.config import Settings
from archdesk.core.context import ServiceContext
from archdesk.core.models import AudioCommand, LocaleTarget, LocaleVariant, ThemeOptions
from archdesk.exceptions import ArchdeskError, UsageError
from archdesk.version import __version__

AUDIO_USAGE = """\
PipeWire audio setup for Arch Linux

USAGE:
    archdesk audio [COMMAND] [OPTIONS]

COMMANDS:
    install                     Install and configure PipeWire stack (default)
    blacklist <modules...>      Blacklist specified ALSA kernel modules
    remove-blacklist            Remove ALSA module blacklist
    reset                       Reset PipeWire/WirePlumber configuration
    status                      Show current audio system status
    help                        Show this help message

EXAMPLES:
    archdesk audio                      # Install PipeWire with all components
    archdesk audio status               # Show current audio configuration
    archdesk audio blacklist snd_hda_intel snd_usb_audio
    archdesk audio reset                # Clear all config and restart services
    archdesk audio remove-blacklist     # Remove module blacklist

NOTES:
    • install and reset create automatic backups before making changes
    • Blacklisted modules require a reboot to take effect
    • Use 'status' to diagnose audio issues
    • Backups are timestamped directories in ~/.config/
"""

BLACKLIST_USAGE = """\
Usage: archdesk audio blacklist <module1> [module2] [...]
Example: archdesk audio blacklist snd_hda_intel snd_usb_audio
"""


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser with one subparser per task."""
    parser = argparse.ArgumentParser(
        prog="archdesk",
        description="Desktop maintenance tasks for Arch Linux workstations.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Echo every external command before it runs.",
    )
    parser.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="Answer yes to every confirmation prompt.",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    audio = subparsers.add_parser(
        "audio",
        help="Install, reset or inspect the PipeWire audio stack.",
        description=AUDIO_USAGE,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    audio.add_argument("action", nargs="?", default=None, help="Audio command (default: install).")
    audio.add_argument("modules", nargs="*", help="Kernel modules for 'blacklist'.")

    theme = subparsers.add_parser("theme", help="Install the Nordic GTK theme.")
    theme.add_argument(
        "-f", "--force", action="store_true", help="Force installation (overwrite existing theme)."
    )
    theme.add_argument(
        "-n", "--no-backup", action="store_true", help="Skip creating backup of current settings."
    )
    theme.add_argument("-q", "--quiet", action="store_true", help="Suppress non-error output.")
    theme.add_argument(
        "--restore-backup", action="store_true", help="Restore from most recent backup."
    )

    locale = subparsers.add_parser("locale", help="Switch the system locale.")
    locale.add_argument(
        "--variant",
        choices=[variant.value for variant in LocaleVariant],
        default=LocaleVariant.FULL.value,
        help="'full' sets LANG and LC_COLLATE everywhere; 'lang' sets LANG only.",
    )
    locale.add_argument("--locale", default=LocaleTarget().locale, help="Locale to enable.")
    locale.add_argument("--charset", default=LocaleTarget().charset, help="Charset in locale.gen.")

    subparsers.add_parser("font", help="Install the Meslo Nerd Font.")
    subparsers.add_parser("doctor", help="Check for the external tools archdesk uses.")
    return parser


def build_context(
    *,
    verbose: bool = False,
    quiet: bool = False,
    assume_yes: bool = False,
) -> ServiceContext:
    """Wire the concrete runner, file store, reporter and prompts."""
    from archdesk.cli.prompts import QuestionaryConfirmer
    from archdesk.cli.reporter import ConsoleReporter
    from archdesk.infra.files import LocalFileStore
    from archdesk.infra.shell import SubprocessRunner

    reporter = ConsoleReporter(quiet=quiet, verbose=verbose)
    runner = SubprocessRunner(echo=reporter.command)
    settings = Settings.from_environment()
    return ServiceContext(
        settings=settings,
        runner=runner,
        files=LocalFileStore(runner, use_sudo=settings.use_sudo),
        reporter=reporter,
        confirmer=QuestionaryConfirmer(assume_yes=assume_yes),
    )


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _handle_audio(args: argparse.Namespace, context: ServiceContext) -> int:
    """Dispatch ``archdesk audio <action>`` with its precondition checks."""
    from archdesk.core.audio_service import AudioService
    from archdesk.infra.preconditions import ensure_arch, ensure_not_root, ensure_sudo

    command = AudioCommand.parse(args.action, usage=AUDIO_USAGE)
    if args.modules and command is not AudioCommand.BLACKLIST:
        raise UsageError(
            f"Unexpected arguments for '{command.value}': {' '.join(args.modules)}",
            usage=AUDIO_USAGE,
        )

    if command is AudioCommand.HELP:
        console.print(escape(AUDIO_USAGE))
        return exit_codes.SUCCESS

    service = AudioService(context)
    runner = context.runner

    if command is AudioCommand.INSTALL:
        ensure_not_root()
        ensure_arch(runner)
        ensure_sudo(runner)
        service.install()
    elif command is AudioCommand.BLACKLIST:
        ensure_arch(runner)
        if not args.modules:
            service.report_loaded_modules()
            raise UsageError("No modules specified for blacklisting", usage=BLACKLIST_USAGE)
        ensure_sudo(runner)
        service.blacklist(args.modules)
    elif command is AudioCommand.REMOVE_BLACKLIST:
        ensure_arch(runner)
        ensure_sudo(runner)
        service.remove_blacklist()
    elif command is AudioCommand.RESET:
        ensure_not_root()
        service.reset()
    elif command is AudioCommand.STATUS:
        service.status()
    return exit_codes.SUCCESS


def _handle_theme(args: argparse.Namespace, context: ServiceContext) -> int:
    """Dispatch ``archdesk theme``."""
    from archdesk.core import theme_service
    from archdesk.infra.tool_detector import require_tools

    options = ThemeOptions(
        force=args.force,
        backup=not args.no_backup,
        quiet=args.quiet,
        restore=args.restore_backup,
    )
    if not options.restore:
        require_tools(theme_service.REQUIRED_TOOLS)
    theme_service.ThemeService(context).install(options)
    return exit_codes.SUCCESS


def _handle_locale(args: argparse.Namespace, context: ServiceContext) -> int:
    """Dispatch ``archdesk locale``."""
    from archdesk.core.locale_service import LocaleService
    from archdesk.infra.preconditions import ensure_not_root, ensure_sudo

    ensure_not_root()
    ensure_sudo(context.runner)
    target = LocaleTarget(locale=args.locale, charset=args.charset)
    LocaleService(context).switch(target, LocaleVariant(args.variant))
    return exit_codes.SUCCESS


def _handle_font(args: argparse.Namespace, context: ServiceContext) -> int:
    """Dispatch ``archdesk font``."""
    from archdesk.core import font_service
    from archdesk.infra.tool_detector import require_tools

    console.print("=======================================")
    console.print("  Meslo Nerd Font Auto-Installer")
    console.print("=======================================")
    context.reporter.info("Checking dependencies...")
    require_tools(font_service.REQUIRED_TOOLS)
    context.reporter.success("All dependencies are installed")
    font_service.FontService(context).install()
    return exit_codes.SUCCESS


def _handle_doctor() -> int:
    """Dispatch the ``doctor`` diagnostics command."""
    from archdesk.cli.doctor import run_doctor

    return run_doctor()


_HANDLERS = {
    "audio": _handle_audio,
    "theme": _handle_theme,
    "locale": _handle_locale,
    "font": _handle_font,
}


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the archdesk CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return exit_codes.SUCCESS

    if args.command == "doctor":
        return _handle_doctor()

    context = build_context(
        verbose=args.verbose,
        quiet=getattr(args, "quiet", False),
        assume_yes=args.yes,
    )
    return _HANDLERS[args.command](args, context)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def _print_error(exc: ArchdeskError) -> None:
    error_console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
    if exc.hint:
        error_console.print(f"[yellow]Hint:[/yellow] {escape(exc.hint)}")


def cli(argv: list[str] | None = None) -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main(argv)
        sys.exit(code)
    except UsageError as exc:
        _print_error(exc)
        if exc.usage:
            console.print()
            console.print(escape(exc.usage))
        sys.exit(exit_codes.USAGE_ERROR)
    except ArchdeskError as exc:
        _print_error(exc)
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        error_console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        error_console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {escape(str(exc))}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
