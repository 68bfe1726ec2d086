"""``archdesk doctor``: environment diagnostics command.

Gathers system information and renders a Rich table summarising
whether the machine has the programs the maintenance procedures shell
out to.

This module lives in the CLI layer; it may import from ``infra``
and ``core``, and it renders via Rich.  No business logic resides
here; it purely collects and displays diagnostic data.
"""

from __future__ import annotations

import platform
import sys

from archdesk.cli import exit_codes
from archdesk.cli.console import console
from archdesk.infra.tool_detector import detect_tool
from archdesk.version import __version__

# Without these nothing archdesk does can work.
CRITICAL_TOOLS: tuple[str, ...] = ("pacman", "sudo", "systemctl")

OPTIONAL_TOOLS: tuple[str, ...] = (
    "pactl",
    "curl",
    "tar",
    "wget",
    "7z",
    "fc-cache",
    "locale-gen",
    "localectl",
    "gsettings",
)


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _python_version_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the Python version row."""
    version = platform.python_version()
    major, minor = sys.version_info[:2]
    ok = (major, minor) >= (3, 10)
    status = "[green]OK[/green]" if ok else "[red]FAIL (>=3.10 required)[/red]"
    return "Python", version, status


def _tool_check(name: str, *, critical: bool) -> tuple[str, str, str]:
    """Return (label, value, status) for one external program."""
    tool = detect_tool(name)
    if tool.found:
        return name, str(tool.path) if tool.path else "found", "[green]OK[/green]"
    if critical:
        return name, "not found", "[red]FAIL[/red]"
    return name, f"not found ({tool.install_command})", "[yellow]WARN[/yellow]"


def _os_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the OS row; non-Linux warns."""
    system = platform.system()
    value = f"{system} {platform.release()} ({platform.machine()})"
    status = "[green]OK[/green]" if system == "Linux" else "[yellow]WARN[/yellow]"
    return "OS", value, status


def _archdesk_version_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the archdesk version row."""
    return "archdesk", __version__, "[green]OK[/green]"


def _status_plain(status: str) -> str:
    """Convert rich-markup status to plain text."""
    if "FAIL" in status:
        return "FAIL"
    if "WARN" in status:
        return "WARN"
    if "OK" in status:
        return "OK"
    return status


def _print_plain_doctor_table(checks: list[tuple[str, str, str]]) -> None:
    """Render doctor output without Rich."""
    print("\narchdesk doctor")
    print("=" * 72)
    print(f"{'Component':<12} {'Value':<48} {'Status':<8}")
    print("-" * 72)
    for label, value, status in checks:
        print(f"{label:<12} {value:<48} {_status_plain(status):<8}")
    print()


def collect_checks() -> list[tuple[str, str, str]]:
    checks = [
        _archdesk_version_check(),
        _python_version_check(),
        _os_check(),
    ]
    checks.extend(_tool_check(name, critical=True) for name in CRITICAL_TOOLS)
    checks.extend(_tool_check(name, critical=False) for name in OPTIONAL_TOOLS)
    return checks


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_doctor() -> int:
    """Execute all diagnostic checks and render a Rich summary table.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when all critical checks pass,
        :data:`exit_codes.GENERAL_ERROR` if a critical check fails.
    """
    checks = collect_checks()
    has_failure = any("FAIL" in status for _, _, status in checks)

    rich_available = True
    try:
        from rich.table import Table
    except ModuleNotFoundError:
        rich_available = False

    if rich_available:
        table = Table(
            title="archdesk doctor",
            show_header=True,
            header_style="bold cyan",
            border_style="dim",
        )
        table.add_column("Component", style="bold", min_width=12)
        table.add_column("Value", min_width=20)
        table.add_column("Status", justify="center", min_width=8)

        for label, value, status in checks:
            table.add_row(label, value, status)

        console.print()
        console.print(table)
        console.print()
    else:
        _print_plain_doctor_table(checks)

    if has_failure:
        console.print("[bold red]Some checks failed.[/bold red]")
        return exit_codes.GENERAL_ERROR

    console.print("[bold green]All critical checks passed.[/bold green]")
    return exit_codes.SUCCESS
