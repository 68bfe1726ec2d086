"""Regression tests for optional CLI UI dependencies (rich/questionary).

These tests verify bootstrap commands are resilient when optional UI
packages are missing, and confirmation prompts fail cleanly only when
they are actually reached.
"""

from __future__ import annotations

import sys

import pytest

from archdesk.cli import exit_codes
from archdesk.cli.app import main
from archdesk.cli.prompts import QuestionaryConfirmer
from archdesk.cli.reporter import ConsoleReporter
from archdesk.exceptions import EnvironmentError


def _hide_rich(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(sys.modules, "rich", None)
    monkeypatch.setitem(sys.modules, "rich.console", None)
    monkeypatch.setitem(sys.modules, "rich.table", None)


def _hide_questionary(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(sys.modules, "questionary", None)


def test_help_works_without_rich_or_questionary(monkeypatch: pytest.MonkeyPatch) -> None:
    _hide_rich(monkeypatch)
    _hide_questionary(monkeypatch)

    with pytest.raises(SystemExit) as exc_info:
        main(["--help"])
    assert exc_info.value.code == 0


def test_version_works_without_rich_or_questionary(monkeypatch: pytest.MonkeyPatch) -> None:
    _hide_rich(monkeypatch)
    _hide_questionary(monkeypatch)

    with pytest.raises(SystemExit) as exc_info:
        main(["--version"])
    assert exc_info.value.code == 0


def test_doctor_works_without_rich(monkeypatch: pytest.MonkeyPatch) -> None:
    _hide_rich(monkeypatch)

    code = main(["doctor"])
    assert code in (exit_codes.SUCCESS, exit_codes.GENERAL_ERROR)


def test_reporter_falls_back_to_plain_text(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _hide_rich(monkeypatch)

    reporter = ConsoleReporter()
    reporter.info("Installing PipeWire audio stack...")
    reporter.error("wireplumber failed to start")

    captured = capsys.readouterr()
    assert captured.out == "[INFO] Installing PipeWire audio stack...\n"
    assert captured.err == "[ERROR] wireplumber failed to start\n"


def test_confirm_errors_cleanly_when_questionary_missing(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    _hide_questionary(monkeypatch)

    with pytest.raises(EnvironmentError, match="questionary is not installed"):
        QuestionaryConfirmer().confirm("Remove these packages?")


def test_assume_yes_needs_no_questionary(monkeypatch: pytest.MonkeyPatch) -> None:
    _hide_questionary(monkeypatch)

    assert QuestionaryConfirmer(assume_yes=True).confirm("Remove these packages?") is True
