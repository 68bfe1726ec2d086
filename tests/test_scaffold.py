"""Smoke tests: verify scaffold wiring.

These tests prove that:
* The CLI entry point is importable and callable.
* The exception hierarchy is correctly structured.
* Version is accessible.
* Exit codes are defined.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest

from archdesk import __version__
from archdesk.cli import exit_codes
from archdesk.cli.app import main
from archdesk.exceptions import (
    ArchdeskError,
    BackupNotFoundError,
    CommandFailedError,
    DownloadError,
    EnvironmentError,
    ExtractionError,
    MissingToolError,
    PreconditionError,
    UsageError,
    VerificationError,
    pacman_install_hint,
)


# ---------------------------------------------------------------------------
# Version
# ---------------------------------------------------------------------------

class TestVersion:
    def test_version_is_string(self) -> None:
        assert isinstance(__version__, str)

    def test_version_is_semver_like(self) -> None:
        parts = __version__.split(".")
        assert len(parts) == 3
        assert all(part.isdigit() for part in parts)


# ---------------------------------------------------------------------------
# Exception hierarchy
# ---------------------------------------------------------------------------

class TestExceptions:
    @pytest.mark.parametrize(
        "exc_class",
        [
            UsageError,
            PreconditionError,
            MissingToolError,
            DownloadError,
            ExtractionError,
            VerificationError,
            BackupNotFoundError,
            EnvironmentError,
        ],
    )
    def test_all_exceptions_inherit_from_base(
        self, exc_class: type[ArchdeskError]
    ) -> None:
        assert issubclass(exc_class, ArchdeskError)

    def test_missing_tool_is_a_precondition(self) -> None:
        assert issubclass(MissingToolError, PreconditionError)

    def test_base_inherits_from_exception(self) -> None:
        assert issubclass(ArchdeskError, Exception)

    def test_hint_is_stored(self) -> None:
        err = ArchdeskError("boom", hint="try this")
        assert str(err) == "boom"
        assert err.hint == "try this"

    def test_hint_defaults_to_none(self) -> None:
        err = ArchdeskError("boom")
        assert err.hint is None

    def test_usage_error_carries_usage(self) -> None:
        err = UsageError("Unknown command: foo", usage="USAGE: ...")
        assert err.usage == "USAGE: ..."


class TestCommandFailedError:
    def test_default_message_names_command(self) -> None:
        err = CommandFailedError(["pacman", "-S", "pipewire"], 1)
        assert str(err) == "Command failed with exit code 1: pacman -S pipewire"
        assert err.argv == ("pacman", "-S", "pipewire")
        assert err.returncode == 1

    def test_custom_message_and_stderr(self) -> None:
        err = CommandFailedError(
            ["locale-gen"], 2, stderr="  permission denied\n", message="Failed to generate locales"
        )
        assert str(err) == "Failed to generate locales\npermission denied"
        assert err.stderr == "  permission denied\n"


def test_pacman_install_hint() -> None:
    assert pacman_install_hint(["curl", "tar"]) == (
        "Install them first. On Arch: sudo pacman -S curl tar"
    )


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

class TestExitCodes:
    def test_success_is_zero(self) -> None:
        assert exit_codes.SUCCESS == 0

    def test_general_error_is_one(self) -> None:
        assert exit_codes.GENERAL_ERROR == 1

    def test_usage_error_is_two(self) -> None:
        assert exit_codes.USAGE_ERROR == 2

    def test_keyboard_interrupt_is_130(self) -> None:
        assert exit_codes.KEYBOARD_INTERRUPT == 130

    def test_unexpected_error_is_70(self) -> None:
        assert exit_codes.UNEXPECTED_ERROR == 70


# ---------------------------------------------------------------------------
# CLI routing (skeleton)
# ---------------------------------------------------------------------------

class TestCLIRouting:
    def test_no_args_returns_success(self, capsys: pytest.CaptureFixture[str]) -> None:
        """No arguments should print help and exit 0."""
        code = main([])
        assert code == exit_codes.SUCCESS
        assert "audio" in capsys.readouterr().out

    def test_version_flag(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0

    @patch("archdesk.cli.doctor.run_doctor", return_value=exit_codes.SUCCESS)
    def test_doctor_returns_success(self, _mock_doc: object) -> None:
        code = main(["doctor"])
        assert code == exit_codes.SUCCESS

    def test_unknown_subcommand_is_usage_error(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["frobnicate"])
        assert exc_info.value.code == exit_codes.USAGE_ERROR
