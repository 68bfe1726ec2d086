"""Shared pytest fixtures and configuration for the archdesk test suite.

Guidelines
----------
* No internet access in any test.
* External programs are faked at the ``CommandRunner`` boundary.
* Filesystem work happens under ``tmp_path`` with ``use_sudo=False``.
* Tests must not depend on OS state.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import pytest

from archdesk.core.config import Settings
from archdesk.core.context import ServiceContext
from archdesk.core.models import CommandResult
from archdesk.exceptions import MissingToolError, pacman_install_hint
from archdesk.infra.files import LocalFileStore

FIXED_NOW = datetime(2024, 3, 5, 14, 30, 15)
FIXED_STAMP = "20240305-143015"


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

@dataclass
class _Rule:
    prefix: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    sequence: list[tuple[int, str]] | None
    effect: Callable[[tuple[str, ...]], None] | None


class FakeRunner:
    """Scriptable :class:`~archdesk.core.protocols.CommandRunner`.

    Commands without a matching rule succeed with empty output.  Rules
    match on an argv prefix; the most recently added rule wins.
    Programs listed in ``missing`` are absent from PATH: ``which`` returns
    ``None`` and running them raises :class:`MissingToolError`, as
    :class:`~archdesk.infra.shell.SubprocessRunner` does.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, ...]] = []
        self.inputs: dict[tuple[str, ...], str] = {}
        self.cwds: dict[tuple[str, ...], Path | None] = {}
        self.spawned: list[tuple[str, ...]] = []
        self.missing: set[str] = set()
        self._rules: list[_Rule] = []

    def on(
        self,
        *prefix: str,
        returncode: int = 0,
        stdout: str = "",
        stderr: str = "",
        sequence: Sequence[tuple[int, str]] | None = None,
        effect: Callable[[tuple[str, ...]], None] | None = None,
    ) -> None:
        """Script the answer for commands starting with *prefix*.

        *sequence* gives successive ``(returncode, stdout)`` answers; the
        last one repeats.
        """
        self._rules.append(
            _Rule(
                prefix=tuple(prefix),
                returncode=returncode,
                stdout=stdout,
                stderr=stderr,
                sequence=list(sequence) if sequence is not None else None,
                effect=effect,
            )
        )

    def _match(self, argv: tuple[str, ...]) -> _Rule | None:
        for rule in reversed(self._rules):
            if argv[: len(rule.prefix)] == rule.prefix:
                return rule
        return None

    def run(
        self,
        argv: Sequence[str],
        *,
        check: bool = True,
        capture: bool = False,
        input_text: str | None = None,
        cwd: Path | None = None,
    ) -> CommandResult:
        args = tuple(str(arg) for arg in argv)
        self.calls.append(args)
        self.cwds[args] = cwd
        if input_text is not None:
            self.inputs[args] = input_text
        if args[0] in self.missing:
            raise MissingToolError(
                f"Program not found: {args[0]}", hint=pacman_install_hint([args[0]])
            )

        returncode, stdout, stderr = 0, "", ""
        rule = self._match(args)
        if rule is not None:
            if rule.effect is not None:
                rule.effect(args)
            if rule.sequence:
                returncode, stdout = (
                    rule.sequence.pop(0) if len(rule.sequence) > 1 else rule.sequence[0]
                )
            else:
                returncode, stdout = rule.returncode, rule.stdout
            stderr = rule.stderr

        result = CommandResult(argv=args, returncode=returncode, stdout=stdout, stderr=stderr)
        if check:
            result.raise_for_status()
        return result

    def spawn(self, argv: Sequence[str]) -> None:
        self.spawned.append(tuple(str(arg) for arg in argv))

    def which(self, name: str) -> Path | None:
        return None if name in self.missing else Path("/usr/bin") / name

    # ------------------------------------------------------------------
    # Assertions helpers
    # ------------------------------------------------------------------

    def matching(self, *prefix: str) -> list[tuple[str, ...]]:
        return [call for call in self.calls if call[: len(prefix)] == prefix]

    def called(self, *prefix: str) -> bool:
        return bool(self.matching(*prefix))


class FakeReporter:
    """Records every message as ``(level, text)``."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str]] = []

    def info(self, message: str) -> None:
        self.records.append(("info", message))

    def success(self, message: str) -> None:
        self.records.append(("success", message))

    def warning(self, message: str) -> None:
        self.records.append(("warning", message))

    def error(self, message: str) -> None:
        self.records.append(("error", message))

    def detail(self, text: str) -> None:
        self.records.append(("detail", text))

    def command(self, argv: Sequence[str]) -> None:
        self.records.append(("command", " ".join(argv)))

    def messages(self, level: str) -> list[str]:
        return [text for kind, text in self.records if kind == level]

    @property
    def text(self) -> str:
        return "\n".join(text for _, text in self.records)


class FakeConfirmer:
    """Answers every question with a fixed value and records the questions."""

    def __init__(self, answer: bool = True) -> None:
        self.answer = answer
        self.questions: list[str] = []

    def confirm(self, question: str, *, default: bool = False) -> bool:
        self.questions.append(question)
        return self.answer


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    home = tmp_path / "home"
    root = tmp_path / "root"
    home.mkdir()
    root.mkdir()
    return Settings(home=home, root=root, use_sudo=False)


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def reporter() -> FakeReporter:
    return FakeReporter()


@pytest.fixture
def confirmer() -> FakeConfirmer:
    return FakeConfirmer(answer=True)


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def context(
    settings: Settings,
    runner: FakeRunner,
    reporter: FakeReporter,
    confirmer: FakeConfirmer,
    sleeps: list[float],
) -> ServiceContext:
    return ServiceContext(
        settings=settings,
        runner=runner,
        files=LocalFileStore(runner, use_sudo=False),
        reporter=reporter,
        confirmer=confirmer,
        sleep=sleeps.append,
        now=lambda: FIXED_NOW,
    )
