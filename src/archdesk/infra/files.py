"""Local filesystem implementation of :class:`~archdesk.core.protocols.FileStore`.

Unprivileged operations use :mod:`pathlib` and :mod:`shutil` directly.
Privileged operations (``/etc``, ``/usr/share``) go through ``sudo``
commands on the injected runner when ``use_sudo`` is enabled, mirroring
``sudo tee``/``sudo cp``/``sudo rm``.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path

from archdesk.core.protocols import CommandRunner
from archdesk.exceptions import ArchdeskError


class LocalFileStore:
    """Concrete :class:`FileStore` for the running machine."""

    def __init__(self, runner: CommandRunner, *, use_sudo: bool = True) -> None:
        self._runner = runner
        self._use_sudo = use_sudo

    def _sudo(self, privileged: bool) -> bool:
        return privileged and self._use_sudo

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def exists(self, path: Path) -> bool:
        return path.exists()

    def is_dir(self, path: Path) -> bool:
        return path.is_dir()

    def read_text(self, path: Path, *, privileged: bool = False) -> str:
        if self._sudo(privileged):
            return self._runner.run(["sudo", "cat", str(path)], capture=True).stdout
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ArchdeskError(f"Could not read {path}: {exc.strerror}") from exc

    def find(
        self,
        directory: Path,
        pattern: str,
        *,
        recursive: bool = False,
        dirs_only: bool = False,
        files_only: bool = False,
    ) -> list[Path]:
        if not directory.is_dir():
            return []
        matches = directory.rglob(pattern) if recursive else directory.glob(pattern)
        result = []
        for match in matches:
            if dirs_only and not match.is_dir():
                continue
            if files_only and not match.is_file():
                continue
            result.append(match)
        return sorted(result)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def write_text(
        self,
        path: Path,
        text: str,
        *,
        privileged: bool = False,
        mode: int | None = None,
    ) -> None:
        if self._sudo(privileged):
            self._runner.run(["sudo", "tee", str(path)], input_text=text, capture=True)
        else:
            try:
                path.write_text(text, encoding="utf-8")
            except OSError as exc:
                raise ArchdeskError(f"Could not write {path}: {exc.strerror}") from exc
        if mode is not None:
            self.chmod(path, mode, privileged=privileged)

    def copy(self, source: Path, target: Path, *, privileged: bool = False) -> None:
        if self._sudo(privileged):
            self._runner.run(["sudo", "cp", "-r", str(source), str(target)], capture=True)
            return
        try:
            if source.is_dir():
                shutil.copytree(source, target, dirs_exist_ok=True)
            else:
                shutil.copy2(source, target)
        except OSError as exc:
            raise ArchdeskError(f"Could not copy {source} to {target}: {exc}") from exc

    def move(self, source: Path, target: Path, *, privileged: bool = False) -> None:
        if self._sudo(privileged):
            self._runner.run(["sudo", "mv", str(source), str(target)], capture=True)
            return
        try:
            shutil.move(str(source), str(target))
        except OSError as exc:
            raise ArchdeskError(f"Could not move {source} to {target}: {exc}") from exc

    def remove(self, path: Path, *, privileged: bool = False) -> None:
        if self._sudo(privileged):
            self._runner.run(["sudo", "rm", "-rf", str(path)], capture=True)
            return
        try:
            if path.is_dir() and not path.is_symlink():
                shutil.rmtree(path)
            else:
                path.unlink(missing_ok=True)
        except OSError as exc:
            raise ArchdeskError(f"Could not remove {path}: {exc.strerror}") from exc

    def make_dirs(self, path: Path, *, privileged: bool = False) -> None:
        if self._sudo(privileged):
            self._runner.run(["sudo", "mkdir", "-p", str(path)], capture=True)
            return
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ArchdeskError(f"Could not create {path}: {exc.strerror}") from exc

    def chmod(
        self,
        path: Path,
        mode: int,
        *,
        privileged: bool = False,
        recursive: bool = False,
    ) -> None:
        if self._sudo(privileged):
            argv = ["sudo", "chmod"]
            if recursive:
                argv.append("-R")
            self._runner.run([*argv, f"{mode:o}", str(path)], capture=True)
            return
        targets = [path]
        if recursive and path.is_dir():
            targets.extend(path.rglob("*"))
        try:
            for target in targets:
                os.chmod(target, mode)
        except OSError as exc:
            raise ArchdeskError(f"Could not change mode of {path}: {exc.strerror}") from exc

    def take_ownership(self, path: Path) -> None:
        if not self._use_sudo:
            return
        owner = f"{os.getuid()}:{os.getgid()}"
        self._runner.run(["sudo", "chown", "-R", owner, str(path)], check=False, capture=True)
