"""Default process collaborators: executor, tool locator and Go installer.

Hosts with their own process/tool management pass their implementations to
the navigator instead; these keep the CLI and integration tests self-contained.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping, Protocol, Sequence

from .tools import InstallRequest, InstallResult

__all__ = ["ExecResult", "Executor", "SubprocessExecutor", "PathToolLocator", "GoInstaller"]

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ExecResult:
    stdout: str
    stderr: str
    exitcode: int


class Executor(Protocol):
    async def exec(
        self,
        command: str,
        args: Sequence[str],
        *,
        cwd: str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> ExecResult:  # pragma: no cover - protocol
        ...


class SubprocessExecutor:
    """Runs commands with :func:`asyncio.create_subprocess_exec`.

    The child is killed when the awaiting task is cancelled (for example by
    an ``asyncio.wait_for`` timeout) so a hung tool never outlives its request.
    """

    def __init__(self, *, encoding: str = "utf-8") -> None:
        self._encoding = encoding

    async def exec(
        self,
        command: str,
        args: Sequence[str],
        *,
        cwd: str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> ExecResult:
        LOGGER.debug("exec %s %s (cwd=%s)", command, " ".join(args), cwd)
        process = await asyncio.create_subprocess_exec(
            command,
            *args,
            cwd=cwd,
            env=dict(env) if env is not None else None,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout, stderr = await process.communicate()
        except asyncio.CancelledError:
            if process.returncode is None:
                process.kill()
                await process.wait()
            raise
        return ExecResult(
            stdout=stdout.decode(self._encoding, errors="replace"),
            stderr=stderr.decode(self._encoding, errors="replace"),
            exitcode=process.returncode if process.returncode is not None else -1,
        )


class PathToolLocator:
    """Finds Go tools in the usual install locations, then on ``PATH``.

    Search order: configured extra paths, ``$GOBIN``, each ``$GOPATH/bin``,
    ``~/go/bin``, then ``PATH``.
    """

    def __init__(
        self,
        search_paths: Iterable[Path | str] = (),
        *,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._search_paths = [Path(path).expanduser() for path in search_paths]
        self._environ = environ

    async def find_tool(
        self, name: str, *, file: str | None = None, directory: str | None = None
    ) -> str | None:
        del file, directory  # the lookup does not depend on the project
        return await asyncio.to_thread(self._find, name)

    def candidate_directories(self) -> list[Path]:
        environ = self._environ if self._environ is not None else os.environ
        directories: list[Path] = list(self._search_paths)
        gobin = environ.get("GOBIN")
        if gobin:
            directories.append(Path(gobin))
        for entry in (environ.get("GOPATH") or "").split(os.pathsep):
            if entry:
                directories.append(Path(entry) / "bin")
        directories.append(Path.home() / "go" / "bin")
        return directories

    def _find(self, name: str) -> str | None:
        environ = self._environ if self._environ is not None else os.environ
        for directory in self.candidate_directories():
            found = shutil.which(name, path=str(directory))
            if found:
                return found
        return shutil.which(name, path=environ.get("PATH"))


class GoInstaller:
    """Installs a Go command with ``go install <package>@latest``."""

    def __init__(
        self,
        executor: Executor,
        *,
        go_command: str = "go",
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._executor = executor
        self._go_command = go_command
        self._env = env

    async def install(self, request: InstallRequest) -> InstallResult:
        go = shutil.which(self._go_command) or self._go_command
        target = f"{request.package_path}@latest"
        LOGGER.info("Installing %s for %s", target, request.name)
        try:
            result = await self._executor.exec(go, ["install", target], env=self._env)
        except OSError as exc:
            return InstallResult(success=False, detail=f"cannot run {self._go_command}: {exc}")
        if result.exitcode != 0:
            return InstallResult(success=False, detail=result.stderr.strip() or f"exit code {result.exitcode}")
        return InstallResult(success=True, detail=result.stdout.strip())
