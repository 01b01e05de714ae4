"""Discovery of the external definition tool, with a one-shot install fallback."""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, Sequence

from .events import EventBus, ToolInstallFinished
from .settings import Settings

__all__ = [
    "LocatorOptions",
    "ToolCommand",
    "InstallRequest",
    "InstallResult",
    "ToolLocator",
    "ToolInstaller",
    "ToolResolver",
    "locator_options",
    "INSTALLER_NAME",
]

LOGGER = logging.getLogger(__name__)

INSTALLER_NAME = "navigator-go"


@dataclass(frozen=True, slots=True)
class LocatorOptions:
    """Search context: the active file and the directory to run the tool in."""

    file: str | None = None
    directory: str | None = None

    def as_dict(self) -> dict[str, str]:
        result: dict[str, str] = {}
        if self.file:
            result["file"] = self.file
        if self.directory:
            result["directory"] = self.directory
        return result


@dataclass(frozen=True, slots=True)
class ToolCommand:
    """Executable resolved for a single request."""

    path: str
    name: str
    options: LocatorOptions


@dataclass(frozen=True, slots=True)
class InstallRequest:
    name: str
    package_name: str
    package_path: str
    type: str = "missing"


@dataclass(frozen=True, slots=True)
class InstallResult:
    success: bool
    detail: str = ""


class ToolLocator(Protocol):
    async def find_tool(
        self, name: str, *, file: str | None = None, directory: str | None = None
    ) -> str | None:  # pragma: no cover - protocol
        ...


class ToolInstaller(Protocol):
    async def install(self, request: InstallRequest) -> InstallResult:  # pragma: no cover - protocol
        ...


def locator_options(editor_path: Path | str | None, project_paths: Sequence[Path | str] = ()) -> LocatorOptions:
    """Build the search context for ``editor_path``.

    The directory falls back to the first project root when no file is open.
    """

    file: str | None = None
    directory: str | None = None
    if editor_path:
        file = os.fspath(editor_path)
        directory = os.path.dirname(file) or None
    if not directory and project_paths:
        directory = os.fspath(project_paths[0])
    return LocatorOptions(file=file, directory=directory)


class ToolResolver:
    """Finds the definition tool, requesting an install at most once.

    ``install_attempted`` lives for the lifetime of the resolver (one
    process run in practice). After a failed install nothing is retried
    until :meth:`reset_install_attempt` is called.
    """

    def __init__(
        self,
        locator: ToolLocator,
        settings: Settings,
        *,
        installer: ToolInstaller | None = None,
        bus: EventBus | None = None,
    ) -> None:
        self._locator = locator
        self._settings = settings
        self._installer = installer
        self._bus = bus
        self._install_attempted = False
        self._install_task: asyncio.Task[Any] | None = None

    @property
    def install_attempted(self) -> bool:
        return self._install_attempted

    @property
    def install_task(self) -> asyncio.Task[Any] | None:
        return self._install_task

    async def resolve(
        self,
        editor_path: Path | str | None,
        project_paths: Sequence[Path | str] = (),
    ) -> ToolCommand | None:
        """Return the tool command, or ``None`` when the tool is not available.

        A miss schedules the background install (first time only) and still
        returns ``None``; the current request never waits for it.
        """

        options = locator_options(editor_path, project_paths)
        name = self._settings.tool_name
        path = await self._locator.find_tool(name, file=options.file, directory=options.directory)
        if path:
            return ToolCommand(path=path, name=name, options=options)

        if self._install_attempted or not self._settings.auto_install:
            LOGGER.debug("%s not found; install already attempted or disabled", name)
            return None

        self._install_attempted = True
        if self._installer is None:
            LOGGER.info("%s not found and no installer is configured", name)
            return None

        request = InstallRequest(
            name=INSTALLER_NAME,
            package_name=self._settings.package_name,
            package_path=self._settings.package_path,
        )
        LOGGER.info("%s not found; requesting install of %s", name, request.package_path)
        self._install_task = asyncio.create_task(self._install(request, options))
        return None

    async def wait_for_install(self) -> str | None:
        """Await the pending install task, if any.

        Returns the tool path found after a successful install, else ``None``.
        """

        task = self._install_task
        if task is None:
            return None
        (outcome,) = await asyncio.gather(task, return_exceptions=True)
        return outcome if isinstance(outcome, str) else None

    def reset_install_attempt(self) -> None:
        self._install_attempted = False
        self._install_task = None

    def dispose(self) -> None:
        task, self._install_task = self._install_task, None
        if task is not None and not task.done():
            task.cancel()

    async def _install(self, request: InstallRequest, options: LocatorOptions) -> str | None:
        name = self._settings.tool_name
        command: str | None = None
        try:
            result = await self._installer.install(request)  # type: ignore[union-attr]
            if result.success:
                command = await self._locator.find_tool(
                    name, file=options.file, directory=options.directory
                )
                LOGGER.info("Installed %s (found at %s)", request.package_path, command)
            else:
                LOGGER.warning("Install of %s failed: %s", request.package_path, result.detail)
        except asyncio.CancelledError:
            raise
        except Exception:
            LOGGER.exception("Install of %s raised", request.package_path)
        if self._bus is not None:
            self._bus.publish(ToolInstallFinished(tool_name=name, success=command is not None, command=command))
        return command
