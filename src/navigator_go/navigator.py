"""Go-to-definition orchestration.

A request runs as one sequential pipeline: cursor offset, tool lookup, tool
execution, output parsing, target resolution, history push, editor
navigation. Each external call is a single ``await``; failures raise a
:class:`~navigator_go.errors.NavigatorError` that is converted at the public
boundary into a warning or a logged no-op.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import stat
from pathlib import Path
from typing import Awaitable, Callable, Iterable, Mapping

from .cancellation import CancellationToken
from .editor.protocols import CompositeDisposable, EditorHost, TextEditor
from .errors import (
    ErrorCode,
    ExecutionError,
    InvalidTargetError,
    MalformedOutputError,
    NavigatorError,
    PreconditionError,
    RequestCancelledError,
    ToolUnavailableError,
)
from .events import DefinitionVisited, EventBus
from .highlight import TransientHighlight, highlight_word_at_cursor
from .history import NavigationStack
from .location import Location, parse_definition
from .notifications import EventBusNotifier, LoggingNotifier, Notification, Notifier
from .positions import character_index_for_point, encode_offset
from .process import ExecResult, Executor
from .settings import Settings
from .tools import LocatorOptions, ToolCommand, ToolInstaller, ToolLocator, ToolResolver

__all__ = ["DefinitionNavigator", "EnvironmentProvider", "first_source_file"]

LOGGER = logging.getLogger(__name__)

EnvironmentProvider = Callable[[LocatorOptions], "Mapping[str, str] | None"]


def first_source_file(
    names: Iterable[str],
    *,
    extension: str = ".go",
    test_marker: str = "_test",
) -> str | None:
    """Return the lexicographically first non-test source file name, if any."""

    for name in sorted(names):
        if name.endswith(extension) and test_marker not in name:
            return name
    return None


class DefinitionNavigator:
    """Drives ``goto-definition`` and ``goto-definition-return`` for one host."""

    def __init__(
        self,
        host: EditorHost,
        executor: Executor,
        locator: ToolLocator | None,
        *,
        settings: Settings | None = None,
        installer: ToolInstaller | None = None,
        notifier: Notifier | None = None,
        bus: EventBus | None = None,
        environment: EnvironmentProvider | None = None,
        navigation_stack: NavigationStack | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self._host = host
        self._executor = executor
        self._locator = locator
        self._bus = bus
        self._environment = environment
        if notifier is None:
            notifier = EventBusNotifier(bus) if bus is not None else LoggingNotifier()
        self._notifier = notifier
        self.resolver = (
            ToolResolver(locator, self.settings, installer=installer, bus=bus)
            if locator is not None
            else None
        )
        self.navigation_stack = navigation_stack or NavigationStack(host, bus=bus)
        self.subscriptions = CompositeDisposable()
        self._token = CancellationToken()
        self._highlight: TransientHighlight | None = None
        self._disposed = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def ready(self) -> bool:
        return not self._disposed and self.resolver is not None

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def highlight(self) -> TransientHighlight | None:
        if self._highlight is not None and self._highlight.disposed:
            self._highlight = None
        return self._highlight

    def clear_highlight(self) -> None:
        highlight, self._highlight = self._highlight, None
        if highlight is not None:
            highlight.dispose()

    def clear_return_history(self) -> None:
        self.navigation_stack.reset()

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._token.cancel("disposed")
        self.clear_highlight()
        self.subscriptions.dispose()
        if self.resolver is not None:
            self.resolver.dispose()
        LOGGER.debug("Definition navigator disposed")

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def get_editor(self) -> TextEditor | None:
        """Return the active editor when it shows a source file."""

        editor = self._host.active_editor()
        if editor is None or not self._host.is_source_file(editor):
            return None
        return editor

    async def goto_definition_for_word_at_cursor(self) -> bool:
        """Jump to the definition of the identifier under the cursor.

        Returns ``True`` when the editor navigated somewhere.
        """

        async def _run(token: CancellationToken) -> bool:
            editor = self._require_editor()
            if editor.cursor_count() > 1:
                raise PreconditionError(
                    error_code=ErrorCode.MULTIPLE_CURSORS,
                    message=f"{self.settings.tool_name} only works with a single cursor",
                )
            return await self._goto(editor, self.cursor_offset(editor), token)

        return await self._guard(_run)

    async def goto_definition_with_parameters(self, offset: int) -> bool:
        """Same as :meth:`goto_definition_for_word_at_cursor` for a precomputed byte offset."""

        async def _run(token: CancellationToken) -> bool:
            return await self._goto(self._require_editor(), offset, token)

        return await self._guard(_run)

    async def return_to_previous_location(self) -> bool:
        """Pop the navigation stack and move back; a no-op on an empty stack."""

        try:
            entry = await self.navigation_stack.restore_previous_location()
        except OSError as exc:
            LOGGER.warning("Cannot return to previous location: %s", exc)
            return False
        return entry is not None

    async def visit_location(self, location: Location) -> bool:
        """Navigate to an already-parsed location."""

        async def _run(token: CancellationToken) -> bool:
            await self._visit(location, token)
            return True

        return await self._guard(_run)

    # ------------------------------------------------------------------
    # Pipeline steps
    # ------------------------------------------------------------------
    @staticmethod
    def cursor_offset(editor: TextEditor) -> int:
        """UTF-8 byte offset of the editor's cursor."""

        text = editor.get_text()
        index = character_index_for_point(text, editor.get_cursor_position())
        return encode_offset(text, index)

    def build_arguments(self, path: Path | str, offset: int) -> list[str]:
        return ["-json", self.settings.query_mode, f"{os.fspath(path)}:#{offset}"]

    def executor_options(self, options: LocatorOptions) -> dict[str, object]:
        """Working directory and environment for the tool process."""

        env = dict(os.environ)
        env.update(self.settings.environment)
        if self._environment is not None:
            extra = self._environment(options)
            if extra:
                env.update(extra)
        result: dict[str, object] = {"env": env}
        if options.directory:
            result["cwd"] = options.directory
        return result

    async def find_first_source_file(self, directory: Path) -> Path:
        try:
            names = await asyncio.to_thread(os.listdir, directory)
        except OSError as exc:
            raise InvalidTargetError(
                error_code=ErrorCode.INVALID_DIRECTORY,
                message=f"{self.settings.tool_name} returned invalid directory",
                path=str(directory),
                details={"reason": str(exc)},
            ) from exc
        name = first_source_file(
            names,
            extension=self.settings.source_extension,
            test_marker=self.settings.test_marker,
        )
        if name is None:
            raise InvalidTargetError(
                error_code=ErrorCode.NO_SOURCE_FILE,
                message=f"no non-test {self.settings.source_extension} file in directory",
                path=str(directory),
            )
        return directory / name

    async def _goto(self, editor: TextEditor, offset: int, token: CancellationToken) -> bool:
        self.clear_highlight()
        location = await self._resolve_location(editor, offset, token)
        await self._visit(location, token)
        return True

    async def _resolve_location(
        self, editor: TextEditor, offset: int, token: CancellationToken
    ) -> Location:
        if self.resolver is None:
            raise PreconditionError(error_code=ErrorCode.NOT_CONFIGURED, message="no tool locator configured")
        command = await self.resolver.resolve(editor.path, self._host.project_paths)
        token.raise_if_cancelled()
        if command is None:
            raise ToolUnavailableError(details={"tool": self.settings.tool_name})

        result = await self._execute(command, self.build_arguments(editor.path, offset))
        token.raise_if_cancelled()
        if result.stderr and result.stderr.strip():
            LOGGER.warning("%s (stderr) %s", command.name, result.stderr.strip())
        if result.exitcode != 0:
            raise ExecutionError(
                error_code=ErrorCode.NONZERO_EXIT,
                message=f"{command.name} exited with code {result.exitcode}",
                exitcode=result.exitcode,
                stderr=result.stderr,
            )
        return parse_definition(result.stdout)

    async def _execute(self, command: ToolCommand, args: list[str]) -> ExecResult:
        options = self.executor_options(command.options)
        timeout = self.settings.timeout_seconds
        try:
            return await asyncio.wait_for(
                self._executor.exec(command.path, args, cwd=options.get("cwd"), env=options["env"]),
                timeout=timeout,
            )
        except asyncio.TimeoutError as exc:
            raise ExecutionError(
                error_code=ErrorCode.TIMEOUT,
                message=f"{command.name} did not answer within {timeout:g}s",
            ) from exc
        except Exception as exc:
            raise ExecutionError(message=f"failed to run {command.name}: {exc}") from exc

    async def _visit(self, location: Location, token: CancellationToken) -> None:
        if location.is_malformed:
            raise MalformedOutputError(
                message=f"{self.settings.tool_name} returned malformed output",
                raw=location.raw,
            )
        target = Path(location.filepath)
        try:
            info = await asyncio.to_thread(os.stat, target)
        except OSError as exc:
            raise InvalidTargetError(
                message=f"{self.settings.tool_name} returned invalid file path",
                path=str(target),
                details={"reason": str(exc)},
            ) from exc
        token.raise_if_cancelled()

        self.navigation_stack.push_current_location()
        if stat.S_ISDIR(info.st_mode):
            await self._visit_directory(location, token)
        else:
            await self._visit_file(location)

    async def _visit_directory(self, location: Location, token: CancellationToken) -> None:
        path = await self.find_first_source_file(Path(location.filepath))
        token.raise_if_cancelled()
        # The reported position belongs to the directory, not the chosen file.
        await self._visit_file(Location(raw=location.raw, filepath=str(path)))

    async def _visit_file(self, location: Location) -> TextEditor:
        editor = await self._host.open_file(location.filepath)
        position = location.position
        if position is not None:
            editor.scroll_to(position)
            editor.set_cursor(position)
            self.clear_highlight()
            self._highlight = highlight_word_at_cursor(editor)
        if self._bus is not None:
            self._bus.publish(
                DefinitionVisited(
                    path=location.filepath,
                    row=position.row if position else None,
                    column=position.column if position else None,
                )
            )
        return editor

    # ------------------------------------------------------------------
    # Error boundary
    # ------------------------------------------------------------------
    def _require_editor(self) -> TextEditor:
        if not self.ready():
            raise PreconditionError(error_code=ErrorCode.NOT_CONFIGURED, message="navigator is not ready")
        editor = self.get_editor()
        if editor is None or editor.path is None:
            raise PreconditionError()
        return editor

    async def _guard(self, step: Callable[[CancellationToken], Awaitable[bool]]) -> bool:
        token = self._token.child()
        try:
            return await step(token)
        except NavigatorError as exc:
            self._report(exc)
            return False
        except asyncio.CancelledError:
            raise
        except Exception:
            LOGGER.exception("Definition lookup failed")
            return False
        finally:
            token.close()

    def _report(self, error: NavigatorError) -> None:
        if error.user_visible:
            self._warn(error.message, self._describe(error))
        elif isinstance(error, PreconditionError):
            LOGGER.debug("Definition request skipped: %s", error)
        elif isinstance(error, (ToolUnavailableError, RequestCancelledError)):
            LOGGER.info("Definition lookup aborted: %s", error)
        else:
            LOGGER.warning("Definition lookup aborted: %s", error)

    @staticmethod
    def _describe(error: NavigatorError) -> str | None:
        if isinstance(error, MalformedOutputError):
            return json.dumps(error.raw) if error.raw is not None else None
        if isinstance(error, InvalidTargetError):
            return error.path
        return None

    def _warn(self, detail: str, description: str | None = None) -> None:
        self._notifier.add_warning(Notification(detail=detail, description=description))
