"""Bootstrap helpers and the ``navigator-go`` command-line entry point."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, TextIO, get_type_hints

from .commands import CommandRegistry, register_commands
from .editor.protocols import EditorHost
from .editor.workspace import HeadlessWorkspace
from .events import EventBus, WarningPosted
from .navigator import DefinitionNavigator
from .notifications import Notifier
from .positions import Point
from .process import Executor, GoInstaller, PathToolLocator, SubprocessExecutor
from .settings import Settings, SettingsStore
from .tools import ToolInstaller, ToolLocator
from .utils import logging as logging_utils

__all__ = ["configure_logging", "load_settings", "create_navigator", "main", "run"]

_LOGGER = logging.getLogger(__name__)
_TRUE_VALUES = {"1", "true", "yes", "on", "debug"}
_FALSE_VALUES = {"0", "false", "no", "off", "disabled"}


def configure_logging(debug: bool = False, *, force: bool = False, console: bool = True) -> Path:
    """Configure logging for a standalone run."""

    log_path = logging_utils.setup_logging(logging_utils.level_for(debug), force=force, console=console)
    _LOGGER.debug("Logging configured (debug=%s)", debug)
    return log_path


def load_settings(
    path: Optional[Path] = None,
    *,
    store: SettingsStore | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Settings:
    """Load persisted settings or fall back to defaults."""

    active_store = store or SettingsStore(path)
    try:
        return active_store.load(overrides=overrides)
    except OSError as exc:
        _LOGGER.warning("Failed to load settings from %s: %s", active_store.path, exc)
        return Settings()


def create_navigator(
    host: EditorHost,
    *,
    settings: Settings | None = None,
    bus: EventBus | None = None,
    executor: Executor | None = None,
    locator: ToolLocator | None = None,
    installer: ToolInstaller | None = None,
    notifier: Notifier | None = None,
    registry: CommandRegistry | None = None,
) -> DefinitionNavigator:
    """Wire a navigator with the default process collaborators."""

    settings = settings or Settings()
    executor = executor or SubprocessExecutor()
    locator = locator or PathToolLocator(settings.tool_search_paths)
    if installer is None and settings.auto_install:
        installer = GoInstaller(executor, env={**os.environ, **settings.environment})
    navigator = DefinitionNavigator(
        host,
        executor,
        locator,
        settings=settings,
        installer=installer,
        notifier=notifier,
        bus=bus,
    )
    if registry is not None:
        register_commands(navigator, registry)
    return navigator


def main(argv: Sequence[str] | None = None, *, stdout: TextIO | None = None) -> int:
    """Resolve one definition from the command line.

    Exit status is 0 when the definition was found, 1 when no navigation
    happened, and 2 for usage errors.
    """

    out = stdout or sys.stdout
    parser = _build_parser()
    args = parser.parse_args(argv)

    debug = args.debug or _env_flag("NAVIGATOR_GO_DEBUG")
    configure_logging(debug, console=debug)

    try:
        overrides = _coerce_cli_overrides(args.overrides or [])
    except ValueError as exc:
        print(f"Invalid --set override: {exc}", file=sys.stderr)
        return 2

    settings_path = args.settings_path or os.environ.get("NAVIGATOR_GO_SETTINGS_PATH")
    resolved_path = Path(settings_path).expanduser() if settings_path else None
    settings = load_settings(resolved_path, overrides=overrides or None)
    if settings.debug_logging and not debug:
        configure_logging(True, force=True)

    if args.dump_settings:
        out.write(json.dumps(asdict(settings), indent=2, sort_keys=True) + "\n")
        return 0
    if args.file is None:
        parser.print_usage(sys.stderr)
        print("navigator-go: error: FILE is required", file=sys.stderr)
        return 2
    if args.offset is None and args.line is None:
        print("navigator-go: error: pass --offset or --line/--column", file=sys.stderr)
        return 2

    return asyncio.run(_locate(args, settings, out))


def run() -> None:
    """Console-script entry point."""

    raise SystemExit(main())


async def _locate(args: argparse.Namespace, settings: Settings, out: TextIO) -> int:
    target = Path(args.file).expanduser().resolve()
    workspace = HeadlessWorkspace(
        project_paths=[target.parent],
        source_scope=settings.grammar_scope,
        source_extension=settings.source_extension,
    )
    bus: EventBus = EventBus()

    def _print_warning(event: WarningPosted) -> None:
        suffix = f": {event.description}" if event.description else ""
        print(f"warning: {event.detail}{suffix}", file=sys.stderr)

    bus.subscribe(WarningPosted, _print_warning)
    navigator = create_navigator(workspace, settings=settings, bus=bus)
    try:
        try:
            editor = await workspace.open_file(target)
        except OSError as exc:
            print(f"navigator-go: cannot open {target}: {exc}", file=sys.stderr)
            return 1
        if args.offset is not None:
            found = await navigator.goto_definition_with_parameters(args.offset)
        else:
            editor.set_cursor(Point(max(0, args.line - 1), max(0, (args.column or 1) - 1)))
            found = await navigator.goto_definition_for_word_at_cursor()
        resolver = navigator.resolver
        if resolver is not None and resolver.install_task is not None:
            installed = await resolver.wait_for_install()
            if installed:
                print(f"installed {settings.tool_name} at {installed}; run again to resolve", file=sys.stderr)
            else:
                print(f"{settings.tool_name} is not installed and the install attempt failed", file=sys.stderr)
        if not found:
            return 1
        landed = workspace.active_editor()
        if landed is None or landed.path is None:
            return 1
        position = landed.get_cursor_position()
        payload = {"path": str(landed.path), "row": position.row, "column": position.column}
        out.write(json.dumps(payload) + "\n")
        return 0
    finally:
        navigator.dispose()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="navigator-go",
        description="Resolve the definition of the Go identifier at a position.",
    )
    parser.add_argument("file", nargs="?", help="Go source file containing the identifier.")
    parser.add_argument("--offset", type=int, help="UTF-8 byte offset of the identifier.")
    parser.add_argument("--line", type=int, help="1-based line of the identifier.")
    parser.add_argument("--column", type=int, help="1-based column of the identifier.")
    parser.add_argument(
        "--settings",
        dest="settings_path",
        help="Path to an alternate settings JSON file (defaults to ~/.navigator-go/settings.json).",
    )
    parser.add_argument(
        "--set",
        dest="overrides",
        action="append",
        metavar="KEY=VALUE",
        help="Override a settings field for this run (repeatable).",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging on the console.")
    parser.add_argument(
        "--dump-settings",
        action="store_true",
        help="Print the effective settings as JSON and exit.",
    )
    return parser


def _env_flag(name: str, *, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _coerce_cli_overrides(items: Sequence[str]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    known = {item.name for item in fields(Settings)}
    type_hints = get_type_hints(Settings)
    for entry in items:
        if "=" not in entry:
            raise ValueError(f"Override '{entry}' must use KEY=VALUE syntax.")
        key, raw_value = entry.split("=", 1)
        key = key.strip()
        if not key:
            raise ValueError("Override is missing a field name.")
        if key not in known:
            raise ValueError(f"Unknown setting '{key}'.")
        overrides[key] = _coerce_value(type_hints[key], raw_value.strip())
    return overrides


def _coerce_value(annotation: Any, raw_value: str) -> Any:
    text = repr(annotation)
    if annotation is bool:
        return _parse_bool(raw_value)
    if annotation is str:
        return raw_value
    if "float" in text:
        if raw_value.lower() in {"none", "null", ""}:
            return None
        return float(raw_value)
    if "list" in text or "dict" in text:
        try:
            value = json.loads(raw_value)
        except json.JSONDecodeError as exc:
            raise ValueError(f"'{raw_value}' is not valid JSON") from exc
        expected = list if "list" in text else dict
        if not isinstance(value, expected):
            raise ValueError(f"'{raw_value}' must be a JSON {expected.__name__}")
        return value
    return raw_value


def _parse_bool(raw_value: str) -> bool:
    lowered = raw_value.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"'{raw_value}' is not a boolean value")
