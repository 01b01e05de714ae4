"""Shared pytest fixtures."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator

import pytest

from navigator_go.editor import HeadlessWorkspace
from navigator_go.events import EventBus, WarningPosted
from navigator_go.utils import logging as logging_utils
from tests.helpers import GO_SOURCE, HELPER_SOURCE, FakeExecutor, FakeLocator


@pytest.fixture(autouse=True)
def _isolated_environment(
    monkeypatch: pytest.MonkeyPatch, tmp_path_factory: pytest.TempPathFactory
) -> Iterator[None]:
    """Keep user overrides and log files out of the tests."""

    for name in list(os.environ):
        if name.startswith("NAVIGATOR_GO_"):
            monkeypatch.delenv(name)
    monkeypatch.setenv("NAVIGATOR_GO_LOG_DIR", str(tmp_path_factory.mktemp("logs")))
    yield
    if logging_utils.get_log_path() is not None:
        logging_utils.reset_logging()


@pytest.fixture
def go_project(tmp_path: Path) -> Path:
    """A tiny Go module: main.go, helper.go and a pkg/ directory."""

    (tmp_path / "main.go").write_text(GO_SOURCE, encoding="utf-8")
    (tmp_path / "helper.go").write_text(HELPER_SOURCE, encoding="utf-8")
    pkg = tmp_path / "pkg"
    pkg.mkdir()
    (pkg / "a_test.go").write_text("package pkg\n", encoding="utf-8")
    (pkg / "b.go").write_text("package pkg\n\nfunc B() {}\n", encoding="utf-8")
    (pkg / "c.go").write_text("package pkg\n", encoding="utf-8")
    return tmp_path


@pytest.fixture
def workspace(go_project: Path) -> HeadlessWorkspace:
    return HeadlessWorkspace(project_paths=[go_project])


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def warnings(bus: EventBus) -> list[WarningPosted]:
    received: list[WarningPosted] = []
    bus.subscribe(WarningPosted, received.append)
    return received


@pytest.fixture
def executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def locator() -> FakeLocator:
    return FakeLocator()
