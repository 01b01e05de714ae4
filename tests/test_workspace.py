"""Tests for the headless editor and workspace."""

from __future__ import annotations

from pathlib import Path

import pytest

from navigator_go.editor import BufferEditor, CompositeDisposable, Disposable, HeadlessWorkspace, scope_for_path
from navigator_go.positions import Point, Range


class TestBufferEditor:
    def test_scope_from_extension(self) -> None:
        assert BufferEditor(path="/a/main.go").scope_name == "source.go"
        assert scope_for_path(Path("README")) == "text.plain"
        assert scope_for_path(None) == "text.plain"

    def test_line_text(self) -> None:
        editor = BufferEditor("one\r\ntwo\n")

        assert editor.line_text(0) == "one"
        assert editor.line_text(1) == "two"
        assert editor.line_text(2) == ""
        assert editor.line_text(9) == ""

    def test_set_cursor_clamps_and_collapses(self) -> None:
        editor = BufferEditor("ab\ncd")
        editor.add_cursor(Point(1, 1))
        assert editor.cursor_count() == 2

        editor.set_cursor(Point(7, 9))

        assert editor.cursors == (Point(1, 2),)

    def test_cursor_listeners(self) -> None:
        editor = BufferEditor("abc\n")
        moves: list[Point] = []
        subscription = editor.on_cursor_moved(moves.append)

        editor.set_cursor(Point(0, 2))
        editor.set_cursor(Point(0, 2))
        subscription.dispose()
        editor.set_cursor(Point(0, 1))

        assert moves == [Point(0, 2)]
        assert editor.listener_count == 0

    def test_highlight_marker_lifecycle(self) -> None:
        editor = BufferEditor("abc\n")
        released: list[bool] = []
        handle = editor.highlight_range(Range(Point(0, 0), Point(0, 3)), on_dispose=lambda: released.append(True))
        marker = editor.markers[0]

        handle.dispose()
        handle.dispose()

        assert marker.destroyed
        assert editor.markers == []
        assert released == [True]

    def test_set_text_clamps_cursor(self) -> None:
        editor = BufferEditor("line one\nline two\n")
        editor.set_cursor(Point(1, 6))

        editor.set_text("x")

        assert editor.get_cursor_position() == Point(0, 1)


class TestDisposables:
    def test_composite_disposes_children_once(self) -> None:
        calls: list[str] = []
        group = CompositeDisposable([Disposable(lambda: calls.append("a"))])
        group.add(Disposable(lambda: calls.append("b")))
        assert len(group) == 2

        group.dispose()
        group.dispose()

        assert calls == ["a", "b"]

    def test_add_after_dispose_releases_immediately(self) -> None:
        group = CompositeDisposable()
        group.dispose()
        child = Disposable()

        group.add(child)

        assert child.disposed
        assert len(group) == 0


class TestHeadlessWorkspace:
    @pytest.mark.asyncio
    async def test_open_file_reuses_editor(self, workspace: HeadlessWorkspace, go_project: Path) -> None:
        activated: list[object] = []
        workspace.add_active_listener(activated.append)

        first = await workspace.open_file(go_project / "main.go")
        await workspace.open_file(go_project / "helper.go")
        again = await workspace.open_file(str(go_project / "main.go"))

        assert first is again
        assert workspace.active_editor() is first
        assert len(workspace.open_paths) == 2
        assert len(activated) == 3
        assert first.get_text().startswith("package main")

    @pytest.mark.asyncio
    async def test_missing_file(self, workspace: HeadlessWorkspace, go_project: Path) -> None:
        with pytest.raises(FileNotFoundError):
            await workspace.open_file(go_project / "nope.go")
        assert workspace.active_editor() is None

    @pytest.mark.asyncio
    async def test_is_source_file(self, workspace: HeadlessWorkspace, go_project: Path) -> None:
        editor = await workspace.open_file(go_project / "pkg" / "b.go")

        assert workspace.is_source_file(editor)
        assert not workspace.is_source_file(BufferEditor(path=go_project / "notes.txt"))
        assert workspace.is_source_file(BufferEditor(scope_name="source.go"))

    def test_project_paths(self, workspace: HeadlessWorkspace, go_project: Path, tmp_path: Path) -> None:
        workspace.add_project_path(go_project)
        workspace.add_project_path(tmp_path / "other")

        assert workspace.project_paths == (go_project.resolve(), (tmp_path / "other").resolve())

    @pytest.mark.asyncio
    async def test_close_all(self, workspace: HeadlessWorkspace, go_project: Path) -> None:
        await workspace.open_file(go_project / "main.go")

        workspace.close_all()

        assert workspace.active_editor() is None
        assert workspace.editor_for(go_project / "main.go") is None
