"""CLI tests; every invocation shares the temp data root from the autouse env fixture."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from planboard.cli import main


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def _run(runner: CliRunner, *args: str, input: str | None = None):
    result = runner.invoke(main, list(args), input=input)
    assert result.exit_code == 0, result.output
    return result


def _last_line(result) -> str:
    return result.output.strip().splitlines()[-1]


def test_workspace_create_list_switch(runner: CliRunner) -> None:
    ws_id = _last_line(_run(runner, "workspace", "create", "Work"))
    assert ws_id.startswith("workspace_")

    listing = _run(runner, "workspace", "list").output
    assert "* default  Personal" in listing
    assert f"  {ws_id}  Work" in listing

    _run(runner, "workspace", "switch", ws_id)
    assert f"* {ws_id}  Work" in _run(runner, "workspace", "list").output


def test_switch_unknown_workspace_fails(runner: CliRunner) -> None:
    result = runner.invoke(main, ["workspace", "switch", "nope"])
    assert result.exit_code == 1
    assert "not found" in result.output


def test_delete_default_workspace_refused(runner: CliRunner) -> None:
    result = runner.invoke(main, ["workspace", "delete", "default", "--yes"])
    assert result.exit_code == 1
    assert "cannot be deleted" in result.output


def test_add_and_tree(runner: CliRunner) -> None:
    assert "No tasks yet." in _run(runner, "todo", "tree").output

    epic_id = _last_line(_run(runner, "todo", "add", "Launch", "-t", "epic"))
    story_id = _last_line(_run(runner, "todo", "add", "Landing page", "-t", "story", "-p", epic_id))
    task_id = _last_line(_run(runner, "todo", "add", "Write copy", "-p", story_id))
    assert _last_line(_run(runner, "todo", "done", task_id)) == "completed"

    tree = _run(runner, "todo", "tree").output
    assert f"[ ] Epic: Launch  ({epic_id})  0/1" in tree
    assert f"  [ ] Story: Landing page  ({story_id})  1/1" in tree
    assert f"    [x] Task: Write copy  ({task_id})" in tree


def test_add_to_workspace_option(runner: CliRunner) -> None:
    ws_id = _last_line(_run(runner, "workspace", "create", "Work"))
    _run(runner, "todo", "-w", ws_id, "add", "in work")

    assert "in work" in _run(runner, "todo", "-w", ws_id, "list").output
    assert "in work" not in _run(runner, "todo", "list").output


def test_unknown_parent_is_an_error(runner: CliRunner) -> None:
    result = runner.invoke(main, ["todo", "add", "orphan", "-p", "missing"])
    assert result.exit_code == 1
    assert "Not found" in result.output


def test_delete_needs_confirmation(runner: CliRunner) -> None:
    todo_id = _last_line(_run(runner, "todo", "add", "keep me"))

    result = runner.invoke(main, ["todo", "delete", todo_id], input="n\n")
    assert result.exit_code == 1
    assert "keep me" in _run(runner, "todo", "list").output

    result = _run(runner, "todo", "delete", todo_id, "--yes")
    assert "Deleted 1 todo(s)." in result.output
    assert "keep me" not in _run(runner, "todo", "list").output


def test_archive_and_restore(runner: CliRunner) -> None:
    todo_id = _last_line(_run(runner, "todo", "add", "old"))
    assert "Archive is empty." in _run(runner, "todo", "archived").output

    _run(runner, "todo", "archive", todo_id)
    archived = _run(runner, "todo", "archived").output
    assert "Task (1)" in archived
    assert "old" not in _run(runner, "todo", "list").output

    _run(runner, "todo", "restore", todo_id)
    assert "old" in _run(runner, "todo", "list").output


def test_reorder(runner: CliRunner) -> None:
    for title in ("first", "second", "third"):
        _run(runner, "todo", "add", title)

    _run(runner, "todo", "reorder", "2", "0")
    lines = _run(runner, "todo", "list").output.strip().splitlines()
    assert [line.split()[-2] for line in lines] == ["third", "first", "second"]

    result = runner.invoke(main, ["todo", "reorder", "0", "5"])
    assert result.exit_code == 1
    assert "Index out of range." in result.output


def test_edit_requires_a_change(runner: CliRunner) -> None:
    todo_id = _last_line(_run(runner, "todo", "add", "draft"))

    result = runner.invoke(main, ["todo", "edit", todo_id])
    assert result.exit_code == 2

    _run(runner, "todo", "edit", todo_id, "--title", "final", "-t", "story")
    assert "story   final" in _run(runner, "todo", "list").output


def test_move_into_descendant_fails(runner: CliRunner) -> None:
    parent_id = _last_line(_run(runner, "todo", "add", "parent", "-t", "story"))
    child_id = _last_line(_run(runner, "todo", "add", "child", "-p", parent_id))

    result = runner.invoke(main, ["todo", "move", parent_id, "--to", child_id])
    assert result.exit_code == 1

    _run(runner, "todo", "move", child_id)
    assert "child" in _run(runner, "todo", "list").output


def test_export_import_round_trip(runner: CliRunner, tmp_path) -> None:
    epic_id = _last_line(_run(runner, "todo", "add", "Epic", "-t", "epic"))
    _run(runner, "todo", "add", "Story", "-t", "story", "-p", epic_id)

    dump = tmp_path / "backup.json"
    _run(runner, "export", "-o", str(dump))
    exported = json.loads(dump.read_text(encoding="utf-8"))
    assert {item["title"] for item in exported} == {"Epic", "Story"}
    assert "parentId" in exported[0]

    ws_id = _last_line(_run(runner, "workspace", "create", "Copy"))
    result = _run(runner, "import", str(dump), "-w", ws_id, "--yes")
    assert "Imported 2 todo(s)." in result.output

    tree = _run(runner, "todo", "-w", ws_id, "tree").output
    assert "Epic: Epic" in tree
    assert "Story: Story" in tree


def test_import_rejects_garbage(runner: CliRunner, tmp_path) -> None:
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")

    result = runner.invoke(main, ["import", str(bad), "--yes"])
    assert result.exit_code == 1
