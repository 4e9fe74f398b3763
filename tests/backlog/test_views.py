"""Unit tests for the tree view composer."""

from __future__ import annotations

import json

from planboard.backlog import views
from planboard.backlog.managers.todos import TodoManager
from planboard.backlog.models.enums import TodoType
from planboard.backlog.store.base import todos_key
from planboard.backlog.store.memory import MemoryKeyValueStore


def test_compose_tree_nests_all_levels(todos: TodoManager) -> None:
    project = todos.add_todo("Website", TodoType.PROJECT)
    epic = todos.add_todo("Blog", TodoType.EPIC, project.id)
    story = todos.add_todo("Comments", TodoType.STORY, epic.id)
    todos.add_todo("Spam filter", TodoType.TASK, story.id)
    todos.add_todo("Loose epic", TodoType.EPIC)

    tree = views.compose_tree(todos)

    assert [n.todo.title for n in tree] == ["Website", "Loose epic"]
    [blog] = tree[0].children
    [comments] = blog.children
    [spam] = comments.children
    assert (blog.todo.title, comments.todo.title, spam.todo.title) == ("Blog", "Comments", "Spam filter")
    assert spam.children == []


def test_compose_tree_follows_order(todos: TodoManager) -> None:
    epic = todos.add_todo("Epic", TodoType.EPIC)
    for title in "ABC":
        todos.add_todo(title, TodoType.STORY, epic.id)
    todos.reorder_todos(epic.id, 2, 0)

    [node] = views.compose_tree(todos)
    assert [c.todo.title for c in node.children] == ["C", "A", "B"]


def test_compose_tree_skips_archived(todos: TodoManager) -> None:
    epic = todos.add_todo("Epic", TodoType.EPIC)
    kept = todos.add_todo("Kept", TodoType.STORY, epic.id)
    gone = todos.add_todo("Gone", TodoType.STORY, epic.id)
    todos.archive_todo(gone.id)
    archived_epic = todos.add_todo("Archived epic", TodoType.EPIC)
    todos.archive_todo(archived_epic.id)

    tree = views.compose_tree(todos)
    assert [n.todo.title for n in tree] == ["Epic"]
    assert [c.todo.id for c in tree[0].children] == [kept.id]


def test_progress_counts(todos: TodoManager) -> None:
    story = todos.add_todo("Story", TodoType.STORY)
    done = todos.add_todo("done", TodoType.TASK, story.id)
    todos.add_todo("open", TodoType.TASK, story.id)
    todos.toggle_complete(done.id)

    [node] = views.compose_tree(todos)
    assert (node.completed_count, node.total_count) == (1, 2)


def test_compose_subtree_of_archived_todo(todos: TodoManager) -> None:
    epic = todos.add_todo("Epic", TodoType.EPIC)
    todos.add_todo("Story", TodoType.STORY, epic.id)
    todos.archive_todo(epic.id)

    node = views.compose_subtree(todos, epic.id)
    assert node.todo.archived is True
    assert [c.todo.title for c in node.children] == ["Story"]


def test_compose_subtree_survives_cycle() -> None:
    data = [
        {"id": "a", "title": "a", "type": "story", "parentId": "b", "createdAt": 1, "order": 0},
        {"id": "b", "title": "b", "type": "story", "parentId": "a", "createdAt": 2, "order": 0},
    ]
    store = MemoryKeyValueStore({todos_key("default"): json.dumps(data)})
    todos = TodoManager(store)

    node = views.compose_subtree(todos, "a")
    assert [c.todo.id for c in node.children] == ["b"]
    assert node.children[0].children == []
    # Neither node is reachable from the top level.
    assert views.compose_tree(todos) == []


def test_group_archived(todos: TodoManager) -> None:
    epic = todos.add_todo("Epic", TodoType.EPIC)
    task = todos.add_todo("Task", TodoType.TASK)
    todos.add_todo("Live", TodoType.TASK)
    todos.archive_todo(task.id)
    todos.archive_todo(epic.id)

    groups = views.group_archived(todos)
    assert list(groups) == [TodoType.EPIC, TodoType.TASK]
    assert [t.title for t in groups[TodoType.TASK]] == ["Task"]


def test_group_archived_empty(todos: TodoManager) -> None:
    assert views.group_archived(todos) == {}


def test_render_tree(todos: TodoManager) -> None:
    story = todos.add_todo("Story", TodoType.STORY)
    task = todos.add_todo("line one\nline two", TodoType.TASK, story.id)
    todos.toggle_complete(task.id)

    lines = views.render_tree(views.compose_tree(todos)).splitlines()

    assert lines[0].startswith("[ ] Story: Story")
    assert lines[0].endswith("1/1")
    assert lines[1].startswith("  [x] Task: line one")
    assert lines[2] == "      line two"


def test_render_archive(todos: TodoManager) -> None:
    task = todos.add_todo("Task", TodoType.TASK)
    todos.archive_todo(task.id)

    text = views.render_archive(views.group_archived(todos))
    assert text.splitlines()[0] == "Task (1)"
    assert "Task: Task" in text
