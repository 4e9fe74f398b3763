from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import click

from planboard.backlog.models.enums import TodoType

_TYPE_CHOICE = click.Choice([t.value for t in TodoType], case_sensitive=False)


@click.group()
def main() -> None:
    """Planboard - hierarchical backlog (projects, epics, stories, tasks) with workspaces."""


@main.command()
@click.option("--host", default=None, help="Bind host (default: from PLANBOARD_HOST or 127.0.0.1).")
@click.option("--port", default=None, type=int, help="Bind port (default: from PLANBOARD_PORT or 8000).")
@click.option("--reload", is_flag=True, default=False, help="Enable auto-reload for development.")
def serve(host: str | None, port: int | None, reload: bool) -> None:
    """Start the HTTP API server."""
    import uvicorn

    from planboard.backlog.settings import get_settings

    settings = get_settings()

    uvicorn.run(
        "planboard.backlog.app:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_level="warning",  # uvicorn's own logging is intercepted by loguru
    )


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _open_store():
    from planboard.backlog.app import create_store
    from planboard.backlog.log import setup_logging
    from planboard.backlog.settings import get_settings

    settings = get_settings()
    setup_logging(settings.log_level)
    return create_store(settings)


def _todo_manager(workspace_id: str | None):
    from planboard.backlog.managers.todos import TodoManager
    from planboard.backlog.managers.workspaces import WorkspaceManager

    store = _open_store()
    workspaces = WorkspaceManager(store)
    workspace_id = workspace_id or workspaces.active_workspace_id
    if not workspaces.exists(workspace_id):
        raise click.ClickException(f"Workspace '{workspace_id}' not found.")
    return TodoManager(store, workspace_id)


@contextmanager
def _domain_errors() -> Iterator[None]:
    """Report manager exceptions as CLI errors instead of tracebacks."""
    try:
        yield
    except LookupError as exc:
        raise click.ClickException(f"Not found: {exc.args[0]}") from None
    except ValueError as exc:
        raise click.ClickException(str(exc)) from None


def _warn_if_degraded(manager) -> None:
    if manager.persistence_degraded:
        click.echo("Warning: changes could not be saved to storage.", err=True)


# ---------------------------------------------------------------------------
# Workspaces
# ---------------------------------------------------------------------------


@main.group()
def workspace() -> None:
    """Create, rename, delete and switch workspaces."""


def _workspace_manager():
    from planboard.backlog.managers.workspaces import WorkspaceManager

    return WorkspaceManager(_open_store())


@workspace.command("list")
def workspace_list() -> None:
    """List workspaces; the active one is marked with '*'."""
    manager = _workspace_manager()
    for ws in manager.list_workspaces():
        mark = "*" if ws.id == manager.active_workspace_id else " "
        click.echo(f"{mark} {ws.id}  {ws.name}")


@workspace.command("create")
@click.argument("name")
@click.option("--switch", is_flag=True, default=False, help="Make the new workspace active.")
def workspace_create(name: str, switch: bool) -> None:
    """Create a workspace."""
    manager = _workspace_manager()
    with _domain_errors():
        ws = manager.create_workspace(name)
    if switch:
        manager.switch_workspace(ws.id)
    _warn_if_degraded(manager)
    click.echo(ws.id)


@workspace.command("rename")
@click.argument("workspace_id")
@click.argument("name")
def workspace_rename(workspace_id: str, name: str) -> None:
    manager = _workspace_manager()
    with _domain_errors():
        ws = manager.rename_workspace(workspace_id, name)
    if ws is None:
        raise click.ClickException(f"Workspace '{workspace_id}' not found.")
    _warn_if_degraded(manager)


@workspace.command("delete")
@click.argument("workspace_id")
@click.confirmation_option(prompt="Delete this workspace and all of its todos?")
def workspace_delete(workspace_id: str) -> None:
    """Delete a workspace and its todos."""
    from planboard.backlog.managers.workspaces import DefaultWorkspaceError

    manager = _workspace_manager()
    try:
        deleted = manager.delete_workspace(workspace_id)
    except DefaultWorkspaceError:
        raise click.ClickException("The default workspace cannot be deleted.") from None
    if not deleted:
        raise click.ClickException(f"Workspace '{workspace_id}' not found.")
    _warn_if_degraded(manager)


@workspace.command("switch")
@click.argument("workspace_id")
def workspace_switch(workspace_id: str) -> None:
    """Make a workspace the active one."""
    manager = _workspace_manager()
    if not manager.switch_workspace(workspace_id):
        raise click.ClickException(f"Workspace '{workspace_id}' not found.")
    _warn_if_degraded(manager)


# ---------------------------------------------------------------------------
# Todos
# ---------------------------------------------------------------------------


@main.group()
@click.option("-w", "--workspace", "workspace_id", default=None, help="Workspace id (default: the active one).")
@click.pass_context
def todo(ctx: click.Context, workspace_id: str | None) -> None:
    """Manage the todos of a workspace."""
    ctx.obj = {"workspace_id": workspace_id}


def _manager_from(ctx: click.Context):
    return _todo_manager(ctx.obj["workspace_id"])


@todo.command("add")
@click.argument("title")
@click.option("-t", "--type", "todo_type", type=_TYPE_CHOICE, default=TodoType.TASK.value, show_default=True)
@click.option("-p", "--parent", "parent_id", default=None, help="Parent todo id (default: top level).")
@click.pass_context
def todo_add(ctx: click.Context, title: str, todo_type: str, parent_id: str | None) -> None:
    """Add a todo at the end of its parent's list."""
    manager = _manager_from(ctx)
    with _domain_errors():
        created = manager.add_todo(title, TodoType(todo_type.lower()), parent_id)
    _warn_if_degraded(manager)
    click.echo(created.id)


@todo.command("list")
@click.option("-p", "--parent", "parent_id", default=None, help="Parent todo id (default: top level).")
@click.option("--all", "include_archived", is_flag=True, default=False, help="Include archived todos.")
@click.pass_context
def todo_list(ctx: click.Context, parent_id: str | None, include_archived: bool) -> None:
    """List the children of a todo in order."""
    manager = _manager_from(ctx)
    for index, item in enumerate(manager.get_children(parent_id, include_archived)):
        flags = "".join(["x" if item.completed else " ", "a" if item.archived else " "])
        first_line = item.title.splitlines()[0] if item.title else ""
        click.echo(f"{index:>3} [{flags}] {item.type.value:<7} {first_line}  ({item.id})")


@todo.command("tree")
@click.argument("todo_id", required=False)
@click.pass_context
def todo_tree(ctx: click.Context, todo_id: str | None) -> None:
    """Show the backlog (or one subtree) as an outline."""
    from planboard.backlog import views

    manager = _manager_from(ctx)
    with _domain_errors():
        nodes = [views.compose_subtree(manager, todo_id)] if todo_id else views.compose_tree(manager)
    if nodes:
        click.echo(views.render_tree(nodes))
    else:
        click.echo("No tasks yet.")


@todo.command("archived")
@click.pass_context
def todo_archived(ctx: click.Context) -> None:
    """Show archived todos grouped by type."""
    from planboard.backlog import views

    groups = views.group_archived(_manager_from(ctx))
    if groups:
        click.echo(views.render_archive(groups))
    else:
        click.echo("Archive is empty.")


@todo.command("done")
@click.argument("todo_id")
@click.pass_context
def todo_done(ctx: click.Context, todo_id: str) -> None:
    """Toggle a todo's completed flag."""
    manager = _manager_from(ctx)
    with _domain_errors():
        updated = manager.toggle_complete(todo_id)
    _warn_if_degraded(manager)
    click.echo("completed" if updated.completed else "open")


@todo.command("edit")
@click.argument("todo_id")
@click.option("--title", default=None)
@click.option("-t", "--type", "todo_type", type=_TYPE_CHOICE, default=None)
@click.pass_context
def todo_edit(ctx: click.Context, todo_id: str, title: str | None, todo_type: str | None) -> None:
    """Change a todo's title or type."""
    changes: dict[str, object] = {}
    if title is not None:
        changes["title"] = title
    if todo_type is not None:
        changes["type"] = TodoType(todo_type.lower())
    if not changes:
        raise click.UsageError("Nothing to change; pass --title and/or --type.")
    manager = _manager_from(ctx)
    with _domain_errors():
        manager.update_todo(todo_id, **changes)
    _warn_if_degraded(manager)


@todo.command("archive")
@click.argument("todo_id")
@click.pass_context
def todo_archive(ctx: click.Context, todo_id: str) -> None:
    manager = _manager_from(ctx)
    with _domain_errors():
        manager.archive_todo(todo_id)
    _warn_if_degraded(manager)


@todo.command("restore")
@click.argument("todo_id")
@click.pass_context
def todo_restore(ctx: click.Context, todo_id: str) -> None:
    manager = _manager_from(ctx)
    with _domain_errors():
        manager.restore_todo(todo_id)
    _warn_if_degraded(manager)


@todo.command("delete")
@click.argument("todo_id")
@click.confirmation_option(prompt="Permanently delete this todo and all its children?")
@click.pass_context
def todo_delete(ctx: click.Context, todo_id: str) -> None:
    """Permanently delete a todo and its descendants."""
    manager = _manager_from(ctx)
    with _domain_errors():
        removed = manager.delete_todo(todo_id)
    _warn_if_degraded(manager)
    click.echo(f"Deleted {len(removed)} todo(s).")


@todo.command("move")
@click.argument("todo_id")
@click.option("--to", "parent_id", default=None, help="New parent id (default: top level).")
@click.option("--index", type=click.IntRange(min=0), default=None, help="Position among the new siblings.")
@click.pass_context
def todo_move(ctx: click.Context, todo_id: str, parent_id: str | None, index: int | None) -> None:
    """Move a todo under a different parent."""
    manager = _manager_from(ctx)
    with _domain_errors():
        manager.move_todo(todo_id, parent_id, index)
    _warn_if_degraded(manager)


@todo.command("reorder")
@click.argument("from_index", type=int)
@click.argument("to_index", type=int)
@click.option("-p", "--parent", "parent_id", default=None, help="Parent todo id (default: top level).")
@click.pass_context
def todo_reorder(ctx: click.Context, from_index: int, to_index: int, parent_id: str | None) -> None:
    """Move the sibling at FROM_INDEX to TO_INDEX."""
    manager = _manager_from(ctx)
    if not manager.reorder_todos(parent_id, from_index, to_index):
        raise click.ClickException("Index out of range.")
    _warn_if_degraded(manager)


# ---------------------------------------------------------------------------
# Import / export
# ---------------------------------------------------------------------------


@main.command("export")
@click.option("-w", "--workspace", "workspace_id", default=None, help="Workspace id (default: the active one).")
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), default=None)
def export_todos(workspace_id: str | None, output: Path | None) -> None:
    """Write a workspace's todos as JSON (stdout unless --output)."""
    payload = _todo_manager(workspace_id).export_json()
    if output is None:
        click.echo(payload)
    else:
        output.write_text(payload, encoding="utf-8")


@main.command("import")
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-w", "--workspace", "workspace_id", default=None, help="Workspace id (default: the active one).")
@click.confirmation_option(prompt="Replace all todos in the workspace?")
def import_todos(source: Path, workspace_id: str | None) -> None:
    """Replace a workspace's todos with a JSON export."""
    manager = _todo_manager(workspace_id)
    with _domain_errors():
        count = manager.import_json(source.read_text(encoding="utf-8"))
    _warn_if_degraded(manager)
    click.echo(f"Imported {count} todo(s).")


if __name__ == "__main__":
    main()
