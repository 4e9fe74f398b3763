"""Planboard - hierarchical backlog manager with workspaces."""
