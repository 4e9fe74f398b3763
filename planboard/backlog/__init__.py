"""Backlog domain: todo tree, workspaces, views and HTTP API."""
