"""Taskboard backend: projects, ordered tasks, collaborators and activity feeds."""

__version__ = "0.1.0"
