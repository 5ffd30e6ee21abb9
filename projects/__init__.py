"""Projects manager: SQLite-backed project, material, step and category records."""

__version__ = "0.1.0"
