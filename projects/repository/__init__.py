"""Repository layer: DB access for the project aggregate (SQLite).

Keep SQL strings here, so services and the shell never touch them.
"""
from __future__ import annotations
