"""Workspace persistence module.

Exports ``WorkspaceSerializer`` and the file-level load/save helpers.
"""
from __future__ import annotations

from vhandle.workspace.serializer import (
    WorkspaceError,
    WorkspaceSerializer,
    load_workspace,
    save_workspace,
)

__all__ = [
    "WorkspaceSerializer",
    "WorkspaceError",
    "load_workspace",
    "save_workspace",
]
