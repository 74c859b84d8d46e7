"""Service Layer: orchestration of the core components for one workspace."""

from __future__ import annotations

from .workspace_service import Workspace, build_sandbox

__all__ = [
    "Workspace",
    "build_sandbox",
]
