"""Runtime orchestration for the sidebar.

This package groups persisted settings, the working-directory monitor, and
the ``ViewCoordinator`` that ties snapshots, search, and selection together.
"""

from __future__ import annotations

from .config import SidebarSettings, load_settings, save_default_mode
from .coordinator import RefreshToken, ViewCoordinator
from .cwd_monitor import CwdMonitor

__all__ = [
    "SidebarSettings",
    "load_settings",
    "save_default_mode",
    "RefreshToken",
    "ViewCoordinator",
    "CwdMonitor",
]
