# src/gitdeck/core/__init__.py
"""Public facade for gitdeck.core: re-export main classes from CamelCase modules.

Keeps the CamelCase file names (AsyncEngine.py, Dashboard.py, ...),
but provides flat imports for convenience and stability.
"""

from .AsyncEngine import AsyncEngine  # noqa: F401
from .Dashboard import Dashboard  # noqa: F401
from .Layout import LayoutPlan, compute_layout  # noqa: F401
from .PanelState import Panel, PanelState, Viewport  # noqa: F401


__all__ = [
    "AsyncEngine",
    "Dashboard",
    "LayoutPlan",
    "compute_layout",
    "Panel",
    "PanelState",
    "Viewport",
]
