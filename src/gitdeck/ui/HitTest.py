# gitdeck/ui/HitTest.py
"""HitTest Module
==============
Per-frame registry of clickable screen regions.

The renderer calls `reset()` at the start of every frame and registers one
zone per visible panel, one per visible line of the selectable panels and one
for the help button. Pointer events are resolved against the zones of the
last completed frame only, most specific kind first: line, then button, then
panel.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from gitdeck.core.Layout import Rect
from gitdeck.core.PanelState import Panel


HELP_BUTTON_ID = "help-button"


class ZoneKind(Enum):
    LINE = "line"
    BUTTON = "button"
    PANEL = "panel"


RESOLUTION_ORDER = (ZoneKind.LINE, ZoneKind.BUTTON, ZoneKind.PANEL)


@dataclass(frozen=True)
class Zone:
    zone_id: str
    kind: ZoneKind
    rect: Rect
    panel: Optional[Panel] = None
    line_index: Optional[int] = None


class HitTestRegistry:
    def __init__(self) -> None:
        self._zones: list[Zone] = []
        self.frame: int = 0

    def reset(self) -> None:
        self._zones = []
        self.frame += 1

    def __len__(self) -> int:
        return len(self._zones)

    def zones(self) -> list[Zone]:
        return list(self._zones)

    def register_panel(self, panel: Panel, rect: Rect) -> None:
        self._zones.append(Zone(panel.zone_id, ZoneKind.PANEL, rect, panel=panel))

    def register_line(self, panel: Panel, index: int, rect: Rect) -> None:
        self._zones.append(
            Zone(f"{panel.zone_id}-line-{index}", ZoneKind.LINE, rect, panel=panel, line_index=index)
        )

    def register_button(self, button_id: str, rect: Rect) -> None:
        self._zones.append(Zone(button_id, ZoneKind.BUTTON, rect))

    def resolve(self, y: int, x: int) -> Optional[Zone]:
        for kind in RESOLUTION_ORDER:
            for zone in self._zones:
                if zone.kind is kind and zone.rect.contains(y, x):
                    return zone
        return None

    def panel_at(self, y: int, x: int) -> Optional[Panel]:
        for zone in self._zones:
            if zone.kind is ZoneKind.PANEL and zone.rect.contains(y, x):
                return zone.panel
        return None

    def get(self, zone_id: str) -> Optional[Zone]:
        for zone in self._zones:
            if zone.zone_id == zone_id:
                return zone
        return None
