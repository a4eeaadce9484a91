"""
Menu Module - Toolbox Overlay
=============================
Tool, color and size pickers shown while the session is in menu mode.
Items are selected by hovering the pointing cursor over them until the
dwell ring fills; each completed dwell emits one MenuSelection event.
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

import cv2
import numpy as np

from .ink import BRUSH_SIZES, Color, ColorPalette, Tool

# Normalized rectangle (x0, y0, x1, y1)
Rect = Tuple[float, float, float, float]


@dataclass(frozen=True)
class MenuSelection:
    """A discrete selection event: kind is 'tool', 'color' or 'size'."""
    kind: str
    value: Any


@dataclass(frozen=True)
class MenuItem:
    item_id: str
    selection: MenuSelection
    rect: Rect

    def contains(self, point: Tuple[float, float]) -> bool:
        x, y = point
        x0, y0, x1, y1 = self.rect
        return x0 <= x <= x1 and y0 <= y <= y1


def build_layout() -> List[MenuItem]:
    """Toolbox layout in normalized screen coordinates."""
    items = [
        MenuItem('tool-pen', MenuSelection('tool', Tool.PEN), (0.30, 0.20, 0.46, 0.36)),
        MenuItem('tool-eraser', MenuSelection('tool', Tool.ERASER), (0.54, 0.20, 0.70, 0.36)),
    ]

    colors = ColorPalette.get_all()
    width = 0.06
    gap = (0.64 - width * len(colors)) / (len(colors) - 1)
    for i, color in enumerate(colors):
        x0 = 0.18 + i * (width + gap)
        items.append(MenuItem(f'color-{i}', MenuSelection('color', color), (x0, 0.44, x0 + width, 0.54)))

    width = 0.1
    for i, size in enumerate(BRUSH_SIZES):
        x0 = 0.25 + i * 0.13
        items.append(MenuItem(f'size-{size}', MenuSelection('size', size), (x0, 0.62, x0 + width, 0.74)))

    return items


class ToolboxMenu:
    """
    Hover-to-select toolbox.

    Holding the cursor on one item advances its progress every frame;
    moving to another item or off the menu restarts it.
    """

    PANEL_COLOR = (245, 245, 245)
    TEXT_COLOR = (40, 40, 40)
    HIGHLIGHT_COLOR = (246, 130, 59)
    PROGRESS_COLOR = (246, 130, 59)

    def __init__(self, select_step: float = 0.04):
        """
        Args:
            select_step: Progress added per frame while hovering (1.0 selects)
        """
        self.select_step = select_step
        self.items = build_layout()
        self._hover_id: Optional[str] = None
        self._progress = 0.0

    @property
    def hover_id(self) -> Optional[str]:
        return self._hover_id

    @property
    def progress(self) -> float:
        return self._progress

    def item_at(self, cursor: Tuple[float, float]) -> Optional[MenuItem]:
        for item in self.items:
            if item.contains(cursor):
                return item
        return None

    def update(self, cursor: Optional[Tuple[float, float]]) -> Optional[MenuSelection]:
        """
        Advance hover state for one frame.

        Args:
            cursor: Normalized cursor position, None when hidden

        Returns:
            A MenuSelection when a dwell completes, otherwise None
        """
        item = self.item_at(cursor) if cursor is not None else None

        if item is None:
            self.reset()
            return None

        if item.item_id != self._hover_id:
            self._hover_id = item.item_id
            self._progress = 0.0
            return None

        self._progress += self.select_step
        if self._progress >= 1.0 - 1e-9:
            self._progress = 0.0
            return item.selection
        return None

    def reset(self):
        self._hover_id = None
        self._progress = 0.0

    def draw(
        self,
        frame: np.ndarray,
        tool: Tool,
        color: Color,
        size: int,
        cursor: Optional[Tuple[float, float]]
    ) -> np.ndarray:
        """
        Draw the toolbox and cursor onto a BGR frame (screen space).

        Returns:
            Frame with menu overlay
        """
        h, w = frame.shape[:2]

        def px(x: float, y: float) -> Tuple[int, int]:
            return int(x * w), int(y * h)

        # Dim the background
        shade = np.zeros_like(frame)
        frame = cv2.addWeighted(frame, 0.4, shade, 0.6, 0)

        cv2.rectangle(frame, px(0.15, 0.08), px(0.85, 0.82), self.PANEL_COLOR, -1)
        cv2.putText(frame, "Toolbox", px(0.44, 0.14), cv2.FONT_HERSHEY_SIMPLEX, 0.9, self.TEXT_COLOR, 2)
        cv2.putText(frame, "Hover index finger to select", px(0.38, 0.18),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.45, (120, 120, 120), 1)

        for item in self.items:
            x0, y0, x1, y1 = item.rect
            selected = (
                (item.selection.kind == 'tool' and item.selection.value == tool)
                or (item.selection.kind == 'color' and tuple(item.selection.value) == tuple(color))
                or (item.selection.kind == 'size' and item.selection.value == size)
            )

            if item.selection.kind == 'tool':
                cv2.rectangle(frame, px(x0, y0), px(x1, y1), (225, 225, 225), -1)
                label = "Pen" if item.selection.value == Tool.PEN else "Eraser"
                cv2.putText(frame, label, px(x0 + 0.03, (y0 + y1) / 2),
                            cv2.FONT_HERSHEY_SIMPLEX, 0.7, self.TEXT_COLOR, 2)
            elif item.selection.kind == 'color':
                center = px((x0 + x1) / 2, (y0 + y1) / 2)
                radius = int((x1 - x0) * w / 2)
                cv2.circle(frame, center, radius, item.selection.value, -1, cv2.LINE_AA)
                cv2.circle(frame, center, radius, (160, 160, 160), 1, cv2.LINE_AA)
            else:
                center = px((x0 + x1) / 2, (y0 + y1) / 2)
                cv2.circle(frame, center, max(2, item.selection.value), self.TEXT_COLOR, -1, cv2.LINE_AA)

            if selected:
                cv2.rectangle(frame, px(x0, y0), px(x1, y1), self.HIGHLIGHT_COLOR, 3)

        cv2.putText(frame, "Show Open Palm to Close", px(0.36, 0.88),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.7, (0, 215, 255), 2)

        if cursor is not None:
            center = px(*cursor)
            dot_color = self.PROGRESS_COLOR if self._progress > 0 else (68, 68, 239)
            cv2.circle(frame, center, 12, dot_color, -1, cv2.LINE_AA)
            cv2.circle(frame, center, 12, (255, 255, 255), 2, cv2.LINE_AA)
            if self._progress > 0:
                cv2.ellipse(frame, center, (22, 22), -90, 0, 360 * self._progress,
                            self.PROGRESS_COLOR, 4, cv2.LINE_AA)

        return frame
