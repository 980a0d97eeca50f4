"""
RowLayoutEngine - placement of icon + label rows.

Handles:
1. Item width measurement (icon, margin, label)
2. Dropping items whose label is empty
3. Centering the whole row on a center x
4. Stacked rows with each item centered on its own line
"""

import logging
from typing import Callable, List, Optional, Sequence
from dataclasses import dataclass

from .models import IconRowEntry, RowMode
from .presets import CANVAS_WIDTH, IconId

logger = logging.getLogger(__name__)


@dataclass
class Placement:
    """Position of one visible item in a row."""
    index: int          # Order among visible items
    icon: IconId
    label: str
    x: float            # Left edge of the icon
    y: float            # Vertical center line of the item
    width: float        # Icon + margin + label
    text_x: float       # Left edge of the label


@dataclass
class RowLayout:
    """Complete row layout."""
    center_x: float
    y: float
    start_x: float
    total_width: float
    gap: float
    mode: RowMode
    placements: List[Placement]

    @property
    def is_empty(self) -> bool:
        return not self.placements


class RowLayoutEngine:
    """
    Computes icon-row placements.

    Features:
    - Row width is measured, never assumed
    - Items with empty labels are removed so the row re-centers
    - Inline (one centered row) or stacked (one centered item per line)
    """

    TEXT_MARGIN = 8     # Space between icon and label

    def __init__(self, canvas_width: int = CANVAS_WIDTH, text_margin: int = TEXT_MARGIN):
        """
        Initialize layout engine.

        Args:
            canvas_width: Used for auto-centering
            text_margin: Space between an icon and its label in pixels
        """
        self.canvas_width = canvas_width
        self.text_margin = text_margin

    @staticmethod
    def visible_items(items: Sequence[IconRowEntry]) -> List[IconRowEntry]:
        """Items with a non-empty label; cleared labels leave no gap."""
        return [item for item in items if item.label != ""]

    def item_width(self, label: str, icon_size: int, measure: Callable[[str], float]) -> float:
        return icon_size + self.text_margin + measure(label)

    def layout(
        self,
        items: Sequence[IconRowEntry],
        gap: float,
        measure: Callable[[str], float],
        icon_size: int = 24,
        center_x: Optional[float] = None,
        y: float = 0,
        mode: RowMode = RowMode.INLINE
    ) -> RowLayout:
        """
        Calculate placements for a row.

        Args:
            items: Row entries in display order
            gap: Space between items (inline) or between lines (stacked)
            measure: Label width function
            icon_size: Icon edge length
            center_x: Row center; canvas center when None
            y: Vertical center of the (first) row line
            mode: Inline or stacked

        Returns:
            RowLayout; empty when every label is empty
        """
        if center_x is None:
            center_x = self.canvas_width / 2

        visible = self.visible_items(items)
        widths = [self.item_width(item.label, icon_size, measure) for item in visible]

        if mode == RowMode.STACKED:
            placements = []
            for i, (item, width) in enumerate(zip(visible, widths)):
                x = center_x - width / 2
                placements.append(Placement(
                    index=i,
                    icon=item.icon,
                    label=item.label,
                    x=x,
                    y=y + i * (icon_size + gap),
                    width=width,
                    text_x=x + icon_size + self.text_margin,
                ))
            total_width = max(widths, default=0)
            start_x = min((p.x for p in placements), default=center_x)
            return RowLayout(center_x, y, start_x, total_width, gap, mode, placements)

        total_width = sum(widths) + gap * max(len(widths) - 1, 0)
        start_x = center_x - total_width / 2

        placements = []
        x = start_x
        for i, (item, width) in enumerate(zip(visible, widths)):
            placements.append(Placement(
                index=i,
                icon=item.icon,
                label=item.label,
                x=x,
                y=y,
                width=width,
                text_x=x + icon_size + self.text_margin,
            ))
            x += width + gap

        logger.debug(f"Row at y={y}: {len(placements)} items, width {total_width:.1f}")
        return RowLayout(center_x, y, start_x, total_width, gap, mode, placements)
