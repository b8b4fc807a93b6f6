"""Keep the floating comment panel on the same side as the active highlight.

The host page rewrites the panel's inline ``left``/``right`` whenever it lays
the panel out, so this is a reconciliation loop rather than owned state. Two
guards keep our own writes from re-triggering it: a write only happens when
the target differs from the current offset by more than the tolerance, and
never when the panel still shows the value we applied last time (kept on the
panel) and that value is the target again. Once the host moves the panel
away from that value the marker no longer matches and the panel is re-pinned.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from wxreader.engine import selectors
from wxreader.engine.dom import Document, Element
from wxreader.engine.query import find_visible_panel
from wxreader.engine.selection import SelectionState
from wxreader.utils.logger import logger

OffsetValue = Union[int, float, str]

_OFFSET_RE = {
    name: re.compile(
        r"(?:^|;)\s*" + name + r"\s*:\s*(-?\d+(?:\.\d+)?)px", re.IGNORECASE
    )
    for name in ("left", "right")
}
_PERCENT_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*%\s*$")


class Side(enum.Enum):
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class PanelOffset:
    left: float
    from_right: bool = False


@dataclass(frozen=True)
class PlacementOptions:
    left_side_offset: OffsetValue = 24
    right_side_offset: OffsetValue = "52%"
    tolerance: float = 10.0
    panel_selectors: Tuple[str, ...] = selectors.FLOATING_PANEL_SELECTORS

    @classmethod
    def from_config(cls, config: dict) -> "PlacementOptions":
        section = dict(config.get("panel") or {})
        return cls(
            left_side_offset=section.get("left_side_offset", 24),
            right_side_offset=section.get("right_side_offset", "52%"),
            tolerance=float(section.get("tolerance", 10)),
        )


def resolve_offset(value: OffsetValue, viewport_width: float) -> float:
    """Pixels, or a percentage of the current viewport width."""
    if isinstance(value, str):
        match = _PERCENT_RE.match(value)
        if match:
            return viewport_width * float(match.group(1)) / 100.0
        return float(value.strip().lower().replace("px", "") or 0)
    return float(value)


def parse_panel_offset(
    style: str, viewport_width: float, panel_width: float
) -> Optional[PanelOffset]:
    match = _OFFSET_RE["left"].search(style or "")
    if match:
        return PanelOffset(left=float(match.group(1)))
    match = _OFFSET_RE["right"].search(style or "")
    if match:
        right = float(match.group(1))
        return PanelOffset(left=viewport_width - right - panel_width, from_right=True)
    return None


def _declarations(style: str) -> List[Tuple[str, str]]:
    pairs = []
    for chunk in (style or "").split(";"):
        if ":" not in chunk:
            continue
        name, value = chunk.split(":", 1)
        pairs.append((name.strip(), value.strip()))
    return pairs


def rewrite_left(style: str, left: float) -> str:
    """Drop any ``right`` declaration and set ``left`` to ``left`` pixels."""
    value = f"{round(left)}px"
    pairs = []
    replaced = False
    for name, current in _declarations(style):
        key = name.lower()
        if key == "right":
            continue
        if key == "left":
            if not replaced:
                pairs.append(("left", value))
                replaced = True
            continue
        pairs.append((name, current))
    if not replaced:
        pairs.append(("left", value))
    return "; ".join(f"{name}: {current}" for name, current in pairs) + ";"


def side_of(x: float, midpoint: float) -> Side:
    return Side.LEFT if x < midpoint else Side.RIGHT


class PanelPlacement:
    def __init__(
        self,
        document: Document,
        state: SelectionState,
        options: Optional[PlacementOptions] = None,
    ) -> None:
        self.document = document
        self.state = state
        self.options = options or PlacementOptions()

    def find_panel(self) -> Optional[Element]:
        return find_visible_panel(self.document, self.options.panel_selectors)

    def target_side(self, offset: PanelOffset, panel_width: float) -> Side:
        midpoint = self.document.viewport().midpoint
        highlight = self.state.selected_highlight
        if highlight is not None:
            rect = highlight.rect()
            if not rect.is_empty:
                return side_of(rect.center_x, midpoint)
        if self.state.last_click_x is not None:
            return side_of(self.state.last_click_x, midpoint)
        current = side_of(offset.left + panel_width / 2, midpoint)
        return Side.RIGHT if current is Side.LEFT else Side.LEFT

    def target_left(self, side: Side) -> float:
        width = self.document.viewport().width
        if side is Side.LEFT:
            return resolve_offset(self.options.left_side_offset, width)
        return resolve_offset(self.options.right_side_offset, width)

    def applied_left(self, panel: Element) -> Optional[float]:
        value = panel.get_attribute(selectors.PANEL_APPLIED_LEFT_ATTRIBUTE)
        try:
            return float(value) if value else None
        except ValueError:
            return None

    def is_own_write(
        self, panel: Element, offset: PanelOffset, target: float
    ) -> bool:
        """The panel still shows the value we applied and we would apply it again."""
        applied = self.applied_left(panel)
        if applied is None or offset.from_right:
            return False
        tolerance = self.options.tolerance
        return (
            abs(offset.left - applied) <= tolerance
            and abs(target - applied) <= tolerance
        )

    def reconcile(self) -> bool:
        """Move the panel to the active side. Returns True when it wrote."""
        panel = self.find_panel()
        if panel is None:
            return False
        style = panel.inline_style()
        panel_width = panel.rect().width
        offset = parse_panel_offset(
            style, self.document.viewport().width, panel_width
        )
        if offset is None:
            return False

        side = self.target_side(offset, panel_width)
        target = self.target_left(side)
        if self.is_own_write(panel, offset, target):
            return False
        if abs(target - offset.left) <= self.options.tolerance:
            return False
        applied = str(round(target))

        panel.set_inline_style(rewrite_left(style, target))
        panel.set_attribute(selectors.PANEL_APPLIED_LEFT_ATTRIBUTE, applied)
        logger.debug(
            "Moved panel to %s side: left %.0fpx -> %spx (was %s form)",
            side.value,
            offset.left,
            applied,
            "right" if offset.from_right else "left",
        )
        return True
