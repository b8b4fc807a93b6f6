from __future__ import annotations

from typing import List, Optional, Sequence

from wxreader.engine.dom import Document, Element

_SCROLLABLE = {"auto", "scroll"}


def _opacity_is_zero(value: object) -> bool:
    try:
        return float(str(value).strip()) == 0.0
    except (TypeError, ValueError):
        return False


def is_visible(element: Optional[Element]) -> bool:
    """Rendered, not hidden by style, and with a non-empty box."""
    if element is None:
        return False
    style = element.computed_style()
    if style.get("display") == "none" or style.get("visibility") == "hidden":
        return False
    if _opacity_is_zero(style.get("opacity", "1")):
        return False
    return not element.rect().is_empty


def find_visible_panel(
    document: Document, selectors: Sequence[str]
) -> Optional[Element]:
    """First visible match, trying selectors in priority order."""
    for selector in selectors:
        for candidate in document.query_all(selector):
            if is_visible(candidate):
                return candidate
    return None


def visible_items(scope: Element, selectors: Sequence[str]) -> List[Element]:
    """Visible matches of the first selector that yields any inside ``scope``."""
    for selector in selectors:
        items = [item for item in scope.query_all(selector) if is_visible(item)]
        if items:
            return items
    return []


def find_scroll_container(element: Element) -> Optional[Element]:
    current = element.parent()
    while current is not None:
        style = current.computed_style()
        if (
            style.get("overflow") in _SCROLLABLE
            or style.get("overflowY") in _SCROLLABLE
        ):
            return current
        current = current.parent()
    return None


def is_in_scroll_viewport(document: Document, element: Optional[Element]) -> bool:
    """True when the element is actually on screen.

    It must have a size, intersect its nearest scrollable ancestor (if any)
    and intersect the window's vertical extent.
    """
    if element is None:
        return False
    rect = element.rect()
    if rect.is_empty:
        return False
    container = find_scroll_container(element)
    if container is not None:
        bounds = container.rect()
        if rect.bottom < bounds.top or rect.top > bounds.bottom:
            return False
    viewport_height = document.viewport().height
    return rect.overlaps_vertically(0, viewport_height)


def normalized_text(element: Optional[Element]) -> str:
    if element is None:
        return ""
    return (element.text() or "").replace("\r\n", "\n").strip()
