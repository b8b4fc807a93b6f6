"""Protocols for the host document the engine reads and mutates.

The engine never talks to a browser directly. It sees the page through
``Document``/``Element`` objects, which the Qt layer backs with the live web
page and the tests back with an in-memory tree. Element equality must follow
the underlying node identity so that membership checks survive re-queries.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Mapping, Optional, Protocol, Sequence, Tuple


@dataclass(frozen=True)
class Rect:
    left: float = 0.0
    top: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def center_x(self) -> float:
        return self.left + self.width / 2

    @property
    def center_y(self) -> float:
        return self.top + self.height / 2

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def overlaps_vertically(self, top: float, bottom: float) -> bool:
        return self.top < bottom and self.bottom > top

    @classmethod
    def from_mapping(cls, payload: object) -> "Rect":
        if not isinstance(payload, Mapping):
            return cls()
        try:
            return cls(
                left=float(payload.get("left") or 0.0),
                top=float(payload.get("top") or 0.0),
                width=float(payload.get("width") or 0.0),
                height=float(payload.get("height") or 0.0),
            )
        except (TypeError, ValueError):
            return cls()


@dataclass(frozen=True)
class Viewport:
    width: float
    height: float

    @property
    def midpoint(self) -> float:
        return self.width / 2


@dataclass(frozen=True)
class ScrollMetrics:
    scroll_top: float = 0.0
    scroll_height: float = 0.0
    client_height: float = 0.0

    @property
    def overflows(self) -> bool:
        return self.scroll_height > self.client_height


@dataclass(frozen=True)
class FragmentQuery:
    """What to read for every visible highlight fragment in one pass.

    The identity key is the first ``key_attributes`` value found on the
    fragment or one of its ``key_depth`` nearest ancestors, then any attribute
    whose name contains one of ``key_fragments``. It reads ``"name:value"``.
    The colour key is the first class starting with ``color_prefix``.
    """

    selector: str
    key_attributes: Tuple[str, ...]
    key_fragments: Tuple[str, ...]
    key_depth: int
    color_prefix: str


@dataclass(frozen=True)
class Fragment:
    element: "Element"
    rect: Rect
    key: Optional[str] = None
    color: str = ""


class Element(Protocol):
    def rect(self) -> Rect: ...

    def class_names(self) -> List[str]: ...

    def get_attribute(self, name: str) -> Optional[str]: ...

    def attribute_names(self) -> List[str]: ...

    def set_attribute(self, name: str, value: str) -> None: ...

    def parent(self) -> Optional["Element"]: ...

    def computed_style(self) -> Mapping[str, str]: ...

    def query_all(self, selector: str) -> List["Element"]: ...

    def query(self, selector: str) -> Optional["Element"]: ...

    def text(self) -> str: ...

    def add_class(self, name: str) -> None: ...

    def remove_class(self, name: str) -> None: ...

    def scroll_into_view(self) -> None: ...

    def dispatch_pointer_events(self, event_types: Sequence[str]) -> None: ...

    def inline_style(self) -> str: ...

    def set_inline_style(self, text: str) -> None: ...

    def set_style_property(
        self, name: str, value: str, priority: str = "", subtree: bool = False
    ) -> None: ...

    def scroll_metrics(self) -> ScrollMetrics: ...

    def scroll_by(self, amount: float) -> None: ...


class Document(Protocol):
    def query_all(self, selector: str) -> List[Element]: ...

    def query(self, selector: str) -> Optional[Element]: ...

    def viewport(self) -> Viewport: ...

    def highlight_fragments(self, query: FragmentQuery) -> List[Fragment]:
        """Visible fragments in document order with rect and keys filled in."""
        ...

    def on_screen(self, elements: Sequence[Element]) -> List[bool]:
        """Per element: sized, inside its scroll container and the window."""
        ...

    def toggle_root_class(self, name: str, enabled: bool) -> None: ...

    def set_root_property(self, name: str, value: str) -> None: ...

    def dispatch_resize(self) -> None: ...

    def install_stylesheet(self, style_id: str, css: str) -> bool: ...


class Host(Protocol):
    """Services the engine needs from the process that embeds the page."""

    def copy_text(self, text: str) -> None: ...

    def native_click(self, x: float, y: float) -> None: ...

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> None: ...


# Event sequences understood by ``Element.dispatch_pointer_events``.
CLICK = ("click",)
MOUSE_CLICK_SEQUENCE = ("mousedown", "mouseup", "click")
POINTER_CLICK_SEQUENCE = (
    "pointerdown",
    "mousedown",
    "pointerup",
    "mouseup",
    "click",
)
