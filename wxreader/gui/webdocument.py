"""``Document``/``Element`` backed by the live page through ``window.__wxrd``.

Every call is one synchronous ``run_js`` round trip, so the reads the engine
makes for every highlight on a keypress (fragment keys and on-screen checks)
have bulk methods. Anything the page does not answer (no runtime yet, node
gone, timeout) comes back as absence.
"""

from __future__ import annotations

from typing import Callable, List, Mapping, Optional, Sequence

from wxreader.engine.dom import Fragment, FragmentQuery, Rect, ScrollMetrics, Viewport
from wxreader.gui.scripts import build_call_script

RunJs = Callable[[str], object]


def _as_handle(value: object) -> Optional[int]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        handle = int(value)
    except (TypeError, ValueError):
        return None
    return handle if handle > 0 else None


class WebDocument:
    def __init__(self, run_js: RunJs, fallback_viewport: Viewport = Viewport(1280, 800)) -> None:
        self._run_js = run_js
        self._fallback_viewport = fallback_viewport

    def call(self, method: str, *args: object) -> object:
        return self._run_js(build_call_script(method, *args))

    def _elements(self, value: object) -> List["WebElement"]:
        if not isinstance(value, (list, tuple)):
            return []
        elements = []
        for item in value:
            handle = _as_handle(item)
            if handle is not None:
                elements.append(WebElement(self, handle))
        return elements

    def _element(self, value: object) -> Optional["WebElement"]:
        handle = _as_handle(value)
        return WebElement(self, handle) if handle is not None else None

    def query_all(self, selector: str) -> List["WebElement"]:
        return self._elements(self.call("queryAll", selector, None))

    def query(self, selector: str) -> Optional["WebElement"]:
        return self._element(self.call("query", selector, None))

    def viewport(self) -> Viewport:
        value = self.call("viewport")
        if isinstance(value, Mapping):
            try:
                width = float(value.get("width") or 0)
                height = float(value.get("height") or 0)
            except (TypeError, ValueError):
                width = height = 0
            if width > 0 and height > 0:
                return Viewport(width, height)
        return self._fallback_viewport

    def highlight_fragments(self, query: FragmentQuery) -> List[Fragment]:
        value = self.call(
            "highlightFragments",
            query.selector,
            list(query.key_attributes),
            list(query.key_fragments),
            query.key_depth,
            query.color_prefix,
        )
        if not isinstance(value, list):
            return []
        fragments = []
        for item in value:
            if not isinstance(item, Mapping):
                continue
            handle = _as_handle(item.get("handle"))
            if handle is None:
                continue
            key = item.get("key")
            fragments.append(
                Fragment(
                    element=WebElement(self, handle),
                    rect=Rect.from_mapping(item.get("rect")),
                    key=str(key) if key else None,
                    color=str(item.get("color") or ""),
                )
            )
        return fragments

    def on_screen(self, elements: Sequence["WebElement"]) -> List[bool]:
        if not elements:
            return []
        value = self.call("onScreen", [element.handle for element in elements])
        flags = [bool(flag) for flag in value] if isinstance(value, list) else []
        # a short or missing answer counts as off screen
        flags.extend([False] * (len(elements) - len(flags)))
        return flags[: len(elements)]

    def toggle_root_class(self, name: str, enabled: bool) -> None:
        self.call("toggleRootClass", name, bool(enabled))

    def set_root_property(self, name: str, value: str) -> None:
        self.call("setRootProperty", name, value)

    def dispatch_resize(self) -> None:
        self.call("dispatchResize")

    def install_stylesheet(self, style_id: str, css: str) -> bool:
        return bool(self.call("installStyle", style_id, css))

    def watch_panel(self, panel_selectors: Sequence[str]) -> bool:
        return bool(self.call("watchPanel", list(panel_selectors)))


class WebElement:
    __slots__ = ("_document", "handle")

    def __init__(self, document: WebDocument, handle: int) -> None:
        self._document = document
        self.handle = handle

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WebElement):
            return NotImplemented
        return self._document is other._document and self.handle == other.handle

    def __hash__(self) -> int:
        return hash((id(self._document), self.handle))

    def __repr__(self) -> str:
        return f"WebElement({self.handle})"

    def _call(self, method: str, *args: object) -> object:
        return self._document.call(method, self.handle, *args)

    def rect(self) -> Rect:
        return Rect.from_mapping(self._call("rect"))

    def class_names(self) -> List[str]:
        value = self._call("classes")
        return [str(name) for name in value] if isinstance(value, list) else []

    def get_attribute(self, name: str) -> Optional[str]:
        value = self._call("attribute", name)
        return None if value is None else str(value)

    def attribute_names(self) -> List[str]:
        value = self._call("attributeNames")
        return [str(name) for name in value] if isinstance(value, list) else []

    def set_attribute(self, name: str, value: str) -> None:
        self._call("setAttribute", name, value)

    def parent(self) -> Optional["WebElement"]:
        return self._document._element(self._call("parent"))

    def computed_style(self) -> Mapping[str, str]:
        value = self._call("style")
        if not isinstance(value, Mapping):
            # a node we cannot inspect counts as not rendered
            return {"display": "none"}
        return {str(key): str(item) for key, item in value.items()}

    def query_all(self, selector: str) -> List["WebElement"]:
        return self._document._elements(
            self._document.call("queryAll", selector, self.handle)
        )

    def query(self, selector: str) -> Optional["WebElement"]:
        return self._document._element(
            self._document.call("query", selector, self.handle)
        )

    def text(self) -> str:
        value = self._call("text")
        return value if isinstance(value, str) else ""

    def add_class(self, name: str) -> None:
        self._call("addClass", name)

    def remove_class(self, name: str) -> None:
        self._call("removeClass", name)

    def scroll_into_view(self) -> None:
        self._call("scrollIntoView")

    def dispatch_pointer_events(self, event_types: Sequence[str]) -> None:
        self._call("dispatch", list(event_types))

    def inline_style(self) -> str:
        value = self._call("inlineStyle")
        return value if isinstance(value, str) else ""

    def set_inline_style(self, text: str) -> None:
        self._call("setInlineStyle", text)

    def set_style_property(
        self, name: str, value: str, priority: str = "", subtree: bool = False
    ) -> None:
        self._call("setStyleProperty", name, value, priority, bool(subtree))

    def scroll_metrics(self) -> ScrollMetrics:
        value = self._call("scrollMetrics")
        if not isinstance(value, Mapping):
            return ScrollMetrics()
        return ScrollMetrics(
            scroll_top=float(value.get("scrollTop") or 0),
            scroll_height=float(value.get("scrollHeight") or 0),
            client_height=float(value.get("clientHeight") or 0),
        )

    def scroll_by(self, amount: float) -> None:
        self._call("scrollBy", float(amount))
