"""In-memory stand-ins for the reader page used by the engine tests.

Selectors are not parsed: each fake element lists the selector strings it
answers to, and ``query_all`` returns the registered matches in creation
order (document order).
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Sequence, Tuple

import pytest

from wxreader.engine.dom import Fragment, FragmentQuery, Rect, ScrollMetrics, Viewport
from wxreader.engine.grouping import scan_fragments
from wxreader.engine.query import is_in_scroll_viewport


class FakeElement:
    def __init__(
        self,
        document: "FakeDocument",
        matches: Sequence[str] = (),
        classes: Sequence[str] = (),
        attrs: Optional[Dict[str, str]] = None,
        rect: Tuple[float, float, float, float] = (0, 0, 100, 20),
        style: Optional[Dict[str, str]] = None,
        text: str = "",
        parent: Optional["FakeElement"] = None,
        inline_style: str = "",
        scroll: Optional[ScrollMetrics] = None,
    ) -> None:
        self.document = document
        self.matches = set(matches)
        self.classes = list(classes)
        self.attrs = dict(attrs or {})
        self.box = Rect(*rect)
        self.style = dict(style or {})
        self.content = text
        self._parent = parent
        self.style_text = inline_style
        self.style_writes = 0
        self.style_properties: List[Tuple[str, str, str, bool]] = []
        self.events: List[str] = []
        self.scrolled_into_view = 0
        self.metrics = scroll or ScrollMetrics()
        self.scrolled_by: List[float] = []

    def __repr__(self) -> str:
        return f"FakeElement({sorted(self.matches)!r}, {self.box!r})"

    def is_descendant_of(self, ancestor: "FakeElement") -> bool:
        current = self._parent
        while current is not None:
            if current is ancestor:
                return True
            current = current._parent
        return False

    def rect(self) -> Rect:
        return self.box

    def class_names(self) -> List[str]:
        return list(self.classes)

    def get_attribute(self, name: str) -> Optional[str]:
        return self.attrs.get(name)

    def attribute_names(self) -> List[str]:
        return list(self.attrs)

    def set_attribute(self, name: str, value: str) -> None:
        self.attrs[name] = value

    def parent(self) -> Optional["FakeElement"]:
        return self._parent

    def computed_style(self) -> Dict[str, str]:
        return dict(self.style)

    def query_all(self, selector: str) -> List["FakeElement"]:
        return [
            element
            for element in self.document.query_all(selector)
            if element.is_descendant_of(self)
        ]

    def query(self, selector: str) -> Optional["FakeElement"]:
        found = self.query_all(selector)
        return found[0] if found else None

    def text(self) -> str:
        return self.content

    def add_class(self, name: str) -> None:
        if name not in self.classes:
            self.classes.append(name)

    def remove_class(self, name: str) -> None:
        if name in self.classes:
            self.classes.remove(name)

    def scroll_into_view(self) -> None:
        self.scrolled_into_view += 1

    def dispatch_pointer_events(self, event_types: Sequence[str]) -> None:
        self.events.extend(event_types)

    def inline_style(self) -> str:
        return self.style_text

    def set_inline_style(self, text: str) -> None:
        self.style_text = text
        self.style_writes += 1

    def set_style_property(
        self, name: str, value: str, priority: str = "", subtree: bool = False
    ) -> None:
        self.style_properties.append((name, value, priority, subtree))

    def scroll_metrics(self) -> ScrollMetrics:
        return self.metrics

    def scroll_by(self, amount: float) -> None:
        self.scrolled_by.append(amount)
        self.metrics = ScrollMetrics(
            scroll_top=self.metrics.scroll_top + amount,
            scroll_height=self.metrics.scroll_height,
            client_height=self.metrics.client_height,
        )


class FakeDocument:
    def __init__(self, width: float = 1000, height: float = 800) -> None:
        self.size = Viewport(width, height)
        self.elements: List[FakeElement] = []
        self.root_classes: set = set()
        self.root_properties: Dict[str, str] = {}
        self.resizes = 0
        self.stylesheets: Dict[str, str] = {}
        self.fragment_reads = 0
        self.on_screen_reads = 0

    def add(self, *matches: str, **kwargs) -> FakeElement:
        element = FakeElement(self, matches=matches, **kwargs)
        self.elements.append(element)
        return element

    def remove(self, element: FakeElement) -> None:
        self.elements.remove(element)

    def query_all(self, selector: str) -> List[FakeElement]:
        return [element for element in self.elements if selector in element.matches]

    def query(self, selector: str) -> Optional[FakeElement]:
        found = self.query_all(selector)
        return found[0] if found else None

    def viewport(self) -> Viewport:
        return self.size

    def highlight_fragments(self, query: FragmentQuery) -> List[Fragment]:
        self.fragment_reads += 1
        return scan_fragments(self, query)

    def on_screen(self, elements: Sequence[FakeElement]) -> List[bool]:
        self.on_screen_reads += 1
        return [is_in_scroll_viewport(self, element) for element in elements]

    def toggle_root_class(self, name: str, enabled: bool) -> None:
        if enabled:
            self.root_classes.add(name)
        else:
            self.root_classes.discard(name)

    def set_root_property(self, name: str, value: str) -> None:
        self.root_properties[name] = value

    def dispatch_resize(self) -> None:
        self.resizes += 1

    def install_stylesheet(self, style_id: str, css: str) -> bool:
        if style_id in self.stylesheets:
            return False
        self.stylesheets[style_id] = css
        return True


class FakeHost:
    def __init__(self) -> None:
        self.copied: List[str] = []
        self.clicks: List[Tuple[float, float]] = []
        self.scheduled: List[Tuple[int, Callable[[], None]]] = []

    def copy_text(self, text: str) -> None:
        self.copied.append(text)

    def native_click(self, x: float, y: float) -> None:
        self.clicks.append((x, y))

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> None:
        self.scheduled.append((delay_ms, callback))

    def run_scheduled(self) -> int:
        """Run pending callbacks, including ones they schedule. Returns count."""
        ran = 0
        while self.scheduled:
            _, callback = self.scheduled.pop(0)
            callback()
            ran += 1
        return ran


@pytest.fixture
def document() -> FakeDocument:
    return FakeDocument()


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def user_config_file(tmp_path, monkeypatch):
    from wxreader import configs

    path = tmp_path / ".wxreaderrc"
    monkeypatch.setattr(configs, "USER_CONFIG_FILE", str(path))
    return path


@pytest.fixture
def config(user_config_file) -> dict:
    from wxreader.configs import get_default_config

    return get_default_config()
