"""Rebuild logical highlight groups from the fragments the reader renders.

One annotation is often drawn as several rectangles (line wraps, spans over
paragraphs). Fragments that expose an identity attribute are grouped by it.
The rest are clustered by geometry: same colour, and either on the same line
or on the next line within the same page half. The reader shows two pages
side by side, so the left and right halves are separate reading columns and
must never be merged or interleaved.

Identity keys come from whatever attributes the markup happens to carry, so
the whole module is a best-effort heuristic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from wxreader.engine import selectors
from wxreader.engine.dom import Document, Element, Fragment, FragmentQuery, Rect
from wxreader.engine.query import is_visible
from wxreader.utils.logger import logger


@dataclass(frozen=True)
class GroupingOptions:
    same_line_ratio: float = 0.5
    continuation_ratio: float = 1.8
    fallback_line_height: float = 24.0
    key_depth: int = 4

    @classmethod
    def from_config(cls, config: dict) -> "GroupingOptions":
        section = dict(config.get("grouping") or {})
        return cls(
            same_line_ratio=float(section.get("same_line_ratio", 0.5)),
            continuation_ratio=float(section.get("continuation_ratio", 1.8)),
            fallback_line_height=float(section.get("fallback_line_height", 24)),
            key_depth=int(section.get("key_depth", 4)),
        )


@dataclass
class HighlightGroup:
    fragments: List[Fragment] = field(default_factory=list)

    @property
    def elements(self) -> List[Element]:
        return [fragment.element for fragment in self.fragments]

    @property
    def first(self) -> Fragment:
        return self.fragments[0]

    @property
    def key(self) -> Optional[str]:
        return self.fragments[0].key if self.fragments else None

    def contains(self, element: Optional[Element]) -> bool:
        if element is None:
            return False
        return any(fragment.element == element for fragment in self.fragments)

    def __len__(self) -> int:
        return len(self.fragments)


def identity_key(
    element: Element,
    attributes: Sequence[str] = selectors.HIGHLIGHT_KEY_ATTRIBUTES,
    depth: int = 4,
    name_fragments: Sequence[str] = selectors.HIGHLIGHT_KEY_FRAGMENTS,
) -> Optional[str]:
    """``"attr:value"`` from the fragment or one of its nearest ancestors."""
    current: Optional[Element] = element
    level = 0
    while current is not None and level < depth:
        for name in attributes:
            value = current.get_attribute(name)
            if value:
                return f"{name}:{value}"
        for name in current.attribute_names():
            if any(part in name for part in name_fragments):
                value = current.get_attribute(name)
                if value:
                    return f"{name}:{value}"
        current = current.parent()
        level += 1
    return None


def color_key(element: Element, prefix: str = selectors.HIGHLIGHT_COLOR_PREFIX) -> str:
    for name in element.class_names():
        if name.startswith(prefix):
            return name
    return ""


def scan_fragments(document: Document, query: FragmentQuery) -> List[Fragment]:
    """Element-by-element fragment read for documents without a bulk path."""
    fragments = []
    for element in document.query_all(query.selector):
        if not is_visible(element):
            continue
        fragments.append(
            Fragment(
                element=element,
                rect=element.rect(),
                key=identity_key(
                    element,
                    query.key_attributes,
                    query.key_depth,
                    query.key_fragments,
                ),
                color=color_key(element, query.color_prefix),
            )
        )
    return fragments


def median_height(rects: Iterable[Rect]) -> float:
    heights = sorted(rect.height for rect in rects)
    if not heights:
        return 0.0
    mid = len(heights) // 2
    if len(heights) % 2 == 0:
        return (heights[mid - 1] + heights[mid]) / 2
    return heights[mid]


def can_group_by_geometry(
    last: Rect,
    nxt: Rect,
    line_height: float,
    midpoint: float,
    same_line_ratio: float = 0.5,
    continuation_ratio: float = 1.8,
) -> bool:
    # the two page halves are independent columns, even on the same line
    if (last.left < midpoint) != (nxt.left < midpoint):
        return False
    gap = abs(nxt.top - last.top)
    if gap <= line_height * same_line_ratio:
        return True
    return gap <= line_height * continuation_ratio


def _reading_order(fragment: Fragment) -> tuple:
    return (fragment.rect.top, fragment.rect.left)


class HighlightGroupingEngine:
    def __init__(
        self, document: Document, options: Optional[GroupingOptions] = None
    ) -> None:
        self.document = document
        self.options = options or GroupingOptions()

    def fragment_query(self) -> FragmentQuery:
        return FragmentQuery(
            selector=selectors.HIGHLIGHT_SELECTOR,
            key_attributes=selectors.HIGHLIGHT_KEY_ATTRIBUTES,
            key_fragments=selectors.HIGHLIGHT_KEY_FRAGMENTS,
            key_depth=self.options.key_depth,
            color_prefix=selectors.HIGHLIGHT_COLOR_PREFIX,
        )

    def collect_fragments(self) -> List[Fragment]:
        return list(self.document.highlight_fragments(self.fragment_query()))

    def build_groups(
        self, fragments: Optional[Sequence[Fragment]] = None
    ) -> List[HighlightGroup]:
        if fragments is None:
            fragments = self.collect_fragments()
        if not fragments:
            return []

        midpoint = self.document.viewport().midpoint
        keyed: Dict[str, HighlightGroup] = {}
        unkeyed: List[Fragment] = []
        for fragment in fragments:
            if fragment.key:
                keyed.setdefault(fragment.key, HighlightGroup()).fragments.append(
                    fragment
                )
            else:
                unkeyed.append(fragment)

        groups = list(keyed.values())
        groups.extend(self.cluster_by_geometry(unkeyed, midpoint))
        for group in groups:
            group.fragments.sort(key=_reading_order)

        groups.sort(
            key=lambda group: (
                0 if group.first.rect.left < midpoint else 1,
                group.first.rect.top,
                group.first.rect.left,
            )
        )
        logger.debug(
            "Grouped %d fragments into %d highlight groups (%d keyed)",
            len(fragments),
            len(groups),
            len(keyed),
        )
        return groups

    def cluster_by_geometry(
        self, fragments: Sequence[Fragment], midpoint: float
    ) -> List[HighlightGroup]:
        if not fragments:
            return []
        # left page fully before right page
        ordered = sorted(fragments, key=lambda f: (f.rect.left, f.rect.top))
        line_height = (
            median_height(f.rect for f in ordered)
            or self.options.fallback_line_height
        )

        clusters: List[HighlightGroup] = []
        last: Optional[Fragment] = None
        for fragment in ordered:
            if (
                clusters
                and last is not None
                and last.color == fragment.color
                and can_group_by_geometry(
                    last.rect,
                    fragment.rect,
                    line_height,
                    midpoint,
                    self.options.same_line_ratio,
                    self.options.continuation_ratio,
                )
            ):
                clusters[-1].fragments.append(fragment)
            else:
                clusters.append(HighlightGroup([fragment]))
            last = fragment
        return clusters
