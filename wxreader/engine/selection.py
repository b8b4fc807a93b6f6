"""Tiered cursor over highlights, comments and replies.

The tier is recomputed from the visible panels on every action because the
host page opens and closes panels on its own. Candidate lists are rebuilt on
every call too, so the previously selected element (not its stored index) is
what identifies the current position.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from wxreader.engine import selectors
from wxreader.engine.dom import (
    CLICK,
    MOUSE_CLICK_SEQUENCE,
    POINTER_CLICK_SEQUENCE,
    Document,
    Element,
    Host,
)
from wxreader.engine.grouping import HighlightGroup, HighlightGroupingEngine
from wxreader.engine.query import find_visible_panel, is_visible, visible_items
from wxreader.utils.logger import logger


class Tier(enum.Enum):
    HIGHLIGHT = "highlight"
    COMMENT = "comment"
    REPLY = "reply"


@dataclass
class SelectionState:
    highlight_index: int = 0
    comment_index: int = 0
    reply_index: int = 0
    ink_enabled: bool = True
    compact_enabled: bool = False
    compact_padding: int = 5
    selected_highlight_group: Optional[HighlightGroup] = None
    selected_comment: Optional[Element] = None
    selected_reply: Optional[Element] = None
    last_click_x: Optional[float] = None

    @property
    def selected_highlight(self) -> Optional[Element]:
        group = self.selected_highlight_group
        if group is None or not group.fragments:
            return None
        return group.first.element

    def select_highlight_group(self, group: HighlightGroup, index: int) -> None:
        self.selected_highlight_group = group
        self.highlight_index = index

    def select_comment(self, comment: Element, index: int) -> None:
        # a reply only means something inside the comment it belongs to
        self.selected_comment = comment
        self.comment_index = index
        self.clear_reply()

    def select_reply(self, reply: Element, index: int) -> None:
        self.selected_reply = reply
        self.reply_index = index

    def clear_reply(self) -> None:
        self.selected_reply = None
        self.reply_index = 0


def wrap_index(index: int, length: int) -> int:
    if length <= 0:
        return 0
    return ((index % length) + length) % length


def next_index(current: int, delta: int, length: int) -> int:
    return wrap_index(current + delta, length)


def resolve_index(
    items: Sequence[object], previous: Optional[object], fallback: Optional[int]
) -> int:
    """Position of ``previous`` in ``items``, else the wrapped stored index.

    Returns -1 for an empty list.
    """
    if not items:
        return -1
    if previous is not None:
        for position, item in enumerate(items):
            if item == previous:
                return position
    if fallback is None or fallback < 0:
        return 0
    return wrap_index(fallback, len(items))


def find_group(groups: Sequence[HighlightGroup], element: Optional[Element]) -> int:
    for position, group in enumerate(groups):
        if group.contains(element):
            return position
    return -1


def resolve_group_index(
    groups: Sequence[HighlightGroup],
    selected: Optional[Element],
    fallback: Optional[int],
) -> int:
    if not groups:
        return -1
    position = find_group(groups, selected)
    if position >= 0:
        return position
    return resolve_index(groups, None, fallback)


@dataclass
class SelectionStateMachine:
    document: Document
    state: SelectionState
    grouping: HighlightGroupingEngine
    host: Host
    highlight_listeners: List[Callable[[], object]] = field(default_factory=list)

    # ------------------------------------------------------------------
    # tier
    # ------------------------------------------------------------------
    def detail_panel(self) -> Optional[Element]:
        return find_visible_panel(self.document, selectors.DETAIL_PANEL_SELECTORS)

    def comment_panel(self) -> Optional[Element]:
        return find_visible_panel(self.document, selectors.COMMENT_PANEL_SELECTORS)

    def current_tier(self) -> Tier:
        if self.detail_panel() is not None:
            return Tier.REPLY
        if self.comment_panel() is not None:
            return Tier.COMMENT
        return Tier.HIGHLIGHT

    # ------------------------------------------------------------------
    # navigation
    # ------------------------------------------------------------------
    def navigate(self, delta: int) -> bool:
        tier = self.current_tier()
        logger.debug("navigate delta=%s tier=%s", delta, tier.value)
        if tier is Tier.REPLY:
            return self.select_reply(delta)
        if tier is Tier.COMMENT:
            return self.select_comment(delta)
        return self.select_highlight(delta)

    def step_index(
        self,
        items: Sequence[Element],
        previous: Optional[Element],
        stored_index: int,
        delta: int,
    ) -> int:
        """Index to select after moving ``delta`` from the current selection.

        A selection that is still listed and on screen moves circularly.
        Otherwise the cursor lands on the first (forward) or last (backward)
        candidate currently in view, so the user never jumps to something
        scrolled away.
        """
        count = len(items)
        current = resolve_index(items, previous, stored_index)
        present = previous is not None and previous in items
        flags = list(self.document.on_screen(items))
        if present and current < len(flags) and flags[current]:
            return next_index(current, delta, count)

        on_screen = [position for position, flag in enumerate(flags) if flag]
        if on_screen:
            return on_screen[0] if delta >= 0 else on_screen[-1]
        if present:
            return next_index(current, delta, count)
        return 0 if delta >= 0 else count - 1

    def highlight_groups(self) -> List[HighlightGroup]:
        return self.grouping.build_groups()

    def select_highlight(self, delta: int) -> bool:
        groups = self.highlight_groups()
        if not groups:
            logger.debug("select_highlight: no highlights on page")
            return False
        anchors = [group.first.element for group in groups]
        # the old anchor may now sit inside a regrouped cluster
        position = find_group(groups, self.state.selected_highlight)
        previous = anchors[position] if position >= 0 else None
        index = self.step_index(anchors, previous, self.state.highlight_index, delta)
        self._apply_highlight(groups, index)
        return True

    def ensure_highlight_selection(self) -> Optional[HighlightGroup]:
        groups = self.highlight_groups()
        if not groups:
            return None
        index = resolve_group_index(
            groups, self.state.selected_highlight, self.state.highlight_index
        )
        self._apply_highlight(groups, max(index, 0))
        return groups[max(index, 0)]

    def _apply_highlight(self, groups: List[HighlightGroup], index: int) -> None:
        group = groups[index]
        previous = self.state.selected_highlight_group
        if previous is not None:
            for element in previous.elements:
                element.remove_class(selectors.CLASS_SELECTED)
        for element in group.elements:
            element.add_class(selectors.CLASS_SELECTED)
        group.first.element.scroll_into_view()
        self.state.select_highlight_group(group, index)
        logger.debug(
            "Selected highlight group %d/%d (%d fragments)",
            index + 1,
            len(groups),
            len(group),
        )
        for listener in list(self.highlight_listeners):
            listener()

    def comment_items(self) -> List[Element]:
        for panel_selector in selectors.COMMENT_LIST_PANEL_SELECTORS:
            panel = find_visible_panel(self.document, (panel_selector,))
            if panel is None:
                continue
            items = visible_items(panel, selectors.COMMENT_ITEM_SELECTORS)
            if items:
                logger.debug(
                    "Found %d comments in panel %s", len(items), panel_selector
                )
                return items
        return []

    def select_comment(self, delta: int) -> bool:
        if self.comment_panel() is None:
            return False
        items = self.comment_items()
        if not items:
            logger.debug("select_comment: comment panel has no items")
            return False
        index = self.step_index(
            items, self.state.selected_comment, self.state.comment_index, delta
        )
        comment = items[index]
        self._mark(comment, self.state.selected_comment)
        if self.state.selected_reply is not None:
            self.state.selected_reply.remove_class(selectors.CLASS_SELECTED)
        self.state.select_comment(comment, index)
        return True

    def reply_items(self) -> List[Element]:
        for panel_selector in selectors.REPLY_PANEL_SELECTORS:
            panel = find_visible_panel(self.document, (panel_selector,))
            if panel is None:
                continue
            items = visible_items(panel, selectors.REPLY_ITEM_SELECTORS)
            if items:
                return items

        comment = self.state.selected_comment
        if comment is not None:
            return [
                item
                for item in comment.query_all(selectors.SUB_REPLY_SELECTOR)
                if "more" not in " ".join(item.class_names()) and is_visible(item)
            ]
        return []

    def select_reply(self, delta: int) -> bool:
        items = self.reply_items()
        if not items:
            logger.debug("select_reply: no replies found")
            return False
        index = self.step_index(
            items, self.state.selected_reply, self.state.reply_index, delta
        )
        reply = items[index]
        self._mark(reply, self.state.selected_reply)
        self.state.select_reply(reply, index)
        return True

    def _mark(self, element: Element, previous: Optional[Element]) -> None:
        if previous is not None:
            previous.remove_class(selectors.CLASS_SELECTED)
        element.add_class(selectors.CLASS_SELECTED)
        element.scroll_into_view()

    # ------------------------------------------------------------------
    # confirm / back
    # ------------------------------------------------------------------
    def confirm(self) -> bool:
        """Open whatever the cursor is on.

        The detail panel sits on top of the comment list, so in the reply
        tier this re-opens the selected comment just like the comment tier
        does. With no comment selected both tiers do nothing.
        """
        tier = self.current_tier()
        if tier is Tier.HIGHLIGHT:
            return self.click_selected_highlight()
        comment = self.state.selected_comment
        if comment is None:
            logger.info("confirm: no comment selected")
            return False
        target = comment.query(selectors.COMMENT_CONTENT_SELECTOR) or comment
        target.dispatch_pointer_events(MOUSE_CLICK_SEQUENCE)
        return True

    def click_selected_highlight(self) -> bool:
        group = self.ensure_highlight_selection()
        if group is None:
            return False
        group.first.element.dispatch_pointer_events(CLICK)
        return True

    def leftmost_back_button(self) -> Optional[Element]:
        target = None
        min_left = float("inf")
        for button in self.document.query_all(selectors.BACK_BUTTON_SELECTOR):
            rect = button.rect()
            if rect.is_empty or rect.left <= 0:
                continue
            if rect.left < min_left:
                min_left = rect.left
                target = button
        return target

    def _native_click(self, element: Element) -> None:
        rect = element.rect()
        self.host.native_click(round(rect.center_x), round(rect.center_y))

    def back(self) -> bool:
        tier = self.current_tier()
        if tier is Tier.HIGHLIGHT:
            return False

        button = self.leftmost_back_button()
        if button is not None:
            logger.info("back: clicking back button in %s tier", tier.value)
            self._native_click(button)
            return True

        if tier is Tier.REPLY:
            close = self.document.query(selectors.DETAIL_CLOSE_SELECTOR)
            if close is None:
                return False
            close.dispatch_pointer_events(POINTER_CLICK_SEQUENCE)
            return True

        panel = find_visible_panel(self.document, selectors.REVIEW_PANEL_SELECTORS)
        if panel is None:
            logger.info("back: no comment panel to close")
            return False
        close = panel.query(selectors.CLOSE_BUTTON_SELECTOR)
        if close is None:
            fallbacks = panel.query_all(selectors.CLOSE_BUTTON_FALLBACK_SELECTOR)
            close = fallbacks[0] if fallbacks else None
        if close is None:
            return False
        close.dispatch_pointer_events(POINTER_CLICK_SEQUENCE)
        return True
