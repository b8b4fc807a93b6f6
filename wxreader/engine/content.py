from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from wxreader.engine import selectors
from wxreader.engine.dom import CLICK, Document, Element, Host
from wxreader.engine.query import find_visible_panel, normalized_text
from wxreader.engine.selection import SelectionStateMachine, Tier
from wxreader.utils.logger import logger

MIN_SCROLL_STEP = 100
SCROLL_PAGE_RATIO = 0.9


@dataclass(frozen=True)
class CopyOptions:
    retry_attempts: int = 6
    retry_delay_ms: int = 200

    @classmethod
    def from_config(cls, config: dict) -> "CopyOptions":
        section = dict(config.get("copy") or {})
        return cls(
            retry_attempts=int(section.get("retry_attempts", 6)),
            retry_delay_ms=int(section.get("retry_delay_ms", 200)),
        )


def extract_content_text(item: Optional[Element]) -> str:
    """Comment or reply body, without author line and toolbar text."""
    if item is None:
        return ""
    for selector in selectors.CONTENT_TEXT_SELECTORS:
        text = normalized_text(item.query(selector))
        if text:
            return text
    return normalized_text(item)


def highlight_text_from_panel(document: Document) -> str:
    panel = find_visible_panel(document, selectors.HIGHLIGHT_TEXT_PANEL_SELECTORS)
    if panel is None:
        return ""
    text = normalized_text(panel.query(selectors.HIGHLIGHT_TEXT_SELECTOR))
    if text:
        return text
    return normalized_text(panel.query(selectors.HIGHLIGHT_TEXT_WRAPPER_SELECTOR))


class ContentActions:
    """Copy and scroll actions on whatever panel is currently open."""

    def __init__(
        self,
        document: Document,
        machine: SelectionStateMachine,
        host: Host,
        options: Optional[CopyOptions] = None,
    ) -> None:
        self.document = document
        self.machine = machine
        self.host = host
        self.options = options or CopyOptions()

    @property
    def state(self):
        return self.machine.state

    def copy_text(self, text: str) -> bool:
        text = (text or "").strip()
        if not text:
            logger.info("Nothing to copy")
            return False
        logger.info("Copying %d characters: %s", len(text), text[:50])
        self.host.copy_text(text)
        return True

    def copy_selected_text(self) -> bool:
        tier = self.machine.current_tier()
        if tier is Tier.REPLY and self.state.selected_reply is not None:
            return self.copy_text(extract_content_text(self.state.selected_reply))
        if tier is Tier.COMMENT:
            if self.state.selected_comment is None:
                self.machine.select_comment(0)
            return self.copy_text(extract_content_text(self.state.selected_comment))
        return False

    def copy_highlight(self) -> bool:
        text = highlight_text_from_panel(self.document)
        if text:
            return self.copy_text(text)

        panel = find_visible_panel(self.document, selectors.COPY_PANEL_SELECTORS)
        if panel is not None:
            button = panel.query(selectors.COPY_BUTTON_SELECTOR)
            if button is not None:
                logger.info("copy_highlight: using the panel copy button")
                button.dispatch_pointer_events(CLICK)
                return True

        if not self.machine.click_selected_highlight():
            return False
        self._poll_highlight_text(self.options.retry_attempts)
        return True

    def _poll_highlight_text(self, remaining: int) -> None:
        # the detail panel fills in asynchronously after the click
        def attempt() -> None:
            text = highlight_text_from_panel(self.document)
            if text:
                self.copy_text(text)
                return
            if remaining > 0:
                self._poll_highlight_text(remaining - 1)
            else:
                logger.info("copy_highlight: panel text never appeared")

        self.host.schedule(self.options.retry_delay_ms, attempt)

    def scroll_panel_one_page(self) -> bool:
        for panel_selector in selectors.SCROLL_PANEL_SELECTORS:
            panel = find_visible_panel(self.document, (panel_selector,))
            if panel is None:
                continue
            for area_selector in selectors.SCROLL_AREA_SELECTORS:
                area = panel.query(area_selector)
                if area is not None and self._scroll_page(area):
                    return True
            if self._scroll_page(panel):
                return True
        logger.info("scroll_panel_one_page: no scrollable panel")
        return False

    @staticmethod
    def _scroll_page(element: Element) -> bool:
        metrics = element.scroll_metrics()
        if not metrics.overflows:
            return False
        step = max(MIN_SCROLL_STEP, metrics.client_height * SCROLL_PAGE_RATIO)
        element.scroll_by(step)
        return True
