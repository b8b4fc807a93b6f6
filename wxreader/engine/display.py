from __future__ import annotations

from typing import Tuple

from wxreader.engine import selectors
from wxreader.engine.dom import Document, Host
from wxreader.engine.selection import SelectionState
from wxreader.engine.stylesheet import build_stylesheet
from wxreader.utils.logger import logger

PADDING_STEP = 5
PADDING_RANGE = (0, 50)
# the canvas reader only relayouts on resize; it may not be ready on the first
RESIZE_DELAYS_MS: Tuple[int, ...] = (10, 100, 300)


class DisplayModes:
    """Ink mode, compact mode and comment font reinforcement."""

    def __init__(
        self, document: Document, state: SelectionState, host: Host, config: dict
    ) -> None:
        self.document = document
        self.state = state
        self.host = host
        self.config = config
        ui = dict(config.get("ui") or {})
        self.comment_font_size = str(ui.get("comment_font_size", "20px"))
        self.comment_line_height = str(ui.get("comment_line_height", "1.6"))

    def install(self) -> bool:
        return self.document.install_stylesheet(
            selectors.STYLE_ID, build_stylesheet(self.config)
        )

    def set_ink_mode(self, enabled: bool) -> None:
        self.state.ink_enabled = enabled
        self.document.toggle_root_class(selectors.CLASS_INK, enabled)
        logger.info("Ink mode %s", "on" if enabled else "off")

    def toggle_ink_mode(self) -> None:
        self.set_ink_mode(not self.state.ink_enabled)

    def set_compact_mode(self, enabled: bool) -> None:
        self.state.compact_enabled = enabled
        self.document.toggle_root_class(selectors.CLASS_COMPACT, enabled)
        if enabled:
            self._write_padding()
        logger.info(
            "Compact mode %s (padding %spx)",
            "on" if enabled else "off",
            self.state.compact_padding,
        )
        for delay in RESIZE_DELAYS_MS:
            self.host.schedule(delay, self.document.dispatch_resize)

    def toggle_compact_mode(self) -> None:
        self.set_compact_mode(not self.state.compact_enabled)

    def adjust_compact_padding(self, delta: int) -> bool:
        low, high = PADDING_RANGE
        padding = max(low, min(high, self.state.compact_padding + delta))
        if padding == self.state.compact_padding:
            return False
        self.state.compact_padding = padding
        self._write_padding()
        logger.info("Compact padding %spx", padding)
        return True

    def _write_padding(self) -> None:
        self.document.set_root_property(
            selectors.COMPACT_PADDING_PROPERTY, f"{self.state.compact_padding}px"
        )

    def reinforce_comment_fonts(self) -> int:
        """Inline the comment font on panels the host renders with its own."""
        count = 0
        for selector in selectors.FONT_REINFORCE_SELECTORS:
            for element in self.document.query_all(selector):
                element.set_style_property(
                    "font-size", self.comment_font_size, "important", subtree=True
                )
                element.set_style_property(
                    "line-height", self.comment_line_height, "important", subtree=True
                )
                count += 1
        if count:
            logger.debug("Reinforced comment fonts on %d elements", count)
        return count
