from __future__ import annotations

import enum
from typing import Dict, Mapping, Optional, Sequence

from wxreader.engine.content import ContentActions
from wxreader.engine.display import PADDING_STEP, DisplayModes
from wxreader.engine.placement import PanelPlacement
from wxreader.engine.selection import SelectionStateMachine
from wxreader.utils.logger import logger


class Action(enum.Enum):
    NAVIGATE_PREV = "prev"
    NAVIGATE_NEXT = "next"
    CONFIRM = "confirm"
    BACK = "back"
    COPY_HIGHLIGHT = "copy_highlight"
    COPY_TEXT = "copy_text"
    SCROLL_PAGE = "scroll"
    TOGGLE_INK = "toggle_ink"
    TOGGLE_COMPACT = "toggle_compact"
    DECREASE_PADDING = "decrease_padding"
    INCREASE_PADDING = "increase_padding"


def build_keymap(shortcuts: Mapping[str, Sequence[str]]) -> Dict[str, Action]:
    """Map ``KeyboardEvent.code`` values to actions.

    Unknown action names are ignored; when a code is bound twice the first
    action in ``Action`` order wins.
    """
    keymap: Dict[str, Action] = {}
    for action in Action:
        for code in shortcuts.get(action.value) or ():
            keymap.setdefault(str(code), action)
    return keymap


class ActionDispatcher:
    def __init__(
        self,
        machine: SelectionStateMachine,
        placement: PanelPlacement,
        display: DisplayModes,
        content: ContentActions,
        keymap: Mapping[str, Action],
    ) -> None:
        self.machine = machine
        self.placement = placement
        self.display = display
        self.content = content
        self.keymap = dict(keymap)

    @property
    def recognized_codes(self) -> Sequence[str]:
        return sorted(self.keymap)

    def action_for(self, code: str) -> Optional[Action]:
        return self.keymap.get(code)

    def handle_key(self, code: str, editable: bool = False) -> bool:
        """Run the action bound to ``code``. False leaves the event alone."""
        if editable:
            return False
        action = self.action_for(code)
        if action is None:
            return False
        logger.debug("key %s -> %s", code, action.value)
        self.perform(action)
        return True

    def perform(self, action: Action) -> bool:
        if action is Action.NAVIGATE_PREV:
            return self.machine.navigate(-1)
        if action is Action.NAVIGATE_NEXT:
            return self.machine.navigate(1)
        if action is Action.CONFIRM:
            return self.machine.confirm()
        if action is Action.BACK:
            return self.machine.back()
        if action is Action.COPY_HIGHLIGHT:
            return self.content.copy_highlight()
        if action is Action.COPY_TEXT:
            return self.content.copy_selected_text()
        if action is Action.SCROLL_PAGE:
            return self.content.scroll_panel_one_page()
        if action is Action.TOGGLE_INK:
            self.display.toggle_ink_mode()
            return True
        if action is Action.TOGGLE_COMPACT:
            self.display.toggle_compact_mode()
            return True
        if action is Action.DECREASE_PADDING:
            return self.display.adjust_compact_padding(-PADDING_STEP)
        if action is Action.INCREASE_PADDING:
            return self.display.adjust_compact_padding(PADDING_STEP)
        return False

    def record_pointer(self, x: float) -> None:
        self.machine.state.last_click_x = float(x)

    def on_panel_style_mutated(self) -> bool:
        return self.placement.reconcile()

    def on_panels_added(self) -> int:
        return self.display.reinforce_comment_fonts()
