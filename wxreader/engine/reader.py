from __future__ import annotations

from wxreader.engine.content import ContentActions, CopyOptions
from wxreader.engine.dispatcher import ActionDispatcher, build_keymap
from wxreader.engine.display import DisplayModes
from wxreader.engine.dom import Document, Host
from wxreader.engine.grouping import GroupingOptions, HighlightGroupingEngine
from wxreader.engine.placement import PanelPlacement, PlacementOptions
from wxreader.engine.selection import SelectionState, SelectionStateMachine
from wxreader.utils.logger import logger


class ReaderEngine:
    """Wires the engine components around one document and one state."""

    def __init__(self, document: Document, host: Host, config: dict) -> None:
        self.document = document
        self.host = host
        self.config = config
        ui = dict(config.get("ui") or {})

        self.state = SelectionState(
            ink_enabled=bool(ui.get("ink_mode", True)),
            compact_enabled=False,
            compact_padding=int(ui.get("compact_padding", 5)),
        )
        self.grouping = HighlightGroupingEngine(
            document, GroupingOptions.from_config(config)
        )
        self.machine = SelectionStateMachine(
            document=document, state=self.state, grouping=self.grouping, host=host
        )
        self.placement = PanelPlacement(
            document, self.state, PlacementOptions.from_config(config)
        )
        self.machine.highlight_listeners.append(self.placement.reconcile)
        self.display = DisplayModes(document, self.state, host, config)
        self.content = ContentActions(
            document, self.machine, host, CopyOptions.from_config(config)
        )
        self.dispatcher = ActionDispatcher(
            machine=self.machine,
            placement=self.placement,
            display=self.display,
            content=self.content,
            keymap=build_keymap(config.get("shortcuts") or {}),
        )

    def start(self) -> None:
        """Install styles and initial modes once the page is ready."""
        ui = dict(self.config.get("ui") or {})
        self.display.install()
        self.display.set_ink_mode(bool(ui.get("ink_mode", True)))
        if ui.get("compact_mode"):
            self.display.set_compact_mode(True)
        logger.info(
            "Reader engine started, %d shortcuts active",
            len(self.dispatcher.recognized_codes),
        )
