from __future__ import annotations

from typing import TYPE_CHECKING

from qtpy import QtCore

if TYPE_CHECKING:  # pragma: no cover
    from wxreader.gui.widgets.reader_view import ReaderViewWidget


class _ReaderBridge(QtCore.QObject):
    """WebChannel object the page hooks report to.

    Slots only queue work on the view; the engine talks back to the page
    with blocking JavaScript calls, which must not run inside a channel
    callback.
    """

    def __init__(self, view: "ReaderViewWidget") -> None:
        super().__init__(view)
        self._view = view

    @QtCore.Slot(str, bool)
    def onKey(self, code: str, editable: bool) -> None:  # noqa: N802 - Qt slot name
        self._view.enqueue(
            lambda: self._view.engine_call("handle_key", str(code), bool(editable))
        )

    @QtCore.Slot(float)
    def onPointerDown(self, x: float) -> None:  # noqa: N802 - Qt slot name
        self._view.enqueue(lambda: self._view.engine_call("record_pointer", float(x)))

    @QtCore.Slot()
    def onPanelsAdded(self) -> None:  # noqa: N802 - Qt slot name
        self._view.enqueue(lambda: self._view.engine_call("on_panels_added"))

    @QtCore.Slot()
    def onPanelStyleMutated(self) -> None:  # noqa: N802 - Qt slot name
        self._view.enqueue(lambda: self._view.engine_call("on_panel_style_mutated"))


__all__ = ["_ReaderBridge"]
