from __future__ import annotations

import collections
from typing import Callable, Deque, Optional

from qtpy import QtCore, QtGui, QtWebChannel, QtWebEngineWidgets, QtWidgets

from wxreader.engine.dispatcher import Action, build_keymap
from wxreader.engine.dom import Viewport
from wxreader.engine.placement import PlacementOptions
from wxreader.engine.reader import ReaderEngine
from wxreader.gui.console import RepeatFilter, is_ignorable_js_console_message
from wxreader.gui.scripts import BRIDGE_NAME, build_bootstrap_script
from wxreader.gui.webdocument import WebDocument
from wxreader.gui.widgets.reader_bridge import _ReaderBridge
from wxreader.utils.logger import logger

_WEBCHANNEL_RESOURCE = ":/qtwebchannel/qwebchannel.js"


def _read_webchannel_js() -> str:
    resource = QtCore.QFile(_WEBCHANNEL_RESOURCE)
    if not resource.open(QtCore.QIODevice.ReadOnly):
        logger.warning("Cannot open %s, key hooks stay offline", _WEBCHANNEL_RESOURCE)
        return ""
    try:
        return bytes(resource.readAll()).decode("utf-8")
    finally:
        resource.close()


class _ReaderWebEnginePage(QtWebEngineWidgets.QWebEnginePage):
    """Reader page with the runtime injected and console noise filtered."""

    def __init__(self, parent: Optional[QtCore.QObject], bootstrap_js: str) -> None:
        super().__init__(parent)
        self._console_filter = RepeatFilter()
        self._install_scripts(bootstrap_js)

    def _insert_script(self, name: str, source: str, injection_point) -> None:
        script = QtWebEngineWidgets.QWebEngineScript()
        script.setName(name)
        script.setSourceCode(source)
        script.setInjectionPoint(injection_point)
        script.setWorldId(QtWebEngineWidgets.QWebEngineScript.MainWorld)
        script.setRunsOnSubFrames(False)
        self.scripts().insert(script)

    def _install_scripts(self, bootstrap_js: str) -> None:
        webchannel_js = _read_webchannel_js()
        if webchannel_js:
            self._insert_script(
                "wxreader_webchannel",
                webchannel_js,
                QtWebEngineWidgets.QWebEngineScript.DocumentCreation,
            )
        self._insert_script(
            "wxreader_runtime",
            bootstrap_js,
            QtWebEngineWidgets.QWebEngineScript.DocumentReady,
        )

    def javaScriptConsoleMessage(  # noqa: N802 - Qt override
        self,
        level: "QtWebEngineWidgets.QWebEnginePage.JavaScriptConsoleMessageLevel",
        message: str,
        lineNumber: int,
        sourceID: str,
    ) -> None:
        msg = str(message or "").strip()
        if is_ignorable_js_console_message(msg):
            return

        verdict = self._console_filter.admit(msg)
        if verdict == "suppress-notice":
            logger.info("QtWebEngine js: suppressing repeated message: %s", msg)
            return
        if verdict == "drop":
            return

        info_level = getattr(
            QtWebEngineWidgets.QWebEnginePage, "InfoMessageLevel", None
        )
        warning_level = getattr(
            QtWebEngineWidgets.QWebEnginePage, "WarningMessageLevel", None
        )
        if info_level is not None and level == info_level:
            logger.debug("QtWebEngine js: %s (%s:%s)", msg, sourceID, lineNumber)
        elif warning_level is not None and level == warning_level:
            logger.warning("QtWebEngine js: %s (%s:%s)", msg, sourceID, lineNumber)
        else:
            logger.error("QtWebEngine js: %s (%s:%s)", msg, sourceID, lineNumber)


class QtHost:
    """Clipboard, trusted clicks and timers for the engine."""

    def __init__(self, view: "ReaderViewWidget") -> None:
        self._view = view

    def copy_text(self, text: str) -> None:
        QtWidgets.QApplication.clipboard().setText(text)

    def native_click(self, x: float, y: float) -> None:
        web_view = self._view.web_view
        target = web_view.focusProxy() or web_view
        zoom = web_view.zoomFactor() or 1.0
        point = QtCore.QPointF(x * zoom, y * zoom)
        for event_type in (
            QtCore.QEvent.MouseButtonPress,
            QtCore.QEvent.MouseButtonRelease,
        ):
            event = QtGui.QMouseEvent(
                event_type,
                point,
                QtCore.Qt.LeftButton,
                QtCore.Qt.LeftButton,
                QtCore.Qt.NoModifier,
            )
            QtWidgets.QApplication.postEvent(target, event)
        logger.debug("Native click at (%s, %s), zoom %.2f", x, y, zoom)

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> None:
        QtCore.QTimer.singleShot(
            max(0, int(delay_ms)), lambda: self._view.enqueue(callback)
        )


class ReaderViewWidget(QtWidgets.QWidget):
    """Web view hosting the reader plus the engine driving it."""

    def __init__(self, config: dict, parent: Optional[QtWidgets.QWidget] = None):
        super().__init__(parent)
        self.config = config
        self.engine: Optional[ReaderEngine] = None
        self.document: Optional[WebDocument] = None
        self.host = QtHost(self)
        self._queue: Deque[Callable[[], object]] = collections.deque()
        self._draining = False
        self._js_running = False
        self._panel_selectors = PlacementOptions.from_config(config).panel_selectors

        codes = build_keymap(config.get("shortcuts") or {}).keys()
        self.web_view = QtWebEngineWidgets.QWebEngineView(self)
        self._page = _ReaderWebEnginePage(self.web_view, build_bootstrap_script(codes))
        self.web_view.setPage(self._page)

        self._web_channel = QtWebChannel.QWebChannel(self._page)
        self._bridge = _ReaderBridge(self)
        self._web_channel.registerObject(BRIDGE_NAME, self._bridge)
        self._page.setWebChannel(self._web_channel)

        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self.web_view)

        panel = dict(config.get("panel") or {})
        self._watch_timer = QtCore.QTimer(self)
        self._watch_timer.setInterval(int(panel.get("watch_interval_ms", 1000)))
        self._watch_timer.timeout.connect(self._watch_panel)

        self.web_view.loadStarted.connect(self._on_load_started)
        self.web_view.loadFinished.connect(self._on_load_finished)

    def load(self, url: str) -> None:
        logger.info("Loading %s", url)
        self.web_view.load(QtCore.QUrl(url))

    def run_js(self, script: str, timeout_ms: int = 2000) -> object:
        """Evaluate ``script`` and wait for its value. None on failure."""
        if self._js_running:
            logger.debug("Nested JavaScript call skipped")
            return None
        self._js_running = True
        loop = QtCore.QEventLoop(self)
        timer = QtCore.QTimer(self)
        timer.setSingleShot(True)
        result = {"done": False, "value": None}

        def _finish(value: object) -> None:
            if result["done"]:
                return
            result["done"] = True
            result["value"] = value
            loop.quit()

        def _timeout() -> None:
            logger.warning("JavaScript call timed out after %sms", timeout_ms)
            _finish(None)

        timer.timeout.connect(_timeout)
        try:
            self._page.runJavaScript(script, _finish)
            timer.start(max(100, int(timeout_ms)))
            if not result["done"]:
                loop.exec_()
        finally:
            timer.stop()
            self._js_running = False
        return result["value"]

    def enqueue(self, job: Callable[[], object]) -> None:
        self._queue.append(job)
        QtCore.QTimer.singleShot(0, self._drain)

    def _drain(self) -> None:
        # jobs block on run_js; timers firing inside that wait land here
        if self._draining:
            return
        self._draining = True
        try:
            while self._queue:
                job = self._queue.popleft()
                try:
                    job()
                except Exception:
                    logger.exception("Reader action failed")
        finally:
            self._draining = False

    def engine_call(self, name: str, *args: object) -> object:
        if self.engine is None:
            return None
        return getattr(self.engine.dispatcher, name)(*args)

    def perform(self, action: Action) -> None:
        self.enqueue(lambda: self.engine_call("perform", action))

    def _on_load_started(self) -> None:
        self._watch_timer.stop()
        self.engine = None
        self.document = None

    def _on_load_finished(self, ok: bool) -> None:
        if not ok:
            logger.warning("Page failed to load: %s", self.web_view.url().toString())
            return
        self.enqueue(self._start_engine)

    def _start_engine(self) -> None:
        self.document = WebDocument(
            self.run_js, fallback_viewport=Viewport(self.width(), self.height())
        )
        self.engine = ReaderEngine(self.document, self.host, self.config)
        self.engine.start()
        self._watch_timer.start()

    def _watch_panel(self) -> None:
        document = self.document
        if document is not None:
            self.enqueue(lambda: document.watch_panel(self._panel_selectors))
