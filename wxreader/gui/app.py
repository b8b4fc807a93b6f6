import sys
from typing import Optional

from qtpy import QtCore, QtWidgets

from wxreader.engine.dispatcher import Action
from wxreader.gui.application import create_qapp
from wxreader.gui.cli import parse_cli
from wxreader.gui.widgets.reader_view import ReaderViewWidget
from wxreader.utils.logger import __appname__, logger, set_log_level
from wxreader.version import get_version


class ReaderWindow(QtWidgets.QMainWindow):
    """Main window: the reader view plus a small View menu."""

    def __init__(self, config: dict, parent: Optional[QtWidgets.QWidget] = None):
        super().__init__(parent)
        self.config = config
        window = dict(config.get("window") or {})
        self.setWindowTitle(__appname__)
        self.resize(int(window.get("width", 1280)), int(window.get("height", 800)))

        self.reader = ReaderViewWidget(config, self)
        self.setCentralWidget(self.reader)
        self._build_menu()
        self.reader.load(str(window.get("initial_url") or "https://weread.qq.com/"))

    def _build_menu(self) -> None:
        menu = self.menuBar().addMenu("&View")
        entries = (
            ("Toggle &ink mode", Action.TOGGLE_INK),
            ("Toggle &compact mode", Action.TOGGLE_COMPACT),
            ("&Decrease padding", Action.DECREASE_PADDING),
            ("I&ncrease padding", Action.INCREASE_PADDING),
        )
        for label, action in entries:
            qaction = menu.addAction(label)
            qaction.triggered.connect(
                lambda _checked=False, action=action: self.reader.perform(action)
            )
        menu.addSeparator()
        reload_action = menu.addAction("&Reload")
        reload_action.setShortcut(QtCore.Qt.Key_F5)
        reload_action.triggered.connect(self.reader.web_view.reload)

        self.menuBar().setVisible(False)
        toggle = QtWidgets.QShortcut(QtCore.Qt.Key_F10, self)
        toggle.activated.connect(
            lambda: self.menuBar().setVisible(not self.menuBar().isVisible())
        )


def main(argv=None):
    config, _, version_requested = parse_cli(argv)
    if version_requested:
        print(get_version())
        return 0

    set_log_level((config.get("logging") or {}).get("level", "INFO"))
    qt_args = sys.argv if argv is None else [sys.argv[0], *argv]
    app = create_qapp(qt_args)
    app.setApplicationName(__appname__)

    win = ReaderWindow(config=config)
    logger.info("wxreader %s started", get_version())
    win.show()
    win.raise_()
    return app.exec_()


if __name__ == "__main__":
    sys.exit(main())
