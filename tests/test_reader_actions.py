import pytest

from wxreader.engine import selectors
from wxreader.engine.dispatcher import Action, build_keymap
from wxreader.engine.dom import ScrollMetrics
from wxreader.engine.reader import ReaderEngine

REVIEW_PANEL = '[class*="float_panel"][class*="review"]'


@pytest.fixture
def engine(document, host, config) -> ReaderEngine:
    return ReaderEngine(document, host, config)


def _comments(document, texts):
    panel = document.add(REVIEW_PANEL, rect=(520, 0, 420, 800))
    return panel, [
        document.add(
            selectors.COMMENT_ITEM_SELECTORS[0],
            parent=panel,
            rect=(530, 80 + index * 120, 400, 100),
            text=text,
        )
        for index, text in enumerate(texts)
    ]


def test_keymap_from_default_shortcuts(config) -> None:
    keymap = build_keymap(config["shortcuts"])

    assert keymap["ArrowUp"] is Action.NAVIGATE_PREV
    assert keymap["Numpad0"] is Action.CONFIRM
    assert keymap["Escape"] is Action.BACK
    assert keymap["KeyZ"] is Action.SCROLL_PAGE
    assert keymap["BracketRight"] is Action.INCREASE_PADDING


def test_keymap_first_binding_wins_and_unknown_names_are_ignored() -> None:
    keymap = build_keymap({"next": ["KeyA"], "prev": ["KeyA"], "launch": ["KeyL"]})

    assert keymap == {"KeyA": Action.NAVIGATE_PREV}


def test_handle_key_skips_editable_and_unbound(engine, document) -> None:
    document.add(selectors.HIGHLIGHT_SELECTOR, rect=(10, 100, 200, 24))
    dispatcher = engine.dispatcher

    assert not dispatcher.handle_key("ArrowDown", editable=True)
    assert engine.state.selected_highlight is None
    assert not dispatcher.handle_key("KeyQ")
    assert dispatcher.handle_key("ArrowDown")
    assert engine.state.selected_highlight is not None


def test_start_installs_styles_and_ink_mode(engine, document) -> None:
    engine.start()
    engine.start()

    assert list(document.stylesheets) == [selectors.STYLE_ID]
    assert selectors.CLASS_INK in document.root_classes
    assert selectors.CLASS_COMPACT not in document.root_classes


def test_toggle_keys(engine, document, host) -> None:
    engine.start()

    engine.dispatcher.handle_key("KeyE")
    assert selectors.CLASS_INK not in document.root_classes
    assert not engine.state.ink_enabled

    engine.dispatcher.handle_key("KeyD")
    assert selectors.CLASS_COMPACT in document.root_classes
    assert document.root_properties[selectors.COMPACT_PADDING_PROPERTY] == "5px"
    assert [delay for delay, _ in host.scheduled] == [10, 100, 300]
    host.run_scheduled()
    assert document.resizes == 3


def test_compact_mode_from_config(document, host, config) -> None:
    config["ui"]["compact_mode"] = True
    engine = ReaderEngine(document, host, config)

    engine.start()

    assert engine.state.compact_enabled
    assert selectors.CLASS_COMPACT in document.root_classes


def test_padding_is_clamped(engine, document) -> None:
    display = engine.display

    assert display.adjust_compact_padding(-5)
    assert engine.state.compact_padding == 0
    assert not display.adjust_compact_padding(-5)

    for _ in range(12):
        engine.dispatcher.perform(Action.INCREASE_PADDING)
    assert engine.state.compact_padding == 50
    assert document.root_properties[selectors.COMPACT_PADDING_PROPERTY] == "50px"


def test_comment_fonts_reinforced_on_new_panels(engine, document) -> None:
    content = document.add(selectors.FONT_REINFORCE_SELECTORS[0])

    assert engine.dispatcher.on_panels_added() == 1

    assert content.style_properties == [
        ("font-size", "20px", "important", True),
        ("line-height", "1.6", "important", True),
    ]


def test_copy_text_in_comment_tier(engine, document, host) -> None:
    _, items = _comments(document, ["first comment", "second comment"])
    document.add(
        selectors.CONTENT_TEXT_SELECTORS[0], parent=items[1], text=" body\r\ntext \n"
    )

    # nothing selected yet: the first comment is picked and copied
    assert engine.dispatcher.handle_key("KeyX")
    assert host.copied == ["first comment"]

    engine.dispatcher.handle_key("ArrowDown")
    engine.dispatcher.handle_key("KeyX")
    assert host.copied[-1] == "body\ntext"


def test_copy_text_in_reply_tier(engine, document, host) -> None:
    panel = document.add(selectors.DETAIL_PANEL_SELECTORS[0], rect=(520, 0, 420, 800))
    document.add(
        selectors.REPLY_ITEM_SELECTORS[1],
        parent=panel,
        rect=(530, 100, 400, 80),
        text="a reply",
    )

    assert not engine.content.copy_selected_text()
    engine.dispatcher.handle_key("ArrowDown")
    assert engine.content.copy_selected_text()
    assert host.copied == ["a reply"]


def test_copy_text_outside_panels_does_nothing(engine, host) -> None:
    assert not engine.content.copy_selected_text()
    assert not engine.content.copy_text("   ")
    assert host.copied == []


def test_copy_highlight_from_open_detail_panel(engine, document, host) -> None:
    panel = document.add(
        selectors.HIGHLIGHT_TEXT_PANEL_SELECTORS[0], rect=(520, 0, 420, 600)
    )
    document.add(selectors.HIGHLIGHT_TEXT_SELECTOR, parent=panel, text="passage ")

    assert engine.dispatcher.handle_key("KeyC")

    assert host.copied == ["passage"]


def test_copy_highlight_uses_panel_copy_button(engine, document, host) -> None:
    panel = document.add(REVIEW_PANEL, rect=(520, 0, 420, 600))
    button = document.add(selectors.COPY_BUTTON_SELECTOR, parent=panel)

    assert engine.content.copy_highlight()

    assert button.events == ["click"]
    assert host.copied == []


def test_copy_highlight_polls_until_panel_text_appears(engine, document, host) -> None:
    fragment = document.add(selectors.HIGHLIGHT_SELECTOR, rect=(10, 100, 200, 24))

    assert engine.content.copy_highlight()
    assert fragment.events == ["click"]
    assert len(host.scheduled) == 1

    _, attempt = host.scheduled.pop(0)
    attempt()
    assert host.copied == []

    panel = document.add(
        selectors.HIGHLIGHT_TEXT_PANEL_SELECTORS[1], rect=(520, 0, 420, 600)
    )
    document.add(
        selectors.HIGHLIGHT_TEXT_WRAPPER_SELECTOR, parent=panel, text="late passage"
    )
    host.run_scheduled()
    assert host.copied == ["late passage"]


def test_copy_highlight_gives_up_after_retries(engine, document, host) -> None:
    document.add(selectors.HIGHLIGHT_SELECTOR, rect=(10, 100, 200, 24))

    engine.content.copy_highlight()

    assert host.run_scheduled() == 7
    assert host.copied == []
    assert host.scheduled == []


def test_copy_highlight_without_highlights(engine, host) -> None:
    assert not engine.content.copy_highlight()
    assert host.scheduled == []


def test_scroll_page_prefers_inner_scroll_area(engine, document) -> None:
    panel = document.add(
        REVIEW_PANEL,
        rect=(520, 0, 420, 800),
        scroll=ScrollMetrics(0, 900, 800),
    )
    area = document.add(
        selectors.SCROLL_AREA_SELECTORS[0],
        parent=panel,
        scroll=ScrollMetrics(0, 2000, 500),
    )

    assert engine.dispatcher.handle_key("KeyZ")

    assert area.scrolled_by == [450]
    assert panel.scrolled_by == []


def test_scroll_page_falls_back_to_panel_with_minimum_step(engine, document) -> None:
    panel = document.add(
        REVIEW_PANEL,
        rect=(520, 0, 420, 800),
        scroll=ScrollMetrics(0, 300, 60),
    )
    document.add(
        selectors.SCROLL_AREA_SELECTORS[2],
        parent=panel,
        scroll=ScrollMetrics(0, 100, 100),
    )

    assert engine.content.scroll_panel_one_page()

    assert panel.scrolled_by == [100]


def test_scroll_page_without_panel(engine) -> None:
    assert not engine.content.scroll_panel_one_page()


def test_pointer_and_panel_mutation_feed_placement(engine, document) -> None:
    panel = document.add(
        selectors.FLOATING_PANEL_SELECTORS[0],
        rect=(24, 40, 420, 600),
        inline_style="left: 24px; top: 40px",
    )

    engine.dispatcher.record_pointer(900)
    assert engine.dispatcher.on_panel_style_mutated()

    assert panel.style_text == "left: 520px; top: 40px;"


def test_highlight_selection_reconciles_panel(engine, document) -> None:
    document.add(selectors.HIGHLIGHT_SELECTOR, rect=(620, 100, 200, 24))
    panel = document.add(
        selectors.FLOATING_PANEL_SELECTORS[0],
        rect=(24, 40, 420, 600),
        inline_style="left: 24px",
    )

    # the panel makes this the comment tier, so select directly
    assert engine.machine.select_highlight(1)

    assert panel.style_writes == 1
    assert panel.style_text == "left: 520px;"
