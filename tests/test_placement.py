from wxreader.engine import selectors
from wxreader.engine.dom import Rect
from wxreader.engine.grouping import Fragment, HighlightGroup
from wxreader.engine.placement import (
    PanelOffset,
    PanelPlacement,
    PlacementOptions,
    Side,
    parse_panel_offset,
    resolve_offset,
    rewrite_left,
)
from wxreader.engine.selection import SelectionState


def _panel(document, style="position: absolute; left: 24px; top: 40px"):
    return document.add(
        selectors.FLOATING_PANEL_SELECTORS[0],
        rect=(24, 40, 420, 600),
        inline_style=style,
    )


def _select(document, state, left):
    element = document.add(selectors.HIGHLIGHT_SELECTOR, rect=(left, 200, 150, 24))
    state.select_highlight_group(HighlightGroup([Fragment(element, element.rect())]), 0)
    return element


def test_resolve_offset_units() -> None:
    assert resolve_offset("52%", 1000) == 520
    assert resolve_offset("30px", 1000) == 30
    assert resolve_offset(24, 1000) == 24


def test_parse_panel_offset_forms() -> None:
    assert parse_panel_offset("top: 4px; left: 120.5px", 1000, 420) == PanelOffset(120.5)
    assert parse_panel_offset("right: 30px; top: 0px", 1000, 420) == PanelOffset(
        550, from_right=True
    )
    assert parse_panel_offset("margin-left: 12px", 1000, 420) is None
    assert parse_panel_offset("", 1000, 420) is None


def test_rewrite_left_drops_right() -> None:
    assert rewrite_left("top: 40px; right: 30px", 24) == "top: 40px; left: 24px;"
    assert (
        rewrite_left("position: absolute; left: 24px; top: 40px", 519.6)
        == "position: absolute; left: 520px; top: 40px;"
    )


def test_panel_follows_highlight_to_right_half(document) -> None:
    panel = _panel(document)
    state = SelectionState()
    _select(document, state, left=700)
    placement = PanelPlacement(document, state)

    assert placement.reconcile()

    assert panel.style_text == "position: absolute; left: 520px; top: 40px;"
    assert panel.attrs[selectors.PANEL_APPLIED_LEFT_ATTRIBUTE] == "520"


def test_repeated_reconcile_writes_once(document) -> None:
    panel = _panel(document)
    state = SelectionState()
    _select(document, state, left=700)
    placement = PanelPlacement(document, state)

    placement.reconcile()
    placement.reconcile()

    assert panel.style_writes == 1


def test_host_reset_is_pinned_back(document) -> None:
    panel = _panel(document)
    state = SelectionState()
    _select(document, state, left=700)
    placement = PanelPlacement(document, state)
    assert placement.reconcile()

    # the host lays the panel out again on its default side
    panel.style_text = "position: absolute; left: 24px; top: 40px"
    _select(document, state, left=720)
    assert placement.reconcile()

    assert "left: 520px" in panel.style_text
    assert panel.style_writes == 2


def test_own_write_echo_is_ignored(document) -> None:
    panel = _panel(document, style="left: 523px")
    panel.attrs[selectors.PANEL_APPLIED_LEFT_ATTRIBUTE] = "520"
    state = SelectionState()
    _select(document, state, left=700)

    assert not PanelPlacement(document, state).reconcile()
    assert panel.style_writes == 0


def test_panel_placed_right_moves_back_left(document) -> None:
    panel = _panel(document)
    state = SelectionState()
    placement = PanelPlacement(document, state)
    _select(document, state, left=700)
    placement.reconcile()

    _select(document, state, left=10)
    assert placement.reconcile()

    assert "left: 24px" in panel.style_text
    assert panel.attrs[selectors.PANEL_APPLIED_LEFT_ATTRIBUTE] == "24"


def test_right_anchored_panel_moves_left(document) -> None:
    panel = _panel(document, style="top: 40px; right: 30px")
    state = SelectionState()
    _select(document, state, left=10)

    assert PanelPlacement(document, state).reconcile()

    assert panel.style_text == "top: 40px; left: 24px;"


def test_within_tolerance_is_left_alone(document) -> None:
    panel = _panel(document, style="left: 515px")
    state = SelectionState()
    _select(document, state, left=700)

    assert not PanelPlacement(document, state).reconcile()
    assert panel.style_writes == 0


def test_missing_panel_or_offset_is_a_no_op(document) -> None:
    state = SelectionState()
    placement = PanelPlacement(document, state)
    assert not placement.reconcile()

    panel = _panel(document, style="top: 40px")
    assert not placement.reconcile()
    assert panel.style_writes == 0


def test_target_side_priority(document) -> None:
    state = SelectionState()
    placement = PanelPlacement(document, state)
    on_left = PanelOffset(24)

    # no signal: move away from the current side
    assert placement.target_side(on_left, 420) is Side.RIGHT
    assert placement.target_side(PanelOffset(600), 420) is Side.LEFT

    state.last_click_x = 100
    assert placement.target_side(on_left, 420) is Side.LEFT

    hidden = _select(document, state, left=700)
    hidden.box = Rect()
    assert placement.target_side(on_left, 420) is Side.LEFT

    _select(document, state, left=700)
    assert placement.target_side(on_left, 420) is Side.RIGHT


def test_options_from_config() -> None:
    options = PlacementOptions.from_config(
        {"panel": {"left_side_offset": "40px", "right_side_offset": 600}}
    )

    assert options.left_side_offset == "40px"
    assert options.right_side_offset == 600
    assert options.tolerance == 10.0
