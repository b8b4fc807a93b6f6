from wxreader.engine import selectors
from wxreader.engine.stylesheet import build_stylesheet


def test_stylesheet_uses_configured_values(config) -> None:
    config["ui"]["comment_font_size"] = "22px"
    config["ui"]["selection_outline_width"] = 3
    config["panel"]["width"] = 380

    css = build_stylesheet(config)

    assert f".{selectors.CLASS_SELECTED} {{ outline: 3px solid" in css
    assert "font-size: 22px !important;" in css
    assert "width: 380px !important;" in css
    assert f"{selectors.COMPACT_PADDING_PROPERTY}: 5px;" in css
    assert f".{selectors.CLASS_COMPACT} .page" in css
    assert f".{selectors.CLASS_INK} img" in css


def test_stylesheet_defaults_without_config() -> None:
    css = build_stylesheet({})

    assert "font-size: 40px !important;" in css
    assert "line-height: 1.6 !important;" in css
    assert "{" in css and "{{" not in css
