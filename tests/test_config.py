import pytest
import yaml

from wxreader import configs
from wxreader.configs import (
    get_config,
    is_offset_value,
    update_dict,
    validate_config_item,
)


def test_defaults_are_copied_to_user_file(user_config_file) -> None:
    config = get_config()

    assert user_config_file.exists()
    assert config["window"]["initial_url"] == "https://weread.qq.com/"
    assert config["panel"]["right_side_offset"] == "52%"
    assert config["copy"] == {"retry_attempts": 6, "retry_delay_ms": 200}


def test_yaml_string_overrides_nested_values(user_config_file) -> None:
    config = get_config("{ui: {compact_padding: 10}, panel: {left_side_offset: 30px}}")

    assert config["ui"]["compact_padding"] == 10
    assert config["ui"]["comment_font_size"] == "20px"
    assert config["panel"]["left_side_offset"] == "30px"


def test_config_file_and_args(user_config_file, tmp_path) -> None:
    path = tmp_path / "custom.yaml"
    path.write_text(
        yaml.safe_dump({"shortcuts": {"next": ["KeyJ"]}}), encoding="utf-8"
    )

    config = get_config(str(path), {"window": {"width": 900}})

    assert config["shortcuts"]["next"] == ["KeyJ"]
    assert config["shortcuts"]["prev"] == ["ArrowUp"]
    assert config["window"]["width"] == 900


def test_empty_config_file(user_config_file, tmp_path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")

    assert get_config(str(path))["grouping"]["key_depth"] == 4


def test_unknown_keys_are_skipped() -> None:
    target = {"ui": {"ink_mode": True}}

    update_dict(target, {"ui": {"theme": "dark"}, "plugins": []})

    assert target == {"ui": {"ink_mode": True}}


@pytest.mark.parametrize(
    "key, value",
    [
        ("right_side_offset", "half"),
        ("left_side_offset", -4),
        ("left_side_offset", True),
        ("compact_padding", 60),
        ("compact_padding", "5"),
        ("same_line_ratio", 0),
        ("retry_attempts", -1),
        ("watch_interval_ms", 1.5),
        ("next", "ArrowDown"),
        ("confirm", ["Enter", ""]),
    ],
)
def test_invalid_values_raise(key, value) -> None:
    with pytest.raises(ValueError):
        validate_config_item(key, value)


def test_invalid_value_in_yaml_fails_at_load(user_config_file) -> None:
    with pytest.raises(ValueError):
        get_config("{panel: {right_side_offset: wide}}")


def test_offset_values() -> None:
    assert is_offset_value(24)
    assert is_offset_value(12.5)
    assert is_offset_value("24px")
    assert is_offset_value("52%")
    assert not is_offset_value("52 percent")
    assert not is_offset_value(None)


def test_user_config_path_is_in_home() -> None:
    assert configs.USER_CONFIG_FILE.endswith(".wxreaderrc")
