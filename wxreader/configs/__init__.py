import os.path as osp
import re
import shutil

import yaml

from wxreader.utils.logger import logger


here = osp.dirname(osp.abspath(__file__))

USER_CONFIG_FILE = osp.join(osp.expanduser("~"), ".wxreaderrc")

_PERCENT_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*%\s*$")
_PIXELS_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(?:px)?\s*$")

SHORTCUT_ACTIONS = (
    "prev",
    "next",
    "confirm",
    "back",
    "copy_highlight",
    "copy_text",
    "scroll",
    "toggle_ink",
    "toggle_compact",
    "decrease_padding",
    "increase_padding",
)


def update_dict(target_dict, new_dict, validate_item=None):
    for key, value in new_dict.items():
        if validate_item:
            validate_item(key, value)
        if key not in target_dict:
            logger.warning("Skipping unexpected key in config: {}".format(key))
            continue
        if isinstance(target_dict[key], dict) and isinstance(value, dict):
            update_dict(target_dict[key], value, validate_item=validate_item)
        else:
            target_dict[key] = value


def is_offset_value(value) -> bool:
    """Pixel number, ``"120px"`` or a viewport percentage such as ``"52%"``."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return value >= 0
    if isinstance(value, str):
        return bool(_PERCENT_RE.match(value) or _PIXELS_RE.match(value))
    return False


def validate_config_item(key, value):
    if key in ("left_side_offset", "right_side_offset") and not is_offset_value(
        value
    ):
        raise ValueError(
            "Unexpected value for config key '{}': {}".format(key, value)
        )
    if key == "compact_padding" and (
        not isinstance(value, int) or not 0 <= value <= 50
    ):
        raise ValueError(
            "Unexpected value for config key 'compact_padding': {}".format(value)
        )
    if key in ("same_line_ratio", "continuation_ratio") and (
        not isinstance(value, (int, float)) or value <= 0
    ):
        raise ValueError(
            "Unexpected value for config key '{}': {}".format(key, value)
        )
    if key in ("retry_attempts", "retry_delay_ms", "watch_interval_ms") and (
        not isinstance(value, int) or value < 0
    ):
        raise ValueError(
            "Unexpected value for config key '{}': {}".format(key, value)
        )
    if key in SHORTCUT_ACTIONS:
        if not isinstance(value, list) or not all(
            isinstance(code, str) and code for code in value
        ):
            raise ValueError(
                "Shortcut '{}' must be a list of key codes: {}".format(key, value)
            )


def get_default_config():
    config_file = osp.join(here, "default_config.yaml")
    with open(config_file) as f:
        config = yaml.safe_load(f)

    # save default config to ~/.wxreaderrc
    if not osp.exists(USER_CONFIG_FILE):
        try:
            shutil.copy(config_file, USER_CONFIG_FILE)
        except Exception:
            logger.warning("Failed to save config: {}".format(USER_CONFIG_FILE))

    return config


def get_config(config_file_or_yaml=None, config_from_args=None):
    # 1. default config
    config = get_default_config()

    # 2. specified as file or yaml
    if config_file_or_yaml is not None:
        config_from_yaml = yaml.safe_load(config_file_or_yaml)
        if not isinstance(config_from_yaml, dict):
            with open(config_from_yaml) as f:
                logger.info(
                    "Loading config file from: {}".format(config_from_yaml)
                )
                config_from_yaml = yaml.safe_load(f) or {}
        update_dict(
            config, config_from_yaml, validate_item=validate_config_item
        )

    # 3. command line argument overrides
    if config_from_args is not None:
        update_dict(
            config, config_from_args, validate_item=validate_config_item
        )

    return config
