import argparse
from typing import Optional, Sequence, Tuple

from wxreader.configs import USER_CONFIG_FILE, get_config

__all__ = ["build_parser", "parse_cli"]


def build_parser() -> argparse.ArgumentParser:
    """Construct the argument parser used by the reader entry point."""
    parser = argparse.ArgumentParser(
        description="Keyboard-driven WeRead web reader."
    )
    parser.add_argument(
        "--version",
        "-V",
        action="store_true",
        help="show version and exit",
    )
    parser.add_argument(
        "--config",
        dest="config",
        default=USER_CONFIG_FILE,
        help=f"config file or yaml format string (default {USER_CONFIG_FILE})",
    )
    parser.add_argument(
        "--url",
        default=argparse.SUPPRESS,
        help="page to open instead of the configured start page",
    )
    parser.add_argument(
        "--no-ink",
        dest="ink_mode",
        action="store_false",
        default=argparse.SUPPRESS,
        help="start with ink screen mode off",
    )
    parser.add_argument(
        "--compact",
        dest="compact_mode",
        action="store_true",
        default=argparse.SUPPRESS,
        help="start in compact reading mode",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=argparse.SUPPRESS,
        help="log at DEBUG level",
    )
    return parser


def _overrides_from_namespace(namespace: argparse.Namespace) -> dict:
    """Nest the flat command line options into config sections."""
    values = vars(namespace)
    overrides: dict = {}
    if "url" in values:
        overrides.setdefault("window", {})["initial_url"] = values["url"]
    for key in ("ink_mode", "compact_mode"):
        if key in values:
            overrides.setdefault("ui", {})[key] = values[key]
    if values.get("debug"):
        overrides["logging"] = {"level": "DEBUG"}
    return overrides


def parse_cli(
    argv: Optional[Sequence[str]] = None,
) -> Tuple[dict, argparse.Namespace, bool]:
    """Parse CLI arguments and return `(config, namespace, version_requested)`."""
    parser = build_parser()
    namespace = parser.parse_args(argv)

    version_requested = bool(namespace.version)
    config = get_config(namespace.config, _overrides_from_namespace(namespace))
    return config, namespace, version_requested
