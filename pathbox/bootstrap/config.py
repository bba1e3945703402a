"""Environment defaults and CLI argument parsing."""

import argparse
import os

from pathbox.domain.policy import JailbreakPolicy


def _env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value else default


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}


EXIT_OK = 0
EXIT_NOT_FOUND = 2
EXIT_FORBIDDEN = 3
EXIT_BAD_LOCATOR = 4
EXIT_IO_ERROR = 5


def parse_cli_args(argv: list[str]) -> argparse.Namespace:
    """Return parsed CLI arguments for the pathbox tool."""
    parser = argparse.ArgumentParser(
        description="Validate untrusted paths against a sandbox root directory"
    )
    parser.add_argument("--root", default=".", help="Sandbox root directory")
    parser.add_argument(
        "--policy",
        default=_env_str("PATHBOX_DEFAULT_POLICY", "STRICT").upper(),
        choices=[policy.name for policy in JailbreakPolicy],
        type=str.upper,
        help="Jailbreak policy applied beneath the root",
    )
    parser.add_argument(
        "--log-level",
        default=_env_str("PATHBOX_LOG_LEVEL", "INFO").upper(),
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
    )
    parser.add_argument(
        "--log-destination",
        default=_env_str("PATHBOX_LOG_DESTINATION", "stdout"),
        help="stdout or a file path",
    )
    parser.add_argument(
        "--log-json",
        action=argparse.BooleanOptionalAction,
        default=_env_bool("PATHBOX_LOG_JSON", True),
        help="Emit structured JSON log records",
    )

    commands = parser.add_subparsers(dest="command", required=True)
    check = commands.add_parser("check", help="Validate candidates and print their locators")
    check.add_argument("paths", nargs="+")
    realpath = commands.add_parser("realpath", help="Resolve a candidate's real location")
    realpath.add_argument("path")
    decode = commands.add_parser("decode", help="Print the native path behind a locator")
    decode.add_argument("locator")
    return parser.parse_args(argv)
