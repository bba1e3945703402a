"""Command-line tool for checking untrusted paths against a sandbox root."""

import sys

from pathbox.bootstrap.config import (
    EXIT_BAD_LOCATOR,
    EXIT_FORBIDDEN,
    EXIT_IO_ERROR,
    EXIT_NOT_FOUND,
    EXIT_OK,
    parse_cli_args,
)
from pathbox.bootstrap.logging_setup import configure_logging
from pathbox.domain.correlation_id import correlation_scope, get_logger
from pathbox.domain.errors import ForbiddenPath, LocatorError
from pathbox.domain.locator import decode_locator
from pathbox.domain.policy import JailbreakPolicy
from pathbox.domain.sandbox_root import SandboxRoot
from pathbox.lifecycle.registry import RootRegistry

CLI_LOGGER = get_logger("cli")


def _report_rejection(candidate: str, err: Exception) -> None:
    print(f"{candidate}: {type(err).__name__}: {err}", file=sys.stderr)


def run_check(root: SandboxRoot, candidates: list[str]) -> int:
    """Print the locator of every accepted candidate; fail if any is rejected."""
    exit_code = EXIT_OK
    for candidate in candidates:
        try:
            confined = root.resolve(candidate)
        except ForbiddenPath as err:
            _report_rejection(candidate, err)
            exit_code = max(exit_code, EXIT_FORBIDDEN)
            continue
        except OSError as err:
            _report_rejection(candidate, err)
            exit_code = max(exit_code, EXIT_IO_ERROR)
            continue
        print(confined.to_uri())
    return exit_code


def run_realpath(root: SandboxRoot, candidate: str) -> int:
    try:
        confined = root.resolve(candidate).to_real_path()
    except ForbiddenPath as err:
        _report_rejection(candidate, err)
        return EXIT_FORBIDDEN
    except (FileNotFoundError, NotADirectoryError) as err:
        _report_rejection(candidate, err)
        return EXIT_NOT_FOUND
    except OSError as err:
        _report_rejection(candidate, err)
        return EXIT_IO_ERROR
    print(confined.unwrap())
    return EXIT_OK


def run_decode(registry: RootRegistry, locator: str) -> int:
    try:
        confined = decode_locator(locator, registry)
    except LocatorError as err:
        _report_rejection(locator, err)
        return EXIT_BAD_LOCATOR
    except ForbiddenPath as err:
        _report_rejection(locator, err)
        return EXIT_FORBIDDEN
    except OSError as err:
        _report_rejection(locator, err)
        return EXIT_IO_ERROR
    print(confined.unwrap())
    return EXIT_OK


def run(argv: list[str]) -> int:
    """Parse ``argv``, execute the requested command and return its exit code."""
    args = parse_cli_args(argv)
    configure_logging(args.log_level, args.log_destination, args.log_json)
    registry = RootRegistry()

    with correlation_scope():
        if args.command == "decode":
            exit_code = run_decode(registry, args.locator)
        else:
            root = registry.acquire(args.root, policy=JailbreakPolicy.from_name(args.policy))
            if args.command == "check":
                exit_code = run_check(root, args.paths)
            else:
                exit_code = run_realpath(root, args.path)
        CLI_LOGGER.info(
            "Command finished",
            extra={"event": "command_finished", "operation": args.command, "exit_code": exit_code},
        )
    return exit_code


def main() -> None:
    sys.exit(run(sys.argv[1:]))


if __name__ == "__main__":
    main()
