"""Confinement validation: lexical containment plus the symlink-safe real-path walk."""

import logging
import os
from pathlib import Path, PurePath
from typing import TYPE_CHECKING

from pathbox.domain.correlation_id import get_logger
from pathbox.domain.errors import ContainmentViolation, JailbreakAttempt
from pathbox.domain.policy import JailbreakPolicy

if TYPE_CHECKING:
    from pathbox.domain.sandbox_root import SandboxRoot

VALIDATOR_LOGGER = get_logger("validator")

# Raised by a real-path probe when the probed segment does not exist yet.
MISSING_SEGMENT_ERRORS = (FileNotFoundError, NotADirectoryError)


def normalize_lexically(path: PurePath) -> Path:
    """Make ``path`` absolute and collapse ``.`` and ``..`` without touching the filesystem."""
    return Path(os.path.normpath(os.path.abspath(path)))


def is_within(candidate: PurePath, root: PurePath) -> bool:
    """Return True when ``root``'s segments are a leading run of ``candidate``'s segments."""
    return candidate == root or root in candidate.parents


def check_containment(candidate: PurePath, root: "SandboxRoot") -> Path:
    """Return the normalized candidate, or raise ContainmentViolation if it leaves the root."""
    if "\x00" in str(candidate):
        _reject(ContainmentViolation, candidate, root, "embedded NUL character")

    normalized = normalize_lexically(candidate)
    if not is_within(normalized, root.root_path):
        _reject(ContainmentViolation, candidate, root, "lexical escape")
    return normalized


def check_symlinks(normalized: Path, root: "SandboxRoot") -> None:
    """Walk ``normalized`` segment by segment from the root's real path.

    Each existing segment is resolved through the root's filesystem backend.
    The walk stops at the first segment that does not exist, since nothing
    past that point can be a pre-existing symlink. A dangling symlink does
    exist, so its target becomes the real prefix before the walk stops.
    Whatever real prefix was reached must still lie under the root's real path.
    """
    filesystem = root.filesystem
    try:
        real_root = filesystem.real_path(root.root_path)
    except MISSING_SEGMENT_ERRORS:
        # A tree that does not exist yet cannot hold a symlink.
        return

    real_prefix = real_root
    for segment in normalized.relative_to(root.root_path).parts:
        probe = real_prefix / segment
        try:
            real_prefix = filesystem.real_path(probe)
        except MISSING_SEGMENT_ERRORS:
            link_target = filesystem.resolve_link(probe)
            if link_target is not None:
                # Creating through a dangling link lands on its target.
                real_prefix = link_target
            if VALIDATOR_LOGGER.logger.isEnabledFor(logging.DEBUG):
                VALIDATOR_LOGGER.debug(
                    "Symlink walk stopped at missing segment",
                    extra={
                        "event": "symlink_walk_stopped",
                        "candidate": normalized.as_posix(),
                        "real_prefix": real_prefix.as_posix(),
                        "segment": segment,
                    },
                )
            break

    if not is_within(real_prefix, real_root):
        _reject(JailbreakAttempt, normalized, root, f"symlink resolves to {real_prefix}")


def validate(candidate: PurePath, root: "SandboxRoot") -> Path:
    """Accept ``candidate`` for ``root`` and return its normalized absolute form.

    Raises ContainmentViolation or JailbreakAttempt on rejection. Filesystem
    errors other than a missing segment propagate unchanged.
    """
    normalized = check_containment(candidate, root)
    if root.policy is JailbreakPolicy.STRICT:
        check_symlinks(normalized, root)
    return normalized


def is_confined(candidate: PurePath, root: "SandboxRoot") -> bool:
    """Return True when ``candidate`` would be accepted for ``root``."""
    try:
        validate(candidate, root)
    except (ContainmentViolation, JailbreakAttempt):
        return False
    return True


def _reject(error_type: type, candidate: PurePath, root: "SandboxRoot", reason: str) -> None:
    event = "jailbreak_attempt" if error_type is JailbreakAttempt else "containment_violation"
    VALIDATOR_LOGGER.warning(
        "Path rejected by sandbox",
        extra={
            "event": event,
            "candidate": str(candidate),
            "root": root.root_path.as_posix(),
            "policy": root.policy.value,
            "reason": reason,
        },
    )
    raise error_type(candidate, root.root_path, reason)
