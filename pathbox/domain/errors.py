"""Error taxonomy for sandbox confinement decisions."""

from typing import Optional


class SandboxError(Exception):
    """Base class for every error raised by the confinement core."""


class ForbiddenPath(SandboxError):
    """Raised when a candidate path is not allowed inside its sandbox."""

    def __init__(self, candidate: object, root: object, reason: str) -> None:
        self.candidate = str(candidate)
        self.root = str(root)
        self.reason = reason
        super().__init__(f"Path {self.candidate} is outside the sandbox {self.root} ({reason})")


class ContainmentViolation(ForbiddenPath):
    """The lexically normalized candidate does not start with the root."""


class JailbreakAttempt(ForbiddenPath):
    """The candidate is lexically contained but a symlink leads out of the root."""


class InvalidOperation(SandboxError):
    """Raised for operations that would drop the root-anchored invariant."""


class AlreadyRegistered(SandboxError):
    """Raised by strict registration when the sandbox identity already exists."""


class RootNotRegistered(SandboxError, LookupError):
    """Raised when looking up a sandbox identity that was never registered."""


class LocatorError(SandboxError, ValueError):
    """Raised when a sandbox locator string cannot be parsed."""

    def __init__(self, locator: str, reason: Optional[str] = None) -> None:
        self.locator = locator
        message = f"Malformed sandbox locator {locator!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
