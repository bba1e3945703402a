"""Jailbreak policies understood by the confinement validator."""

from enum import Enum


class JailbreakPolicy(Enum):
    """How strictly a sandbox root checks symlinks inside its tree."""

    STRICT = "STRICT"
    UNCHECKED_SYMLINKS = "UNCHECKED_SYMLINKS"

    @classmethod
    def from_name(cls, name: str) -> "JailbreakPolicy":
        """Parse a policy name case-insensitively, rejecting unknown values."""
        try:
            return cls[name.strip().upper()]
        except KeyError as err:
            choices = ", ".join(member.name for member in cls)
            raise ValueError(f"unknown jailbreak policy {name!r} (expected {choices})") from err
