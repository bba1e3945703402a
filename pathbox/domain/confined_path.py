"""Path value type that can only hold locations approved by its sandbox root."""

import functools
import os
from pathlib import Path, PurePath
from typing import TYPE_CHECKING, Union

from pathbox.domain.errors import InvalidOperation
from pathbox.domain.locator import encode_locator
from pathbox.security.validator import is_within, validate

if TYPE_CHECKING:
    from pathbox.domain.sandbox_root import SandboxRoot

PathLike = Union[str, "os.PathLike[str]"]


@functools.total_ordering
class ConfinedPath:
    """An absolute, normalized path that has passed validation against a SandboxRoot.

    Instances are immutable. Every derivation builds a new ConfinedPath,
    which runs the validator again before the value can exist. The native
    path is only handed out by :meth:`unwrap`.
    """

    __slots__ = ("_path", "_root")

    def __init__(self, path: PathLike, root: "SandboxRoot") -> None:
        if isinstance(path, ConfinedPath):
            raise InvalidOperation("ConfinedPath values cannot be re-wrapped; use resolve()")
        self._root = root
        self._path = validate(Path(path), root)

    @property
    def root(self) -> "SandboxRoot":
        return self._root

    def unwrap(self) -> Path:
        """Return the validated native path for the filesystem boundary."""
        return self._path

    @property
    def relative_path(self) -> PurePath:
        """Location of this path relative to its sandbox root."""
        return self._path.relative_to(self._root.root_path)

    @property
    def parts(self) -> tuple[str, ...]:
        """Segments below the sandbox root."""
        return self.relative_path.parts

    @property
    def name(self) -> str:
        return self._path.name

    def is_absolute(self) -> bool:
        return self._path.is_absolute()

    def resolve(self, other: PathLike) -> "ConfinedPath":
        """Join ``other`` onto this path; an absolute ``other`` replaces it."""
        if isinstance(other, ConfinedPath):
            raise InvalidOperation(
                "Cannot resolve a ConfinedPath against another ConfinedPath; "
                "both already carry an absolute sandbox prefix"
            )
        return ConfinedPath(self._path / other, self._root)

    def __truediv__(self, other: PathLike) -> "ConfinedPath":
        return self.resolve(other)

    def resolve_sibling(self, other: PathLike) -> "ConfinedPath":
        """Resolve ``other`` against the parent of this path."""
        if isinstance(other, ConfinedPath):
            raise InvalidOperation(
                "Cannot resolve a ConfinedPath sibling from another ConfinedPath; "
                "both already carry an absolute sandbox prefix"
            )
        return ConfinedPath(self._path.parent / other, self._root)

    def normalize(self) -> "ConfinedPath":
        return ConfinedPath(self._path, self._root)

    def relativize(self, other: object) -> "ConfinedPath":
        """Always raises: a path relative to another has no sandbox anchor."""
        raise InvalidOperation(
            "Relativizing confined paths is not supported; "
            "every confined path is defined relative to its sandbox root"
        )

    @property
    def parent(self) -> "ConfinedPath":
        """The containing directory; the root's own parent is rejected."""
        relative_parts = self.parts
        if not relative_parts:
            return ConfinedPath(self._root.root_path.parent, self._root)
        return self._from_relative_parts(relative_parts[:-1])

    def subpath(self, begin: int, end: int) -> "ConfinedPath":
        """Re-anchor the segments ``[begin, end)`` below the root at the root."""
        relative_parts = self.parts
        if begin < 0 or end > len(relative_parts) or begin >= end:
            raise ValueError(
                f"invalid subpath range [{begin}, {end}) for {len(relative_parts)} segments"
            )
        return self._from_relative_parts(relative_parts[begin:end])

    def to_absolute_path(self) -> "ConfinedPath":
        return ConfinedPath(self._path.absolute(), self._root)

    def to_real_path(self) -> "ConfinedPath":
        """Resolve symlinks on disk and validate where they actually lead.

        Missing segments raise the backend's FileNotFoundError. The result is
        checked lexically even for UNCHECKED_SYMLINKS roots, since the caller
        asked for the real location.
        """
        filesystem = self._root.filesystem
        real = filesystem.real_path(self._path)
        real_root = filesystem.real_path(self._root.root_path)
        if is_within(real, real_root):
            real = self._root.root_path.joinpath(*real.relative_to(real_root).parts)
        return ConfinedPath(real, self._root)

    def starts_with(self, other: Union[PathLike, "ConfinedPath"]) -> bool:
        other_path = other.unwrap() if isinstance(other, ConfinedPath) else PurePath(other)
        return is_within(self._path, other_path)

    def ends_with(self, other: Union[PathLike, "ConfinedPath"]) -> bool:
        other_path = other.unwrap() if isinstance(other, ConfinedPath) else PurePath(other)
        suffix = other_path.parts
        if not suffix or len(suffix) > len(self._path.parts):
            return False
        return self._path.parts[-len(suffix) :] == suffix

    def to_uri(self) -> str:
        """Return the ``sandbox:`` locator identifying this path."""
        return encode_locator(self._root.root_path, self._root.policy, self.relative_path)

    def _from_relative_parts(self, relative_parts: tuple[str, ...]) -> "ConfinedPath":
        return ConfinedPath(self._root.root_path.joinpath(*relative_parts), self._root)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConfinedPath):
            return NotImplemented
        return self._path == other._path and self._root.root_path == other._root.root_path

    def __lt__(self, other: "ConfinedPath") -> bool:
        if not isinstance(other, ConfinedPath):
            return NotImplemented
        return (self._root.root_path, self._path) < (other._root.root_path, other._path)

    def __hash__(self) -> int:
        return hash((self._path, self._root.root_path))

    def __str__(self) -> str:
        return str(self._path)

    def __repr__(self) -> str:
        return f"ConfinedPath({self._path.as_posix()!r}, root={self._root.root_path.as_posix()!r})"
