"""Immutable record of one confinement boundary."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from pathbox.domain.confined_path import ConfinedPath, PathLike
from pathbox.domain.locator import encode_locator
from pathbox.domain.policy import JailbreakPolicy
from pathbox.handlers.native_fs import FilesystemBackend, NativeFilesystem
from pathbox.security.validator import normalize_lexically

RootKey = tuple[JailbreakPolicy, Path]


@dataclass(frozen=True)
class SandboxRoot:
    """A sandbox directory and the jailbreak policy applied beneath it.

    ``root_path`` is absolute and lexically normalized; equality and hashing
    use ``(policy, root_path)``. Obtain instances from a RootRegistry so that
    repeated requests for the same sandbox share one record.
    """

    root_path: Path
    policy: JailbreakPolicy = JailbreakPolicy.STRICT
    filesystem: FilesystemBackend = field(
        default_factory=NativeFilesystem, compare=False, repr=False
    )

    @classmethod
    def create(
        cls,
        first: PathLike,
        *more: PathLike,
        policy: JailbreakPolicy = JailbreakPolicy.STRICT,
        filesystem: Optional[FilesystemBackend] = None,
    ) -> "SandboxRoot":
        """Build a root from path segments, normalizing them to an absolute path."""
        return cls(
            root_key(first, *more, policy=policy)[1],
            policy,
            filesystem if filesystem is not None else NativeFilesystem(),
        )

    @property
    def key(self) -> RootKey:
        return (self.policy, self.root_path)

    def get_root(self) -> ConfinedPath:
        """The sandbox directory itself as a confined path."""
        return ConfinedPath(self.root_path, self)

    def of(self, first: PathLike, *more: PathLike) -> ConfinedPath:
        """Join the segments and resolve them against the root."""
        return self.get_root().resolve(Path(first, *more))

    def resolve(self, other: Union[PathLike, ConfinedPath]) -> ConfinedPath:
        return self.get_root().resolve(other)

    def real_path(self) -> Path:
        """Symlink-resolved root directory; raises if the root does not exist."""
        return self.filesystem.real_path(self.root_path)

    def to_uri(self) -> str:
        """Return the ``sandbox:`` locator naming this root."""
        return encode_locator(self.root_path, self.policy)


def root_key(
    first: PathLike, *more: PathLike, policy: JailbreakPolicy = JailbreakPolicy.STRICT
) -> RootKey:
    """Registry key for a root directory given as one or more segments."""
    return (policy, normalize_lexically(Path(first, *more)))
