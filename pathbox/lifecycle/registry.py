"""Registry that deduplicates sandbox roots by identity."""

import threading
from dataclasses import dataclass
from typing import Optional, Union

from pathbox.domain.confined_path import PathLike
from pathbox.domain.correlation_id import get_logger
from pathbox.domain.errors import AlreadyRegistered, RootNotRegistered
from pathbox.domain.policy import JailbreakPolicy
from pathbox.domain.sandbox_root import RootKey, SandboxRoot, root_key
from pathbox.handlers.native_fs import FilesystemBackend, NativeFilesystem

REGISTRY_LOGGER = get_logger("registry")


@dataclass(slots=True)
class RegistryEntry:
    """A registered root and the number of holders that acquired it."""

    root: SandboxRoot
    holders: int


class RootRegistry:
    """Thread-safe map from ``(policy, root directory)`` to a live SandboxRoot.

    Callers construct a registry and share it explicitly. ``acquire`` is the
    normal entry point and is idempotent; ``register`` and ``lookup`` are the
    strict variants that fail on an existing or missing identity.
    """

    def __init__(self, filesystem: Optional[FilesystemBackend] = None) -> None:
        self._filesystem = filesystem if filesystem is not None else NativeFilesystem()
        self._lock = threading.Lock()
        self._entries: dict[RootKey, RegistryEntry] = {}

    @property
    def filesystem(self) -> FilesystemBackend:
        return self._filesystem

    def acquire(
        self,
        first: PathLike,
        *more: PathLike,
        policy: JailbreakPolicy = JailbreakPolicy.STRICT,
    ) -> SandboxRoot:
        """Return the root for this identity, creating it on first use."""
        key = root_key(first, *more, policy=policy)
        with self._lock:
            entry = self._entries.get(key)
            created = entry is None
            if entry is None:
                entry = self._add(key)
            else:
                entry.holders += 1
            holders = entry.holders
        self._log_acquired(entry.root, created, holders)
        return entry.root

    def register(
        self,
        first: PathLike,
        *more: PathLike,
        policy: JailbreakPolicy = JailbreakPolicy.STRICT,
    ) -> SandboxRoot:
        """Create the root for this identity; raise AlreadyRegistered if it exists."""
        key = root_key(first, *more, policy=policy)
        with self._lock:
            if key in self._entries:
                raise AlreadyRegistered(
                    f"Sandbox {key[1]} with policy {policy.value} is already registered"
                )
            entry = self._add(key)
        self._log_acquired(entry.root, True, 1)
        return entry.root

    def lookup(
        self,
        first: PathLike,
        *more: PathLike,
        policy: JailbreakPolicy = JailbreakPolicy.STRICT,
    ) -> SandboxRoot:
        """Return an existing root without taking a hold on it."""
        key = root_key(first, *more, policy=policy)
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            raise RootNotRegistered(
                f"Sandbox {key[1]} with policy {policy.value} is not registered"
            )
        return entry.root

    def release(self, root: SandboxRoot) -> bool:
        """Drop one hold on ``root``; return True when the last hold evicted it."""
        with self._lock:
            entry = self._entries.get(root.key)
            if entry is None:
                raise RootNotRegistered(
                    f"Sandbox {root.root_path} with policy {root.policy.value} is not registered"
                )
            entry.holders -= 1
            evicted = entry.holders <= 0
            if evicted:
                del self._entries[root.key]
            holders = max(entry.holders, 0)
        REGISTRY_LOGGER.info(
            "Sandbox root released",
            extra={
                "event": "root_released",
                "root": root.root_path.as_posix(),
                "policy": root.policy.value,
                "holders": holders,
                "evicted": evicted,
            },
        )
        return evicted

    def roots(self) -> list[SandboxRoot]:
        """Snapshot of the currently registered roots."""
        with self._lock:
            return [entry.root for entry in self._entries.values()]

    def holders(self, root: SandboxRoot) -> int:
        with self._lock:
            entry = self._entries.get(root.key)
            return entry.holders if entry is not None else 0

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, item: Union[SandboxRoot, RootKey]) -> bool:
        key = item.key if isinstance(item, SandboxRoot) else item
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _add(self, key: RootKey) -> RegistryEntry:
        policy, root_path = key
        entry = RegistryEntry(SandboxRoot(root_path, policy, self._filesystem), 1)
        self._entries[key] = entry
        return entry

    def _log_acquired(self, root: SandboxRoot, created: bool, holders: int) -> None:
        REGISTRY_LOGGER.info(
            "Sandbox root registered" if created else "Sandbox root reused",
            extra={
                "event": "root_registered" if created else "root_reused",
                "root": root.root_path.as_posix(),
                "policy": root.policy.value,
                "holders": holders,
            },
        )
