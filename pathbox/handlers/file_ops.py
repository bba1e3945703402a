"""Filesystem operations that accept only confined paths.

Each helper unwraps its already-validated ConfinedPath arguments and
forwards them to the root's filesystem backend. Outcomes and errors are
passed through unchanged.
"""

import logging
import os
from typing import IO, Iterator

from pathbox.domain.confined_path import ConfinedPath
from pathbox.domain.correlation_id import get_logger
from pathbox.domain.errors import ForbiddenPath

FILE_LOGGER = get_logger("file_ops")


def _require_confined(*paths: object) -> None:
    for path in paths:
        if not isinstance(path, ConfinedPath):
            raise TypeError(f"expected a ConfinedPath, got {type(path).__name__}")


def open_file(path: ConfinedPath, mode: str = "rb") -> IO:
    """Open the file behind ``path`` with the backend's ``open``."""
    _require_confined(path)
    return path.root.filesystem.open(path.unwrap(), mode)


def stream_file(path: ConfinedPath, chunk_size: int = 65536) -> Iterator[bytes]:
    """Yield file contents in fixed-size chunks."""
    _require_confined(path)
    if FILE_LOGGER.logger.isEnabledFor(logging.DEBUG):
        FILE_LOGGER.debug(
            "File streaming started",
            extra={"event": "file_streaming_started", "candidate": str(path)},
        )
    with open_file(path, "rb") as file_handle:
        while True:
            chunk = file_handle.read(chunk_size)
            if not chunk:
                break
            yield chunk


def read_bytes(path: ConfinedPath) -> bytes:
    with open_file(path, "rb") as file_handle:
        data = file_handle.read()
    FILE_LOGGER.info(
        "File read operation complete",
        extra={"event": "file_read_complete", "candidate": str(path), "bytes": len(data)},
    )
    return data


def write_bytes(path: ConfinedPath, data: bytes, create_parents: bool = True) -> int:
    """Write ``data`` to ``path``, creating missing parent directories by default."""
    _require_confined(path)
    if FILE_LOGGER.logger.isEnabledFor(logging.DEBUG):
        FILE_LOGGER.debug(
            "File write started",
            extra={"event": "file_write_started", "candidate": str(path), "bytes": len(data)},
        )
    if create_parents and path.parts:
        make_dirs(path.parent)
    with open_file(path, "wb") as file_handle:
        file_handle.write(data)
    FILE_LOGGER.info(
        "File write complete",
        extra={"event": "file_write_complete", "candidate": str(path), "bytes": len(data)},
    )
    return len(data)


def list_dir(path: ConfinedPath) -> list[ConfinedPath]:
    """Return the entries of a directory as confined paths.

    Entries that fail validation, such as symlinks leading out of a STRICT
    root, are left out and logged.
    """
    _require_confined(path)
    entries = []
    for native_entry in path.root.filesystem.read_dir(path.unwrap()):
        try:
            entries.append(path.resolve(native_entry.name))
        except ForbiddenPath as err:
            FILE_LOGGER.warning(
                "Directory entry rejected",
                extra={
                    "event": "directory_entry_rejected",
                    "candidate": str(native_entry),
                    "reason": err.reason,
                    "error_type": type(err).__name__,
                },
            )
    return entries


def make_dirs(path: ConfinedPath, exist_ok: bool = True) -> None:
    _require_confined(path)
    path.root.filesystem.create_dir(path.unwrap(), parents=True, exist_ok=exist_ok)


def delete(path: ConfinedPath) -> None:
    """Remove a file, symlink or empty directory."""
    _require_confined(path)
    path.root.filesystem.delete(path.unwrap())
    FILE_LOGGER.info("Path deleted", extra={"event": "path_deleted", "candidate": str(path)})


def copy(source: ConfinedPath, target: ConfinedPath) -> None:
    _require_confined(source, target)
    source.root.filesystem.copy(source.unwrap(), target.unwrap())
    FILE_LOGGER.info(
        "Path copied",
        extra={"event": "path_copied", "candidate": str(source), "target": str(target)},
    )


def move(source: ConfinedPath, target: ConfinedPath) -> None:
    _require_confined(source, target)
    source.root.filesystem.move(source.unwrap(), target.unwrap())
    FILE_LOGGER.info(
        "Path moved",
        extra={"event": "path_moved", "candidate": str(source), "target": str(target)},
    )


def stat(path: ConfinedPath, follow_symlinks: bool = True) -> os.stat_result:
    _require_confined(path)
    return path.root.filesystem.stat(path.unwrap(), follow_symlinks=follow_symlinks)
