"""Filesystem backend interface and the adapter over the host's native filesystem."""

import os
import shutil
from pathlib import Path
from typing import IO, Optional, Protocol


class FilesystemBackend(Protocol):
    """Operations the confinement core and the I/O boundary need from a filesystem.

    Every method receives a native path that has already been validated.
    Errors are the host's ``OSError`` subclasses and are never translated.
    """

    def open(self, path: Path, mode: str = "rb") -> IO:
        ...

    def read_dir(self, path: Path) -> list[Path]:
        ...

    def create_dir(self, path: Path, parents: bool = False, exist_ok: bool = False) -> None:
        ...

    def delete(self, path: Path) -> None:
        ...

    def copy(self, source: Path, target: Path) -> None:
        ...

    def move(self, source: Path, target: Path) -> None:
        ...

    def stat(self, path: Path, follow_symlinks: bool = True) -> os.stat_result:
        ...

    def real_path(self, path: Path) -> Path:
        """Resolve every symlink along ``path``; raise if any segment is missing."""
        ...

    def resolve_link(self, path: Path) -> Optional[Path]:
        """Return where ``path`` points if it is itself a symlink, even a dangling one."""
        ...


class NativeFilesystem:
    """FilesystemBackend backed by ``os``, ``shutil`` and ``pathlib``."""

    def open(self, path: Path, mode: str = "rb") -> IO:
        # pylint: disable=consider-using-with,unspecified-encoding
        return open(path, mode)

    def read_dir(self, path: Path) -> list[Path]:
        return sorted(path.iterdir())

    def create_dir(self, path: Path, parents: bool = False, exist_ok: bool = False) -> None:
        path.mkdir(parents=parents, exist_ok=exist_ok)

    def delete(self, path: Path) -> None:
        if path.is_dir() and not path.is_symlink():
            path.rmdir()
        else:
            path.unlink()

    def copy(self, source: Path, target: Path) -> None:
        if source.is_dir():
            shutil.copytree(source, target, symlinks=True)
        else:
            shutil.copy2(source, target, follow_symlinks=False)

    def move(self, source: Path, target: Path) -> None:
        shutil.move(os.fspath(source), os.fspath(target))

    def stat(self, path: Path, follow_symlinks: bool = True) -> os.stat_result:
        return os.stat(path, follow_symlinks=follow_symlinks)

    def real_path(self, path: Path) -> Path:
        # Symlink loops raise OSError(ELOOP) here, where Path.resolve raises RuntimeError.
        return Path(os.path.realpath(path, strict=True))

    def resolve_link(self, path: Path) -> Optional[Path]:
        if not path.is_symlink():
            return None
        return Path(os.path.realpath(path))
