"""Unit tests for the delegated filesystem operations."""

import logging
from pathlib import Path

import pytest

from pathbox.domain.sandbox_root import SandboxRoot
from pathbox.handlers import file_ops


def test_write_then_read(strict_root: SandboxRoot, sandbox_dir: Path):
    """Writes create parent directories and land under the sandbox."""
    path = strict_root.resolve("nested/dir/file.bin")
    assert file_ops.write_bytes(path, b"payload") == 7
    assert (sandbox_dir / "nested" / "dir" / "file.bin").read_bytes() == b"payload"
    assert file_ops.read_bytes(path) == b"payload"


def test_stream_file_yields_chunks(strict_root: SandboxRoot, sandbox_dir: Path):
    (sandbox_dir / "big.bin").write_bytes(b"abcdefghij")
    chunks = list(file_ops.stream_file(strict_root.resolve("big.bin"), chunk_size=4))
    assert chunks == [b"abcd", b"efgh", b"ij"]


def test_open_file_uses_mode(strict_root: SandboxRoot, sandbox_dir: Path):
    with file_ops.open_file(strict_root.resolve("notes.txt"), "w") as handle:
        handle.write("hello")
    assert (sandbox_dir / "notes.txt").read_text() == "hello"


def test_native_paths_are_refused(sandbox_dir: Path):
    """Only confined paths may cross the I/O boundary."""
    with pytest.raises(TypeError):
        file_ops.read_bytes(sandbox_dir / "x")  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        file_ops.write_bytes(str(sandbox_dir / "x"), b"")  # type: ignore[arg-type]


def test_list_dir_returns_confined_entries(strict_root: SandboxRoot, sandbox_dir: Path):
    (sandbox_dir / "b.txt").write_text("b")
    (sandbox_dir / "a").mkdir()
    entries = file_ops.list_dir(strict_root.get_root())
    assert entries == [strict_root.resolve("a"), strict_root.resolve("b.txt")]


def test_list_dir_skips_escaping_symlinks_under_strict(
    strict_root: SandboxRoot,
    unchecked_root: SandboxRoot,
    escape_link: Path,
    caplog: pytest.LogCaptureFixture,
):
    with caplog.at_level(logging.WARNING, logger="pathbox"):
        assert file_ops.list_dir(strict_root.get_root()) == []
    assert any(
        getattr(record, "event", None) == "directory_entry_rejected" for record in caplog.records
    )

    assert file_ops.list_dir(unchecked_root.get_root()) == [unchecked_root.resolve("link")]


def test_make_dirs_and_delete(strict_root: SandboxRoot, sandbox_dir: Path):
    directory = strict_root.resolve("x/y")
    file_ops.make_dirs(directory)
    assert (sandbox_dir / "x" / "y").is_dir()
    file_ops.make_dirs(directory)

    file_ops.delete(directory)
    assert not (sandbox_dir / "x" / "y").exists()

    target = strict_root.resolve("x/file.txt")
    file_ops.write_bytes(target, b"1")
    file_ops.delete(target)
    assert not (sandbox_dir / "x" / "file.txt").exists()


def test_delete_missing_file_propagates(strict_root: SandboxRoot):
    with pytest.raises(FileNotFoundError):
        file_ops.delete(strict_root.resolve("missing.txt"))


def test_copy_and_move(strict_root: SandboxRoot, sandbox_dir: Path):
    source = strict_root.resolve("source.txt")
    file_ops.write_bytes(source, b"content")

    file_ops.copy(source, strict_root.resolve("copy.txt"))
    assert (sandbox_dir / "copy.txt").read_bytes() == b"content"

    file_ops.move(strict_root.resolve("copy.txt"), strict_root.resolve("moved.txt"))
    assert not (sandbox_dir / "copy.txt").exists()
    assert (sandbox_dir / "moved.txt").read_bytes() == b"content"


def test_copy_requires_confined_target(strict_root: SandboxRoot, outside_dir: Path):
    source = strict_root.resolve("source.txt")
    file_ops.write_bytes(source, b"content")
    with pytest.raises(TypeError):
        file_ops.copy(source, outside_dir / "stolen.txt")  # type: ignore[arg-type]
    assert not (outside_dir / "stolen.txt").exists()


def test_stat_reports_size(strict_root: SandboxRoot):
    path = strict_root.resolve("sized.bin")
    file_ops.write_bytes(path, b"12345")
    assert file_ops.stat(path).st_size == 5
