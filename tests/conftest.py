"""Shared pytest fixtures for integration and unit tests."""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Callable

import pytest

from pathbox.domain.policy import JailbreakPolicy
from pathbox.domain.sandbox_root import SandboxRoot
from pathbox.lifecycle.registry import RootRegistry

if TYPE_CHECKING:
    from _pytest.tmpdir import TempPathFactory

PROJECT_ROOT = Path(__file__).resolve().parent.parent
CLI_ENTRYPOINT = PROJECT_ROOT / "main.py"

CliRunner = Callable[..., "subprocess.CompletedProcess[str]"]


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Expose the repository root path to tests."""

    return PROJECT_ROOT


@pytest.fixture(scope="session")
def symlinks_supported(tmp_path_factory: "TempPathFactory") -> bool:
    """Report whether the platform lets this process create symlinks."""

    probe_dir = tmp_path_factory.mktemp("symlink-probe")
    try:
        (probe_dir / "link").symlink_to(probe_dir, target_is_directory=True)
    except (OSError, NotImplementedError):
        return False
    return True


@pytest.fixture()
def require_symlinks(symlinks_supported: bool) -> None:
    """Skip tests that need symlinks on platforms without them."""

    if not symlinks_supported:
        pytest.skip("symlinks are not available on this platform")


@pytest.fixture()
def registry() -> RootRegistry:
    """Provide a fresh registry per test."""

    return RootRegistry()


@pytest.fixture()
def sandbox_dir(tmp_path: Path) -> Path:
    """An existing, symlink-free sandbox directory."""

    directory = tmp_path.resolve() / "sandbox"
    directory.mkdir()
    return directory


@pytest.fixture()
def outside_dir(tmp_path: Path) -> Path:
    """An existing directory next to, but outside, the sandbox."""

    directory = tmp_path.resolve() / "outside"
    directory.mkdir()
    (directory / "secret.txt").write_text("top secret")
    return directory


@pytest.fixture()
def strict_root(registry: RootRegistry, sandbox_dir: Path) -> SandboxRoot:
    return registry.acquire(sandbox_dir)


@pytest.fixture()
def unchecked_root(registry: RootRegistry, sandbox_dir: Path) -> SandboxRoot:
    return registry.acquire(sandbox_dir, policy=JailbreakPolicy.UNCHECKED_SYMLINKS)


@pytest.fixture()
def escape_link(require_symlinks: None, sandbox_dir: Path, outside_dir: Path) -> Path:
    """Symlink ``sandbox/link`` pointing at the outside directory."""

    link = sandbox_dir / "link"
    link.symlink_to(outside_dir, target_is_directory=True)
    return link


@pytest.fixture()
def run_cli(tmp_path: Path) -> CliRunner:
    """Run main.py in a subprocess with logs written to a file under tmp_path."""

    def _run(*args: str, log_file: Path | None = None) -> subprocess.CompletedProcess[str]:
        destination = log_file or tmp_path / "pathbox.log"
        command = [
            sys.executable,
            str(CLI_ENTRYPOINT),
            "--log-destination",
            str(destination),
            *args,
        ]
        env = {**os.environ, "PATHBOX_LOG_LEVEL": "DEBUG"}
        return subprocess.run(
            command,
            cwd=PROJECT_ROOT,
            capture_output=True,
            text=True,
            timeout=30,
            env=env,
            check=False,
        )

    return _run
