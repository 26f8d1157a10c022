"""Fixtures for integration tests."""

import textwrap
from collections.abc import AsyncGenerator, Callable
from pathlib import Path

import pytest

from kaos.toolchains.python import PythonToolchain, PythonToolchainConfig


@pytest.fixture
def targets_dir(tmp_path: Path) -> Path:
    """Directory holding the target scripts."""
    directory = tmp_path / "kaos-tests"
    directory.mkdir()
    return directory


@pytest.fixture
def write_target(targets_dir: Path) -> Callable[[str, str], Path]:
    """Return a function writing target scripts into the targets directory."""

    def _write(name: str, source: str) -> Path:
        path = targets_dir / name
        path.write_text(textwrap.dedent(source))
        return path

    return _write


@pytest.fixture
async def python_toolchain() -> AsyncGenerator[PythonToolchain, None]:
    """Python toolchain with its own workspace."""
    async with PythonToolchain.from_config(PythonToolchainConfig()) as toolchain:
        yield toolchain
