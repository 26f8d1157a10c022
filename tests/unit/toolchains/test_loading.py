"""Tests for toolchain loading module."""

from importlib.metadata import EntryPoint, EntryPoints
from unittest.mock import patch

import pytest

from kaos.toolchains.command import command_manifest
from kaos.toolchains.loading import (
    ENTRY_POINT_GROUP,
    ToolchainNotFoundError,
    available_toolchains,
    load_toolchain_manifest,
)
from kaos.toolchains.python import python_manifest


def test_load_toolchain_manifest_returns_python_manifest() -> None:
    """Loads the python toolchain manifest by key."""
    manifest = load_toolchain_manifest("python")

    assert manifest is python_manifest


def test_load_toolchain_manifest_returns_command_manifest() -> None:
    """Loads the command toolchain manifest by key."""
    manifest = load_toolchain_manifest("command")

    assert manifest is command_manifest


def test_load_toolchain_manifest_raises_for_unknown_toolchain() -> None:
    """Raises ToolchainNotFoundError listing the installed toolchains."""
    with pytest.raises(ToolchainNotFoundError) as exc_info:
        load_toolchain_manifest("unknown-toolchain")

    message = str(exc_info.value)
    assert "unknown-toolchain" in message
    assert "Available toolchains" in message
    assert "'python'" in message


def test_load_toolchain_manifest_rejects_non_manifest() -> None:
    """An entry point resolving to something else is not a toolchain."""
    entry = EntryPoint(
        name="broken", value="kaos.errors:HarnessError", group=ENTRY_POINT_GROUP
    )

    with (
        patch(
            "kaos.toolchains.loading.entry_points",
            return_value=EntryPoints((entry,)),
        ),
        pytest.raises(ToolchainNotFoundError, match="not a toolchain manifest"),
    ):
        load_toolchain_manifest("broken")


def test_available_toolchains_lists_builtins() -> None:
    """Both built-in toolchains are registered."""
    assert {"python", "command"} <= set(available_toolchains())
