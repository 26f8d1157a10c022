"""Toolchain plugins registered under the ``kaos.toolchains`` entry points."""

import logging
from importlib.metadata import entry_points
from typing import Any

from kaos.toolchains.manifest import ToolchainManifest

log = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "kaos.toolchains"


class ToolchainNotFoundError(Exception):
    """Raised when no installed toolchain is registered under a key."""


def available_toolchains() -> list[str]:
    """Keys of all installed toolchains, sorted."""
    return sorted({entry.name for entry in entry_points(group=ENTRY_POINT_GROUP)})


def load_toolchain_manifest(key: str) -> ToolchainManifest[Any]:
    """Load the manifest registered under ``key`` (e.g. "python", "command").

    Third-party packages add toolchains by declaring an entry point in the
    ``kaos.toolchains`` group that points at a :class:`ToolchainManifest`.

    Raises:
        ToolchainNotFoundError: If no toolchain is registered under ``key``,
            or the entry point does not resolve to a manifest

    """
    matches = entry_points(group=ENTRY_POINT_GROUP, name=key)
    if not matches:
        raise ToolchainNotFoundError(
            f"Toolchain '{key}' not found. "
            f"Available toolchains: {available_toolchains()}"
        )

    entry = next(iter(matches))
    log.debug("Loading toolchain %s from %s", key, entry.value)
    manifest = entry.load()
    if not isinstance(manifest, ToolchainManifest):
        raise ToolchainNotFoundError(
            f"Toolchain '{key}' ({entry.value}) is not a toolchain manifest"
        )
    return manifest
