"""Toolchain manifest definition for the plugin system."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

from pydantic import BaseModel

from kaos.toolchains.base import Toolchain

ConfigT = TypeVar("ConfigT", bound=BaseModel)

ToolchainFactory: TypeAlias = Callable[
    [ConfigT, float | None], AbstractAsyncContextManager[Toolchain]
]


@dataclass(frozen=True, kw_only=True)
class ToolchainManifest(Generic[ConfigT]):
    """Manifest describing a toolchain plugin.

    The manifest contains references to the configuration class and the
    toolchain factory for lazy loading of toolchains based on their key. The
    factory receives the validated config and the optional run timeout, and
    owns the ephemeral workspace for as long as its context is open.
    """

    config_cls: type[ConfigT]
    toolchain_factory: ToolchainFactory[ConfigT]
