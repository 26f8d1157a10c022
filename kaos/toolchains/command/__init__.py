"""Command toolchain module."""

from kaos.toolchains.command.config import CommandToolchainConfig
from kaos.toolchains.command.manifest import command_manifest
from kaos.toolchains.command.toolchain import CommandToolchain

__all__ = ["CommandToolchain", "CommandToolchainConfig", "command_manifest"]
