"""Command toolchain manifest."""

from kaos.toolchains.command.config import CommandToolchainConfig
from kaos.toolchains.command.toolchain import CommandToolchain
from kaos.toolchains.manifest import ToolchainManifest

command_manifest = ToolchainManifest(
    config_cls=CommandToolchainConfig,
    toolchain_factory=CommandToolchain.from_config,
)
