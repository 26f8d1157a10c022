"""Python toolchain manifest."""

from kaos.toolchains.manifest import ToolchainManifest
from kaos.toolchains.python.config import PythonToolchainConfig
from kaos.toolchains.python.toolchain import PythonToolchain

python_manifest = ToolchainManifest(
    config_cls=PythonToolchainConfig,
    toolchain_factory=PythonToolchain.from_config,
)
