"""Python toolchain module."""

from kaos.toolchains.python.config import PythonToolchainConfig
from kaos.toolchains.python.manifest import python_manifest
from kaos.toolchains.python.toolchain import PythonToolchain

__all__ = ["PythonToolchain", "PythonToolchainConfig", "python_manifest"]
