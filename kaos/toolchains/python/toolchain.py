"""Toolchain running Python scripts as chaos targets."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

from kaos.toolchains.base import (
    Artifact,
    BuildOutput,
    Toolchain,
    ephemeral_workspace,
    run_process,
)
from kaos.toolchains.python.config import PythonToolchainConfig

log = logging.getLogger(__name__)

# Byte-compiles into the workspace so the target tree is left untouched.
COMPILE_SCRIPT = """\
import py_compile, sys
try:
    py_compile.compile(sys.argv[1], cfile=sys.argv[2], doraise=True)
except py_compile.PyCompileError as exc:
    sys.exit(exc.msg)
"""


@dataclass(frozen=True, kw_only=True)
class PythonToolchain(Toolchain):
    """Builds by byte-compiling a script, runs it with the interpreter."""

    config: PythonToolchainConfig

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: PythonToolchainConfig, run_timeout: float | None = None
    ) -> AsyncGenerator["PythonToolchain", None]:
        """Create toolchain with managed workspace lifecycle."""
        with ephemeral_workspace() as workspace:
            yield cls(config=config, workspace=workspace, run_timeout=run_timeout)

    async def compile(self, source: Path, name: str) -> BuildOutput:
        """Check the script compiles and return the command that runs it."""
        cfile = self.workspace / f"{name}.pyc"
        output = await run_process(
            [self.config.interpreter, "-c", COMPILE_SCRIPT, str(source), str(cfile)]
        )
        if not output.success:
            log.info("Compilation of %s failed", source)
            return BuildOutput(
                success=False, stdout=output.stdout, stderr=output.stderr
            )

        artifact = Artifact(
            argv=(self.config.interpreter, str(source), *self.config.args),
            env=self.config.env,
        )
        return BuildOutput(
            success=True, artifact=artifact, stdout=output.stdout, stderr=output.stderr
        )
