"""Toolchain driven by user-supplied build and run commands."""

import logging
from collections.abc import AsyncGenerator, Mapping, Sequence
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
from kaos.toolchains.command.config import CommandToolchainConfig

log = logging.getLogger(__name__)


def render(template: Sequence[str], values: Mapping[str, str]) -> list[str]:
    """Substitute placeholders in every argument of an argv template.

    Templates are checked when the config is validated, so every
    placeholder is known here.
    """
    return [arg.format_map(values) for arg in template]


@dataclass(frozen=True, kw_only=True)
class CommandToolchain(Toolchain):
    """Runs configured commands, e.g. ``rustc {source} -o {artifact}``."""

    config: CommandToolchainConfig

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: CommandToolchainConfig, run_timeout: float | None = None
    ) -> AsyncGenerator["CommandToolchain", None]:
        """Create toolchain with managed workspace lifecycle."""
        with ephemeral_workspace() as workspace:
            yield cls(config=config, workspace=workspace, run_timeout=run_timeout)

    async def compile(self, source: Path, name: str) -> BuildOutput:
        """Run the build command, if any, and render the run command."""
        if self.config.build is None:
            artifact_path = source
        else:
            artifact_path = self.workspace / f"{name}{self.config.artifact_suffix}"

        values = {
            "source": str(source),
            "artifact": str(artifact_path),
            "name": name,
            "workspace": str(self.workspace),
        }

        stdout = stderr = b""
        if self.config.build is not None:
            output = await run_process(render(self.config.build, values))
            stdout, stderr = output.stdout, output.stderr
            if not output.success:
                log.info("Build of %s exited with %d", source, output.returncode)
                return BuildOutput(success=False, stdout=stdout, stderr=stderr)

        artifact = Artifact(argv=render(self.config.run, values), env=self.config.env)
        return BuildOutput(success=True, artifact=artifact, stdout=stdout, stderr=stderr)
