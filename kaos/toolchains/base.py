"""Abstract base class for build-and-run toolchains."""

import asyncio
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path

from kaos.errors import HarnessError

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class Artifact:
    """A runnable product of a build: the argv to spawn and where."""

    argv: Sequence[str]
    cwd: Path | None = None
    env: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, kw_only=True)
class BuildOutput:
    """Result of compiling one target."""

    success: bool
    artifact: Artifact | None = None
    stdout: bytes = b""
    stderr: bytes = b""


@dataclass(frozen=True, kw_only=True)
class RunOutput:
    """Result of running one artifact to completion."""

    returncode: int
    stdout: bytes = b""
    stderr: bytes = b""
    timed_out: bool = False

    @property
    def success(self) -> bool:
        return self.returncode == 0 and not self.timed_out


@dataclass(frozen=True, kw_only=True)
class Toolchain(ABC):
    """Abstract base for toolchains turning target sources into processes.

    A toolchain owns one ephemeral workspace for the lifetime of a harness
    invocation. Trials are built and run one at a time, so implementations
    may reuse the workspace without locking.
    """

    workspace: Path
    run_timeout: float | None = None

    @abstractmethod
    async def compile(self, source: Path, name: str) -> BuildOutput:
        """Build ``source`` into a runnable artifact.

        Args:
            source: Path of the target source file
            name: Unique trial id, usable to name build products

        Returns:
            Build output; ``artifact`` is set when ``success`` is true

        """

    async def run(self, artifact: Artifact) -> RunOutput:
        """Spawn the artifact and wait for it to exit."""
        return await run_process(
            artifact.argv,
            cwd=artifact.cwd,
            env=artifact.env,
            timeout=self.run_timeout,
        )


async def run_process(
    argv: Sequence[str],
    *,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
    timeout: float | None = None,
) -> RunOutput:
    """Run a command, capturing output.

    Without a timeout the call blocks until the process exits. With one, an
    overdue process is killed and reported as ``timed_out``.
    """
    log.debug("Spawning %s (cwd=%s)", " ".join(argv), cwd)
    process = await asyncio.create_subprocess_exec(
        *argv,
        cwd=cwd,
        env={**os.environ, **env} if env else None,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout)
    except TimeoutError:
        process.kill()
        stdout, stderr = await process.communicate()
        log.warning("Process %s killed after %.2fs", argv[0], timeout)
        return RunOutput(
            returncode=await process.wait(),
            stdout=stdout,
            stderr=stderr,
            timed_out=True,
        )

    return RunOutput(returncode=await process.wait(), stdout=stdout, stderr=stderr)


@contextmanager
def ephemeral_workspace() -> Iterator[Path]:
    """Create the per-invocation workspace and remove it afterwards."""
    try:
        tmp = tempfile.TemporaryDirectory(prefix="kaos-")
    except OSError as e:
        raise HarnessError(f"Cannot create workspace: {e}") from e

    with tmp as workspace:
        log.debug("Using workspace %s", workspace)
        yield Path(workspace)
