"""Build, run and time a single trial."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from kaos import normalize
from kaos.models.plan import ExpandedTrial
from kaos.models.result import Classification, TrialOutcome, TrialState
from kaos.toolchains.base import BuildOutput, RunOutput, Toolchain

log = logging.getLogger(__name__)


def format_duration(seconds: float) -> str:
    """Render a duration the way report lines show it."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    return f"{seconds:.3f}s"


@dataclass(frozen=True, kw_only=True)
class TrialExecutor:
    """Executes one build-then-run attempt and classifies it.

    Only the run is timed: build time never counts towards availability.
    """

    toolchain: Toolchain
    source_dir: Path = field(default_factory=Path.cwd)
    clock: Callable[[], float] = time.monotonic

    async def execute(self, trial: ExpandedTrial, required: float) -> TrialOutcome:
        """Execute a trial and check it stayed up at least ``required`` seconds.

        Args:
            trial: Trial to build and run
            required: Minimum availability in seconds

        Returns:
            Outcome of the attempt; never raises for target failures

        """
        self._transition(trial, TrialState.PENDING)
        if not trial.path.exists():
            self._transition(trial, TrialState.BUILD_FAILED)
            return TrialOutcome(
                success=False,
                classification=Classification.BUILD_FAILED,
                required=required,
                diagnostic_text=f"Cannot open {trial.path}: no such file",
            )

        self._transition(trial, TrialState.BUILDING)
        build = await self.toolchain.compile(trial.path, trial.id)
        if not build.success or build.artifact is None:
            self._transition(trial, TrialState.BUILD_FAILED)
            return TrialOutcome(
                success=False,
                classification=Classification.BUILD_FAILED,
                required=required,
                diagnostic_text=self._diagnostics(build.stderr or build.stdout),
            )
        self._transition(trial, TrialState.BUILT)

        self._transition(trial, TrialState.RUNNING)
        started = self.clock()
        output = await self.toolchain.run(build.artifact)
        elapsed = self.clock() - started
        self._log_output(trial, build, output)

        if not output.success:
            self._transition(trial, TrialState.RUN_FAILED)
            if output.timed_out:
                reason = f"killed after {format_duration(elapsed)}"
            elif output.returncode < 0:
                reason = f"terminated by signal {-output.returncode}"
            else:
                reason = f"exited with status {output.returncode}"
            text = self._diagnostics(output.stderr)
            return TrialOutcome(
                success=False,
                classification=Classification.RUN_FAILED,
                elapsed=elapsed,
                required=required,
                diagnostic_text=f"{reason}\n{text}" if text else reason,
            )
        self._transition(trial, TrialState.RUN_SUCCEEDED)

        self._transition(trial, TrialState.AVAILABILITY_CHECKED)
        if elapsed < required:
            self._transition(trial, TrialState.FAIL)
            return TrialOutcome(
                success=False,
                classification=Classification.AVAILABILITY_TOO_LOW,
                elapsed=elapsed,
                required=required,
                diagnostic_text=(
                    "availability is low. Expected at least: "
                    f"{format_duration(required)}, Found: {format_duration(elapsed)}"
                ),
            )

        self._transition(trial, TrialState.PASS)
        return TrialOutcome(
            success=True,
            classification=Classification.PASSED,
            elapsed=elapsed,
            required=required,
        )

    def _diagnostics(self, raw: bytes) -> str:
        return normalize.diagnostics(
            raw,
            normalize.Context(
                source_dir=self.source_dir, workspace=self.toolchain.workspace
            ),
        )

    def _transition(self, trial: ExpandedTrial, state: TrialState) -> None:
        log.debug("%s [%s]: %s", trial.id, trial.path, state)

    def _log_output(
        self, trial: ExpandedTrial, build: BuildOutput, output: RunOutput
    ) -> None:
        for label, stream in (
            ("build stdout", build.stdout),
            ("stdout", output.stdout),
            ("stderr", output.stderr),
        ):
            if stream:
                log.debug("%s %s:\n%s", trial.id, label, self._diagnostics(stream))
