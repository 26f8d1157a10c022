"""Trial orchestrator for running an expanded plan on a single toolchain."""

import logging
import random
import secrets
import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from kaos.config import KaosSettings
from kaos.errors import HarnessError
from kaos.executor import TrialExecutor
from kaos.expander import expand, filter_trials
from kaos.models.plan import AvailableMode, ChaoticMode, ExpandedTrial, Plan
from kaos.models.result import Classification, EntryResult, TrialOutcome
from kaos.report import Report
from kaos.search import ChaosSearch
from kaos.toolchains.base import Toolchain

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class TrialOrchestrator:
    """Runs trials one at a time, in expansion order.

    Trials never overlap so timings are not skewed by concurrent builds and
    the shared workspace is only used by one trial at a time.
    """

    executor: TrialExecutor
    search: ChaosSearch
    seed: int | None = None

    async def run(self, trials: Sequence[ExpandedTrial]) -> Report:
        """Run all trials and collect one result per trial.

        Args:
            trials: Expanded (and filtered) trials

        Returns:
            Report holding the results in trial order

        """
        if not trials:
            log.info("No kaos tests enabled")
            return Report(entries=[], seed=self.seed)

        log.info("Running %d trial(s)...", len(trials))
        results = [await self._run_entry(trial) for trial in trials]
        log.info("Trial execution completed")

        return Report(entries=results, seed=self.seed)

    async def _run_entry(self, trial: ExpandedTrial) -> EntryResult:
        """Run one trial, turning any per-entry error into a failed result."""
        log.info("Running %s: %s (%s)", trial.id, trial.path, trial.mode.kind)

        if trial.expansion_error is not None:
            return EntryResult(
                trial=trial,
                outcome=TrialOutcome(
                    success=False,
                    classification=Classification.EXPANSION_FAILED,
                    diagnostic_text=trial.expansion_error,
                ),
            )

        try:
            match trial.mode:
                case ChaoticMode():
                    result = EntryResult(
                        trial=trial, search=await self.search.search(trial)
                    )
                case AvailableMode(duration=duration):
                    result = EntryResult(
                        trial=trial,
                        outcome=await self.executor.execute(trial, duration),
                    )
        except HarnessError:
            raise
        except Exception as e:
            log.error("Trial %s raised: %s", trial.id, e, exc_info=e)
            return EntryResult(
                trial=trial,
                outcome=TrialOutcome(
                    success=False,
                    classification=Classification.ERROR,
                    diagnostic_text=str(e) or type(e).__name__,
                ),
            )

        log.info(
            "Trial completed: id=%s status=%s",
            trial.id,
            "passed" if result.passed else "failed",
        )
        return result


def draw_seed() -> int:
    return secrets.randbits(32)


async def run_plan(
    plan: Plan,
    toolchain: Toolchain,
    settings: KaosSettings,
    argv: Iterable[str] = (),
    *,
    source_dir: Path | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> Report:
    """Expand, filter and run a plan against an open toolchain."""
    trials = filter_trials(expand(plan.entries), argv, settings.filter_prefix)

    seed = settings.seed if settings.seed is not None else draw_seed()
    log.info("Using kaos seed %d (set KAOS_SEED=%d to reproduce)", seed, seed)

    executor = TrialExecutor(
        toolchain=toolchain, source_dir=source_dir or Path.cwd(), clock=clock
    )
    orchestrator = TrialOrchestrator(
        executor=executor,
        search=ChaosSearch(
            executor=executor,
            rng=random.Random(seed),
            max_shrink_iters=settings.max_shrink_iters,
        ),
        seed=seed,
    )
    return await orchestrator.run(trials)
