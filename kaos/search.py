"""Randomized availability search with shrinking for chaotic entries."""

import logging
import random
from dataclasses import dataclass, field

from kaos.executor import TrialExecutor
from kaos.models.plan import ChaoticMode, ExpandedTrial
from kaos.models.result import Sample, SearchResult, SearchState, TrialOutcome

log = logging.getLogger(__name__)

DEFAULT_MAX_SHRINK_ITERS = 64


@dataclass(kw_only=True)
class _SearchRun:
    """Mutable bookkeeping for one entry's search."""

    trial: ExpandedTrial
    state: SearchState = SearchState.SAMPLING
    samples: list[Sample] = field(default_factory=list)
    shrink_steps: int = 0


@dataclass(frozen=True, kw_only=True)
class ChaosSearch:
    """Samples surges for a chaotic entry and shrinks the first failure.

    Surges are whole milliseconds drawn uniformly from ``[0, max_surge)``;
    each one is the availability the target must sustain for that run. The
    random source is shared by every entry of an invocation, so one seed
    reproduces the whole run.

    Shrinking bisects between the largest surge known to pass and the
    smallest known to fail. Once they are one unit apart the next candidate
    is simply ``best - 1``, so the search also finishes as a linear
    decrement. It stops when no smaller surge is left to try or after
    ``max_shrink_iters`` attempts.
    """

    executor: TrialExecutor
    rng: random.Random
    max_shrink_iters: int = DEFAULT_MAX_SHRINK_ITERS

    async def search(self, trial: ExpandedTrial) -> SearchResult:
        """Search ``trial`` for the smallest surge it cannot sustain."""
        if not isinstance(trial.mode, ChaoticMode):
            raise TypeError(f"Trial {trial.id} is not chaotic")
        mode = trial.mode
        run = _SearchRun(trial=trial)

        if mode.max_surge == 0:
            log.info("%s: empty surge domain, nothing to sample", trial.id)
            return self._finish(run, SearchState.ALL_PASSED)

        counterexample: tuple[int, TrialOutcome] | None = None
        for index in range(mode.run_count):
            surge = self.rng.randrange(mode.max_surge)
            log.info(
                "%s: sample %d/%d surge=%dms", trial.id, index + 1, mode.run_count, surge
            )
            outcome = await self._attempt(run, surge)
            if not outcome.success:
                counterexample = (surge, outcome)
                break

        if counterexample is None:
            return self._finish(run, SearchState.ALL_PASSED)

        self._transition(run, SearchState.FOUND_COUNTEREXAMPLE)
        minimal, outcome = await self._shrink(run, *counterexample)
        return self._finish(run, SearchState.MINIMAL_FOUND, minimal, outcome)

    async def _shrink(
        self, run: _SearchRun, surge: int, outcome: TrialOutcome
    ) -> tuple[int, TrialOutcome]:
        self._transition(run, SearchState.SHRINKING)
        best, best_outcome = surge, outcome
        lower = 0

        while lower < best and run.shrink_steps < self.max_shrink_iters:
            candidate = (lower + best) // 2
            run.shrink_steps += 1
            log.info(
                "%s: shrink step %d surge=%dms (bounds %d..%d)",
                run.trial.id,
                run.shrink_steps,
                candidate,
                lower,
                best,
            )
            attempt = await self._attempt(run, candidate, shrinking=True)
            if attempt.success:
                lower = candidate + 1
            else:
                best, best_outcome = candidate, attempt

        if lower < best:
            log.warning(
                "%s: shrink budget of %d steps exhausted at surge=%dms",
                run.trial.id,
                self.max_shrink_iters,
                best,
            )
        return best, best_outcome

    async def _attempt(
        self, run: _SearchRun, surge: int, *, shrinking: bool = False
    ) -> TrialOutcome:
        outcome = await self.executor.execute(run.trial, surge / 1000)
        run.samples.append(
            Sample(
                surge=surge,
                classification=outcome.classification,
                elapsed=outcome.elapsed,
                shrinking=shrinking,
            )
        )
        return outcome

    def _finish(
        self,
        run: _SearchRun,
        state: SearchState,
        minimal: int | None = None,
        counterexample: TrialOutcome | None = None,
    ) -> SearchResult:
        self._transition(run, state)
        sampled = sum(1 for sample in run.samples if not sample.shrinking)
        return SearchResult(
            passed=minimal is None,
            samples_run=sampled,
            shrink_steps=run.shrink_steps,
            minimal_failing_surge=minimal,
            samples=tuple(run.samples),
            counterexample=counterexample,
        )

    def _transition(self, run: _SearchRun, state: SearchState) -> None:
        log.debug("%s: %s -> %s", run.trial.id, run.state, state)
        run.state = state
