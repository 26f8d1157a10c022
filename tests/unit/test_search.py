"""Tests for the chaos search engine."""

import random
from collections.abc import Sequence
from pathlib import Path

import pytest

from kaos.executor import TrialExecutor
from kaos.models.plan import AvailableMode, ChaoticMode, ExpandedTrial
from kaos.models.result import Classification
from kaos.search import ChaosSearch
from kaos.testing.fakes import FakeToolchain


class ScriptedRandom(random.Random):
    """Random source returning scripted values from randrange."""

    def __init__(self, values: Sequence[int]) -> None:
        super().__init__(0)
        self.values = list(values)

    def randrange(self, start: int, stop: int | None = None, step: int = 1) -> int:
        return self.values.pop(0)


@pytest.fixture
def target(tmp_path: Path) -> Path:
    """Create an (empty) target source file."""
    path = tmp_path / "flaky.py"
    path.write_text("")
    return path


def chaotic_trial(path: Path, run_count: int = 10, max_surge: int = 10_000) -> ExpandedTrial:
    return ExpandedTrial(
        id="kaos000",
        path=path,
        mode=ChaoticMode(run_count=run_count, max_surge=max_surge),
    )


def make_search(
    toolchain: FakeToolchain,
    rng: random.Random,
    max_shrink_iters: int = 64,
) -> ChaosSearch:
    executor = TrialExecutor(toolchain=toolchain, clock=toolchain.clock)
    return ChaosSearch(executor=executor, rng=rng, max_shrink_iters=max_shrink_iters)


async def test_converges_to_threshold(target: Path) -> None:
    """Finds the smallest surge the target cannot sustain (4000ms)."""
    toolchain = FakeToolchain(run_seconds=3.9995)

    result = await make_search(toolchain, random.Random(42)).search(
        chaotic_trial(target, run_count=10, max_surge=10_000)
    )

    assert result.passed is False
    assert result.minimal_failing_surge == 4000
    assert result.shrink_steps > 0
    assert result.counterexample is not None
    assert result.counterexample.classification == Classification.AVAILABILITY_TOO_LOW


async def test_passes_when_domain_is_below_threshold(target: Path) -> None:
    """A target outlasting the whole domain passes after all samples."""
    toolchain = FakeToolchain(run_seconds=20.0)

    result = await make_search(toolchain, random.Random(7)).search(
        chaotic_trial(target, run_count=10, max_surge=10_000)
    )

    assert result.passed is True
    assert result.minimal_failing_surge is None
    assert result.samples_run == 10
    assert result.shrink_steps == 0
    assert len(toolchain.runs) == 10


async def test_stops_sampling_at_first_counterexample(target: Path) -> None:
    """Sampling stops at the first failure and shrinking takes over."""
    toolchain = FakeToolchain(run_seconds=0.0995)
    rng = ScriptedRandom([50, 80, 300, 10, 20])

    result = await make_search(toolchain, rng).search(
        chaotic_trial(target, run_count=5, max_surge=1000)
    )

    assert result.samples_run == 3
    assert [s.surge for s in result.samples if not s.shrinking] == [50, 80, 300]
    assert result.minimal_failing_surge == 100
    assert rng.values == [10, 20]


async def test_shrink_path_bisects_towards_threshold(target: Path) -> None:
    """Shrink candidates bisect the interval between passing and failing."""
    toolchain = FakeToolchain(run_seconds=0.0995)

    result = await make_search(toolchain, ScriptedRandom([400])).search(
        chaotic_trial(target, run_count=1, max_surge=1000)
    )

    shrink_path = [s.surge for s in result.samples if s.shrinking]
    assert shrink_path[:3] == [200, 100, 50]
    assert result.minimal_failing_surge == 100
    assert result.shrink_steps == len(shrink_path)


async def test_identical_seed_gives_identical_search(tmp_path: Path) -> None:
    """Same seed and target behavior reproduce samples and shrink steps."""
    target = tmp_path / "flaky.py"
    target.write_text("")

    first = await make_search(FakeToolchain(run_seconds=2.5), random.Random(1234)).search(
        chaotic_trial(target, run_count=20, max_surge=5000)
    )
    second = await make_search(FakeToolchain(run_seconds=2.5), random.Random(1234)).search(
        chaotic_trial(target, run_count=20, max_surge=5000)
    )

    assert first.samples == second.samples
    assert first.minimal_failing_surge == second.minimal_failing_surge
    assert first.shrink_steps == second.shrink_steps


async def test_samples_follow_seeded_sequence(target: Path) -> None:
    """Sampled surges are the seeded generator's draws in order."""
    toolchain = FakeToolchain(run_seconds=60.0)
    expected_rng = random.Random(99)
    expected = [expected_rng.randrange(3000) for _ in range(5)]

    result = await make_search(toolchain, random.Random(99)).search(
        chaotic_trial(target, run_count=5, max_surge=3000)
    )

    assert [s.surge for s in result.samples] == expected


async def test_crashing_target_shrinks_to_zero(target: Path) -> None:
    """A target that always crashes fails even at a zero surge."""
    toolchain = FakeToolchain(run_seconds=10.0, exit_codes={target: 1})

    result = await make_search(toolchain, ScriptedRandom([700])).search(
        chaotic_trial(target, run_count=3, max_surge=1000)
    )

    assert result.passed is False
    assert result.minimal_failing_surge == 0
    assert result.counterexample is not None
    assert result.counterexample.classification == Classification.RUN_FAILED


async def test_build_failure_is_a_counterexample(target: Path) -> None:
    """A target that does not build fails the search."""
    toolchain = FakeToolchain(build_errors={target: "syntax error"})

    result = await make_search(toolchain, ScriptedRandom([5])).search(
        chaotic_trial(target, run_count=1, max_surge=10)
    )

    assert result.passed is False
    assert result.minimal_failing_surge == 0
    assert toolchain.runs == []


async def test_shrink_budget_is_respected(target: Path) -> None:
    """Shrinking stops after the configured number of steps."""
    toolchain = FakeToolchain(run_seconds=0.0015)

    result = await make_search(toolchain, ScriptedRandom([1000]), max_shrink_iters=3).search(
        chaotic_trial(target, run_count=1, max_surge=2000)
    )

    assert result.shrink_steps == 3
    assert result.minimal_failing_surge == 125


async def test_empty_domain_passes_without_sampling(target: Path) -> None:
    """A zero max surge leaves nothing to sample."""
    toolchain = FakeToolchain()

    result = await make_search(toolchain, random.Random(1)).search(
        chaotic_trial(target, run_count=5, max_surge=0)
    )

    assert result.passed is True
    assert result.samples_run == 0
    assert toolchain.builds == []


async def test_rejects_available_trials(target: Path) -> None:
    """Only chaotic trials can be searched."""
    trial = ExpandedTrial(id="kaos000", path=target, mode=AvailableMode(duration=1))

    with pytest.raises(TypeError, match="not chaotic"):
        await make_search(FakeToolchain(), random.Random(1)).search(trial)
