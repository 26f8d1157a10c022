"""Models for trial and search outcomes."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum

from kaos.models.plan import ExpandedTrial


class Classification(StrEnum):
    """How a single trial attempt ended."""

    PASSED = "passed"
    BUILD_FAILED = "build-failed"
    RUN_FAILED = "run-failed"
    AVAILABILITY_TOO_LOW = "availability-too-low"
    EXPANSION_FAILED = "expansion-failed"
    ERROR = "error"


class TrialState(StrEnum):
    """Lifecycle of one build + run attempt."""

    PENDING = "pending"
    BUILDING = "building"
    BUILD_FAILED = "build-failed"
    BUILT = "built"
    RUNNING = "running"
    RUN_FAILED = "run-failed"
    RUN_SUCCEEDED = "run-succeeded"
    AVAILABILITY_CHECKED = "availability-checked"
    PASS = "pass"
    FAIL = "fail"


class SearchState(StrEnum):
    """Lifecycle of a chaotic entry's search."""

    SAMPLING = "sampling"
    ALL_PASSED = "all-passed"
    FOUND_COUNTEREXAMPLE = "found-counterexample"
    SHRINKING = "shrinking"
    MINIMAL_FOUND = "minimal-found"


@dataclass(frozen=True, kw_only=True)
class TrialOutcome:
    """Result of a single trial execution.

    ``elapsed`` is the measured run time in seconds, zero when nothing ran.
    ``required`` is the availability threshold the run was checked against.
    """

    __test__ = False

    success: bool
    classification: Classification
    elapsed: float = 0.0
    required: float = 0.0
    diagnostic_text: str = ""


@dataclass(frozen=True, kw_only=True)
class Sample:
    """One executor invocation made by the search, in milliseconds."""

    surge: int
    classification: Classification
    elapsed: float
    shrinking: bool = False


@dataclass(frozen=True, kw_only=True)
class SearchResult:
    """Outcome of a chaotic entry's search."""

    passed: bool
    samples_run: int
    shrink_steps: int
    minimal_failing_surge: int | None = None
    samples: Sequence[Sample] = field(default_factory=tuple)
    counterexample: TrialOutcome | None = None


@dataclass(frozen=True, kw_only=True)
class EntryResult:
    """Result container for one expanded trial."""

    trial: ExpandedTrial
    outcome: TrialOutcome | None = None
    search: SearchResult | None = None

    @property
    def passed(self) -> bool:
        if self.search is not None:
            return self.search.passed
        return self.outcome is not None and self.outcome.success
