"""Aggregate entry results into a report and the final pass/fail signal."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from kaos.errors import HarnessFailure
from kaos.executor import format_duration
from kaos.models.plan import AvailableMode, ChaoticMode
from kaos.models.result import Classification, EntryResult, Sample

log = logging.getLogger(__name__)

STATUS_SYMBOLS = {
    True: "✅",
    False: "❌",
}


@dataclass(frozen=True, kw_only=True)
class Report:
    """Per-entry results of one harness invocation, in expansion order."""

    entries: Sequence[EntryResult]
    seed: int | None = None

    @property
    def total_count(self) -> int:
        return len(self.entries)

    @property
    def failure_count(self) -> int:
        return sum(1 for entry in self.entries if not entry.passed)

    @property
    def summary(self) -> str:
        return f"{self.failure_count} of {self.total_count} trials failed"

    @property
    def lines(self) -> Sequence[str]:
        lines: list[str] = []
        for entry in self.entries:
            lines.extend(render_entry(entry))
        return lines

    def render(self) -> str:
        """Render the full human readable report."""
        header = [] if self.seed is None else [f"kaos seed: {self.seed}"]
        if not self.entries:
            return "\n".join([*header, "No kaos tests enabled", self.summary])
        return "\n".join([*header, *self.lines, self.summary])


def render_entry(entry: EntryResult) -> Sequence[str]:
    """Render one entry: a status line, then indented details."""
    trial = entry.trial
    symbol = STATUS_SYMBOLS[entry.passed]
    prefix = f"{symbol} {trial.id} {trial.path}"

    if trial.expansion_error is not None:
        return [
            f"❗ {trial.id} {trial.path}: {Classification.EXPANSION_FAILED}",
            f"    {trial.expansion_error}",
        ]

    if entry.search is not None and isinstance(trial.mode, ChaoticMode):
        search = entry.search
        if search.passed:
            head = (
                f"{prefix}: passed ({search.samples_run} samples below "
                f"{trial.mode.max_surge}ms)"
            )
        else:
            head = (
                f"{prefix}: failed, minimal failing surge "
                f"{search.minimal_failing_surge}ms ({search.samples_run} samples, "
                f"{search.shrink_steps} shrink steps)"
            )
        lines = [head, *(render_sample(i, s) for i, s in enumerate(search.samples))]
        if search.counterexample is not None:
            lines.extend(indent(search.counterexample.diagnostic_text))
        return lines

    outcome = entry.outcome
    if outcome is None:
        return [f"{prefix}: {Classification.ERROR}"]

    expected = ""
    if isinstance(trial.mode, AvailableMode):
        expected = f", expected {format_duration(trial.mode.duration)}"
    head = (
        f"{prefix}: {outcome.classification} "
        f"(elapsed {format_duration(outcome.elapsed)}{expected})"
    )
    return [head, *indent(outcome.diagnostic_text)]


def render_sample(index: int, sample: Sample) -> str:
    kind = "shrink" if sample.shrinking else "sample"
    return (
        f"    {kind} {index + 1}: surge {sample.surge}ms -> {sample.classification} "
        f"(elapsed {format_duration(sample.elapsed)})"
    )


def indent(text: str) -> Sequence[str]:
    return [f"    {line}" for line in text.splitlines() if line]


def format_output(report: Report) -> dict[str, Any]:
    """Format a report for JSON output."""
    results: list[dict[str, Any]] = []
    for entry in report.entries:
        result: dict[str, Any] = {
            "id": entry.trial.id,
            "path": str(entry.trial.path),
            "mode": entry.trial.mode.kind,
            "passed": entry.passed,
        }
        if entry.trial.expansion_error is not None:
            result["error"] = entry.trial.expansion_error
        if entry.outcome is not None:
            result["classification"] = str(entry.outcome.classification)
            result["elapsed"] = entry.outcome.elapsed
            result["required"] = entry.outcome.required
            result["message"] = entry.outcome.diagnostic_text or None
        if entry.search is not None:
            result["minimal_failing_surge"] = entry.search.minimal_failing_surge
            result["samples_run"] = entry.search.samples_run
            result["shrink_steps"] = entry.search.shrink_steps
        results.append(result)

    return {
        "seed": report.seed,
        "total": report.total_count,
        "failed": report.failure_count,
        "results": results,
    }


def conclude(report: Report, *, self_test: bool = False) -> None:
    """Raise :class:`HarnessFailure` if any entry failed.

    Under the self-test guard the failure is only logged, so the harness can
    run its own failing fixtures without failing itself.
    """
    if report.failure_count == 0:
        return

    if self_test:
        log.warning("%s (ignored under self-test)", report.summary)
        return

    raise HarnessFailure(report.failure_count, report.total_count)
