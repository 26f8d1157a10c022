"""Expand declared entries into an ordered list of concrete trials."""

import glob
import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from kaos.errors import PlanExpansionError
from kaos.models.plan import ExpandedTrial, TestSpec

log = logging.getLogger(__name__)

FILTER_PREFIX = "kaos="
WILDCARDS = ("*", "?", "[")


def trial_id(index: int) -> str:
    """Name of the trial at ``index`` in the flattened plan."""
    return f"kaos{index:03d}"


def is_pattern(path: str) -> bool:
    """Check if a declared path needs glob resolution."""
    return any(char in path for char in WILDCARDS)


def resolve_pattern(pattern: str) -> Sequence[Path]:
    """Resolve a glob pattern into lexicographically sorted matches.

    Raises:
        PlanExpansionError: If the pattern is malformed or cannot be resolved

    """
    for component in Path(pattern).parts:
        if "**" in component and component != "**":
            raise PlanExpansionError(
                f"Invalid pattern '{pattern}': recursive wildcards must form "
                "a single path component"
            )
    if pattern.count("[") != pattern.count("]"):
        raise PlanExpansionError(f"Invalid pattern '{pattern}': unbalanced brackets")

    try:
        matches = glob.glob(pattern, recursive=True)
    except (OSError, ValueError) as e:
        raise PlanExpansionError(f"Cannot resolve pattern '{pattern}': {e}") from e

    return [Path(match) for match in sorted(matches)]


def expand(specs: Iterable[TestSpec]) -> Sequence[ExpandedTrial]:
    """Expand declared entries into uniquely named trials.

    Wildcard paths produce one trial per match, sorted lexicographically, each
    inheriting the entry's mode. A pattern that fails to resolve produces a
    single placeholder trial carrying the error so it shows up in the report.
    """
    trials: list[ExpandedTrial] = []

    for spec in specs:
        if not is_pattern(spec.path):
            trials.append(
                ExpandedTrial(id=trial_id(len(trials)), path=Path(spec.path), mode=spec.mode)
            )
            continue

        try:
            paths = resolve_pattern(spec.path)
        except PlanExpansionError as e:
            log.warning("%s", e)
            trials.append(
                ExpandedTrial(
                    id=trial_id(len(trials)),
                    path=Path(spec.path),
                    mode=spec.mode,
                    expansion_error=str(e),
                )
            )
            continue

        if not paths:
            log.warning("Pattern '%s' matched no files", spec.path)

        for path in paths:
            trials.append(ExpandedTrial(id=trial_id(len(trials)), path=path, mode=spec.mode))

    return trials


def parse_filters(argv: Iterable[str], prefix: str = FILTER_PREFIX) -> Sequence[str]:
    """Extract substring filters from ``prefix``-marked invocation arguments."""
    return [arg[len(prefix) :] for arg in argv if arg.startswith(prefix) and arg != prefix]


def filter_trials(
    trials: Sequence[ExpandedTrial],
    argv: Iterable[str],
    prefix: str = FILTER_PREFIX,
) -> Sequence[ExpandedTrial]:
    """Keep trials whose path contains any filter found in ``argv``.

    For example ``kaos run kaos=flaky`` only runs trials with ``flaky`` in
    their path. Without filter arguments the trials are returned unchanged.
    """
    filters = parse_filters(argv, prefix)
    if not filters:
        return trials

    log.info("Filtering trials by: %s", ", ".join(filters))
    return [
        trial for trial in trials if any(f in str(trial.path) for f in filters)
    ]
