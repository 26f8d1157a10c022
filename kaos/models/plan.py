"""Models for declared chaos test entries and the plans built from them."""

import re
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any, Literal, Self

from pydantic import Field, field_validator

from kaos.models.base import Model

DURATION_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h)?\s*$")
DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def parse_duration(value: Any) -> float:
    """Parse a duration into seconds.

    Numbers are taken as seconds. Strings carry an optional unit suffix:
    ``"500ms"``, ``"2s"``, ``"1.5m"``, ``"1h"``. A bare numeric string is
    seconds as well.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        match = DURATION_PATTERN.match(value)
        if match is not None:
            amount, unit = match.groups()
            return float(amount) * DURATION_UNITS[unit or "s"]
    raise ValueError(f"Invalid duration: {value!r}")


class AvailableMode(Model):
    """Every run must stay up at least ``duration`` seconds."""

    kind: Literal["available"] = "available"
    duration: float = Field(..., ge=0, description="Required availability (seconds)")

    @field_validator("duration", mode="before")
    @classmethod
    def _parse_duration(cls, value: Any) -> float:
        return parse_duration(value)


class ChaoticMode(Model):
    """Randomized availability search over ``[0, max_surge)`` milliseconds."""

    kind: Literal["chaotic"] = "chaotic"
    run_count: int = Field(..., ge=1, description="Number of sampled runs")
    max_surge: int = Field(
        ..., ge=0, description="Exclusive upper bound of the surge domain (ms)"
    )


Mode = Annotated[AvailableMode | ChaoticMode, Field(discriminator="kind")]


class TestSpec(Model):
    """A declared entry: a target path (or glob pattern) and its mode."""

    __test__ = False

    path: str = Field(..., min_length=1, description="Target path or glob pattern")
    mode: Mode


class Plan(Model):
    """Immutable, ordered collection of declared entries."""

    version: str = Field(default="1.0", description="Plan schema version")
    entries: Sequence[TestSpec] = Field(default_factory=tuple)


class PlanBuilder:
    """Accumulates entries and hands out an immutable :class:`Plan`.

    Example::

        plan = (
            PlanBuilder()
            .available("kaos-tests/*.py", 2)
            .chaotic("kaos-tests/flaky.py", run_count=10, max_surge=10_000)
            .build()
        )

    """

    def __init__(self) -> None:
        self._entries: list[TestSpec] = []

    def available(self, path: str | Path, duration: float | str) -> Self:
        """Declare an entry that must run at least ``duration``."""
        self._entries.append(
            TestSpec(path=str(path), mode=AvailableMode(duration=duration))
        )
        return self

    def chaotic(self, path: str | Path, run_count: int, max_surge: int) -> Self:
        """Declare an entry searched over ``run_count`` surges below ``max_surge`` ms."""
        self._entries.append(
            TestSpec(
                path=str(path),
                mode=ChaoticMode(run_count=run_count, max_surge=max_surge),
            )
        )
        return self

    def build(self) -> Plan:
        return Plan(entries=tuple(self._entries))


@dataclass(frozen=True, kw_only=True)
class ExpandedTrial:
    """A concrete trial produced by plan expansion."""

    id: str
    path: Path
    mode: AvailableMode | ChaoticMode
    expansion_error: str | None = None
