"""Chaotic testing harness.

Declare entries with :class:`PlanBuilder` (or a ``kaos.yaml`` file), then
hand the plan to :func:`run`::

    import kaos

    def test_chaos() -> None:
        plan = (
            kaos.PlanBuilder()
            .available("kaos-tests/*.py", "2s")
            .chaotic("kaos-tests/flaky.py", run_count=10, max_surge=10_000)
            .build()
        )
        kaos.run(plan)
"""

from kaos.config import KaosSettings
from kaos.errors import HarnessError, HarnessFailure, PlanExpansionError
from kaos.failpoints import Flunked, flunk, scenario
from kaos.models.plan import AvailableMode, ChaoticMode, Plan, PlanBuilder, TestSpec
from kaos.report import Report
from kaos.runner import execute_plan, run

__all__ = [
    "AvailableMode",
    "ChaoticMode",
    "Flunked",
    "HarnessError",
    "HarnessFailure",
    "KaosSettings",
    "Plan",
    "PlanBuilder",
    "PlanExpansionError",
    "Report",
    "TestSpec",
    "execute_plan",
    "flunk",
    "run",
    "scenario",
]
