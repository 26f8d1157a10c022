"""Entry points for running a plan from code or from the CLI."""

import asyncio
import logging
import sys
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from kaos.config import KaosSettings
from kaos.errors import HarnessError
from kaos.models.plan import Plan
from kaos.orchestrator import run_plan
from kaos.report import Report, conclude
from kaos.toolchains.loading import ToolchainNotFoundError, load_toolchain_manifest

log = logging.getLogger(__name__)

DEFAULT_TOOLCHAIN = "python"


async def execute_plan(
    plan: Plan,
    toolchain_key: str = DEFAULT_TOOLCHAIN,
    toolchain_config: Mapping[str, Any] | None = None,
    settings: KaosSettings | None = None,
    argv: Iterable[str] = (),
) -> Report:
    """Open the named toolchain and run the plan on it.

    Raises:
        HarnessError: If the toolchain cannot be loaded, configured or set up

    """
    settings = settings or KaosSettings.from_env()

    log.info("Loading toolchain: %s", toolchain_key)
    try:
        manifest = load_toolchain_manifest(toolchain_key)
        config = manifest.config_cls(**(toolchain_config or {}))
    except (ToolchainNotFoundError, ValidationError) as e:
        raise HarnessError(str(e)) from e

    async with manifest.toolchain_factory(config, settings.run_timeout) as toolchain:
        return await run_plan(plan, toolchain, settings, argv)


def run(
    plan: Plan,
    *,
    toolchain: str = DEFAULT_TOOLCHAIN,
    toolchain_config: Mapping[str, Any] | None = None,
    settings: KaosSettings | None = None,
    argv: Iterable[str] | None = None,
) -> Report:
    """Run a plan, print its report and fail if any trial failed.

    Meant to be called from a regular test function::

        def test_chaos() -> None:
            kaos.run(kaos.PlanBuilder().available("kaos-tests/*.py", "2s").build())

    Filters are read from ``sys.argv`` unless ``argv`` is given.

    Raises:
        HarnessError: If the harness cannot start
        HarnessFailure: If one or more trials failed

    """
    settings = settings or KaosSettings.from_env()
    report = asyncio.run(
        execute_plan(
            plan,
            toolchain,
            toolchain_config,
            settings,
            sys.argv[1:] if argv is None else argv,
        )
    )

    print(f"\n\n{report.render()}\n\n")
    conclude(report, self_test=settings.self_test)
    return report
