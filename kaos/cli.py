"""CLI entry point for the kaos chaotic testing harness."""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from kaos.config import KaosSettings
from kaos.errors import HarnessError, HarnessFailure
from kaos.plan_loader import DEFAULT_PLAN_FILE, load_plan
from kaos.report import Report, conclude, format_output
from kaos.runner import DEFAULT_TOOLCHAIN, execute_plan

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_HARNESS_ERROR = 2


def log_results_summary(log: logging.Logger, report: Report) -> None:
    """Log a formatted summary of trial results."""
    log.info("=" * 80)
    log.info("Trial Results Summary:")
    log.info("=" * 80)

    for entry in report.entries:
        log.info(
            "%s %s: %s",
            entry.trial.id,
            entry.trial.path,
            "passed" if entry.passed else "failed",
        )
        if entry.search is not None and entry.search.minimal_failing_surge is not None:
            log.info("  Minimal failing surge: %dms", entry.search.minimal_failing_surge)

    log.info(report.summary)


async def run(
    plan_path: Path,
    toolchain_key: str,
    toolchain_config_json: str,
    settings: KaosSettings,
    filters: Sequence[str] = (),
    json_output: bool = False,
) -> int:
    """Run the plan file and return exit code."""
    log = logging.getLogger("kaos")

    try:
        log.info("Loading plan: %s", plan_path)
        plan = load_plan(plan_path)
        toolchain_config = json.loads(toolchain_config_json)
        if not isinstance(toolchain_config, dict):
            raise ValueError("Toolchain config must be a JSON object")
        report = await execute_plan(
            plan, toolchain_key, toolchain_config, settings, filters
        )
    except (FileNotFoundError, ValueError, HarnessError) as e:
        log.error("Cannot run kaos tests: %s", e)
        return EXIT_HARNESS_ERROR

    log_results_summary(log, report)

    if json_output:
        print(json.dumps(format_output(report), indent=2))
    else:
        print(report.render())

    try:
        conclude(report, self_test=settings.self_test)
    except HarnessFailure as e:
        log.error("%s", e)
        return EXIT_FAILURES
    return EXIT_OK


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Run chaos tests: availability and randomized surge search"
    )
    parser.add_argument(
        "filters",
        nargs="*",
        help="Trial filters of the form kaos=<substring of the target path>",
    )
    parser.add_argument(
        "--plan",
        type=Path,
        default=Path(DEFAULT_PLAN_FILE),
        help="Path to the YAML plan file",
    )
    parser.add_argument(
        "--toolchain",
        default=DEFAULT_TOOLCHAIN,
        help="Toolchain key (python, command)",
    )
    parser.add_argument(
        "--toolchain-config",
        default="{}",
        help="JSON configuration for the toolchain",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for chaotic entries (default: $KAOS_SEED or random)",
    )
    parser.add_argument(
        "--max-shrink-iters",
        type=int,
        default=None,
        help="Maximum number of shrink steps per chaotic entry",
    )
    parser.add_argument(
        "--run-timeout",
        type=float,
        default=None,
        help="Kill targets still running after this many seconds",
    )
    parser.add_argument(
        "--self-test",
        action="store_true",
        default=None,
        help="Report failures without failing (used when kaos tests itself)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the report as JSON",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log build and run output",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        settings = KaosSettings.from_env(
            seed=args.seed,
            max_shrink_iters=args.max_shrink_iters,
            run_timeout=args.run_timeout,
            self_test=args.self_test,
        )
    except ValueError as e:
        logging.getLogger("kaos").error("Invalid settings: %s", e)
        sys.exit(EXIT_HARNESS_ERROR)

    exit_code = asyncio.run(
        run(
            plan_path=args.plan,
            toolchain_key=args.toolchain,
            toolchain_config_json=args.toolchain_config,
            settings=settings,
            filters=args.filters,
            json_output=args.json,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
