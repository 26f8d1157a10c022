"""Canonicalize build and run diagnostics for stable comparison."""

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, kw_only=True)
class Context:
    """Locations to scrub from diagnostic text."""

    source_dir: Path
    workspace: Path


def diagnostics(raw: bytes | str, context: Context) -> str:
    """Decode and normalize raw diagnostic output.

    Workspace and source paths become ``$WORKSPACE`` and ``$DIR`` so that
    reports do not depend on where the harness ran. Trailing whitespace is
    stripped from every line and trailing blank lines are dropped.
    """
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
    text = text.replace("\r\n", "\n")

    replacements: Sequence[tuple[str, str]] = sorted(
        (
            (str(context.workspace), "$WORKSPACE"),
            (str(context.source_dir), "$DIR"),
        ),
        key=lambda pair: len(pair[0]),
        reverse=True,
    )
    for needle, placeholder in replacements:
        if needle and needle != ".":
            text = text.replace(needle, placeholder)

    lines = [line.rstrip() for line in text.split("\n")]
    while lines and not lines[-1]:
        lines.pop()
    return "\n".join(lines)
