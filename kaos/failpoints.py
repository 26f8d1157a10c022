"""Failpoints for Python chaos targets.

A failpoint is a named spot in target code that can be made to fail from
the outside. Targets call :func:`flunk` where a fault may happen::

    from kaos.failpoints import flunk

    def vec_check(items: list[int]) -> None:
        if len(items) == 3:
            flunk("fail-when-three-elems")

and the harness (or a test) turns it on, either with the environment::

    KAOS_FAILPOINTS="fail-when-three-elems=panic;slow-io=25%sleep(200)"

or in process with :func:`configure` / :func:`scenario`.

Actions are ``off``, ``panic`` (raise :class:`Flunked`), ``sleep(ms)`` and
``exit(code)``, optionally prefixed with a probability such as ``50%``.
"""

import logging
import os
import random
import re
import time
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Literal

log = logging.getLogger(__name__)

FAILPOINTS_ENV = "KAOS_FAILPOINTS"
ACTION_PATTERN = re.compile(
    r"^(?:(?P<pct>\d+(?:\.\d+)?)%)?(?P<kind>off|panic|sleep|exit)(?:\((?P<arg>[^)]*)\))?$"
)


class Flunked(Exception):
    """Raised by a failpoint configured to panic."""

    def __init__(self, name: str) -> None:
        super().__init__(f'KAOS: Flunking at "{name}"')
        self.name = name


@dataclass(frozen=True, kw_only=True)
class Action:
    """What a failpoint does when reached."""

    kind: Literal["off", "panic", "sleep", "exit"]
    probability: float = 1.0
    arg: int | None = None


def parse_action(text: str) -> Action:
    """Parse an action such as ``panic``, ``50%sleep(100)`` or ``exit(3)``."""
    match = ACTION_PATTERN.match(text.strip())
    if match is None:
        raise ValueError(f"Invalid failpoint action: {text!r}")

    kind = match["kind"]
    probability = float(match["pct"]) / 100 if match["pct"] is not None else 1.0
    if not 0 <= probability <= 1:
        raise ValueError(f"Invalid failpoint probability: {text!r}")

    arg: int | None = None
    if kind in ("sleep", "exit"):
        if not match["arg"] or not match["arg"].strip().isdigit():
            raise ValueError(f"Failpoint action {kind!r} needs an integer argument")
        arg = int(match["arg"])
    return Action(kind=kind, probability=probability, arg=arg)


_registry: dict[str, Action] = {}
_env_loaded = False


def configure(name: str, action: str) -> None:
    """Configure failpoint ``name`` with ``action``.

    In-process configuration takes precedence over ``KAOS_FAILPOINTS``.
    """
    _ensure_env_loaded()
    _registry[name] = parse_action(action)
    log.debug("Failpoint %s configured: %s", name, action)


def remove(name: str) -> None:
    """Remove the configuration of failpoint ``name``."""
    _ensure_env_loaded()
    _registry.pop(name, None)


def load_from_env(environ: Mapping[str, str] | None = None) -> None:
    """Configure failpoints from ``KAOS_FAILPOINTS``.

    The variable holds ``name=action`` pairs separated by ``;``. Nothing is
    applied unless every pair parses.
    """
    global _env_loaded
    environ = os.environ if environ is None else environ

    actions: dict[str, Action] = {}
    for pair in environ.get(FAILPOINTS_ENV, "").split(";"):
        if not pair.strip():
            continue
        name, sep, action = pair.partition("=")
        if not sep or not name.strip():
            raise ValueError(f"Invalid failpoint entry: {pair!r}")
        actions[name.strip()] = parse_action(action)

    _registry.update(actions)
    _env_loaded = True
    if actions:
        log.debug("Failpoints loaded from %s: %s", FAILPOINTS_ENV, ", ".join(actions))


def _ensure_env_loaded() -> None:
    if not _env_loaded:
        load_from_env()


def flunk(name: str) -> None:
    """Evaluate failpoint ``name``; does nothing unless it is configured."""
    _ensure_env_loaded()

    action = _registry.get(name)
    if action is None or action.kind == "off":
        return
    if action.probability < 1 and random.random() >= action.probability:
        return

    log.debug("Failpoint %s triggered: %s", name, action.kind)
    match action.kind:
        case "panic":
            raise Flunked(name)
        case "sleep":
            time.sleep((action.arg or 0) / 1000)
        case "exit":
            os._exit(action.arg or 0)


@contextmanager
def scenario(name: str, action: str = "panic") -> Iterator[None]:
    """Configure a failpoint for the duration of a block."""
    _ensure_env_loaded()
    previous = _registry.get(name)
    configure(name, action)
    try:
        yield
    finally:
        if previous is None:
            remove(name)
        else:
            _registry[name] = previous
