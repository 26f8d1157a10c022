"""Harness settings."""

import os
from collections.abc import Mapping
from typing import Self

from pydantic import BaseModel, Field

from kaos.expander import FILTER_PREFIX
from kaos.search import DEFAULT_MAX_SHRINK_ITERS

SEED_ENV = "KAOS_SEED"
SELF_TEST_ENV = "KAOS_SELF_TEST"
TRUTHY = {"1", "true", "yes", "on"}


class KaosSettings(BaseModel):
    """Settings for one harness invocation."""

    seed: int | None = Field(
        default=None, description="Random seed; drawn and logged when unset"
    )
    max_shrink_iters: int = Field(default=DEFAULT_MAX_SHRINK_ITERS, ge=0)
    filter_prefix: str = Field(default=FILTER_PREFIX, min_length=1)
    self_test: bool = Field(
        default=False, description="Log trial failures instead of raising"
    )
    run_timeout: float | None = Field(
        default=None, gt=0, description="Kill targets running longer (seconds)"
    )

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None, **overrides: object
    ) -> Self:
        """Build settings from ``KAOS_*`` variables, explicit overrides winning."""
        environ = os.environ if environ is None else environ
        values: dict[str, object] = {}
        if (seed := environ.get(SEED_ENV)) is not None and seed.strip():
            values["seed"] = seed.strip()
        if (self_test := environ.get(SELF_TEST_ENV)) is not None:
            values["self_test"] = self_test.strip().lower() in TRUTHY
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.model_validate(values)
