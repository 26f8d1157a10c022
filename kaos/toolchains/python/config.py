"""Configuration for the Python toolchain."""

import sys
from collections.abc import Mapping, Sequence

from pydantic import BaseModel, Field


class PythonToolchainConfig(BaseModel):
    """Configuration for the Python toolchain."""

    interpreter: str = sys.executable
    args: Sequence[str] = Field(default_factory=tuple)
    env: Mapping[str, str] = Field(default_factory=dict)
