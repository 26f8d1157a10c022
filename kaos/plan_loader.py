"""Load chaos test plans from YAML files."""

from pathlib import Path

import yaml
from pydantic import ValidationError

from kaos.models.plan import Plan

DEFAULT_PLAN_FILE = "kaos.yaml"


def load_plan(path: Path) -> Plan:
    """Load and validate a plan file.

    Args:
        path: Path to the YAML plan file

    Returns:
        The validated plan

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not valid YAML or does not match the schema

    """
    if not path.is_file():
        raise FileNotFoundError(f"Plan file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid plan in {path}: expected a mapping at top level")

    try:
        return Plan.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid plan in {path}: {e}") from e
