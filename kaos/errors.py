"""Harness error taxonomy."""


class KaosError(Exception):
    """Base class for harness errors."""


class PlanExpansionError(KaosError):
    """Raised when a declared path pattern cannot be resolved."""


class HarnessError(KaosError):
    """Raised when the harness cannot start, before any entry runs.

    Covers an uncreatable workspace, an invalid plan file or an unknown
    toolchain.
    """


class HarnessFailure(KaosError):
    """Raised after reporting when one or more trials failed."""

    def __init__(self, failure_count: int, total: int) -> None:
        super().__init__(f"{failure_count} of {total} trials failed")
        self.failure_count = failure_count
        self.total = total
