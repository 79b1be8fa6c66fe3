# -----------------------------------------------------------------------------
# Error taxonomy for the resolution engine
# Every failure of a resolve() call is one of these. They are raised inside the
# pipeline and converted to a SolveOutcome by the engine.
# -----------------------------------------------------------------------------

from __future__ import annotations


class RegistryError(Exception):
    """Undeclared quantity id or malformed registry table (caller bug)."""


class SolveError(Exception):
    kind = "solve_error"
    status = "validation_error"

    def __init__(self, message: str, **detail):
        super().__init__(message)
        self.message = message
        self.detail = detail


class OutOfRange(SolveError):
    kind = "out_of_range"


class MissingDependency(SolveError):
    kind = "missing_dependency"


class InconsistentDualEntry(SolveError):
    kind = "inconsistent_dual_entry"


class InsufficientInputs(SolveError):
    kind = "insufficient_inputs"


class NoBranchMatched(SolveError):
    kind = "no_branch_matched"
    status = "internal_error"


class ImpossibleResult(SolveError):
    kind = "impossible_result"
    status = "impossible_result"


class InputModeError(Exception):
    """Quantity is not an input of the table currently being filled."""
