# -----------------------------------------------------------------------------
# Engine: session object owning one QuantitySet
# Responsibilities:
#   • set_quantity(): collaborator-driven value mutation (no validation)
#   • resolve(): validate → select → solve → publish, returned as SolveOutcome
#   • reset(): restore defaults, clear solved/error state
#   • set_mode(): switch input table (scalar / vector); switching clears values
# Single caller assumed; concurrent callers must serialize resolve() externally.
# -----------------------------------------------------------------------------

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

from .errors import InputModeError, SolveError
from .registry import QuantityRegistry, QuantitySet
from .solver import KinematicsSolver, Solution
from .tracer import Tracer
from .types import Category, QuantitySpec, Source
from .validator import Validator

ANGLE = "angle"


class State(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    SELECTING = "selecting"
    SOLVING = "solving"
    SOLVED = "solved"
    ERROR = "error"
    IMPOSSIBLE = "impossible_result"


class InputMode(str, Enum):
    """
    Input table being filled. MIXED accepts every quantity. SCALAR is the speed
    and angle table, VECTOR the velocity component table, which has no angle
    field: the angle there always comes from a vector. Force placeholders are
    accepted in every mode.
    """
    MIXED = "mixed"
    SCALAR = "scalar"
    VECTOR = "vector"

    def accepts(self, spec: QuantitySpec) -> bool:
        if self is InputMode.MIXED or spec.category is Category.FORCES:
            return True
        if self is InputMode.SCALAR:
            return spec.category.scalar
        return spec.category.vector and spec.id != ANGLE


@dataclass
class SolveOutcome:
    # Structured response for one resolve() call; never cached.
    ok: bool
    status: str                 # "solved" | "validation_error" | "impossible_result" | "internal_error"
    message: str
    solved: bool
    kind: str | None = None     # error taxonomy name, None on success
    branch: Dict[str, Any] | None = None
    values: Dict[str, float | None] = field(default_factory=dict)
    detail: Dict[str, Any] = field(default_factory=dict)
    trace: List[Dict[str, Any]] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok, "status": self.status, "kind": self.kind,
            "message": self.message, "solved": self.solved, "branch": self.branch,
            "values": self.values, "detail": self.detail, "trace": self.trace,
        }


class Engine:
    def __init__(self, registry: QuantityRegistry | None = None):
        self.registry = registry or QuantityRegistry.default()
        self.quantities: QuantitySet = self.registry.new_set()
        self.validator = Validator()
        self.solver = KinematicsSolver()
        self.solved = False
        self.error_message = ""
        self.state = State.IDLE
        self.mode = InputMode.MIXED

    def set_quantity(self, qid: str, value: float | None) -> None:
        spec = self.registry.spec(qid)
        if not self.mode.accepts(spec):
            raise InputModeError(f"Quantity {qid} is not an input of the {self.mode.value} table")
        self.quantities.set(qid, value)

    def value(self, qid: str) -> float | None:
        return self.quantities.value(qid)

    def reset(self) -> None:
        self.quantities.reset()
        if self.mode is InputMode.VECTOR:
            self.quantities.clear(ANGLE)
        self.solved = False
        self.error_message = ""
        self.state = State.IDLE

    def set_mode(self, mode: InputMode | str) -> None:
        """Switch input table. Values are cleared only when the table changes."""
        mode = InputMode(mode)
        if mode is self.mode:
            return
        self.mode = mode
        self.reset()

    def resolve(self) -> SolveOutcome:
        trace = Tracer()
        try:
            self.state = State.VALIDATING
            report = self.validator.validate(self.quantities, trace)
            self.state = State.SELECTING
            prepared = self.solver.prepare(self.quantities, report.known, trace)
            branch = self.solver.select(prepared, trace)
            self.state = State.SOLVING
            solution = self.solver.compute(self.quantities, prepared, branch, trace)
        except SolveError as e:
            return self._fail(e, trace)
        return self._publish(solution, trace)

    # ---------------- publisher ----------------

    def _publish(self, solution: Solution, trace: Tracer) -> SolveOutcome:
        known = {q.id for q in self.quantities if q.provided}
        written = []
        for qid, v in solution.values.items():
            if qid in known:
                continue
            self.quantities.set(qid, v, source=Source.SOLVED)
            written.append(qid)
        self.solved = True
        self.error_message = ""
        self.state = State.SOLVED
        trace.add("publish", {"written": sorted(written)})

        return SolveOutcome(
            ok=True, status="solved", message="", solved=True,
            branch=dict(trace.detail("branch")),
            values=self.quantities.snapshot(),
            trace=trace.steps(),
        )

    def _fail(self, err: SolveError, trace: Tracer) -> SolveOutcome:
        # Values stay as they were: the solver never writes on failure.
        self.solved = False
        self.error_message = err.message
        self.state = State.IMPOSSIBLE if err.status == "impossible_result" else State.ERROR
        trace.add("error", {"kind": err.kind, "message": err.message})
        return SolveOutcome(
            ok=False, status=err.status, message=err.message, solved=False, kind=err.kind,
            values=self.quantities.snapshot(), detail=dict(err.detail), trace=trace.steps(),
        )
