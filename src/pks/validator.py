# -----------------------------------------------------------------------------
# Dependency & Range Validator
# Purpose: Check user-provided quantities before any computation:
#   • per-quantity inclusive bounds (first violation in registry order)
#   • declared dependencies (a provided quantity needs its partners provided)
#   • cross-representation consistency (speed vs speed, component vs
#     component, speed vs vector magnitude)
#   • enough required inputs in the scalar or the vector tables, a launch
#     angle (given or implied by a vector) and three controlling values once
#     vector speeds and the level-ground speed equality are applied
# -----------------------------------------------------------------------------

from __future__ import annotations
import math
from dataclasses import dataclass
from typing import FrozenSet, Tuple

from .errors import InconsistentDualEntry, InsufficientInputs, MissingDependency, OutOfRange
from .known import known_set
from .registry import CONTROLLING, FINAL_SPEED, INITIAL_SPEED, QuantitySet
from .selector import VECTORS, angle_source, effective_inputs
from .tracer import Tracer

MIN_REQUIRED = 3
REL_TOL = 1e-9

# (first, second, message) pairs that describe the same fact twice.
DUAL_ENTRIES: Tuple[Tuple[str, str, str], ...] = (
    (INITIAL_SPEED, FINAL_SPEED, "Initial and Final speed are NOT the same!"),
    ("v_initial_i_component", "v_final_i_component",
     "Initial and Final horizontal (i) components are NOT the same!"),
    ("v_initial_j_component", "v_final_j_component",
     "Initial and Final vertical (j) components are NOT the same!"),
)


@dataclass
class ValidationReport:
    known: FrozenSet[str]
    scalar_count: int
    vector_count: int


def _fmt(x: float) -> str:
    return f"{x:g}"


class Validator:

    def validate(self, qset: QuantitySet, trace: Tracer | None = None) -> ValidationReport:
        trace = trace or Tracer()

        # ---- 1. Bounds, registry order, first violation wins
        for q in qset:
            if not q.provided:
                continue
            s = q.spec
            if q.value < s.min or q.value > s.max:
                raise OutOfRange(
                    f"Parameter: {s.id} with value: {_fmt(q.value)} is not within allowed range "
                    f"[{_fmt(s.min)}, {_fmt(s.max)}]. Please enter valid and consistent values!",
                    quantity=s.id, value=q.value, min=s.min, max=s.max,
                )

        # ---- 2. Known-set
        known = known_set(qset)
        trace.add("known_set", {"known": sorted(known)})

        # ---- 3/4. Dependencies and required tallies
        scalar_count = vector_count = 0
        for q in qset:
            if q.id not in known:
                continue
            for dep in q.spec.dependencies:
                if dep not in known:
                    raise MissingDependency(
                        f"Missing required dependency for parameter: {q.id}: "
                        f"dependency {dep} not provided",
                        quantity=q.id, dependency=dep,
                    )
            if not q.spec.required:
                continue
            if q.spec.category.scalar:
                scalar_count += 1
            if q.spec.category.vector:
                vector_count += 1

        # ---- 5. Cross-representation consistency
        for a, b, message in DUAL_ENTRIES:
            if a in known and b in known and not math.isclose(qset.value(a), qset.value(b), rel_tol=REL_TOL):
                raise InconsistentDualEntry(message, first=a, second=b)
        for speed, (i_id, j_id) in VECTORS.items():
            if speed in known and i_id in known and j_id in known:
                magnitude = math.hypot(qset.value(i_id), qset.value(j_id))
                if not math.isclose(qset.value(speed), magnitude, rel_tol=REL_TOL):
                    raise InconsistentDualEntry(
                        f"Parameter {speed} ({_fmt(qset.value(speed))}) does not match the magnitude "
                        f"of its velocity vector ({_fmt(magnitude)})",
                        first=speed, second=i_id,
                    )

        # ---- 6. Enough information to solve
        if scalar_count < MIN_REQUIRED and vector_count < MIN_REQUIRED:
            raise InsufficientInputs(
                f"Not enough required inputs. Required scalar count = {scalar_count}, "
                f"required vector count = {vector_count}",
                scalar_count=scalar_count, vector_count=vector_count,
            )
        if angle_source(qset) is None:
            raise InsufficientInputs(
                "No launch angle provided and no velocity vector to derive it from",
                scalar_count=scalar_count, vector_count=vector_count,
            )
        effective = sorted(effective_inputs(qset, known))
        if len(effective) < MIN_REQUIRED:
            raise InsufficientInputs(
                f"Not enough controlling inputs. Known: {', '.join(effective) or 'none'}; "
                f"need {MIN_REQUIRED} of {', '.join(CONTROLLING)}",
                scalar_count=scalar_count, vector_count=vector_count, controlling=effective,
            )

        trace.add("validate", {"scalar_count": scalar_count, "vector_count": vector_count,
                               "controlling": effective})
        return ValidationReport(known=known, scalar_count=scalar_count, vector_count=vector_count)
