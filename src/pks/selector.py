# -----------------------------------------------------------------------------
# Equation Selector
# Purpose: Map the known controlling quantities {initial speed, final speed,
# acceleration, time, range, max height} onto one of twenty ordered
# resolution branches, keyed by the three quantities that are unknown.
# Also derives the effective launch angle and the speeds implied by velocity
# vectors, both shared by every branch.
# -----------------------------------------------------------------------------

from __future__ import annotations
import math
from itertools import combinations
from typing import Dict, FrozenSet, Iterable, Tuple

from .errors import NoBranchMatched
from .known import controlling
from .registry import ACC, CONTROLLING, FINAL_SPEED, INITIAL_SPEED, MAX_HEIGHT, RANGE, TIME, QuantitySet
from .types import Branch

UNKNOWNS_PER_BRANCH = 3


def _b(number: int, name: str, *unknowns: str) -> Branch:
    return Branch(number=number, unknowns=frozenset(unknowns), name=name)


# Priority order. Each entry lists the three controlling quantities it solves for.
BRANCHES: Tuple[Branch, ...] = (
    _b(1, "time_max_height_range", TIME, MAX_HEIGHT, RANGE),
    _b(2, "time_acc_range", TIME, ACC, RANGE),
    _b(3, "acc_initial_speed_range", ACC, INITIAL_SPEED, RANGE),
    _b(4, "final_speed_acc_range", FINAL_SPEED, ACC, RANGE),
    _b(5, "final_speed_time_range", FINAL_SPEED, TIME, RANGE),
    _b(6, "initial_speed_time_range", INITIAL_SPEED, TIME, RANGE),
    _b(7, "max_height_acc_range", MAX_HEIGHT, ACC, RANGE),
    _b(8, "initial_speed_range_max_height", INITIAL_SPEED, RANGE, MAX_HEIGHT),
    _b(9, "range_final_speed_max_height", RANGE, FINAL_SPEED, MAX_HEIGHT),
    _b(10, "final_speed_initial_speed_range", FINAL_SPEED, INITIAL_SPEED, RANGE),
    _b(11, "max_height_time_initial_speed", MAX_HEIGHT, TIME, INITIAL_SPEED),
    _b(12, "max_height_time_final_speed", MAX_HEIGHT, TIME, FINAL_SPEED),
    _b(13, "max_height_time_acc", MAX_HEIGHT, TIME, ACC),
    _b(14, "max_height_initial_speed_final_speed", MAX_HEIGHT, INITIAL_SPEED, FINAL_SPEED),
    _b(15, "max_height_initial_speed_acc", MAX_HEIGHT, INITIAL_SPEED, ACC),
    _b(16, "max_height_final_speed_acc", MAX_HEIGHT, FINAL_SPEED, ACC),
    _b(17, "time_initial_speed_final_speed", TIME, INITIAL_SPEED, FINAL_SPEED),
    _b(18, "time_initial_speed_acc", TIME, INITIAL_SPEED, ACC),
    _b(19, "time_final_speed_acc", TIME, FINAL_SPEED, ACC),
    _b(20, "initial_speed_final_speed_acc", INITIAL_SPEED, FINAL_SPEED, ACC),
)

BRANCH_BY_UNKNOWNS: Dict[FrozenSet[str], Branch] = {b.unknowns: b for b in BRANCHES}


def _check_exhaustive() -> None:
    expected = {frozenset(c) for c in combinations(CONTROLLING, UNKNOWNS_PER_BRANCH)}
    if len(BRANCHES) != len(expected) or set(BRANCH_BY_UNKNOWNS) != expected:
        missing = sorted(tuple(sorted(k)) for k in expected - set(BRANCH_BY_UNKNOWNS))
        raise RuntimeError(f"Branch table is not exhaustive; missing {missing}")


_check_exhaustive()


# Velocity vector (i, j) behind each scalar speed.
VECTORS = {
    INITIAL_SPEED: ("v_initial_i_component", "v_initial_j_component"),
    FINAL_SPEED: ("v_final_i_component", "v_final_j_component"),
}

# Label recorded in the trace for each place the launch angle can come from.
ANGLE_SOURCES = {INITIAL_SPEED: "initial_vector", FINAL_SPEED: "final_vector"}


def _provided_vector(qset: QuantitySet, speed: str) -> Tuple[float, float] | None:
    i_id, j_id = VECTORS[speed]
    i, j = qset.get(i_id), qset.get(j_id)
    if i.provided and j.provided and i.value != 0:
        return i.value, j.value
    return None


def angle_source(qset: QuantitySet) -> str | None:
    """'initial_vector', 'final_vector' or 'angle'; None when no angle is available."""
    for speed in (INITIAL_SPEED, FINAL_SPEED):
        if _provided_vector(qset, speed) is not None:
            return ANGLE_SOURCES[speed]
    if qset.get("angle").provided:
        return "angle"
    return None


def effective_angle(qset: QuantitySet) -> float:
    """
    Launch angle in radians: from the initial velocity vector if given, else
    from the final vector, else from the angle quantity (degrees). A cleared
    angle is not replaced by its default.
    """
    source = angle_source(qset)
    if source is None:
        raise NoBranchMatched("No launch angle or velocity vector available")
    if source == "angle":
        return math.radians(qset.value("angle"))
    speed = INITIAL_SPEED if source == ANGLE_SOURCES[INITIAL_SPEED] else FINAL_SPEED
    i, j = _provided_vector(qset, speed)
    return math.atan(abs(j / i))


def normalize_speeds(qset: QuantitySet) -> Dict[str, float]:
    """Scalar speeds implied by provided velocity vectors (their magnitudes)."""
    out: Dict[str, float] = {}
    for speed in VECTORS:
        vec = _provided_vector(qset, speed)
        if vec is not None:
            out[speed] = math.hypot(*vec)
    return out


def mirror_speed(values: Dict[str, float]) -> str | None:
    """
    Level ground: the final speed equals the initial speed. When fewer than
    three controlling values are known and only one speed is among them, copy
    it to the other one. Returns the id that was filled, if any.
    """
    if len(values) >= UNKNOWNS_PER_BRANCH:
        return None
    for have, missing in ((INITIAL_SPEED, FINAL_SPEED), (FINAL_SPEED, INITIAL_SPEED)):
        if have in values and missing not in values:
            values[missing] = values[have]
            return missing
    return None


def effective_inputs(qset: QuantitySet, known: Iterable[str]) -> Dict[str, float]:
    """Known controlling values, with speeds filled in from velocity vectors
    and, when that still leaves too few, from the level-ground equality."""
    values = {k: qset.value(k) for k in controlling(known)}
    for speed, v in normalize_speeds(qset).items():
        values.setdefault(speed, v)
    mirror_speed(values)
    return values


class Selector:
    """
    Picks the first branch, in priority order, whose unknown triple covers
    every unknown controlling quantity. With exactly three unknowns that is
    the one branch keyed by them. With fewer (over-specified inputs) some
    provided values are recomputed and must agree with what was given.
    """

    def select(self, known_controlling: Iterable[str]) -> Branch:
        known = frozenset(known_controlling) & frozenset(CONTROLLING)
        unknowns = frozenset(CONTROLLING) - known
        branch = BRANCH_BY_UNKNOWNS.get(unknowns)
        if branch is None and len(unknowns) < UNKNOWNS_PER_BRANCH:
            branch = next(b for b in BRANCHES if unknowns <= b.unknowns)
        if branch is None:
            raise NoBranchMatched(
                f"No equation set matches the given inputs: at most "
                f"{UNKNOWNS_PER_BRANCH} unknown allowed among {', '.join(CONTROLLING)}, "
                f"found {len(unknowns)} ({', '.join(sorted(unknowns))})",
                unknowns=sorted(unknowns),
            )
        return branch
