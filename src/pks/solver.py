# -----------------------------------------------------------------------------
# Kinematics Solver
# Responsibilities:
#   • Fill speeds implied by velocity vectors, derive the effective angle
#   • Pick the branch for the three unknown controlling quantities
#   • Evaluate that branch's closed-form level-ground formulas
#   • Derive absolute max height and apex time
#   • Reject physically impossible results (negative height, non-finite values)
# Sign convention: acceleration is negative (downward). The solver is pure: it
# reads the QuantitySet and returns a Solution; the engine publishes it.
# -----------------------------------------------------------------------------

from __future__ import annotations
import math
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable

from .errors import ImpossibleResult, InconsistentDualEntry
from .registry import ACC, FINAL_SPEED, INITIAL_SPEED, MAX_HEIGHT, RANGE, TIME, QuantitySet
from .selector import Selector, angle_source, effective_angle, effective_inputs, normalize_speeds
from .tracer import Tracer
from .types import Branch

ABS_MAX_HEIGHT = "abs_max_height"
APEX_TIME = "apex_time"
Y_INITIAL = "y_initial"

# Over-specified inputs are recomputed by the branch and must agree this closely.
AGREEMENT_TOL = 1e-6


@dataclass
class Solution:
    branch: Branch
    theta: float
    values: Dict[str, float] = field(default_factory=dict)


# ---------------- shared formulas ----------------

def flight_time(v: float, acc: float, theta: float) -> float:
    return -2.0 * v * math.sin(theta) / acc


def apex_height(v: float, acc: float, time: float, theta: float) -> float:
    # Vertical displacement at half the flight time.
    half = time / 2.0
    return v * math.sin(theta) * half + 0.5 * acc * half ** 2


def horizontal_range(v: float, time: float, theta: float) -> float:
    return v * math.cos(theta) * time


def acc_from_time(v: float, time: float, theta: float) -> float:
    return -v * math.sin(theta) / (time / 2.0)


def acc_from_height(v: float, max_height: float, theta: float) -> float:
    return -(v * math.sin(theta)) ** 2 / (2.0 * max_height)


def time_from_range(v: float, rng: float, theta: float) -> float:
    return rng / (v * math.cos(theta))


def speed_from_range(rng: float, time: float, theta: float) -> float:
    return rng / (time * math.cos(theta))


# ---------------- branches ----------------
# Each takes the known controlling values `k` and θ and returns the three
# unknowns. Level ground: final speed equals initial speed.

def _b01(k, th):
    v, a = k[INITIAL_SPEED], k[ACC]
    t = flight_time(v, a, th)
    return {TIME: t, MAX_HEIGHT: apex_height(v, a, t, th), RANGE: horizontal_range(v, t, th)}


def _b02(k, th):
    v = k[INITIAL_SPEED]
    a = acc_from_height(v, k[MAX_HEIGHT], th)
    t = flight_time(v, a, th)
    return {ACC: a, TIME: t, RANGE: horizontal_range(v, t, th)}


def _b03(k, th):
    v, t = k[FINAL_SPEED], k[TIME]
    return {INITIAL_SPEED: v, ACC: acc_from_time(v, t, th), RANGE: horizontal_range(v, t, th)}


def _b04(k, th):
    v, t = k[INITIAL_SPEED], k[TIME]
    return {FINAL_SPEED: v, ACC: acc_from_time(v, t, th), RANGE: horizontal_range(v, t, th)}


def _b05(k, th):
    v = k[INITIAL_SPEED]
    t = flight_time(v, k[ACC], th)
    return {FINAL_SPEED: v, TIME: t, RANGE: horizontal_range(v, t, th)}


def _b06(k, th):
    v = k[FINAL_SPEED]
    t = flight_time(v, k[ACC], th)
    return {INITIAL_SPEED: v, TIME: t, RANGE: horizontal_range(v, t, th)}


def _b07(k, th):
    v, t = k[INITIAL_SPEED], k[TIME]
    a = acc_from_time(v, t, th)
    return {ACC: a, MAX_HEIGHT: -(v * math.sin(th)) ** 2 / (2.0 * a), RANGE: horizontal_range(v, t, th)}


def _b08(k, th):
    v, a, t = k[FINAL_SPEED], k[ACC], k[TIME]
    return {INITIAL_SPEED: v, RANGE: horizontal_range(v, t, th), MAX_HEIGHT: apex_height(v, a, t, th)}


def _b09(k, th):
    v, a, t = k[INITIAL_SPEED], k[ACC], k[TIME]
    return {FINAL_SPEED: v, RANGE: horizontal_range(v, t, th), MAX_HEIGHT: apex_height(v, a, t, th)}


def _b10(k, th):
    a, t, h = k[ACC], k[TIME], k[MAX_HEIGHT]
    half = t / 2.0
    v = (h - 0.5 * a * half ** 2) / (half * math.sin(th))
    return {INITIAL_SPEED: v, FINAL_SPEED: v, RANGE: horizontal_range(v, t, th)}


def _b11(k, th):
    v, a = k[FINAL_SPEED], k[ACC]
    t = flight_time(v, a, th)
    return {INITIAL_SPEED: v, TIME: t, MAX_HEIGHT: apex_height(v, a, t, th)}


def _b12(k, th):
    v, a = k[INITIAL_SPEED], k[ACC]
    t = flight_time(v, a, th)
    return {FINAL_SPEED: v, TIME: t, MAX_HEIGHT: apex_height(v, a, t, th)}


def _b13(k, th):
    v = k[INITIAL_SPEED]
    t = time_from_range(v, k[RANGE], th)
    a = acc_from_time(v, t, th)
    return {TIME: t, ACC: a, MAX_HEIGHT: apex_height(v, a, t, th)}


def _b14(k, th):
    a, t = k[ACC], k[TIME]
    v = speed_from_range(k[RANGE], t, th)
    return {INITIAL_SPEED: v, FINAL_SPEED: v, MAX_HEIGHT: apex_height(v, a, t, th)}


def _b15(k, th):
    v, t = k[FINAL_SPEED], k[TIME]
    a = acc_from_time(v, t, th)
    return {INITIAL_SPEED: v, ACC: a, MAX_HEIGHT: apex_height(v, a, t, th)}


def _b16(k, th):
    v, t = k[INITIAL_SPEED], k[TIME]
    a = acc_from_time(v, t, th)
    return {FINAL_SPEED: v, ACC: a, MAX_HEIGHT: apex_height(v, a, t, th)}


def _b17(k, th):
    a, h = k[ACC], k[MAX_HEIGHT]
    # Vertical launch speed from the apex height: (v sinθ)^2 = -2 a h
    v = math.sqrt(-2.0 * a * h) / math.sin(th)
    return {TIME: flight_time(v, a, th), INITIAL_SPEED: v, FINAL_SPEED: v}


def _b18(k, th):
    v = k[FINAL_SPEED]
    t = time_from_range(v, k[RANGE], th)
    return {TIME: t, INITIAL_SPEED: v, ACC: acc_from_time(v, t, th)}


def _b19(k, th):
    v = k[INITIAL_SPEED]
    t = time_from_range(v, k[RANGE], th)
    return {TIME: t, FINAL_SPEED: v, ACC: acc_from_time(v, t, th)}


def _b20(k, th):
    t = k[TIME]
    v = speed_from_range(k[RANGE], t, th)
    return {INITIAL_SPEED: v, FINAL_SPEED: v, ACC: acc_from_time(v, t, th)}


FORMULAS: Dict[int, Callable[[Dict[str, float], float], Dict[str, float]]] = {
    1: _b01, 2: _b02, 3: _b03, 4: _b04, 5: _b05, 6: _b06, 7: _b07, 8: _b08, 9: _b09, 10: _b10,
    11: _b11, 12: _b12, 13: _b13, 14: _b14, 15: _b15, 16: _b16, 17: _b17, 18: _b18, 19: _b19, 20: _b20,
}


@dataclass
class Prepared:
    # Known controlling values (vector speeds filled in) and θ in radians.
    inputs: Dict[str, float]
    theta: float


class KinematicsSolver:
    def __init__(self, selector: Selector | None = None):
        self.selector = selector or Selector()

    def prepare(self, qset: QuantitySet, known: Iterable[str], trace: Tracer) -> Prepared:
        derived_speeds = normalize_speeds(qset)
        inputs = effective_inputs(qset, known)
        mirrored = sorted(k for k in inputs if k not in known and k not in derived_speeds)
        if derived_speeds or mirrored:
            trace.add("normalize", {"speeds": derived_speeds, "level_ground": mirrored})
        theta = effective_angle(qset)
        trace.add("angle", {"theta_rad": theta, "theta_deg": math.degrees(theta), "source": angle_source(qset)})
        return Prepared(inputs=inputs, theta=theta)

    def select(self, prepared: Prepared, trace: Tracer) -> Branch:
        branch = self.selector.select(prepared.inputs)
        trace.add("branch", {"number": branch.number, "name": branch.name, "unknowns": list(branch.key())})
        return branch

    def compute(self, qset: QuantitySet, prepared: Prepared, branch: Branch, trace: Tracer) -> Solution:
        inputs, theta = prepared.inputs, prepared.theta
        try:
            computed = FORMULAS[branch.number](inputs, theta)
        except (ZeroDivisionError, ValueError) as e:
            raise ImpossibleResult(
                f"Inputs lead to an undefined result for branch {branch.number} ({e})",
                branch=branch.number,
            ) from e

        for k in sorted(set(computed) & set(inputs)):
            if not math.isclose(computed[k], inputs[k], rel_tol=AGREEMENT_TOL):
                raise InconsistentDualEntry(
                    f"Parameter {k} ({inputs[k]:g}) does not agree with the value implied by the "
                    f"other inputs ({computed[k]:g})",
                    quantity=k, given=inputs[k], implied=computed[k],
                )

        values = dict(inputs)
        values.update(computed)
        y0 = qset.value(Y_INITIAL) if qset.get(Y_INITIAL).provided else 0.0
        values[ABS_MAX_HEIGHT] = y0 + values[MAX_HEIGHT]
        try:
            values[APEX_TIME] = -(values[INITIAL_SPEED] * math.sin(theta)) / (values[ACC] / 2.0)
        except ZeroDivisionError as e:
            raise ImpossibleResult("Acceleration resolved to zero; apex time is undefined") from e

        bad = sorted(k for k, v in values.items() if not math.isfinite(v))
        if bad:
            raise ImpossibleResult(f"Inputs lead to non-finite values for: {', '.join(bad)}", quantities=bad)
        if values[MAX_HEIGHT] < 0:
            raise ImpossibleResult(
                "User has entered inconsistent values! Look at the calculated value of Maximum Height "
                f"({values[MAX_HEIGHT]:g})",
                max_height=values[MAX_HEIGHT],
            )

        trace.add("computed", {k: computed[k] for k in sorted(computed)})
        return Solution(branch=branch, theta=theta, values=values)

    def solve(self, qset: QuantitySet, known: Iterable[str], trace: Tracer | None = None) -> Solution:
        trace = trace or Tracer()
        prepared = self.prepare(qset, known, trace)
        branch = self.select(prepared, trace)
        return self.compute(qset, prepared, branch, trace)
