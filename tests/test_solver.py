import math

import pytest

from conftest import TRUTH
from pks.errors import ImpossibleResult, InconsistentDualEntry, NoBranchMatched
from pks.known import known_set
from pks.selector import BRANCHES
from pks.solver import KinematicsSolver, apex_height, flight_time, horizontal_range
from pks.tracer import Tracer


def _solve(qset, **values):
    for k, v in values.items():
        qset.set(k, v)
    return KinematicsSolver().solve(qset, known_set(qset))


@pytest.mark.parametrize("branch", BRANCHES, ids=lambda b: f"{b.number:02d}-{b.name}")
def test_every_branch_recovers_the_reference_trajectory(qset, branch):
    given = {k: v for k, v in TRUTH.items() if k not in branch.unknowns}
    sol = _solve(qset, **given)
    assert sol.branch is branch
    for k, expected in TRUTH.items():
        assert sol.values[k] == pytest.approx(expected, rel=1e-9), k


def test_always_derived_values(qset):
    sol = _solve(qset, initial_speed=20, final_speed=20, acc=-10, y_initial=5)
    v_sin = 20 * math.sin(math.pi / 4)
    assert sol.values["abs_max_height"] == pytest.approx(5 + TRUTH["max_height"])
    assert sol.values["apex_time"] == pytest.approx(-v_sin / (-10 / 2))


def test_missing_initial_height_counts_as_ground(qset):
    sol = _solve(qset, initial_speed=20, final_speed=20, acc=-10)
    assert sol.values["abs_max_height"] == pytest.approx(sol.values["max_height"])


def test_standard_identities_at_other_angles(qset):
    for deg in (15, 30, 60, 75):
        qset.reset()
        sol = _solve(qset, initial_speed=35, final_speed=35, acc=-9.81, angle=deg)
        th = math.radians(deg)
        assert sol.values["time"] == pytest.approx(2 * 35 * math.sin(th) / 9.81, rel=1e-6)
        assert sol.values["range"] == pytest.approx(35 ** 2 * math.sin(2 * th) / 9.81, rel=1e-6)
        assert sol.values["max_height"] == pytest.approx((35 * math.sin(th)) ** 2 / (2 * 9.81), rel=1e-6)


def test_vector_inputs_fill_speeds_and_angle(qset):
    sol = _solve(qset, v_initial_i_component=10, v_initial_j_component=10,
                 v_final_i_component=10, v_final_j_component=10, acc=-10)
    assert sol.branch.number == 1
    assert sol.theta == pytest.approx(math.pi / 4)
    assert sol.values["initial_speed"] == pytest.approx(math.sqrt(200))
    assert sol.values["time"] == pytest.approx(2)
    assert sol.values["max_height"] == pytest.approx(5)
    assert sol.values["range"] == pytest.approx(20)


def test_negative_height_is_impossible(qset):
    with pytest.raises(ImpossibleResult, match="Maximum Height"):
        _solve(qset, acc=-9.81, time=10, range=10)


def test_zero_angle_division_is_impossible(qset):
    with pytest.raises(ImpossibleResult, match="branch 10"):
        _solve(qset, angle=0, acc=-9.81, time=2, max_height=5)


def test_single_speed_is_mirrored(qset):
    sol = _solve(qset, final_speed=20, acc=-10)
    assert sol.branch.number == 1
    assert sol.values["initial_speed"] == 20
    assert sol.values["range"] == pytest.approx(40)


def test_too_few_controlling_inputs(qset):
    with pytest.raises(NoBranchMatched, match="found 4"):
        _solve(qset, acc=-9.81, time=3)


def test_over_specified_inputs_are_recomputed(qset):
    trace = Tracer()
    for k, v in {**TRUTH, "angle": 45}.items():
        qset.set(k, v)
    sol = KinematicsSolver().solve(qset, known_set(qset), trace)
    assert sol.branch.number == 1
    assert sol.values["range"] == pytest.approx(TRUTH["range"])
    assert trace.detail("computed").keys() == {"time", "max_height", "range"}


def test_over_specified_inputs_that_disagree(qset):
    with pytest.raises(InconsistentDualEntry, match="time"):
        _solve(qset, initial_speed=20, final_speed=20, acc=-10, time=5)


def test_angle_source_is_traced(qset):
    trace = Tracer()
    for k, v in {"initial_speed": 20, "final_speed": 20, "acc": -10}.items():
        qset.set(k, v)
    KinematicsSolver().solve(qset, known_set(qset), trace)
    assert trace.detail("angle")["source"] == "angle"
    assert trace.detail("angle")["theta_deg"] == pytest.approx(45)
    assert trace.detail("normalize") is None



def test_solver_does_not_write(qset):
    before = qset.snapshot()
    _solve(qset, initial_speed=20, final_speed=20, acc=-10)
    after = qset.snapshot()
    assert after["time"] is None and after["range"] is None
    assert {k: v for k, v in before.items() if k not in ("initial_speed", "final_speed", "acc")} == \
        {k: v for k, v in after.items() if k not in ("initial_speed", "final_speed", "acc")}


def test_shared_formulas():
    th = math.radians(30)
    t = flight_time(10, -10, th)
    assert t == pytest.approx(1.0)
    assert apex_height(10, -10, t, th) == pytest.approx(1.25)
    assert horizontal_range(10, t, th) == pytest.approx(10 * math.cos(th))
