from pks.tracer import Tracer


def test_detail_returns_latest_step_of_a_kind():
    trace = Tracer()
    trace.add("angle", {"source": "angle"})
    trace.add("branch", {"number": 1})
    trace.add("angle", {"source": "final_vector"})
    assert trace.detail("angle") == {"source": "final_vector"}
    assert trace.detail("publish") is None
    assert trace.kinds() == ["angle", "branch", "angle"]


def test_steps_are_json_friendly(engine):
    engine.set_quantity("initial_speed", 20)
    engine.set_quantity("acc", -9.81)
    out = engine.resolve()
    assert all(set(s) == {"kind", "detail"} for s in out.trace)
    assert out.branch == next(s["detail"] for s in out.trace if s["kind"] == "branch")
