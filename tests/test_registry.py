import pytest

from pks.errors import RegistryError
from pks.known import controlling, known_set
from pks.registry import CONTROLLING, QuantityRegistry
from pks.types import Category, Source


def test_default_table_order_and_metadata(registry):
    ids = [s.id for s in registry.specs]
    assert ids[0] == "v_initial_i_component"
    assert ids[-3:] == ["coeff_friction", "force", "mass"]
    assert len(ids) == len(set(ids)) == 17
    speed = registry.spec("initial_speed")
    assert (speed.min, speed.max, speed.required) == (1, 1000, True)
    assert speed.category is Category.SCALAR_KINEMATICS
    assert registry.spec("acc").max == -1
    assert registry.spec("v_initial_i_component").dependencies == ("v_initial_j_component",)
    assert registry.spec("y_initial").required is False


def test_fresh_set_holds_defaults(qset):
    angle = qset.get("angle")
    assert angle.value == 45 and angle.source is Source.DEFAULT
    assert qset.value("initial_speed") is None
    assert known_set(qset) == {"angle"}


def test_unknown_id_is_a_registry_error(qset, registry):
    with pytest.raises(RegistryError):
        qset.set("muzzle_velocity", 3.0)
    with pytest.raises(RegistryError):
        registry.spec("muzzle_velocity")


def test_zero_is_a_real_value(qset):
    qset.set("y_initial", 0.0)
    assert "y_initial" in known_set(qset)
    qset.set("y_initial", None)
    assert "y_initial" not in known_set(qset)


def test_solved_values_are_not_inputs(qset):
    qset.set("range", 40.0, source=Source.SOLVED)
    qset.set("time", 2.0)
    assert known_set(qset) == {"angle", "time"}
    assert controlling(known_set(qset)) == {"time"}


def test_reset_restores_defaults(qset):
    qset.set("angle", 30.0)
    qset.set("initial_speed", 12.0)
    qset.reset()
    assert qset.value("angle") == 45
    assert qset.value("initial_speed") is None


def test_list_quantities_rows(qset):
    rows = qset.list_quantities()
    row = next(r for r in rows if r["id"] == "angle")
    assert row["value"] == 45 and row["source"] == "default" and row["category"] == "shared"


def test_table_must_declare_dependencies():
    text = """
quantities:
  - {id: initial_speed, min: 1, max: 1000, category: scalar_kinematics, dependencies: [ghost]}
"""
    with pytest.raises(RegistryError, match="ghost"):
        QuantityRegistry.from_yaml_text(text)


def test_table_must_cover_controlling_quantities():
    text = "quantities:\n  - {id: time, min: 1, max: 1000, category: shared}\n"
    with pytest.raises(RegistryError, match="controlling"):
        QuantityRegistry.from_yaml_text(text)


def test_malformed_entry():
    with pytest.raises(RegistryError):
        QuantityRegistry.from_yaml_text("quantities:\n  - {id: time, min: 1, category: shared}\n")


def test_env_override(tmp_path, monkeypatch, registry):
    rows = "\n".join(
        f"  - {{id: {c}, min: 1, max: 5, category: shared}}" for c in CONTROLLING
    ) + "\n  - {id: angle, default: 30, min: 0, max: 90, category: shared}"
    path = tmp_path / "q.yaml"
    path.write_text("quantities:\n" + rows + "\n", encoding="utf-8")
    monkeypatch.setenv("PKS_QUANTITIES_PATH", str(path))
    reg = QuantityRegistry.default()
    assert reg.spec("range").max == 5
    assert reg.new_set().value("angle") == 30
