# -----------------------------------------------------------------------------
# Quantity registry loader & value store
# Purpose: Parse the YAML quantity table (id, bounds, category, dependencies)
# into typed specs, and hand out QuantitySets: one mutable value slot per id.
# - Depends on .types (QuantitySpec, Quantity, Category, Source).
# -----------------------------------------------------------------------------

from __future__ import annotations
import os
import yaml
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Tuple

from .errors import RegistryError
from .types import Category, Quantity, QuantitySpec, Source

DEFAULT_PATH = Path(__file__).parent / "data" / "quantities.yaml"

# The six quantities the selector branches on.
INITIAL_SPEED = "initial_speed"
FINAL_SPEED = "final_speed"
ACC = "acc"
TIME = "time"
RANGE = "range"
MAX_HEIGHT = "max_height"
CONTROLLING = (INITIAL_SPEED, FINAL_SPEED, ACC, TIME, RANGE, MAX_HEIGHT)


@dataclass
class QuantityRegistry:
    # Specs in table order; validation reports the first violation in this order.
    specs: Tuple[QuantitySpec, ...]

    @staticmethod
    def from_yaml_dict(d: Dict[str, Any]) -> "QuantityRegistry":
        """
        Build a registry from a pre-parsed YAML dictionary.
        Expected shape:
          quantities:
            - id: initial_speed
              name: Initial speed
              min: 1
              max: 1000
              category: scalar_kinematics
              required: true          # optional, default true
              default: 45             # optional, default "not provided"
              dependencies: [...]     # optional
        """
        specs: List[QuantitySpec] = []
        seen = set()
        for qd in (d or {}).get("quantities") or []:
            try:
                spec = QuantitySpec(
                    id=str(qd["id"]),
                    name=str(qd.get("name", qd["id"])),
                    min=float(qd["min"]),
                    max=float(qd["max"]),
                    category=Category(qd["category"]),
                    required=bool(qd.get("required", True)),
                    default=None if qd.get("default") is None else float(qd["default"]),
                    dependencies=tuple(qd.get("dependencies") or ()),
                    unit=str(qd.get("unit", "")),
                )
            except (KeyError, TypeError, ValueError) as e:
                raise RegistryError(f"Malformed quantity entry {qd!r}: {e}") from e
            if spec.id in seen:
                raise RegistryError(f"Duplicate quantity id: {spec.id}")
            if spec.min > spec.max:
                raise RegistryError(f"Quantity {spec.id} has min > max")
            seen.add(spec.id)
            specs.append(spec)

        # The table must be total: every dependency and controlling id declared.
        for spec in specs:
            for dep in spec.dependencies:
                if dep not in seen:
                    raise RegistryError(f"Quantity {spec.id} depends on undeclared {dep}")
        missing = [c for c in CONTROLLING if c not in seen]
        if missing:
            raise RegistryError(f"Registry lacks controlling quantities: {missing}")
        return QuantityRegistry(specs=tuple(specs))

    @staticmethod
    def from_yaml_text(text: str) -> "QuantityRegistry":
        return QuantityRegistry.from_yaml_dict(yaml.safe_load(text))

    @staticmethod
    def from_file(path: str | os.PathLike) -> "QuantityRegistry":
        with open(path, "r", encoding="utf-8") as f:
            return QuantityRegistry.from_yaml_text(f.read())

    @staticmethod
    def default() -> "QuantityRegistry":
        """Packaged table, or the file named by PKS_QUANTITIES_PATH."""
        return QuantityRegistry.from_file(os.getenv("PKS_QUANTITIES_PATH") or DEFAULT_PATH)

    def spec(self, qid: str) -> QuantitySpec:
        for s in self.specs:
            if s.id == qid:
                return s
        raise RegistryError(f"Unknown quantity: {qid}")

    def new_set(self) -> "QuantitySet":
        return QuantitySet(self)


class QuantitySet:
    """
    Mutable values for one session, one Quantity per registry id.
    Iteration follows registry order.
    """

    def __init__(self, registry: QuantityRegistry):
        self.registry = registry
        self._slots: Dict[str, Quantity] = {}
        for spec in registry.specs:
            q = Quantity(spec)
            q.restore_default()
            self._slots[spec.id] = q

    def __iter__(self) -> Iterator[Quantity]:
        return iter(self._slots.values())

    def __contains__(self, qid: str) -> bool:
        return qid in self._slots

    def ids(self) -> List[str]:
        return list(self._slots)

    def get(self, qid: str) -> Quantity:
        try:
            return self._slots[qid]
        except KeyError:
            raise RegistryError(f"Unknown quantity: {qid}") from None

    def value(self, qid: str) -> float | None:
        return self.get(qid).value

    def set(self, qid: str, value: float | None, source: Source = Source.USER) -> None:
        # No validation here; the validator checks values at resolve time.
        q = self.get(qid)
        if value is None:
            q.value, q.source = None, Source.UNSET
        else:
            q.value, q.source = float(value), source

    def clear(self, qid: str) -> None:
        self.set(qid, None)

    def reset(self) -> None:
        for q in self._slots.values():
            q.restore_default()

    def snapshot(self) -> Dict[str, float | None]:
        return {qid: q.value for qid, q in self._slots.items()}

    def list_quantities(self) -> List[Dict[str, Any]]:
        """UI-friendly rows: metadata plus current value and its source."""
        out = []
        for q in self._slots.values():
            s = q.spec
            out.append({
                "id": s.id, "name": s.name, "unit": s.unit,
                "value": q.value, "source": q.source.value,
                "min": s.min, "max": s.max, "required": s.required,
                "category": s.category.value, "dependencies": list(s.dependencies),
            })
        return out
