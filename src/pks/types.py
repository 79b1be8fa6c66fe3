# -----------------------------------------------------------------------------
# Types module: Shared dataclasses for the resolution engine
# Purpose:
#   Define structured representations for quantities (static metadata plus a
#   mutable value slot) used across the registry, validator, selector, and
#   solver.
# -----------------------------------------------------------------------------

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class Category(str, Enum):
    """Table a quantity belongs to. SHARED counts toward scalar and vector tallies."""
    SCALAR_KINEMATICS = "scalar_kinematics"
    VECTOR_KINEMATICS = "vector_kinematics"
    FORCES = "forces"
    SHARED = "shared"

    @property
    def scalar(self) -> bool:
        return self in (Category.SCALAR_KINEMATICS, Category.SHARED)

    @property
    def vector(self) -> bool:
        return self in (Category.VECTOR_KINEMATICS, Category.SHARED)


class Source(str, Enum):
    # Where the current value came from; only DEFAULT/USER values are inputs.
    UNSET = "unset"
    DEFAULT = "default"
    USER = "user"
    SOLVED = "solved"


@dataclass(frozen=True)
class QuantitySpec:
    """
    Static metadata of one physical quantity.
    - id: stable identifier (e.g., 'initial_speed')
    - name: display name
    - default: value restored on reset; None means "not provided"
    - min/max: inclusive bounds checked on provided values
    - required: counts toward the "enough inputs" tallies
    - dependencies: ids that must also be provided when this one is
    """
    id: str
    name: str
    min: float
    max: float
    category: Category
    required: bool = True
    default: float | None = None
    dependencies: Tuple[str, ...] = ()
    unit: str = ""


@dataclass
class Quantity:
    # Value slot; shape (spec) is fixed, only value/source mutate.
    spec: QuantitySpec
    value: float | None = None
    source: Source = Source.UNSET

    @property
    def id(self) -> str:
        return self.spec.id

    @property
    def provided(self) -> bool:
        return self.value is not None and self.source in (Source.USER, Source.DEFAULT)

    def restore_default(self) -> None:
        self.value = self.spec.default
        self.source = Source.UNSET if self.spec.default is None else Source.DEFAULT


@dataclass(frozen=True)
class Branch:
    """
    One closed-form equation set, identified by the three controlling
    quantities it solves for.
    """
    number: int
    unknowns: frozenset
    name: str = ""

    def key(self) -> Tuple[str, ...]:
        return tuple(sorted(self.unknowns))
