# -----------------------------------------------------------------------------
# Known-set extraction: which quantities the user actually provided.
# -----------------------------------------------------------------------------

from __future__ import annotations
from typing import FrozenSet, Iterable

from .registry import CONTROLLING, QuantitySet


def known_set(qset: QuantitySet) -> FrozenSet[str]:
    # Solved values are results of an earlier resolve, not inputs.
    return frozenset(q.id for q in qset if q.provided)


def controlling(known: Iterable[str]) -> FrozenSet[str]:
    return frozenset(k for k in known if k in CONTROLLING)
