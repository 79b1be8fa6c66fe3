# -----------------------------------------------------------------------------
# Resolve trace
# Purpose:
#   Ordered record of one resolve() call: known-set, validation tallies, speed
#   normalization, effective angle and its source, selected branch, computed
#   values, then either the published ids or the error. Exported as a
#   JSON-friendly list for API responses and debugging.
# -----------------------------------------------------------------------------

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass
class TraceStep:
    # kind: pipeline stage label ("validate", "branch", ...); detail: its data
    kind: str
    detail: Dict[str, Any]

    def as_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "detail": self.detail}


class Tracer:
    """Steps are only ever appended; a stage may appear more than once."""

    def __init__(self):
        self._steps: List[TraceStep] = []

    def add(self, kind: str, detail: Dict[str, Any]) -> None:
        self._steps.append(TraceStep(kind, detail))

    def kinds(self) -> List[str]:
        return [s.kind for s in self._steps]

    def detail(self, kind: str) -> Optional[Dict[str, Any]]:
        """Detail of the latest step of this kind, or None if the stage never ran."""
        for step in reversed(self._steps):
            if step.kind == kind:
                return step.detail
        return None

    def steps(self) -> List[Dict[str, Any]]:
        return [s.as_dict() for s in self._steps]
