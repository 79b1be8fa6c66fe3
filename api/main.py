# --- Projectile Kinematics Solver API (FastAPI) -------------------------------
# Purpose: Thin HTTP surface over one resolution session: pick the input table,
# set quantity values, resolve, reset. The engine is single-caller, so every
# route takes the lock.
# ------------------------------------------------------------------------------

from __future__ import annotations
import threading
from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional

from pks.engine import Engine, InputMode
from pks.errors import InputModeError, RegistryError
from pks.registry import QuantityRegistry

# Load .env for external configuration (PKS_QUANTITIES_PATH, read by the registry)
load_dotenv()

app = FastAPI(title="Projectile Kinematics Solver API")

# One session per process; resolve() must not interleave with set_quantity().
_registry = QuantityRegistry.default()
_engine = Engine(_registry)
_lock = threading.Lock()

# ----------------------------- Schemas ----------------------------------------
class SetQuantityRequest(BaseModel):
    # null clears the quantity (marks it "not provided").
    value: Optional[float] = None

class SetModeRequest(BaseModel):
    mode: InputMode

class QuantityRow(BaseModel):
    id: str
    name: str
    unit: str
    value: Optional[float]
    source: str
    min: float
    max: float
    required: bool
    category: str
    dependencies: List[str] = Field(default_factory=list)

class ResolveResponse(BaseModel):
    ok: bool
    status: str
    kind: Optional[str] = None
    message: str
    solved: bool
    branch: Optional[Dict[str, Any]] = None
    values: Dict[str, Optional[float]]
    detail: Dict[str, Any] = Field(default_factory=dict)
    trace: List[Dict[str, Any]] = Field(default_factory=list)

# ----------------------------- Routes -----------------------------------------
@app.get("/health")
def health(): return {"ok": True}

@app.get("/quantities", response_model=List[QuantityRow])
def list_quantities():
    with _lock:
        return _engine.quantities.list_quantities()

@app.put("/quantities/{qid}", response_model=QuantityRow)
def set_quantity(qid: str, req: SetQuantityRequest):
    """Store a value without validating it; validation happens on /resolve."""
    with _lock:
        try:
            _engine.set_quantity(qid, req.value)
        except RegistryError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except InputModeError as e:
            raise HTTPException(status_code=409, detail=str(e))
        return next(r for r in _engine.quantities.list_quantities() if r["id"] == qid)

@app.post("/mode")
def set_mode(req: SetModeRequest):
    # Switching to another table clears every value, as /reset does.
    with _lock:
        _engine.set_mode(req.mode)
        return {"ok": True, "mode": _engine.mode.value, "state": _engine.state.value}

@app.post("/resolve", response_model=ResolveResponse)
def resolve():
    # Failures are reported in the body (ok=false), not as HTTP errors.
    with _lock:
        return _engine.resolve().as_dict()

@app.post("/reset")
def reset():
    with _lock:
        _engine.reset()
        return {"ok": True, "solved": _engine.solved, "state": _engine.state.value}
