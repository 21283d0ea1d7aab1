# schemas/marking.py
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel

# ---------- Evaluate ----------


class EvaluateRequest(BaseModel):
    expr: str
    bindings: Dict[str, float] = {}


class EvaluateResponse(BaseModel):
    ok: bool
    value: Optional[float] = None
    feedback: Optional[str] = None


# ---------- Equivalence ----------


class EquivalentRequest(BaseModel):
    expected: str
    actual: str
    variables: List[str] = ["x"]


class EquivalentResponse(BaseModel):
    ok: bool
    equivalent: bool
    feedback: str


# ---------- Mark single ----------


class MarkRequest(BaseModel):
    id: str
    answer: str


class MarkResponse(BaseModel):
    ok: bool
    # None when the item has no key or the answer is blank
    correct: Optional[bool] = None
    indeterminate: bool = False
    feedback: str = ""
