from __future__ import annotations

from typing import Optional

from fastapi import APIRouter

from algebra import ParseError, equivalent, evaluate as evaluate_expr
from bank import find_item
from schemas.marking import (
    EquivalentRequest,
    EquivalentResponse,
    EvaluateRequest,
    EvaluateResponse,
    MarkRequest,
    MarkResponse,
)
from scoring import score_item

# --- Validation helpers -----------------------------------------------------------
LEN_LIMIT = 200
_TOO_LONG_MSG = f"Expression too long (> {LEN_LIMIT})."

router = APIRouter(tags=["marking"])


def _validate_expr(s: str) -> Optional[str]:
    if not s or not s.strip():
        return "Expression required."
    if len(s) > LEN_LIMIT:
        return _TOO_LONG_MSG
    return None


# --- Endpoints --------------------------------------------------------------------


@router.post("/evaluate", response_model=EvaluateResponse)
def evaluate(req: EvaluateRequest):
    err = _validate_expr(req.expr)
    if err:
        return {"ok": False, "value": None, "feedback": err}
    try:
        return {"ok": True, "value": evaluate_expr(req.expr, req.bindings)}
    except ParseError as e:
        return {"ok": False, "value": None, "feedback": str(e)}


@router.post("/equivalent", response_model=EquivalentResponse)
def check_equivalent(req: EquivalentRequest):
    # Same check the exam client runs live under STEM answer boxes
    for s in (req.expected, req.actual):
        err = _validate_expr(s)
        if err:
            return {"ok": False, "equivalent": False, "feedback": err}

    ok = equivalent(req.expected, req.actual, req.variables)
    return {
        "ok": True,
        "equivalent": ok,
        "feedback": (
            "Equivalent (checked numerically)."
            if ok
            else "Not equivalent (or could not be parsed)."
        ),
    }


@router.post("/mark", response_model=MarkResponse)
def mark(req: MarkRequest):
    found = find_item(req.id)
    if not found:
        return {"ok": False, "correct": False, "feedback": "unknown question id"}
    _, item = found
    if len(req.answer) > LEN_LIMIT:
        return {"ok": False, "correct": False, "feedback": "Answer too long."}

    verdict = score_item(item, req.answer)
    return {"ok": True, "correct": verdict, "indeterminate": verdict is None}
