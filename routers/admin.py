# routers/admin.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from bank import reload_bank
from db import get_db
from deps.auth import require_admin
from models import ExamSessionEvent, ExamSessionRecord
from schemas.sessions import ExamEventList, ExamEventOut

logger = logging.getLogger("ace-exam")

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.post("/reload")
def reload_sections():
    n = reload_bank()
    logger.info("section bank reloaded: %d items", n)
    return {"ok": True, "count": n}


@router.get("/exam-sessions/{session_id}/events", response_model=ExamEventList)
def list_session_events(
    session_id: str,
    limit: int = 50,
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
):
    """Integrity events of one session, newest first."""
    if db.get(ExamSessionRecord, session_id) is None:
        raise HTTPException(status_code=404, detail="session not found")
    limit = max(1, min(limit, 200))

    rows = (
        db.query(ExamSessionEvent)
        .filter(ExamSessionEvent.session_id == session_id)
        .order_by(ExamSessionEvent.id.desc())
        .offset(offset)
        .limit(limit + 1)
        .all()
    )
    items = [ExamEventOut.model_validate(r) for r in rows[:limit]]
    return ExamEventList(items=items, limit=limit, offset=offset, has_more=len(rows) > limit)
