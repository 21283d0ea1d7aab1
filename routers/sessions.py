# routers/sessions.py
from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from db import get_db
from deps.auth import require_client
from models import ExamSessionEvent, ExamSessionRecord
from schemas.sessions import (
    SESSION_STATUSES,
    ExamEventRequest,
    ExamSessionList,
    ExamSessionListItem,
    ExamSessionOut,
    HeartbeatRequest,
    HeartbeatResponse,
    OkResponse,
    SubmitResponse,
)

logger = logging.getLogger("ace-exam")

router = APIRouter(prefix="/exam-sessions", tags=["exam-sessions"], dependencies=[Depends(require_client)])


def _iso(dt: datetime) -> str:
    return dt.isoformat(timespec="seconds").replace("+00:00", "Z")


@router.get("", response_model=ExamSessionList)
def list_sessions(
    limit: int = 20,
    offset: int = Query(default=0, ge=0),
    status: Optional[str] = None,
    db: Session = Depends(get_db),
):
    if status and status not in SESSION_STATUSES:
        raise HTTPException(status_code=400, detail="invalid status")
    limit = max(1, min(limit, 100))

    q = db.query(ExamSessionRecord)
    if status:
        q = q.filter(ExamSessionRecord.status == status)
    # fetch one extra row to know whether another page exists
    rows = q.order_by(ExamSessionRecord.last_heartbeat_at.desc()).offset(offset).limit(limit + 1).all()

    items = [ExamSessionListItem.model_validate(r) for r in rows[:limit]]
    return ExamSessionList(items=items, limit=limit, offset=offset, has_more=len(rows) > limit)


@router.get("/{session_id}", response_model=ExamSessionOut)
def get_session(session_id: str, db: Session = Depends(get_db)):
    rec = db.get(ExamSessionRecord, session_id)
    if not rec:
        raise HTTPException(status_code=404, detail="session not found")
    return ExamSessionOut.model_validate(rec)


@router.post("/{session_id}/heartbeat", response_model=HeartbeatResponse)
def heartbeat(session_id: str, req: HeartbeatRequest, db: Session = Depends(get_db)):
    # the path is the canonical session id
    if req.session_id and req.session_id != session_id:
        raise HTTPException(status_code=400, detail="sessionId mismatch")

    now = datetime.now(UTC)
    snapshot = req.snapshot.model_dump(mode="json", by_alias=True)

    rec = db.get(ExamSessionRecord, session_id)
    if rec is None:
        rec = ExamSessionRecord(
            session_id=session_id,
            exam_package_id=req.exam_package_id,
            status="active",
            snapshot=snapshot,
            created_at=now,
            updated_at=now,
            last_heartbeat_at=now,
        )
        db.add(rec)
    else:
        if rec.status != "active":
            raise HTTPException(status_code=409, detail="session is not active")
        if rec.exam_package_id is None:
            rec.exam_package_id = req.exam_package_id
        elif req.exam_package_id and req.exam_package_id != rec.exam_package_id:
            raise HTTPException(status_code=409, detail="examPackageId mismatch")
        rec.snapshot = snapshot
        rec.updated_at = now
        rec.last_heartbeat_at = now
    db.commit()

    logger.debug("heartbeat stored for session %s", session_id)
    return HeartbeatResponse(ok=True, server_ts=_iso(now))


@router.post("/{session_id}/submit", response_model=SubmitResponse)
def submit_session(session_id: str, db: Session = Depends(get_db)):
    rec = db.get(ExamSessionRecord, session_id)
    if not rec:
        raise HTTPException(status_code=404, detail="session not found")
    if rec.status != "active":
        raise HTTPException(status_code=409, detail="session is not active")

    now = datetime.now(UTC)
    rec.status = "finished"
    rec.submitted_at = now
    rec.updated_at = now
    db.commit()
    return SubmitResponse(ok=True, status="finished")


@router.post("/{session_id}/events", response_model=OkResponse)
def record_event(session_id: str, req: ExamEventRequest, db: Session = Depends(get_db)):
    event_type = req.event_type.strip()
    if not event_type:
        raise HTTPException(status_code=400, detail="eventType is required")
    if db.get(ExamSessionRecord, session_id) is None:
        raise HTTPException(status_code=404, detail="session not found")

    db.add(ExamSessionEvent(session_id=session_id, event_type=event_type, payload=req.payload or {}))
    db.commit()
    logger.info("exam event %s for session %s", event_type, session_id)
    return OkResponse(ok=True)
