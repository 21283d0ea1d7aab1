# schemas/sessions.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from schemas.exam import SessionSnapshot

ExamSessionStatus = Literal["active", "finished", "terminated", "invalid"]
SESSION_STATUSES = ("active", "finished", "terminated", "invalid")


class _Camel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------- Heartbeat ----------


class HeartbeatRequest(_Camel):
    # defaults to the path id when omitted
    session_id: Optional[str] = None
    exam_package_id: Optional[str] = None
    ts: str
    snapshot: SessionSnapshot


class HeartbeatResponse(_Camel):
    ok: bool
    server_ts: str


# ---------- Session read ----------


class ExamSessionOut(_Camel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)
    session_id: str
    exam_package_id: Optional[str] = None
    status: ExamSessionStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_heartbeat_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None
    snapshot: Optional[SessionSnapshot] = None


class ExamSessionListItem(_Camel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)
    session_id: str
    exam_package_id: Optional[str] = None
    status: ExamSessionStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_heartbeat_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None


class ExamSessionList(_Camel):
    items: List[ExamSessionListItem]
    limit: int
    offset: int
    has_more: bool


class SubmitResponse(_Camel):
    ok: bool
    status: ExamSessionStatus


# ---------- Integrity events ----------


class ExamEventRequest(_Camel):
    # blank is rejected by the route with a 400
    event_type: str = ""
    payload: Optional[Dict[str, Any]] = None
    ts: Optional[str] = None


class OkResponse(BaseModel):
    ok: bool


class ExamEventOut(_Camel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)
    id: int
    event_type: str
    payload: Dict[str, Any]
    created_at: datetime


class ExamEventList(_Camel):
    items: List[ExamEventOut]
    limit: int
    offset: int
    has_more: bool
