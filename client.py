# client.py
"""Async client for the exam-session service."""

from __future__ import annotations

from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from clock import SYSTEM_CLOCK, Clock
from config import EXAM_API_BASE_URL, EXAM_API_KEY
from schemas.exam import SessionSnapshot
from schemas.sessions import (
    ExamEventRequest,
    ExamSessionList,
    ExamSessionOut,
    HeartbeatRequest,
    HeartbeatResponse,
)


class ExamServiceClient:
    def __init__(
        self,
        base_url: str = EXAM_API_BASE_URL,
        api_key: str = EXAM_API_KEY,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Clock = SYSTEM_CLOCK,
    ) -> None:
        headers = {"x-api-key": api_key} if api_key else {}
        # no explicit timeout beyond the transport default
        self._http = httpx.AsyncClient(base_url=base_url, headers=headers, transport=transport)
        self.clock = clock

    async def __aenter__(self) -> "ExamServiceClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    @staticmethod
    def _path(session_id: str, suffix: str = "") -> str:
        return f"/exam-sessions/{quote(session_id, safe='')}{suffix}"

    async def get_session(self, session_id: str) -> ExamSessionOut:
        """Raises httpx.HTTPStatusError on 404 and other failures."""
        r = await self._http.get(self._path(session_id))
        r.raise_for_status()
        return ExamSessionOut.model_validate(r.json())

    async def get_snapshot(self, session_id: str) -> Optional[SessionSnapshot]:
        return (await self.get_session(session_id)).snapshot

    async def post_heartbeat(
        self,
        session_id: str,
        snapshot: SessionSnapshot,
        exam_package_id: Optional[str] = None,
    ) -> HeartbeatResponse:
        body = HeartbeatRequest(
            session_id=session_id,
            exam_package_id=exam_package_id,
            ts=self.clock.now_iso(),
            snapshot=snapshot,
        )
        r = await self._http.post(
            self._path(session_id, "/heartbeat"),
            json=body.model_dump(mode="json", by_alias=True),
        )
        r.raise_for_status()
        return HeartbeatResponse.model_validate(r.json())

    async def submit_session(self, session_id: str) -> Dict[str, Any]:
        r = await self._http.post(self._path(session_id, "/submit"))
        r.raise_for_status()
        return r.json()

    async def list_sessions(
        self, limit: Optional[int] = None, offset: Optional[int] = None, status: Optional[str] = None
    ) -> ExamSessionList:
        params: Dict[str, Any] = {}
        if limit is not None:
            params["limit"] = limit
        if offset is not None:
            params["offset"] = offset
        if status:
            params["status"] = status
        r = await self._http.get("/exam-sessions", params=params)
        r.raise_for_status()
        return ExamSessionList.model_validate(r.json())

    async def record_event(
        self, session_id: str, event_type: str, payload: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        body = ExamEventRequest(event_type=event_type, payload=payload, ts=self.clock.now_iso())
        r = await self._http.post(
            self._path(session_id, "/events"),
            json=body.model_dump(mode="json", by_alias=True),
        )
        r.raise_for_status()
        return r.json()
