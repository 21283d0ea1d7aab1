# session.py
"""
Owner of one live exam session: local load, server hydration, persistence
after every transition, heartbeat wiring, submit and integrity events.

Hydration and local edits race: whichever is applied last wins. If the server
answers before further local edits, its snapshot replaces local state
wholesale (draft included). Two processes sharing a store and a session id
can overwrite each other's records; nothing here locks.

Once the server reports the session as anything but ``active`` (or after
``submit``), the heartbeat is stopped and integrity events are no longer sent.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, Optional, Protocol, Set

from clock import SYSTEM_CLOCK, Clock
from config import HEARTBEAT_INTERVAL_S
from engine import (
    Action,
    HydrateFromSnapshot,
    MarkHeartbeatAttempt,
    apply,
    create_demo_snapshot,
    current_item,
)
from persistence import load_snapshot, persist_snapshot
from schemas.exam import Item, SessionSnapshot
from schemas.sessions import ExamSessionOut
from storage import Storage
from sync import HeartbeatSync

logger = logging.getLogger(__name__)

# minimum gap between two events of the same type
EVENT_THROTTLE_MS = 1500


class SessionClient(Protocol):
    async def get_session(self, session_id: str) -> ExamSessionOut: ...

    async def post_heartbeat(
        self, session_id: str, snapshot: SessionSnapshot, exam_package_id: Optional[str] = None
    ) -> object: ...

    async def submit_session(self, session_id: str) -> Dict[str, Any]: ...

    async def record_event(
        self, session_id: str, event_type: str, payload: Optional[Dict[str, Any]] = None
    ) -> object: ...


class ExamSession:
    def __init__(
        self,
        session_id: str,
        storage: Storage,
        client: Optional[SessionClient] = None,
        clock: Clock = SYSTEM_CLOCK,
        exam_package_id: Optional[str] = None,
        heartbeat_interval: float = HEARTBEAT_INTERVAL_S,
        on_change: Optional[Callable[[SessionSnapshot], None]] = None,
    ) -> None:
        self.session_id = session_id
        self.storage = storage
        self.client = client
        self.clock = clock
        self.exam_package_id = exam_package_id
        self.heartbeat_interval = heartbeat_interval
        self.on_change = on_change

        # server-side status; None until the server has answered
        self.status: Optional[str] = None

        self._state: Optional[SessionSnapshot] = None
        self._cancelled = False
        self._hydration: Optional[asyncio.Task] = None
        self._heartbeat: Optional[HeartbeatSync] = None
        self._last_event_at: Dict[str, int] = {}
        self._events: Set[asyncio.Task] = set()

    # --- state ---------------------------------------------------------------

    @property
    def state(self) -> SessionSnapshot:
        if self._state is None:
            raise RuntimeError("session is not mounted")
        return self._state

    @property
    def current_item(self) -> Optional[Item]:
        return current_item(self.state)

    @property
    def finished(self) -> bool:
        return self.status is not None and self.status != "active"

    def _set_state(self, state: SessionSnapshot) -> None:
        self._state = state
        persist_snapshot(self.storage, state, self.clock)
        if self.on_change:
            self.on_change(state)

    def dispatch(self, action: Action) -> SessionSnapshot:
        self._set_state(apply(self.state, action, self.clock))
        return self.state

    # --- lifecycle -----------------------------------------------------------

    def mount(self) -> SessionSnapshot:
        """
        Load local state (or a fresh demo snapshot) and, when a client is
        configured, start the server fetch in the background. With a client,
        this must run inside an event loop.
        """
        loaded = load_snapshot(self.storage, self.session_id)
        self._cancelled = False
        self._set_state(loaded or create_demo_snapshot(self.session_id, self.clock))

        if self.client is not None:
            loop = asyncio.get_running_loop()
            self._hydration = loop.create_task(self._hydrate())
        return self.state

    async def _hydrate(self) -> None:
        try:
            remote = await self.client.get_session(self.session_id)
        except Exception as e:
            # includes "session not found": keep local state
            logger.debug("hydration for %s skipped: %s", self.session_id, e)
            return
        if self._cancelled:
            return

        self.status = remote.status
        snapshot = remote.snapshot
        if snapshot is not None and snapshot.session_id == self.session_id:
            logger.info("hydrating session %s from server snapshot", self.session_id)
            self.dispatch(HydrateFromSnapshot(snapshot))
        if self.finished:
            logger.info("session %s is %s; heartbeat off", self.session_id, self.status)
            self.stop_heartbeat()

    async def wait_hydrated(self) -> None:
        if self._hydration is not None:
            await asyncio.gather(self._hydration, return_exceptions=True)

    def start_heartbeat(self) -> Optional[HeartbeatSync]:
        """Returns None without starting when the session is already over."""
        if self.client is None:
            raise RuntimeError("heartbeat needs a session client")
        if self.finished:
            return None
        if self._heartbeat is None:
            self._heartbeat = HeartbeatSync(
                self.client,
                self.session_id,
                get_snapshot=lambda: self.state,
                exam_package_id=self.exam_package_id,
                on_attempt=lambda: self.dispatch(MarkHeartbeatAttempt()),
                interval=self.heartbeat_interval,
            )
        self._heartbeat.start()
        return self._heartbeat

    def stop_heartbeat(self) -> None:
        if self._heartbeat is not None:
            self._heartbeat.stop()
            self._heartbeat = None

    async def submit(self) -> str:
        """
        Finish the session on the server and stop the heartbeat. Errors from
        the client propagate; the heartbeat keeps running in that case.
        """
        if self.client is None:
            raise RuntimeError("submit needs a session client")
        result = await self.client.submit_session(self.session_id)
        self.status = result.get("status", "finished")
        self.stop_heartbeat()
        logger.info("session %s submitted", self.session_id)
        return self.status

    # --- integrity events ----------------------------------------------------

    def emit_event(self, event_type: str, payload: Optional[Dict[str, Any]] = None) -> bool:
        """
        Fire-and-forget report of an integrity event (focus loss, tab switch).
        At most one event per type every EVENT_THROTTLE_MS; returns whether
        this one was sent. Delivery failures are logged and dropped.
        """
        if self.client is None or self._cancelled or self.finished:
            return False
        now = self.clock.now_ms()
        last = self._last_event_at.get(event_type)
        if last is not None and now - last < EVENT_THROTTLE_MS:
            return False
        self._last_event_at[event_type] = now

        t = asyncio.get_running_loop().create_task(self._send_event(event_type, payload))
        self._events.add(t)
        t.add_done_callback(self._events.discard)
        return True

    async def _send_event(self, event_type: str, payload: Optional[Dict[str, Any]]) -> None:
        try:
            await self.client.record_event(self.session_id, event_type, payload)
        except Exception as e:
            logger.debug("event %s for %s dropped: %s", event_type, self.session_id, e)

    async def wait_events(self) -> None:
        if self._events:
            await asyncio.gather(*list(self._events), return_exceptions=True)

    def unmount(self) -> None:
        self._cancelled = True
        if self._hydration is not None and not self._hydration.done():
            self._hydration.cancel()
        self._hydration = None
        self.stop_heartbeat()
