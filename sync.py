# sync.py

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional, Protocol, Set

from config import HEARTBEAT_INTERVAL_S
from schemas.exam import SessionSnapshot

logger = logging.getLogger(__name__)


class HeartbeatClient(Protocol):
    async def post_heartbeat(
        self, session_id: str, snapshot: SessionSnapshot, exam_package_id: Optional[str] = None
    ) -> object: ...


class HeartbeatSync:
    """
    Pushes the current snapshot on a fixed interval, plus once on start.

    Failures are logged and dropped; the next tick is the retry. ``on_attempt``
    runs right before each post regardless of its outcome.
    """

    def __init__(
        self,
        client: HeartbeatClient,
        session_id: str,
        get_snapshot: Callable[[], SessionSnapshot],
        exam_package_id: Optional[str] = None,
        on_attempt: Optional[Callable[[], None]] = None,
        interval: float = HEARTBEAT_INTERVAL_S,
    ) -> None:
        self.client = client
        self.session_id = session_id
        self.get_snapshot = get_snapshot
        self.exam_package_id = exam_package_id
        self.on_attempt = on_attempt
        self.interval = interval
        self._stopped = True
        self._loop_task: Optional[asyncio.Task] = None
        self._ticks: Set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return not self._stopped

    async def tick(self) -> None:
        if self._stopped:
            return
        snapshot = self.get_snapshot()
        try:
            if self.on_attempt:
                self.on_attempt()
            await self.client.post_heartbeat(self.session_id, snapshot, self.exam_package_id)
        except Exception as e:
            logger.debug("heartbeat for %s failed: %s", self.session_id, e)

    def _spawn_tick(self) -> None:
        # ticks do not wait for each other, like a browser interval timer
        t = asyncio.get_running_loop().create_task(self.tick())
        self._ticks.add(t)
        t.add_done_callback(self._ticks.discard)

    async def _run(self) -> None:
        while not self._stopped:
            self._spawn_tick()
            await asyncio.sleep(self.interval)

    def start(self) -> None:
        """Must be called from a running event loop."""
        if self._loop_task is not None:
            return
        self._stopped = False
        self._loop_task = asyncio.get_running_loop().create_task(self._run())

    def stop(self) -> None:
        self._stopped = True
        if self._loop_task is not None:
            self._loop_task.cancel()
            self._loop_task = None
        for t in list(self._ticks):
            t.cancel()
