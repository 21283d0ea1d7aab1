import asyncio

import httpx

from engine import Advance, SetDraftAnswer, create_demo_snapshot
from persistence import load_snapshot, persist_snapshot
from schemas.sessions import ExamSessionOut
from session import ExamSession
from storage import MemoryStorage


class FakeSessionClient:
    def __init__(self, snapshot=None, error=None, gate=None, status="active", fail_events=False):
        self.snapshot = snapshot
        self.error = error
        self.gate = gate
        self.status = status
        self.fail_events = fail_events
        self.heartbeats = []
        self.submits = []
        self.events = []

    async def get_session(self, session_id):
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return ExamSessionOut(session_id=session_id, status=self.status, snapshot=self.snapshot)

    async def post_heartbeat(self, session_id, snapshot, exam_package_id=None):
        self.heartbeats.append((session_id, snapshot, exam_package_id))
        return {"ok": True}

    async def submit_session(self, session_id):
        self.submits.append(session_id)
        self.status = "finished"
        return {"ok": True, "status": "finished"}

    async def record_event(self, session_id, event_type, payload=None):
        self.events.append((event_type, payload))
        if self.fail_events:
            raise ConnectionError("offline")
        return {"ok": True}


def test_mount_without_local_state_uses_demo(clock):
    storage = MemoryStorage()
    session = ExamSession("s1", storage, clock=clock)
    state = session.mount()
    assert state.session_id == "s1"
    assert session.current_item.id == "q1"
    # mount persists immediately
    assert load_snapshot(storage, "s1") is not None


def test_mount_prefers_local_snapshot(clock):
    storage = MemoryStorage()
    saved = create_demo_snapshot("s1", clock).model_copy(update={"draft_answer": "kept"})
    persist_snapshot(storage, saved, clock)

    session = ExamSession("s1", storage, clock=clock)
    assert session.mount().draft_answer == "kept"


def test_dispatch_persists_every_transition(clock):
    storage = MemoryStorage()
    seen = []
    session = ExamSession("s1", storage, clock=clock, on_change=seen.append)
    session.mount()
    session.dispatch(SetDraftAnswer("(x+1)^2"))
    session.dispatch(Advance())

    stored = load_snapshot(storage, "s1")
    assert stored.responses["q1"].correct is True
    assert stored.active_item_index == 1
    assert len(seen) == 3
    assert seen[-1] is session.state


def test_server_snapshot_with_matching_id_wins(clock):
    server = create_demo_snapshot("s1", clock).model_copy(
        update={"theta_by_section_id": {"sec-1": 0.9}, "active_item_index": 1}
    )

    async def run():
        storage = MemoryStorage()
        session = ExamSession("s1", storage, client=FakeSessionClient(snapshot=server), clock=clock)
        session.mount()
        session.dispatch(SetDraftAnswer("local draft"))
        await session.wait_hydrated()
        return session, storage

    session, storage = asyncio.run(run())
    assert session.state.theta_by_section_id == {"sec-1": 0.9}
    assert session.state.draft_answer == ""
    assert load_snapshot(storage, "s1").active_item_index == 1


def test_server_snapshot_for_other_session_is_ignored(clock):
    other = create_demo_snapshot("someone-else", clock)

    async def run():
        session = ExamSession("s1", MemoryStorage(), client=FakeSessionClient(snapshot=other), clock=clock)
        session.mount()
        await session.wait_hydrated()
        return session

    assert asyncio.run(run()).state.session_id == "s1"


def test_fetch_errors_keep_local_state(clock):
    not_found = httpx.HTTPStatusError(
        "404", request=httpx.Request("GET", "http://x"), response=httpx.Response(404)
    )

    async def run():
        session = ExamSession("s1", MemoryStorage(), client=FakeSessionClient(error=not_found), clock=clock)
        session.mount()
        session.dispatch(SetDraftAnswer("mine"))
        await session.wait_hydrated()
        return session

    assert asyncio.run(run()).state.draft_answer == "mine"


def test_late_response_after_unmount_is_dropped(clock):
    server = create_demo_snapshot("s1", clock).model_copy(update={"draft_answer": "from server"})

    async def run():
        gate = asyncio.Event()
        session = ExamSession("s1", MemoryStorage(), client=FakeSessionClient(snapshot=server, gate=gate), clock=clock)
        session.mount()
        session.unmount()
        gate.set()
        await asyncio.sleep(0.02)
        return session

    assert asyncio.run(run()).state.draft_answer == ""


def test_heartbeat_stamps_attempt_and_posts_snapshot(clock):
    async def run():
        client = FakeSessionClient()
        session = ExamSession(
            "s1", MemoryStorage(), client=client, clock=clock, exam_package_id="pkg", heartbeat_interval=60
        )
        session.mount()
        session.start_heartbeat()
        for _ in range(100):
            if client.heartbeats:
                break
            await asyncio.sleep(0.01)
        session.unmount()
        return session, client

    session, client = asyncio.run(run())
    assert session.state.last_heartbeat_attempt_at == clock.now_ms()
    sid, snap, pkg = client.heartbeats[0]
    assert (sid, pkg) == ("s1", "pkg")
    assert snap.session_id == "s1"


async def _wait_for(predicate, timeout=2.0):
    for _ in range(int(timeout / 0.01)):
        if predicate():
            return
        await asyncio.sleep(0.01)
    raise AssertionError("condition not reached")


def test_submit_stops_heartbeat(clock):
    async def run():
        client = FakeSessionClient()
        session = ExamSession("s1", MemoryStorage(), client=client, clock=clock, heartbeat_interval=0.02)
        session.mount()
        await session.wait_hydrated()
        hb = session.start_heartbeat()
        await _wait_for(lambda: len(client.heartbeats) >= 2)

        status = await session.submit()
        posted = len(client.heartbeats)
        await asyncio.sleep(0.1)
        return session, client, hb, status, posted

    session, client, hb, status, posted = asyncio.run(run())
    assert status == "finished" and session.finished
    assert client.submits == ["s1"]
    assert hb.running is False
    assert len(client.heartbeats) == posted


def test_heartbeat_not_started_for_finished_session(clock):
    server = create_demo_snapshot("s1", clock)

    async def run():
        client = FakeSessionClient(snapshot=server, status="finished")
        session = ExamSession("s1", MemoryStorage(), client=client, clock=clock, heartbeat_interval=0.02)
        session.mount()
        await session.wait_hydrated()
        hb = session.start_heartbeat()
        await asyncio.sleep(0.05)
        return session, client, hb

    session, client, hb = asyncio.run(run())
    assert session.status == "finished"
    assert hb is None
    assert client.heartbeats == []


def test_hydration_of_terminated_session_stops_running_heartbeat(clock):
    async def run():
        gate = asyncio.Event()
        client = FakeSessionClient(gate=gate, status="terminated")
        session = ExamSession("s1", MemoryStorage(), client=client, clock=clock, heartbeat_interval=0.02)
        session.mount()
        hb = session.start_heartbeat()
        await _wait_for(lambda: client.heartbeats)
        gate.set()
        await session.wait_hydrated()
        return session, hb

    session, hb = asyncio.run(run())
    assert session.finished
    assert hb.running is False


def test_events_are_throttled_per_type(clock):
    async def run():
        client = FakeSessionClient()
        session = ExamSession("s1", MemoryStorage(), client=client, clock=clock)
        session.mount()
        sent = [
            session.emit_event("window_blur", {"n": 1}),
            session.emit_event("window_blur", {"n": 2}),
            session.emit_event("visibility_hidden"),
        ]
        clock.advance(1499)
        sent.append(session.emit_event("window_blur", {"n": 3}))
        clock.advance(1)
        sent.append(session.emit_event("window_blur", {"n": 4}))
        await session.wait_events()
        session.unmount()
        return sent, client

    sent, client = asyncio.run(run())
    assert sent == [True, False, True, False, True]
    assert client.events == [
        ("window_blur", {"n": 1}),
        ("visibility_hidden", None),
        ("window_blur", {"n": 4}),
    ]


def test_event_failures_are_swallowed(clock):
    async def run():
        client = FakeSessionClient(fail_events=True)
        session = ExamSession("s1", MemoryStorage(), client=client, clock=clock)
        session.mount()
        assert session.emit_event("copy") is True
        await session.wait_events()
        return client

    assert asyncio.run(run()).events == [("copy", None)]


def test_no_events_after_submit_or_unmount(clock):
    async def run():
        client = FakeSessionClient()
        session = ExamSession("s1", MemoryStorage(), client=client, clock=clock)
        session.mount()
        await session.wait_hydrated()
        await session.submit()
        after_submit = session.emit_event("window_blur")

        other = ExamSession("s2", MemoryStorage(), client=FakeSessionClient(), clock=clock)
        other.mount()
        other.unmount()
        return after_submit, other.emit_event("window_blur")

    assert asyncio.run(run()) == (False, False)
