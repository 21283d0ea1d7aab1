# engine.py
"""
Exam-session state machine.

``apply(snapshot, action)`` is pure and total: it never mutates its input and
never raises for well-formed snapshots. Scoring failures surface as
False/None verdicts on the recorded response.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from clock import SYSTEM_CLOCK, Clock
from irt import update_theta
from questions import DEMO_SECTION
from schemas.exam import Item, ResponseRecord, Section, SessionSnapshot
from scoring import score_item
from selector import select_next_index

# --- Actions ----------------------------------------------------------------------


@dataclass(frozen=True)
class HydrateFromSnapshot:
    snapshot: SessionSnapshot


@dataclass(frozen=True)
class SetDraftAnswer:
    value: str


@dataclass(frozen=True)
class SubmitDraftAnswer:
    pass


@dataclass(frozen=True)
class Advance:
    pass


@dataclass(frozen=True)
class MarkHeartbeatAttempt:
    pass


Action = Union[HydrateFromSnapshot, SetDraftAnswer, SubmitDraftAnswer, Advance, MarkHeartbeatAttempt]


# --- Helpers ----------------------------------------------------------------------


def create_demo_snapshot(session_id: str, clock: Clock = SYSTEM_CLOCK) -> SessionSnapshot:
    section = Section.model_validate(DEMO_SECTION)
    return SessionSnapshot(
        session_id=session_id,
        sections=[section],
        theta_by_section_id={section.id: 0.0},
        last_local_persisted_at=clock.now_ms(),
    )


def active_section(state: SessionSnapshot) -> Optional[Section]:
    i = state.active_section_index
    if 0 <= i < len(state.sections):
        return state.sections[i]
    return None


def current_item(state: SessionSnapshot) -> Optional[Item]:
    section = active_section(state)
    if section is None:
        return None
    i = state.active_item_index
    if 0 <= i < len(section.items):
        return section.items[i]
    return None


# --- Transitions ------------------------------------------------------------------


def _submit(state: SessionSnapshot, clock: Clock) -> SessionSnapshot:
    item = current_item(state)
    if item is None:
        return state

    section = active_section(state)
    correct = score_item(item, state.draft_answer)

    theta_by_section_id = state.theta_by_section_id
    if section is not None and correct is not None:
        prev = theta_by_section_id.get(section.id, 0.0)
        theta_by_section_id = {
            **theta_by_section_id,
            section.id: update_theta(prev, item.irt, correct),
        }

    response = ResponseRecord(answer=state.draft_answer, ts=clock.now_iso(), correct=correct)
    return state.model_copy(
        update={
            "theta_by_section_id": theta_by_section_id,
            "responses": {**state.responses, item.id: response},
        }
    )


def _advance(state: SessionSnapshot, clock: Clock) -> SessionSnapshot:
    nxt = state
    if current_item(state) is not None and state.draft_answer.strip():
        nxt = _submit(state, clock)

    section = active_section(nxt)
    if section is None:
        return nxt

    theta = nxt.theta_by_section_id.get(section.id, 0.0)
    index = select_next_index(section, theta, set(nxt.responses))
    return nxt.model_copy(update={"active_item_index": index, "draft_answer": ""})


def apply(state: SessionSnapshot, action: Action, clock: Clock = SYSTEM_CLOCK) -> SessionSnapshot:
    if isinstance(action, HydrateFromSnapshot):
        # Server snapshot is canonical; any local draft is dropped.
        return action.snapshot.model_copy(update={"last_local_persisted_at": clock.now_ms()})
    if isinstance(action, SetDraftAnswer):
        return state.model_copy(update={"draft_answer": action.value})
    if isinstance(action, SubmitDraftAnswer):
        return _submit(state, clock)
    if isinstance(action, Advance):
        return _advance(state, clock)
    if isinstance(action, MarkHeartbeatAttempt):
        return state.model_copy(update={"last_heartbeat_attempt_at": clock.now_ms()})
    return state
