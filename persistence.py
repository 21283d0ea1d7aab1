# persistence.py

from __future__ import annotations

import logging
from typing import Optional

from clock import SYSTEM_CLOCK, Clock
from schemas.exam import SessionSnapshot
from storage import Storage

logger = logging.getLogger(__name__)

STORAGE_PREFIX = "ace.exam.session."


def storage_key(session_id: str) -> str:
    return f"{STORAGE_PREFIX}{session_id}"


def serialize_snapshot(snapshot: SessionSnapshot) -> str:
    return snapshot.model_dump_json(by_alias=True)


def deserialize_snapshot(raw: str) -> SessionSnapshot:
    return SessionSnapshot.model_validate_json(raw)


def persist_snapshot(
    storage: Storage, snapshot: SessionSnapshot, clock: Clock = SYSTEM_CLOCK
) -> None:
    """Best-effort write; storage failures are logged and dropped."""
    stamped = snapshot.model_copy(update={"last_local_persisted_at": clock.now_ms()})
    try:
        storage.set_item(storage_key(snapshot.session_id), serialize_snapshot(stamped))
    except Exception as e:
        logger.debug("local persist failed for %s: %s", snapshot.session_id, e)


def load_snapshot(storage: Storage, session_id: str) -> Optional[SessionSnapshot]:
    try:
        raw = storage.get_item(storage_key(session_id))
        if not raw:
            return None
        return deserialize_snapshot(raw)
    except Exception as e:
        # unreadable or stale record -> behave as if nothing was stored
        logger.debug("local load failed for %s: %s", session_id, e)
        return None
