# routers/health.py
from pathlib import Path

from fastapi import APIRouter, HTTPException
from sqlalchemy import inspect, text

from alembic.config import Config
from alembic.script import ScriptDirectory
from db import Base, engine

router = APIRouter(prefix="/health", tags=["health"])

_ALEMBIC_INI = Path(__file__).resolve().parent.parent / "alembic.ini"


@router.get("/db")
def health_db():
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return {"ok": True}
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"db_error: {type(e).__name__}: {e}")


def _alembic_heads() -> list[str]:
    script = ScriptDirectory.from_config(Config(str(_ALEMBIC_INI)))
    return list(script.get_heads())


def _session_tables() -> list[str]:
    import models  # noqa: F401  registers tables on Base.metadata

    return sorted(Base.metadata.tables)


@router.get("/migrations")
def health_migrations():
    """
    Compares the alembic head in code with the stamped DB revision, and lists
    session tables (exam_sessions, exam_session_events) missing from the DB.
    """
    heads: list[str] = []
    try:
        heads = _alembic_heads()
    except Exception:
        heads = []

    expected = _session_tables()
    try:
        with engine.connect() as conn:
            present = set(inspect(conn).get_table_names())
            db_ver = None
            if "alembic_version" in present:
                db_ver = conn.execute(
                    text("SELECT version_num FROM alembic_version")
                ).scalar_one_or_none()
    except Exception as e:
        return {
            "ok": False,
            "error": f"db_connect_failed: {e}",
            "code_heads": heads,
            "db_version": None,
        }

    missing = [t for t in expected if t not in present]
    synced = db_ver in heads if heads else False
    return {
        "ok": synced and not missing,
        "synced": synced,
        "db_version": db_ver,
        "code_heads": heads,
        "missing_tables": missing,
    }
