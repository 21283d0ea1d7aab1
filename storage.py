# storage.py
"""Key-value storage ports for local snapshot persistence."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Dict, Optional, Protocol

from sqlalchemy import DateTime, String, Text, create_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker

from config import LOCAL_STORE_URL


class Storage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...


class MemoryStorage:
    def __init__(self) -> None:
        self._data: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value


# Kept off the server metadata so alembic never sees it.
class _LocalBase(DeclarativeBase):
    pass


class LocalItem(_LocalBase):
    __tablename__ = "local_items"
    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )


class SqlStorage:
    """Durable store on any SQLAlchemy URL (SQLite file by default)."""

    def __init__(self, url: str = LOCAL_STORE_URL) -> None:
        connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
        self.engine = create_engine(url, connect_args=connect_args)
        _LocalBase.metadata.create_all(self.engine)
        self._session = sessionmaker(bind=self.engine, autoflush=False, autocommit=False)

    def get_item(self, key: str) -> Optional[str]:
        with self._session() as db:
            row = db.get(LocalItem, key)
            return row.value if row else None

    def set_item(self, key: str, value: str) -> None:
        with self._session() as db:
            row = db.get(LocalItem, key)
            if row is None:
                db.add(LocalItem(key=key, value=value))
            else:
                row.value = value
                row.updated_at = datetime.now(UTC)
            db.commit()
