"""Session persistence behind a small load/save/clear interface.

``SqlSessionStore`` keeps the serialized session in a key-value table keyed
by the application identifier. ``InMemorySessionStore`` is the drop-in used
by tests. A stored value that cannot be parsed back into a ``Session`` is
treated as absent so a corrupt row degrades to anonymous instead of failing
start-up.
"""
from __future__ import annotations

from typing import Callable, Optional, Protocol

from pydantic import ValidationError
from sqlalchemy.orm import Session as DbSession

from civicsense.config import SESSION_STORE_KEY
from civicsense.database import SessionLocal
from civicsense.models.db.persisted_sessions import PersistedSession
from civicsense.models.schemas.auth import Session
from civicsense.utils import get_logger

logger = get_logger(__name__)


class SessionStore(Protocol):
    def load(self) -> Optional[Session]: ...

    def save(self, session: Session) -> None: ...

    def clear(self) -> None: ...


def _parse(raw: Optional[str]) -> Optional[Session]:
    if not raw:
        return None
    try:
        return Session.model_validate_json(raw)
    except ValidationError as e:
        logger.warning("Ignoring unparseable persisted session", error=str(e))
        return None


class InMemorySessionStore:
    """Holds the serialized form so corrupt-payload handling matches the SQL store."""

    def __init__(self, raw: Optional[str] = None):
        self.raw = raw

    def load(self) -> Optional[Session]:
        return _parse(self.raw)

    def save(self, session: Session) -> None:
        self.raw = session.model_dump_json()

    def clear(self) -> None:
        self.raw = None


class SqlSessionStore:
    def __init__(
        self,
        session_factory: Callable[[], DbSession] = SessionLocal,
        key: str = SESSION_STORE_KEY,
    ):
        self.session_factory = session_factory
        self.key = key

    def load(self) -> Optional[Session]:
        db = self.session_factory()
        try:
            row = db.get(PersistedSession, self.key)
            return _parse(row.payload if row else None)
        finally:
            db.close()

    def save(self, session: Session) -> None:
        db = self.session_factory()
        try:
            row = db.get(PersistedSession, self.key)
            if row is None:
                db.add(PersistedSession(key=self.key, payload=session.model_dump_json()))
            else:
                row.payload = session.model_dump_json()
            db.commit()
        except Exception as e:
            logger.error("Session persistence failed", key=self.key, error=str(e), exc_info=True)
            db.rollback()
            raise
        finally:
            db.close()

    def clear(self) -> None:
        db = self.session_factory()
        try:
            db.query(PersistedSession).filter(PersistedSession.key == self.key).delete()
            db.commit()
        except Exception as e:
            logger.error("Session clear failed", key=self.key, error=str(e), exc_info=True)
            db.rollback()
            raise
        finally:
            db.close()


__all__ = ["SessionStore", "InMemorySessionStore", "SqlSessionStore"]
