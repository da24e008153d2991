"""SQLAlchemy model for the key-value table that survives process restarts.

A single row keyed by the application identifier holds the serialized
signed-in session. The payload is stored as raw text so a corrupt value can
be detected (and ignored) at load time instead of failing inside the ORM.
"""
from datetime import datetime
from sqlalchemy import String, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from civicsense.database import Base

class PersistedSession(Base):
    __tablename__ = "persisted_sessions"
    key: Mapped[str] = mapped_column(String, primary_key=True)
    payload: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
