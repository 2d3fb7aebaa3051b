"""SQLAlchemy models for the ledger world state and key history."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, LargeBinary, String
from sqlalchemy.orm import Mapped, mapped_column

from marbles_engine.common.models import Base, TimestampMixin, utcnow


class WorldStateModel(Base, TimestampMixin):
    """Current value of every live key."""

    __tablename__ = "world_state"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    tx_id: Mapped[str] = mapped_column(String(64), nullable=False)


class KeyHistoryModel(Base):
    """Append-only change log; a delete is a row with no value."""

    __tablename__ = "key_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    key: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    tx_id: Mapped[str] = mapped_column(String(64), nullable=False)
    value: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)
    is_delete: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
