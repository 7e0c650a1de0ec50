"""
OM Spiritual Backend - Mood Entry Model
========================================

What:  ORM model for the `moods` table, the append-only mood journal.
Who:   MoodService (record/history/recent), AdminService (count).

Rows are never updated after insert. Reads are per user, newest first, so
the composite (user_id, created_at) index serves both history (LIMIT 30)
and the recommendation window (LIMIT 7).

Rating and duration bounds are enforced by the API schema (MoodCreate), not
by the table, so rows written before validation existed still load.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from omspiritual.database import Base
from omspiritual.models.user import utcnow


class Mood(Base):
    __tablename__ = "moods"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # Minutes
    meditation_duration: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    frequency: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_moods_user_created_at", "user_id", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Mood(id={self.id}, user_id={self.user_id}, rating={self.rating})>"
