"""
OM Spiritual Backend - Chant Model
===================================

What:  ORM model for the `chants` table: audio tracks in the catalog.
Who:   ChantService (listing), AdminService (creation), Database.init_schema (seed).

`is_premium` marks tracks reserved for the PRO plan. The listing endpoint
returns premium rows to every caller; the client decides what to play.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, String, Text, false, text
from sqlalchemy.orm import Mapped, mapped_column

from omspiritual.database import Base
from omspiritual.models.user import utcnow


class Chant(Base):
    __tablename__ = "chants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # Display label such as "432Hz"; not a number
    frequency: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    audio_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    is_premium: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<Chant(id={self.id}, title='{self.title}', premium={self.is_premium})>"
