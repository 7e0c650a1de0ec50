"""
OM Spiritual Backend - User Model
==================================

What:  ORM model for the `users` table: identity, password hash, role,
       plan tier and Razorpay subscription identifiers.
Who:   AuthService (signup/login), BillingService (webhook promotion),
       AdminService (stats, disable toggle).

Lifecycle:
    1. Created at signup (role='user' unless listed in ADMIN_EMAILS, plan FREE)
    2. Promoted to PRO by a verified subscription webhook
    3. Disabled / re-enabled by an admin
    4. Never hard-deleted
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, Index, Integer, String, false, text
from sqlalchemy.orm import Mapped, mapped_column

from omspiritual.database import Base


ROLE_USER = "user"
ROLE_ADMIN = "admin"

PLAN_FREE = "FREE"
PLAN_PRO = "PRO"

SUBSCRIPTION_INACTIVE = "inactive"
SUBSCRIPTION_ACTIVE = "active"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Stored lower-cased; uniqueness enforced by the database
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    # passlib hash string (algorithm + salt + digest), never the raw password
    password: Mapped[str] = mapped_column(String(255), nullable=False)

    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ROLE_USER,
        server_default=text("'user'"),
    )

    plan_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=PLAN_FREE,
        server_default=text("'FREE'"),
    )

    subscription_status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=SUBSCRIPTION_INACTIVE,
        server_default=text("'inactive'"),
    )

    razorpay_customer_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    razorpay_subscription_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # End of the current paid period, from the processor's `current_end`
    expiry_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    is_disabled: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )

    __table_args__ = (
        # Admin "recent users" listing
        Index("idx_users_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}', plan='{self.plan_type}')>"
