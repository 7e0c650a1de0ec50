"""
Admin operations: aggregate stats, recent users, and the disabled flag.

Role checks do not happen here; the admin router requires the admin role
before any of these run.
"""

import logging

from sqlalchemy import desc, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from omspiritual.exceptions import DatabaseError, NotFoundError
from omspiritual.models.mood import Mood
from omspiritual.models.user import PLAN_PRO, User
from omspiritual.schemas.admin import AdminStatsResponse, AdminUserSummary

logger = logging.getLogger(__name__)

RECENT_USERS_LIMIT = 10


class AdminService:

    async def stats(self, db: AsyncSession) -> AdminStatsResponse:
        try:
            total_users = (await db.execute(select(func.count(User.id)))).scalar() or 0
            pro_users = (
                await db.execute(select(func.count(User.id)).where(User.plan_type == PLAN_PRO))
            ).scalar() or 0
            total_moods = (await db.execute(select(func.count(Mood.id)))).scalar() or 0
            recent = (
                await db.execute(
                    select(User)
                    .order_by(desc(User.created_at), desc(User.id))
                    .limit(RECENT_USERS_LIMIT)
                )
            ).scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error computing admin stats: %s", str(e))
            raise DatabaseError(message="Could not load statistics. Please try again.")

        return AdminStatsResponse(
            total_users=total_users,
            pro_users=pro_users,
            total_moods=total_moods,
            recent_users=[AdminUserSummary.model_validate(u) for u in recent],
        )

    async def set_user_disabled(self, db: AsyncSession, user_id: int, is_disabled: bool) -> None:
        """Set (not flip) the flag; repeating the same call changes nothing."""
        try:
            user = await db.get(User, user_id)
            if user is None:
                raise NotFoundError(resource="user", resource_id=str(user_id))
            user.is_disabled = is_disabled
            await db.flush()
        except NotFoundError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error updating user %s: %s", user_id, str(e))
            raise DatabaseError(message="Could not update the user. Please try again.")
        logger.info("User %s is_disabled set to %s", user_id, is_disabled)


admin_service = AdminService()
