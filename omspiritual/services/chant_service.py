"""
Content catalog: list every chant, and create new ones for admins.

Listing is not filtered by plan tier. Premium rows go to FREE users too and
the client decides what is playable.
"""

import logging
from typing import List

from sqlalchemy import asc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from omspiritual.exceptions import DatabaseError
from omspiritual.models.chant import Chant
from omspiritual.schemas.chant import ChantCreate, ChantResponse

logger = logging.getLogger(__name__)


class ChantService:

    async def list_chants(self, db: AsyncSession) -> List[ChantResponse]:
        """All chants in insertion order."""
        try:
            result = await db.execute(select(Chant).order_by(asc(Chant.id)))
            chants = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing chants: %s", str(e))
            raise DatabaseError(message="Could not retrieve chants. Please try again.")
        return [ChantResponse.model_validate(c) for c in chants]

    async def add_chant(self, db: AsyncSession, data: ChantCreate) -> ChantResponse:
        chant = Chant(**data.model_dump())
        try:
            db.add(chant)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating chant: %s", str(e))
            raise DatabaseError(message="Could not create the chant. Please try again.")
        logger.info("Chant %s created: %s (premium=%s)", chant.id, chant.title, chant.is_premium)
        return ChantResponse.model_validate(chant)


chant_service = ChantService()
