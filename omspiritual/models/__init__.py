"""
ORM models. Importing this package registers every table with Base.metadata
(used by Database.init_schema and Alembic autogenerate).
"""

from omspiritual.models.analytics import AnalyticsEvent
from omspiritual.models.chant import Chant
from omspiritual.models.mood import Mood
from omspiritual.models.user import User

__all__ = ["AnalyticsEvent", "Chant", "Mood", "User"]
