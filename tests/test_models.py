"""
ORM mapping checks.
"""

import warnings

from sqlalchemy import inspect
from sqlalchemy.exc import SADeprecationWarning
from sqlalchemy.orm import configure_mappers

from omspiritual.models import AnalyticsEvent, Chant, Mood, User


def test_mappers_configure_without_deprecation_warnings():
    with warnings.catch_warnings():
        warnings.simplefilter("error", SADeprecationWarning)
        configure_mappers()


def test_models_are_flat_tables():
    """Services query by user_id; no model carries a lazy relationship."""
    for model in (User, Chant, Mood, AnalyticsEvent):
        assert list(inspect(model).relationships) == []


def test_mood_references_users():
    foreign_keys = {fk.target_fullname for fk in Mood.__table__.c.user_id.foreign_keys}
    assert foreign_keys == {"users.id"}
