"""
OM Spiritual Backend - Application Package
===========================================

What:  Meditation and wellness API: accounts, chant catalog, mood journal,
       AI recommendations and subscription billing.
Who:   Imported by uvicorn (`omspiritual.main:app`), Alembic and pytest.

Layering:

    ┌─────────────────────────────────────┐
    │   Routes + Dependencies (HTTP)      │  ← status codes, auth requirements
    ├─────────────────────────────────────┤
    │   Services (business rules)         │  ← auth, moods, recommendation, billing
    ├─────────────────────────────────────┤
    │   Models & Schemas (data)           │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   Database (storage context)        │  ← async engine + session factory
    └─────────────────────────────────────┘

Routes never touch SQL directly; services never see a Request object.
"""

__version__ = "1.0.0"
