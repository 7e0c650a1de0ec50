"""
Pydantic request/response schemas: the API contract, kept separate from the
ORM models so internal columns (password hash, subscription ids) never leak.
"""
