"""
OM Spiritual Backend - Authentication Schemas
==============================================

What:  Signup/login payloads, the public user profile and the token response.
Who:   routes/auth.py and AuthService.

`UserPublic` is the only user representation that leaves the API; it omits
the password hash and the processor's customer/subscription ids.
"""

import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

# Deliberately loose: one "@", something on each side, a dot in the domain
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_email(value: str) -> str:
    value = value.strip().lower()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Invalid email address")
    return value


class SignupRequest(BaseModel):
    email: str = Field(max_length=255, description="Login email, unique per account")
    password: str = Field(min_length=6, max_length=128)
    name: Optional[str] = Field(default=None, max_length=255)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return normalize_email(v)


class LoginRequest(BaseModel):
    email: str = Field(max_length=255)
    password: str = Field(max_length=128)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        # No format check: an unknown address is a 401, not a 400
        return v.strip().lower()


class UserPublic(BaseModel):
    """
    What:  Profile returned by signup, login and GET /api/auth/me.
    The client reads plan_type to gate premium chants and role to show the
    admin panel.
    """
    id: int
    email: str
    name: Optional[str] = None
    role: str
    plan_type: str
    subscription_status: str
    expiry_date: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AuthResponse(BaseModel):
    token: str = Field(description="Bearer token for the Authorization header")
    user: UserPublic
