"""
Session values persisted in durable local storage.
"""

from __future__ import annotations

from pydantic import Field, constr, field_validator

from .enums import Role
from .primitives import Entity


class AuthenticatedUser(Entity):
    """The identity of whoever is logged in. Never carries the password."""

    id: constr(min_length=1)
    name: str
    email: str
    role: Role


class ConnectionConfig(Entity):
    """Where the spreadsheet backend lives.

    The endpoint URL doubles as the shared secret; a non-empty URL is
    treated as connected without any handshake.
    """

    endpoint_url: constr(min_length=1) = Field(..., description="Backend endpoint")

    @field_validator("endpoint_url", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value
