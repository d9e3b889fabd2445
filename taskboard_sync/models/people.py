"""
People and the accounts they look after.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import Field, constr, field_validator

from .enums import Role
from .primitives import Entity, blank_to_none, generate_id


class Person(Entity):
    """Someone who can log in and be assigned work.

    The password is stored in plaintext because the backend sheet stores it
    that way. Hardening this is out of scope; it is not a recommendation.
    """

    id: constr(min_length=1) = Field(default_factory=lambda: generate_id("person"))
    name: str = Field(..., description="Display name")
    email: str = Field(..., description="Login email")
    password: Optional[str] = Field(None, description="Plaintext credential")
    role: Role = Field(Role.ASSIGNEE, description="Lead or assignee")

    @field_validator("password", mode="before")
    @classmethod
    def _blank_password(cls, value: Any) -> Any:
        return blank_to_none(value)


class Account(Entity):
    """A customer account, optionally assigned to a person."""

    id: constr(min_length=1) = Field(default_factory=lambda: generate_id("account"))
    name: str = Field(..., description="Account name")
    assigned_person_id: Optional[str] = Field(
        None, description="Soft reference to the responsible Person"
    )

    @field_validator("assigned_person_id", mode="before")
    @classmethod
    def _blank_assignee(cls, value: Any) -> Any:
        return blank_to_none(value)
