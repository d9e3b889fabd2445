"""
Common primitives used across taskboard entities.
"""

from __future__ import annotations

import time
import uuid
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

UNASSIGNED = "Unassigned"


def generate_id(prefix: str) -> str:
    """Generate an opaque identifier such as ``item_3f9c2a1b7d40``."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def now_ms() -> int:
    """Return the current time as epoch milliseconds."""
    return int(time.time() * 1000)


def blank_to_none(value: Any) -> Any:
    """Treat an empty string the same as an absent value."""
    if isinstance(value, str) and value == "":
        return None
    return value


class Entity(BaseModel):
    """Base class for all synced entities.

    Entities are immutable; the store derives updated copies instead of
    mutating values other components may still hold.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)


class OwnedRecord(Entity):
    """A record owned by an account or a person.

    Both owner references are optional. A record with neither is orphaned,
    which is tolerated.
    """

    account_id: Optional[str] = None
    person_id: Optional[str] = None

    @field_validator("account_id", "person_id", mode="before")
    @classmethod
    def _blank_owner(cls, value: Any) -> Any:
        return blank_to_none(value)

    @property
    def owner_key(self) -> Tuple[str, str]:
        """Key identifying the owner, used for one-per-owner collections."""
        return (self.account_id or "", self.person_id or "")
