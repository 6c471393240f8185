"""Base model and sentinel shared by pyrtdb models.

Every pyrtdb model inherits from :class:`RtdbBaseModel` which provides:

* ``frozen=True`` so requests, keys and actions are immutable once built.
* ``alias_generator=to_camel`` so the option names used by the remote
  store's JavaScript tooling (``storeAs``, ``queryParams``...) map to
  snake_case fields, while snake_case names keep working.
"""

from __future__ import annotations

import enum
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Missing(enum.Enum):
    """Sentinel type for "value now absent".

    ``None`` means the remote value is empty; :data:`MISSING` means the value
    was removed (``child_removed``) and the store location should be cleared.
    """

    MISSING = "MISSING"

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = Missing.MISSING


def utcnow() -> datetime:
    return datetime.now(UTC)


class RtdbBaseModel(BaseModel):
    """Base for pyrtdb models."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
    )
