"""State-mutation actions emitted to the state container.

Actions are a tagged union on ``type``. ``SET`` additionally carries a
:class:`SetSource` so consumers can tell a listener update from a
population-resolved child or root without inspecting optional fields.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import Field, TypeAdapter

from pyrtdb._constants import ACTION_PREFIX
from pyrtdb.models._base import MISSING, RtdbBaseModel, utcnow


class ActionType(StrEnum):
    START = f"{ACTION_PREFIX}/START"
    SET = f"{ACTION_PREFIX}/SET"
    NO_VALUE = f"{ACTION_PREFIX}/NO_VALUE"
    ERROR = f"{ACTION_PREFIX}/ERROR"
    UNAUTHORIZED_ERROR = f"{ACTION_PREFIX}/UNAUTHORIZED_ERROR"
    UNSET_LISTENER = f"{ACTION_PREFIX}/UNSET_LISTENER"


class SetSource(StrEnum):
    """Where a ``SET`` action's data came from."""

    LISTENER = "listener"
    ONCE = "once"
    POPULATED_CHILD = "populated_child"
    POPULATED_ROOT = "populated_root"


class _ActionBase(RtdbBaseModel):
    path: str
    timestamp: datetime = Field(default_factory=utcnow)


class StartAction(_ActionBase):
    type: Literal[ActionType.START] = ActionType.START
    requesting: bool = True
    requested: bool = False


class SetAction(_ActionBase):
    type: Literal[ActionType.SET] = ActionType.SET
    source: SetSource
    data: Any = None
    ordered: tuple[str, ...] | None = None
    requesting: bool = False
    requested: bool = True

    @property
    def is_removal(self) -> bool:
        """``True`` when the value at ``path`` was removed remotely."""
        return self.data is MISSING


class NoValueAction(_ActionBase):
    type: Literal[ActionType.NO_VALUE] = ActionType.NO_VALUE
    requesting: bool = False
    requested: bool = True


class ErrorAction(_ActionBase):
    type: Literal[ActionType.ERROR] = ActionType.ERROR
    payload: Any = None


class UnauthorizedErrorAction(_ActionBase):
    type: Literal[ActionType.UNAUTHORIZED_ERROR] = ActionType.UNAUTHORIZED_ERROR
    payload: Any = None


class UnsetListenerAction(_ActionBase):
    type: Literal[ActionType.UNSET_LISTENER] = ActionType.UNSET_LISTENER
    watcher_id: str
    remaining: int = 0


Action = Annotated[
    StartAction | SetAction | NoValueAction | ErrorAction | UnauthorizedErrorAction | UnsetListenerAction,
    Field(discriminator="type"),
]

ACTION_ADAPTER: TypeAdapter[Action] = TypeAdapter(Action)
