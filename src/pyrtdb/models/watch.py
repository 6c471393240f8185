"""Watch request and watcher identity models."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import StrEnum
from typing import Any

from pydantic import Field, field_validator, model_validator

from pyrtdb._constants import QUERY_SEPARATOR, STORE_AS_SEPARATOR
from pyrtdb.models._base import RtdbBaseModel
from pyrtdb.models.query import QueryParam, derive_query_id, parse_query_params, split_query_path


class EventKind(StrEnum):
    """Remote event kinds a watcher can subscribe to."""

    VALUE = "value"
    ONCE = "once"
    FIRST_CHILD = "first_child"
    CHILD_ADDED = "child_added"
    CHILD_CHANGED = "child_changed"
    CHILD_REMOVED = "child_removed"
    CHILD_MOVED = "child_moved"

    @property
    def is_continuous(self) -> bool:
        """Whether this kind attaches a persistent listener."""
        return self not in (EventKind.ONCE, EventKind.FIRST_CHILD)


class PopulateSpec(RtdbBaseModel):
    """A populated field: ``child`` holds references into the ``root`` collection.

    Accepts the ``"child:root"`` shorthand.
    """

    child: str
    root: str
    store_as: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _parse_shorthand(cls, values: Any) -> Any:
        if not isinstance(values, str):
            return values
        child, sep, root = values.partition(":")
        if not sep:
            raise ValueError(f"populate shorthand must be 'child:root', got {values!r}")
        return {"child": child.strip(), "root": root.strip()}

    @field_validator("child", "root")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("populate child and root must be non-empty")
        return value


def _pop_either(values: dict[str, Any], name: str, alias: str) -> Any:
    if name in values:
        return values.pop(name)
    return values.pop(alias, None)


class WatchRequest(RtdbBaseModel):
    """A request to watch a remote path.

    ``path`` may carry inline query parameters (``"todos#limitToFirst=10"``);
    they are moved into ``query_params`` on construction and the request gets
    a derived ``query_id`` unless one is given.
    """

    event: EventKind = Field(default=EventKind.VALUE, alias="type")
    path: str
    query_params: tuple[QueryParam, ...] = ()
    is_query: bool = False
    store_as: str | None = None
    query_id: str | None = None
    populates: tuple[PopulateSpec, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _expand_inline_query(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        working = dict(values)
        path = working.get("path")

        explicit_params = _pop_either(working, "query_params", "queryParams")
        params: list[Any] = list(explicit_params or ())
        query_id = _pop_either(working, "query_id", "queryId")
        is_query = _pop_either(working, "is_query", "isQuery")

        if isinstance(path, str) and QUERY_SEPARATOR in path:
            base, inline = split_query_path(path)
            working["path"] = base
            params.extend(inline)
            if query_id is None:
                event = working.get("event", working.get("type", EventKind.VALUE))
                query_id = derive_query_id(path, str(event))
            if is_query is None:
                is_query = True

        if is_query is None:
            is_query = bool(params)

        working["query_params"] = params
        working["query_id"] = query_id
        working["is_query"] = is_query
        return working

    @field_validator("path")
    @classmethod
    def _normalize_path(cls, value: str) -> str:
        path = value.strip()
        if not path:
            raise ValueError("path must be non-empty")
        return path

    @field_validator("query_params", mode="before")
    @classmethod
    def _parse_params(cls, value: Any) -> Any:
        if value is None:
            return ()
        return tuple(parse_query_params(value))

    @field_validator("populates", mode="before")
    @classmethod
    def _wrap_populates(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, (str, Mapping, PopulateSpec)):
            return (value,)
        return value

    @property
    def result_root(self) -> str:
        """Store location for this watch's own data."""
        return self.store_as or self.path

    def watch_path(self, separator: str = STORE_AS_SEPARATOR) -> str:
        """``path``, or ``path@store_as`` when a custom location is requested."""
        if not self.store_as:
            return self.path
        return f"{self.path}{separator}{self.store_as}"


class WatchKey(RtdbBaseModel):
    """Identity of one remote subscription."""

    event: EventKind
    watch_path: str
    query_id: str | None = None

    @property
    def id(self) -> str:
        """Stable string form used in logs and ``UNSET_LISTENER`` actions."""
        if self.query_id:
            return self.query_id
        return f"{self.event}:/{self.watch_path.lstrip('/')}"

    def __str__(self) -> str:
        return self.id


def coerce_watch_request(value: WatchRequest | str | Mapping[str, Any]) -> WatchRequest:
    """Build a :class:`WatchRequest` from a request, a path, or an option mapping."""
    if isinstance(value, WatchRequest):
        return value
    if isinstance(value, str):
        return WatchRequest(path=value)
    if isinstance(value, Mapping):
        return WatchRequest.model_validate(dict(value))
    raise TypeError(f"Cannot build a watch request from {type(value).__name__}")


def watch_requests_from_input(
    inputs: WatchRequest | str | Mapping[str, Any] | Iterable[WatchRequest | str | Mapping[str, Any]],
) -> list[WatchRequest]:
    """Coerce a single watch input or an iterable of them into requests."""
    if isinstance(inputs, (WatchRequest, str, Mapping)):
        return [coerce_watch_request(inputs)]
    return [coerce_watch_request(item) for item in inputs]
