"""Query parameter model and inline query path parsing.

Query parameters are handed to the remote store's query adapter as typed
:class:`QueryParam` objects. They can be written the way the remote store's
JavaScript tooling writes them, either as a list of ``"op=value"`` strings or
inline after a ``#`` in the watched path::

    todos#orderByChild=done&equalTo=false&queryId=open-todos
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import StrEnum
from typing import Any

from pydantic import model_validator

from pyrtdb._constants import QUERY_PARAM_SEPARATOR, QUERY_SEPARATOR
from pyrtdb.exceptions import RtdbQueryParamError
from pyrtdb.models._base import RtdbBaseModel

QUERY_ID_PARAM = "queryId"


class QueryOp(StrEnum):
    ORDER_BY_VALUE = "orderByValue"
    ORDER_BY_PRIORITY = "orderByPriority"
    ORDER_BY_KEY = "orderByKey"
    ORDER_BY_CHILD = "orderByChild"
    LIMIT_TO_FIRST = "limitToFirst"
    LIMIT_TO_LAST = "limitToLast"
    EQUAL_TO = "equalTo"
    START_AT = "startAt"
    END_AT = "endAt"
    NOT_PARSED = "notParsed"


# Ops after which bound values are kept as strings instead of parsed to int.
_DISABLES_NUMBER_PARSING = frozenset(
    {QueryOp.ORDER_BY_VALUE, QueryOp.ORDER_BY_PRIORITY, QueryOp.ORDER_BY_KEY, QueryOp.NOT_PARSED}
)
_BOUND_OPS = frozenset({QueryOp.EQUAL_TO, QueryOp.START_AT, QueryOp.END_AT})
_LIMIT_OPS = frozenset({QueryOp.LIMIT_TO_FIRST, QueryOp.LIMIT_TO_LAST})
_LITERALS: dict[str, Any] = {"null": None, "true": True, "false": False}


class QueryParam(RtdbBaseModel):
    """One ordering, limiting or filtering operation on a query.

    ``key`` is only meaningful for bound ops (``equalTo``/``startAt``/
    ``endAt``), where it restricts the bound to a child key.
    """

    op: QueryOp
    value: Any = None
    key: str | None = None

    @model_validator(mode="after")
    def _check_value(self) -> QueryParam:
        if self.op == QueryOp.ORDER_BY_CHILD and (not isinstance(self.value, str) or not self.value):
            raise ValueError("orderByChild requires a child name")
        if self.op in _LIMIT_OPS and (
            isinstance(self.value, bool) or not isinstance(self.value, int) or self.value <= 0
        ):
            raise ValueError(f"{self.op.value} requires a positive integer, got {self.value!r}")
        if self.key is not None and self.op not in _BOUND_OPS:
            raise ValueError(f"{self.op.value} does not take a key")
        return self


def _parse_bound(raw: str, *, parse_numbers: bool) -> Any:
    if parse_numbers:
        try:
            return int(raw)
        except ValueError:
            pass
    return _LITERALS.get(raw, raw)


def parse_query_param(text: str, *, parse_numbers: bool = True) -> QueryParam:
    """Parse a single ``"op[=value[=key]]"`` string."""
    parts = text.strip().split("=")
    name = parts[0]
    try:
        op = QueryOp(name)
    except ValueError as exc:
        raise RtdbQueryParamError(f"Unknown query parameter {name!r} in {text!r}") from exc

    raw_value = parts[1] if len(parts) > 1 else None
    value: Any = None
    key: str | None = None

    if op in _LIMIT_OPS:
        try:
            value = int(raw_value) if raw_value is not None else None
        except ValueError as exc:
            raise RtdbQueryParamError(f"{name} requires an integer, got {raw_value!r}") from exc
    elif op in _BOUND_OPS:
        if raw_value is None:
            raise RtdbQueryParamError(f"{name} requires a value")
        value = _parse_bound(raw_value, parse_numbers=parse_numbers)
        if len(parts) > 2:
            key = parts[2]
    elif op == QueryOp.ORDER_BY_CHILD:
        value = raw_value

    try:
        return QueryParam(op=op, value=value, key=key)
    except ValueError as exc:
        raise RtdbQueryParamError(str(exc)) from exc


def parse_query_params(params: Iterable[str | QueryParam | Mapping[str, Any]] | None) -> list[QueryParam]:
    """Parse a list of query parameters, preserving order.

    Bound values are parsed to ``int`` unless an earlier ``orderByKey``,
    ``orderByValue``, ``orderByPriority`` or ``notParsed`` turned parsing
    off. ``null``/``true``/``false`` always become literals.
    """
    parsed: list[QueryParam] = []
    parse_numbers = True
    for param in params or ():
        if isinstance(param, QueryParam):
            item = param
        elif isinstance(param, str):
            item = parse_query_param(param, parse_numbers=parse_numbers)
        else:
            try:
                item = QueryParam.model_validate(param)
            except ValueError as exc:
                raise RtdbQueryParamError(str(exc)) from exc
        if item.op in _DISABLES_NUMBER_PARSING:
            parse_numbers = False
        parsed.append(item)
    return parsed


def split_query_path(path: str) -> tuple[str, list[str]]:
    """Split ``"base#a=1&b=2"`` into the base path and its raw parameters.

    ``queryId`` entries are dropped; they name the watcher, not the query.
    """
    base, _sep, fragment = path.partition(QUERY_SEPARATOR)
    params = [
        part
        for part in fragment.split(QUERY_PARAM_SEPARATOR)
        if part and part.split("=", 1)[0] != QUERY_ID_PARAM
    ]
    return base, params


def derive_query_id(path: str, event: str | None = None) -> str | None:
    """Derive a watcher query id from a path with inline query parameters.

    ``queryId=<id>`` wins (prefixed with the event when one is given); any
    other inline query yields the full original path; a plain path yields
    ``None``.
    """
    _base, sep, fragment = path.partition(QUERY_SEPARATOR)
    if not sep:
        return None
    for part in fragment.split(QUERY_PARAM_SEPARATOR):
        name, _, value = part.partition("=")
        if name == QUERY_ID_PARAM and value:
            return f"{event}:/{value}" if event else value
    return path
