"""Data models for watch requests and emitted actions."""

from pyrtdb.models._base import MISSING, Missing, RtdbBaseModel
from pyrtdb.models.query import QueryOp, QueryParam, derive_query_id, parse_query_param, parse_query_params
from pyrtdb.models.watch import (
    EventKind,
    PopulateSpec,
    WatchKey,
    WatchRequest,
    coerce_watch_request,
    watch_requests_from_input,
)
from pyrtdb.models.actions import (
    ACTION_ADAPTER,
    Action,
    ActionType,
    ErrorAction,
    NoValueAction,
    SetAction,
    SetSource,
    StartAction,
    UnauthorizedErrorAction,
    UnsetListenerAction,
)

__all__ = [
    "ACTION_ADAPTER",
    "MISSING",
    "Action",
    "ActionType",
    "ErrorAction",
    "EventKind",
    "Missing",
    "NoValueAction",
    "PopulateSpec",
    "QueryOp",
    "QueryParam",
    "RtdbBaseModel",
    "SetAction",
    "SetSource",
    "StartAction",
    "UnauthorizedErrorAction",
    "UnsetListenerAction",
    "WatchKey",
    "WatchRequest",
    "coerce_watch_request",
    "derive_query_id",
    "parse_query_param",
    "parse_query_params",
    "watch_requests_from_input",
]
