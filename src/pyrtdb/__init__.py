"""pyrtdb - Sync a remote real-time data store into a local state container."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyrtdb")
except PackageNotFoundError:
    __version__ = "0+local"
from pyrtdb._remote import (
    CallbackSubscription,
    DictSnapshot,
    PopulationResolver,
    RemoteDatabase,
    Snapshot,
    Subscription,
)
from pyrtdb.client import RtdbSyncClient
from pyrtdb.config import SyncConfig
from pyrtdb.exceptions import (
    RtdbConfigError,
    RtdbError,
    RtdbFetchError,
    RtdbPopulateError,
    RtdbQueryError,
    RtdbQueryParamError,
)
from pyrtdb.models import (
    MISSING,
    Action,
    ActionType,
    ErrorAction,
    EventKind,
    NoValueAction,
    PopulateSpec,
    QueryOp,
    QueryParam,
    SetAction,
    SetSource,
    StartAction,
    UnauthorizedErrorAction,
    UnsetListenerAction,
    WatchKey,
    WatchRequest,
)
from pyrtdb.state.registry import WatcherRegistry, WatchResult, WatchStatus
from pyrtdb.state.watchers import InMemoryWatcherStore, WatcherStore

__all__ = [
    "__version__",
    "MISSING",
    "Action",
    "ActionType",
    "CallbackSubscription",
    "DictSnapshot",
    "ErrorAction",
    "EventKind",
    "InMemoryWatcherStore",
    "NoValueAction",
    "PopulateSpec",
    "PopulationResolver",
    "QueryOp",
    "QueryParam",
    "RemoteDatabase",
    "RtdbConfigError",
    "RtdbError",
    "RtdbFetchError",
    "RtdbPopulateError",
    "RtdbQueryError",
    "RtdbQueryParamError",
    "RtdbSyncClient",
    "SetAction",
    "SetSource",
    "Snapshot",
    "StartAction",
    "Subscription",
    "SyncConfig",
    "UnauthorizedErrorAction",
    "UnsetListenerAction",
    "WatchKey",
    "WatchRequest",
    "WatchResult",
    "WatchStatus",
    "WatcherRegistry",
    "WatcherStore",
]
