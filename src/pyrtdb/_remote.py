"""Interfaces consumed from the remote store and the population resolver.

The watcher pipeline never talks to a network client directly. Adapters for
a concrete remote store implement :class:`RemoteDatabase`; they must invoke
listener callbacks on the event loop thread (use
``loop.call_soon_threadsafe`` when data arrives on a network thread).
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from pyrtdb.models.query import QueryParam
from pyrtdb.models.watch import EventKind, PopulateSpec


class Snapshot(Protocol):
    """Remote value at a path, at the moment of an event."""

    @property
    def key(self) -> str | None: ...

    def val(self) -> Any: ...

    def children(self) -> Iterator[Snapshot]:
        """Child snapshots in the remote store's native order."""
        ...


class Subscription(Protocol):
    """Handle for a continuous listener. ``unsubscribe`` must be idempotent."""

    @property
    def active(self) -> bool: ...

    def unsubscribe(self) -> None: ...


DataCallback = Callable[[Snapshot], None]
ErrorCallback = Callable[[BaseException], None]


class RemoteDatabase(Protocol):
    """Query construction and listener attachment on the remote store."""

    def build_query(self, path: str) -> Any: ...

    def apply_params(self, query: Any, params: Sequence[QueryParam]) -> Any: ...

    async def fetch_once(self, query: Any) -> Snapshot: ...

    def subscribe(
        self,
        query: Any,
        event: EventKind,
        on_data: DataCallback,
        on_error: ErrorCallback,
    ) -> Subscription: ...

    async def fetch_first(self, path: str) -> Snapshot:
        """Fetch the first child of *path* ordered by key."""
        ...


class PopulationResolver(Protocol):
    """Fetches the data referenced by populated fields."""

    async def resolve(
        self,
        root_key: str | None,
        data: Any,
        specs: Sequence[PopulateSpec],
    ) -> Mapping[str, Any]:
        """Return resolved values keyed by store path."""
        ...


class CallbackSubscription:
    """Idempotent subscription handle wrapping a detach callable."""

    def __init__(self, detach: Callable[[], None]) -> None:
        self._detach: Callable[[], None] | None = detach

    @property
    def active(self) -> bool:
        return self._detach is not None

    def unsubscribe(self) -> None:
        detach = self._detach
        self._detach = None
        if detach is not None:
            detach()


@dataclass(frozen=True)
class DictSnapshot:
    """Snapshot over plain Python data.

    Mapping children are traversed in insertion order, list children by index.
    """

    key: str | None
    value: Any

    def val(self) -> Any:
        return copy.deepcopy(self.value)

    def children(self) -> Iterator[DictSnapshot]:
        if isinstance(self.value, Mapping):
            for child_key, child_value in self.value.items():
                yield DictSnapshot(str(child_key), child_value)
        elif isinstance(self.value, list):
            for index, child_value in enumerate(self.value):
                yield DictSnapshot(str(index), child_value)
