"""High-level async client that keeps a state container in sync with a remote store."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from typing import Any

from pyrtdb._redact import redact_for_log
from pyrtdb._remote import PopulationResolver, RemoteDatabase
from pyrtdb.config import SyncConfig
from pyrtdb.ingestion.dispatcher import EventDispatcher
from pyrtdb.models._base import utcnow
from pyrtdb.models.actions import Action
from pyrtdb.models.watch import WatchRequest, coerce_watch_request, watch_requests_from_input
from pyrtdb.state.registry import WatcherRegistry, WatchResult
from pyrtdb.state.watchers import WatcherStore

_logger = logging.getLogger(__name__)

WatchInput = WatchRequest | str | Mapping[str, Any]


class RtdbSyncClient:
    """Watches remote paths and dispatches the resulting state actions.

    Usage::

        async with RtdbSyncClient(database, store.dispatch) as client:
            await client.watch_event({"type": "value", "path": "todos"})
            await client.watch_event("users#orderByChild=name&queryId=people")
    """

    def __init__(
        self,
        database: RemoteDatabase,
        dispatch: Callable[[Action], None],
        *,
        config: SyncConfig | None = None,
        resolver: PopulationResolver | None = None,
        watcher_store: WatcherStore | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._config = config or SyncConfig()
        self._dispatch_target = dispatch
        self._dispatcher = EventDispatcher(database, self._dispatch, resolver=resolver, clock=clock)
        self._registry = WatcherRegistry(
            self._dispatcher,
            self._dispatch,
            store=watcher_store,
            config=self._config,
            clock=clock,
        )

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> RtdbSyncClient:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    @property
    def config(self) -> SyncConfig:
        return self._config

    @property
    def registry(self) -> WatcherRegistry:
        return self._registry

    def _dispatch(self, action: Action) -> None:
        if self._config.action_trace_enabled:
            _logger.debug(
                "Dispatching %s %s",
                action.type.value,
                redact_for_log(action.model_dump(exclude={"type"}), max_string=self._config.trace_max_string),
            )
        self._dispatch_target(action)

    # ------------------------------------------------------------------
    # Watch operations
    # ------------------------------------------------------------------

    async def watch_event(self, request: WatchInput) -> WatchResult:
        """Watch one path. See :class:`~pyrtdb.state.registry.WatcherRegistry`."""
        return await self._registry.watch(coerce_watch_request(request))

    def unwatch_event(self, request: WatchInput) -> int:
        """Release one watch; returns the remaining reference count."""
        return self._registry.unwatch(coerce_watch_request(request))

    async def watch_events(self, requests: WatchInput | Iterable[WatchInput]) -> list[WatchResult]:
        results: list[WatchResult] = []
        for request in watch_requests_from_input(requests):
            results.append(await self._registry.watch(request))
        return results

    def unwatch_events(self, requests: WatchInput | Iterable[WatchInput]) -> list[int]:
        return [self._registry.unwatch(request) for request in watch_requests_from_input(requests)]

    async def drain(self) -> None:
        """Wait for in-flight population runs."""
        await self._dispatcher.drain()

    async def close(self) -> None:
        """Detach all listeners and cancel pending population runs."""
        await self._registry.close()
