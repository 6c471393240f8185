"""Listener attachment and firing-to-action translation.

``once`` and ``first_child`` watches issue a single fetch; every other event
kind attaches a persistent listener through the remote store adapter. Each
firing becomes one ``SET`` action, or a population run when the watch
declares populated fields.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pyrtdb._remote import PopulationResolver, RemoteDatabase, Snapshot, Subscription
from pyrtdb.exceptions import RtdbConfigError, RtdbFetchError, RtdbQueryError
from pyrtdb.ingestion.apply import dispatch_set
from pyrtdb.ingestion.normalize import NormalizedEvent, normalize_event, ordered_from_snapshot
from pyrtdb.ingestion.populate import PopulationCoordinator
from pyrtdb.models._base import MISSING, utcnow
from pyrtdb.models.actions import (
    Action,
    ErrorAction,
    NoValueAction,
    SetAction,
    SetSource,
    StartAction,
    UnauthorizedErrorAction,
)
from pyrtdb.models.watch import EventKind, PopulateSpec, WatchRequest

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Attachment:
    """What attaching a watch produced: a fetched snapshot or a live subscription."""

    snapshot: Snapshot | None = None
    subscription: Subscription | None = None


class EventDispatcher:
    def __init__(
        self,
        database: RemoteDatabase,
        dispatch: Callable[[Action], None],
        *,
        resolver: PopulationResolver | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._database = database
        self._dispatch = dispatch
        self._clock = clock
        self._populator = PopulationCoordinator(resolver, dispatch, clock=clock) if resolver is not None else None
        self._pending: set[asyncio.Task[list[SetAction]]] = set()

    @property
    def pending_populations(self) -> int:
        return len(self._pending)

    async def attach(self, request: WatchRequest) -> Attachment:
        """Attach *request* to the remote store.

        Raises :class:`RtdbFetchError` when a one-shot fetch fails and
        :class:`RtdbQueryError` when the adapter cannot build the query; both
        dispatch ``ERROR`` first.
        """
        if request.populates and request.event.is_continuous and self._populator is None:
            raise RtdbConfigError(f"Watch on {request.path} declares populates but no resolver is configured")

        if request.event == EventKind.FIRST_CHILD:
            return Attachment(snapshot=await self.fetch_first(request))

        try:
            query = self._build_query(request)
        except Exception as exc:
            self._dispatch(ErrorAction(path=request.result_root, payload=exc, timestamp=self._clock()))
            raise RtdbQueryError(
                f"query construction failed for {request.path}",
                path=request.path,
                event=request.event,
            ) from exc
        self._dispatch(StartAction(path=request.result_root, timestamp=self._clock()))

        if request.event == EventKind.ONCE:
            return Attachment(snapshot=await self.fetch_once(request, query))
        return Attachment(subscription=self.listen(request, query))

    def _build_query(self, request: WatchRequest) -> Any:
        query = self._database.build_query(request.path)
        if request.is_query and request.query_params:
            query = self._database.apply_params(query, request.query_params)
        return query

    async def fetch_first(self, request: WatchRequest) -> Snapshot:
        """Look up the first child of the watched path; never dispatches ``START``."""
        try:
            snapshot = await self._database.fetch_first(request.path)
        except Exception as exc:
            self._dispatch(ErrorAction(path=request.result_root, payload=exc, timestamp=self._clock()))
            raise RtdbFetchError(
                f"first_child lookup failed for {request.path}",
                path=request.path,
                event=request.event,
            ) from exc

        if snapshot.val() is None:
            self._dispatch(NoValueAction(path=request.result_root, timestamp=self._clock()))
        return snapshot

    async def fetch_once(self, request: WatchRequest, query: Any) -> Snapshot:
        try:
            snapshot = await self._database.fetch_once(query)
        except Exception as exc:
            self._dispatch(ErrorAction(path=request.result_root, payload=exc, timestamp=self._clock()))
            raise RtdbFetchError(
                f"once fetch failed for {request.path}",
                path=request.path,
                event=request.event,
            ) from exc

        self._dispatch(
            SetAction(
                path=request.result_root,
                source=SetSource.ONCE,
                data=snapshot.val(),
                ordered=ordered_from_snapshot(snapshot),
                timestamp=self._clock(),
            )
        )
        return snapshot

    def listen(self, request: WatchRequest, query: Any) -> Subscription:
        """Attach a persistent listener. Must be called from the running loop."""
        loop = asyncio.get_running_loop()

        def on_data(snapshot: Snapshot) -> None:
            event = normalize_event(snapshot, request.event, request.path, store_as=request.store_as)
            # Removals carry no references to resolve.
            if not request.populates or event.data is MISSING:
                dispatch_set(self._dispatch, event, source=SetSource.LISTENER, timestamp=self._clock())
                return
            self._schedule_population(loop, event, request.populates)

        def on_error(exc: BaseException) -> None:
            self._dispatch(UnauthorizedErrorAction(path=request.result_root, payload=exc, timestamp=self._clock()))

        return self._database.subscribe(query, request.event, on_data, on_error)

    def _schedule_population(
        self,
        loop: asyncio.AbstractEventLoop,
        event: NormalizedEvent,
        specs: Sequence[PopulateSpec],
    ) -> None:
        assert self._populator is not None  # noqa: S101
        task = loop.create_task(self._populator.resolve(event, specs))
        self._pending.add(task)
        task.add_done_callback(self._population_done)

    def _population_done(self, task: asyncio.Task[list[SetAction]]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            _logger.debug("Population task failed", exc_info=exc)

    async def drain(self) -> None:
        """Wait until every scheduled population run has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def aclose(self) -> None:
        """Cancel scheduled population runs."""
        pending = list(self._pending)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._pending.clear()
