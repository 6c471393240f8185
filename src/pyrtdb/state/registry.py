"""Watcher registry.

Decides whether a watch request registers, replaces an existing watcher or
is suppressed as a duplicate, and tears remote listeners down when the last
reference to a key is released.

Policy for a key that is already registered:

- with a query id, the request is a *replacement*: the prior listener is
  detached before the new one attaches, so at most one remote listener is
  live per key;
- without a query id, the request is a duplicate and is *suppressed*: nothing
  is registered or dispatched, and the result reports ``SUPPRESSED``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from pyrtdb._remote import Snapshot, Subscription
from pyrtdb.config import SyncConfig
from pyrtdb.exceptions import RtdbQueryError
from pyrtdb.ingestion.dispatcher import EventDispatcher
from pyrtdb.models._base import utcnow
from pyrtdb.models.actions import Action, UnsetListenerAction
from pyrtdb.models.watch import WatchKey, WatchRequest
from pyrtdb.state.watchers import InMemoryWatcherStore, WatcherStore

_logger = logging.getLogger(__name__)


class WatchStatus(StrEnum):
    REGISTERED = "registered"
    REPLACED = "replaced"
    SUPPRESSED = "suppressed"


@dataclass(frozen=True)
class WatchResult:
    """Outcome of a watch request."""

    key: WatchKey
    status: WatchStatus
    snapshot: Snapshot | None = None
    subscription: Subscription | None = None

    @property
    def registered(self) -> bool:
        return self.status != WatchStatus.SUPPRESSED


class WatcherRegistry:
    def __init__(
        self,
        dispatcher: EventDispatcher,
        dispatch: Callable[[Action], None],
        *,
        store: WatcherStore | None = None,
        config: SyncConfig | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._dispatcher = dispatcher
        self._dispatch = dispatch
        self._store: WatcherStore = store if store is not None else InMemoryWatcherStore()
        self._config = config or SyncConfig()
        self._clock = clock
        self._subscriptions: dict[WatchKey, Subscription] = {}
        self._keys: set[WatchKey] = set()

    @property
    def store(self) -> WatcherStore:
        return self._store

    def key_for(self, request: WatchRequest) -> WatchKey:
        """Identity of the remote subscription *request* maps to."""
        return WatchKey(
            event=request.event,
            watch_path=request.watch_path(self._config.store_as_separator),
            query_id=request.query_id,
        )

    def ref_count(self, request: WatchRequest) -> int:
        return self._store.get_count(self.key_for(request))

    async def watch(self, request: WatchRequest) -> WatchResult:
        """Register *request* and attach it to the remote store.

        Raises :class:`~pyrtdb.exceptions.RtdbFetchError` when a one-shot
        fetch fails. One-shot keys whose fetch was issued stay registered until
        unwatched.
        """
        key = self.key_for(request)
        status = WatchStatus.REGISTERED

        if self._store.get_count(key) > 0:
            if key.query_id is None:
                _logger.debug("Duplicate watcher %s suppressed", key)
                return WatchResult(key=key, status=WatchStatus.SUPPRESSED)
            _logger.debug("Replacing watcher %s", key)
            self._teardown(key)
            remaining = self._store.decrement(key)
            self._notify_unset(key, request, remaining)
            status = WatchStatus.REPLACED

        self._store.increment(key)
        self._keys.add(key)
        try:
            attachment = await self._dispatcher.attach(request)
        except Exception as exc:
            # Only a one-shot fetch that was actually issued keeps its reference.
            if request.event.is_continuous or isinstance(exc, RtdbQueryError):
                self._release_count(key)
            raise

        if attachment.subscription is not None:
            self._subscriptions[key] = attachment.subscription
        _logger.debug("Watcher %s %s (count=%d)", key, status.value, self._store.get_count(key))
        return WatchResult(
            key=key,
            status=status,
            snapshot=attachment.snapshot,
            subscription=attachment.subscription,
        )

    def unwatch(self, request: WatchRequest) -> int:
        """Release one reference to *request*'s key; returns the remaining count.

        The remote listener is detached only when the count reaches zero. A
        key that is not registered is left alone.
        """
        key = self.key_for(request)
        count = self._store.get_count(key)
        if count <= 0:
            _logger.debug("Unwatch for unregistered watcher %s ignored", key)
            return 0

        if count == 1:
            self._store.remove(key)
            self._keys.discard(key)
            self._teardown(key)
            remaining = 0
        else:
            remaining = self._store.decrement(key)

        self._notify_unset(key, request, remaining)
        return remaining

    def _release_count(self, key: WatchKey) -> None:
        if self._store.decrement(key) == 0:
            self._keys.discard(key)

    def _teardown(self, key: WatchKey) -> None:
        subscription = self._subscriptions.pop(key, None)
        if subscription is None:
            return
        subscription.unsubscribe()
        _logger.debug("Remote listener for %s detached", key)

    def _notify_unset(self, key: WatchKey, request: WatchRequest, remaining: int) -> None:
        if not self._config.dispatch_on_unset_listener:
            return
        self._dispatch(
            UnsetListenerAction(
                path=request.result_root,
                watcher_id=key.id,
                remaining=remaining,
                timestamp=self._clock(),
            )
        )

    async def close(self) -> None:
        """Detach every live listener, forget all keys and cancel pending populations."""
        for key in list(self._subscriptions):
            self._teardown(key)
        for key in list(self._keys):
            self._store.remove(key)
        self._keys.clear()
        await self._dispatcher.aclose()
