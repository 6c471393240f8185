from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import pytest

from pyrtdb._remote import CallbackSubscription, DictSnapshot, Snapshot
from pyrtdb.models.actions import Action
from pyrtdb.models.query import QueryParam
from pyrtdb.models.watch import EventKind, PopulateSpec


def _last_segment(path: str) -> str | None:
    segment = path.rstrip("/").rsplit("/", 1)[-1]
    return segment or None


@dataclass
class FakeQuery:
    path: str
    params: tuple[QueryParam, ...] = ()


@dataclass
class FakeListener:
    query: FakeQuery
    event: EventKind
    on_data: Callable[[Snapshot], None]
    on_error: Callable[[BaseException], None]


@dataclass
class FakeRemoteDatabase:
    """In-memory stand-in for a remote store adapter."""

    data: dict[str, Any] = field(default_factory=dict)
    fail_paths: dict[str, Exception] = field(default_factory=dict)
    listeners: list[FakeListener] = field(default_factory=list)
    calls: list[str] = field(default_factory=list)
    subscribe_error: Exception | None = None
    params_error: Exception | None = None

    def build_query(self, path: str) -> FakeQuery:
        self.calls.append(f"build_query:{path}")
        return FakeQuery(path)

    def apply_params(self, query: FakeQuery, params: Sequence[QueryParam]) -> FakeQuery:
        self.calls.append(f"apply_params:{query.path}")
        if self.params_error is not None:
            raise self.params_error
        return FakeQuery(query.path, tuple(params))

    async def fetch_once(self, query: FakeQuery) -> Snapshot:
        self.calls.append(f"fetch_once:{query.path}")
        await asyncio.sleep(0)
        if query.path in self.fail_paths:
            raise self.fail_paths[query.path]
        return DictSnapshot(_last_segment(query.path), self.data.get(query.path))

    def subscribe(
        self,
        query: FakeQuery,
        event: EventKind,
        on_data: Callable[[Snapshot], None],
        on_error: Callable[[BaseException], None],
    ) -> CallbackSubscription:
        self.calls.append(f"subscribe:{event}:{query.path}")
        if self.subscribe_error is not None:
            raise self.subscribe_error
        listener = FakeListener(query, event, on_data, on_error)
        self.listeners.append(listener)

        def detach() -> None:
            self.calls.append(f"unsubscribe:{event}:{query.path}")
            self.listeners.remove(listener)

        return CallbackSubscription(detach)

    async def fetch_first(self, path: str) -> Snapshot:
        self.calls.append(f"fetch_first:{path}")
        await asyncio.sleep(0)
        if path in self.fail_paths:
            raise self.fail_paths[path]
        value = self.data.get(path)
        if isinstance(value, dict) and value:
            first = sorted(value)[0]
            return DictSnapshot(_last_segment(path), {first: value[first]})
        return DictSnapshot(_last_segment(path), None)

    def active(self, path: str, event: EventKind = EventKind.VALUE) -> list[FakeListener]:
        return [lst for lst in self.listeners if lst.query.path == path and lst.event == event]

    def emit(self, path: str, event: EventKind, key: str | None, value: Any) -> None:
        for listener in list(self.active(path, event)):
            listener.on_data(DictSnapshot(key, value))

    def emit_error(self, path: str, event: EventKind, exc: BaseException) -> None:
        for listener in list(self.active(path, event)):
            listener.on_error(exc)


@dataclass
class FakeResolver:
    """Resolver whose results settle after per-path delays.

    The returned mapping is built in settle order, so a short delay on the
    root entry puts it ahead of the children.
    """

    results: dict[str, Any] = field(default_factory=dict)
    delays: dict[str, float] = field(default_factory=dict)
    error: Exception | None = None
    calls: list[tuple[str | None, Any, tuple[PopulateSpec, ...]]] = field(default_factory=list)

    async def resolve(self, root_key: str | None, data: Any, specs: Sequence[PopulateSpec]) -> dict[str, Any]:
        self.calls.append((root_key, data, tuple(specs)))
        if self.error is not None:
            raise self.error
        settled: dict[str, Any] = {}

        async def settle(path: str, value: Any) -> None:
            await asyncio.sleep(self.delays.get(path, 0.0))
            settled[path] = value

        await asyncio.gather(*(settle(path, value) for path, value in self.results.items()))
        return settled


def fixed_clock() -> datetime:
    return datetime(2026, 1, 1, tzinfo=UTC)


@pytest.fixture
def database() -> FakeRemoteDatabase:
    return FakeRemoteDatabase()


@pytest.fixture
def actions() -> list[Action]:
    return []
