"""Snapshot normalization.

Turns an opaque remote snapshot into the ``data`` / ``ordered`` pair carried
by ``SET`` actions, and computes where a listener firing is stored.
"""

from __future__ import annotations

from typing import Any, NamedTuple

from pydantic import Field

from pyrtdb._constants import PATH_SEPARATOR
from pyrtdb._remote import Snapshot
from pyrtdb.models._base import MISSING, RtdbBaseModel
from pyrtdb.models.watch import EventKind


class NormalizedSnapshot(NamedTuple):
    data: Any
    ordered: tuple[str, ...] | None


class NormalizedEvent(RtdbBaseModel):
    """A listener firing, ready to become a ``SET`` action."""

    result_path: str
    data: Any = None
    ordered: tuple[str, ...] | None = None
    event: EventKind
    key: str | None = Field(default=None, description="Key of the snapshot that fired")


def ordered_from_snapshot(snapshot: Snapshot) -> tuple[str, ...] | None:
    """Child keys in traversal order, or ``None`` for a leaf snapshot.

    The remote store's native order is kept; keys are never re-sorted.
    """
    keys = tuple(str(child.key) for child in snapshot.children())
    return keys or None


def normalize_snapshot(snapshot: Snapshot, event: EventKind) -> NormalizedSnapshot:
    data = MISSING if event == EventKind.CHILD_REMOVED else snapshot.val()
    return NormalizedSnapshot(data=data, ordered=ordered_from_snapshot(snapshot))


def result_path_for(path: str, event: EventKind, *, store_as: str | None = None, key: str | None = None) -> str:
    """Store location for a firing.

    ``store_as`` wins. ``value`` firings land on ``path``; child-level firings
    land on ``path/<child key>`` so siblings map to separate locations.
    """
    if store_as:
        return store_as
    if event == EventKind.VALUE or key is None:
        return path
    return f"{path.rstrip(PATH_SEPARATOR)}{PATH_SEPARATOR}{key}"


def normalize_event(
    snapshot: Snapshot,
    event: EventKind,
    path: str,
    *,
    store_as: str | None = None,
) -> NormalizedEvent:
    normalized = normalize_snapshot(snapshot, event)
    return NormalizedEvent(
        result_path=result_path_for(path, event, store_as=store_as, key=snapshot.key),
        data=normalized.data,
        ordered=normalized.ordered,
        event=event,
        key=snapshot.key,
    )
