"""Action construction helpers.

Centralizes how normalized firings become ``SET`` actions so the listener
path and the population path build identical shapes.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

from pyrtdb.ingestion.normalize import NormalizedEvent
from pyrtdb.models.actions import SetAction, SetSource


def build_set_action(
    event: NormalizedEvent,
    *,
    source: SetSource,
    timestamp: datetime,
) -> SetAction:
    """Build the ``SET`` action for a watch's own data."""
    return SetAction(
        path=event.result_path,
        source=source,
        data=event.data,
        ordered=event.ordered,
        timestamp=timestamp,
    )


def build_child_set_action(path: str, data: Any, *, timestamp: datetime) -> SetAction:
    """Build the ``SET`` action for one population-resolved child."""
    return SetAction(
        path=path,
        source=SetSource.POPULATED_CHILD,
        data=data,
        timestamp=timestamp,
    )


def dispatch_set(
    dispatch: Callable[[SetAction], None],
    event: NormalizedEvent,
    *,
    source: SetSource,
    timestamp: datetime,
) -> SetAction:
    """Build and dispatch a ``SET`` action."""
    action = build_set_action(event, source=source, timestamp=timestamp)
    dispatch(action)
    return action
