"""Population sequencing for watches with populated fields.

The resolver fetches every referenced child. This module only decides what
gets dispatched and in which order: each child ``SET`` goes out before the
root ``SET``, so a consumer deriving "loaded" from the root never sees the
root before the data it points to.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime

from pyrtdb._remote import PopulationResolver
from pyrtdb.exceptions import RtdbPopulateError
from pyrtdb.ingestion.apply import build_child_set_action, dispatch_set
from pyrtdb.ingestion.normalize import NormalizedEvent
from pyrtdb.models._base import utcnow
from pyrtdb.models.actions import Action, ErrorAction, SetAction, SetSource
from pyrtdb.models.watch import PopulateSpec

_logger = logging.getLogger(__name__)


class PopulationCoordinator:
    """Runs the resolver for one firing and sequences the resulting dispatches."""

    def __init__(
        self,
        resolver: PopulationResolver,
        dispatch: Callable[[Action], None],
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._resolver = resolver
        self._dispatch = dispatch
        self._clock = clock

    async def resolve(self, event: NormalizedEvent, specs: Sequence[PopulateSpec]) -> list[SetAction]:
        """Resolve *specs* for *event* and dispatch children, then the root.

        Returns the dispatched ``SET`` actions in dispatch order.
        """
        try:
            results = await self._resolver.resolve(event.key, event.data, specs)
        except Exception as exc:
            self._dispatch(ErrorAction(path=event.result_path, payload=exc, timestamp=self._clock()))
            raise RtdbPopulateError(
                f"Population failed for {event.result_path}",
                path=event.result_path,
            ) from exc

        dispatched: list[SetAction] = []
        # Results are fully buffered above, so settle order inside the resolver is irrelevant.
        for path, value in results.items():
            if path == event.result_path:
                continue
            action = build_child_set_action(path, value, timestamp=self._clock())
            self._dispatch(action)
            dispatched.append(action)

        _logger.debug("Populated %d child path(s) for %s", len(dispatched), event.result_path)
        dispatched.append(
            dispatch_set(self._dispatch, event, source=SetSource.POPULATED_ROOT, timestamp=self._clock())
        )
        return dispatched
