"""Sync configuration for pyrtdb."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyrtdb._constants import STORE_AS_SEPARATOR
from pyrtdb.exceptions import RtdbConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class SyncConfig:
    """Watcher pipeline configuration.

    Parameters
    ----------
    dispatch_on_unset_listener : bool
        Dispatch an ``UNSET_LISTENER`` action whenever a registered watcher
        is released by ``unwatch`` or replaced.
    action_trace_enabled : bool
        Log every dispatched action at DEBUG level (redacted).
    trace_max_string : int
        Maximum string length kept in traced actions before truncation.
    store_as_separator : str
        Separator between a path and its ``store_as`` location in watch keys.
    """

    dispatch_on_unset_listener: bool = True
    action_trace_enabled: bool = False
    trace_max_string: int = 512
    store_as_separator: str = STORE_AS_SEPARATOR

    def __post_init__(self) -> None:
        if not self.store_as_separator:
            raise RtdbConfigError("store_as_separator must be non-empty")
        if self.trace_max_string <= 0:
            raise RtdbConfigError(f"trace_max_string must be positive, got {self.trace_max_string}")

    @classmethod
    def from_env(cls, **overrides: Any) -> SyncConfig:
        """Create configuration from ``PYRTDB_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        if "dispatch_on_unset_listener" not in overrides:
            config_kwargs["dispatch_on_unset_listener"] = _env_bool(
                env.get("PYRTDB_DISPATCH_ON_UNSET_LISTENER"),
                True,
            )

        if "action_trace_enabled" not in overrides:
            config_kwargs["action_trace_enabled"] = _env_bool(
                env.get("PYRTDB_ACTION_TRACE_ENABLED"),
                False,
            )

        max_string_env = env.get("PYRTDB_TRACE_MAX_STRING")
        if max_string_env is not None and "trace_max_string" not in overrides:
            try:
                config_kwargs["trace_max_string"] = int(max_string_env)
            except ValueError as exc:
                raise RtdbConfigError(f"PYRTDB_TRACE_MAX_STRING must be an integer, got {max_string_env!r}") from exc

        separator_env = env.get("PYRTDB_STORE_AS_SEPARATOR")
        if separator_env is not None and "store_as_separator" not in overrides:
            config_kwargs["store_as_separator"] = separator_env

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
