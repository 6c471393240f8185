from __future__ import annotations

import pytest

from pyrtdb.config import SyncConfig
from pyrtdb.exceptions import RtdbConfigError


def test_defaults() -> None:
    config = SyncConfig()

    assert config.dispatch_on_unset_listener is True
    assert config.action_trace_enabled is False
    assert config.store_as_separator == "@"


def test_from_env_reads_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PYRTDB_DISPATCH_ON_UNSET_LISTENER", "off")
    monkeypatch.setenv("PYRTDB_ACTION_TRACE_ENABLED", "true")
    monkeypatch.setenv("PYRTDB_TRACE_MAX_STRING", "64")
    monkeypatch.setenv("PYRTDB_STORE_AS_SEPARATOR", "|")

    config = SyncConfig.from_env()

    assert config.dispatch_on_unset_listener is False
    assert config.action_trace_enabled is True
    assert config.trace_max_string == 64
    assert config.store_as_separator == "|"


def test_overrides_win_over_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PYRTDB_ACTION_TRACE_ENABLED", "true")
    monkeypatch.setenv("PYRTDB_TRACE_MAX_STRING", "64")

    config = SyncConfig.from_env(action_trace_enabled=False, trace_max_string=32)

    assert config.action_trace_enabled is False
    assert config.trace_max_string == 32


def test_unrecognized_bool_falls_back_to_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PYRTDB_DISPATCH_ON_UNSET_LISTENER", "maybe")

    assert SyncConfig.from_env().dispatch_on_unset_listener is True


def test_invalid_values_raise(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PYRTDB_TRACE_MAX_STRING", "lots")
    with pytest.raises(RtdbConfigError):
        SyncConfig.from_env()

    with pytest.raises(RtdbConfigError):
        SyncConfig(store_as_separator="")
