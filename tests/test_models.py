from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from pyrtdb.models import (
    ACTION_ADAPTER,
    MISSING,
    ActionType,
    EventKind,
    PopulateSpec,
    SetAction,
    SetSource,
    StartAction,
    UnsetListenerAction,
    WatchKey,
    WatchRequest,
    coerce_watch_request,
    watch_requests_from_input,
)


def test_watch_request_accepts_camel_case_option_names() -> None:
    request = WatchRequest.model_validate(
        {
            "type": "child_added",
            "path": "todos",
            "storeAs": "myTodos",
            "queryId": "mine",
            "populates": ["owner:users"],
        }
    )

    assert request.event == EventKind.CHILD_ADDED
    assert request.store_as == "myTodos"
    assert request.query_id == "mine"
    assert request.populates == (PopulateSpec(child="owner", root="users"),)
    assert request.result_root == "myTodos"
    assert request.watch_path() == "todos@myTodos"


def test_watch_request_defaults_to_value_event() -> None:
    request = WatchRequest(path=" todos ")

    assert request.event == EventKind.VALUE
    assert request.path == "todos"
    assert request.populates == ()
    assert request.watch_path() == "todos"


def test_watch_request_is_frozen() -> None:
    request = WatchRequest(path="todos")
    with pytest.raises(ValidationError):
        request.path = "other"  # type: ignore[misc]


def test_watch_request_rejects_empty_path() -> None:
    with pytest.raises(ValidationError):
        WatchRequest(path="  ")


def test_populate_shorthand_requires_separator() -> None:
    with pytest.raises(ValidationError):
        PopulateSpec.model_validate("owner")


def test_event_kind_modes() -> None:
    assert not EventKind.ONCE.is_continuous
    assert not EventKind.FIRST_CHILD.is_continuous
    assert EventKind.VALUE.is_continuous


def test_watch_key_id() -> None:
    assert WatchKey(event=EventKind.VALUE, watch_path="/todos").id == "value:/todos"
    assert WatchKey(event=EventKind.VALUE, watch_path="todos", query_id="q1").id == "q1"


def test_watch_keys_are_hashable_and_compare_by_value() -> None:
    first = WatchKey(event=EventKind.VALUE, watch_path="todos")
    second = WatchKey(event=EventKind.VALUE, watch_path="todos")

    assert first == second
    assert len({first, second}) == 1


def test_coerce_inputs() -> None:
    request = WatchRequest(path="todos")

    assert coerce_watch_request(request) is request
    assert coerce_watch_request("todos").path == "todos"
    assert [r.path for r in watch_requests_from_input(["a", {"path": "b"}])] == ["a", "b"]
    assert len(watch_requests_from_input({"path": "c"})) == 1
    with pytest.raises(TypeError):
        coerce_watch_request(42)  # type: ignore[arg-type]


def test_set_action_removal_flag() -> None:
    removed = SetAction(path="todos/t1", source=SetSource.LISTENER, data=MISSING)
    emptied = SetAction(path="todos/t1", source=SetSource.LISTENER, data=None)

    assert removed.is_removal
    assert not emptied.is_removal
    assert removed.requested is True
    assert removed.requesting is False


def test_start_action_flags() -> None:
    action = StartAction(path="todos")

    assert action.type == ActionType.START
    assert action.requesting is True
    assert action.requested is False
    assert action.timestamp.tzinfo is not None


def test_action_adapter_discriminates_on_type() -> None:
    ts = datetime(2026, 1, 1, tzinfo=UTC)
    parsed = ACTION_ADAPTER.validate_python(
        {"type": ActionType.UNSET_LISTENER, "path": "todos", "watcherId": "value:/todos", "timestamp": ts}
    )

    assert isinstance(parsed, UnsetListenerAction)
    assert parsed.watcher_id == "value:/todos"
    assert parsed.remaining == 0
