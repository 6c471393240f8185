from __future__ import annotations

from pyrtdb._redact import redact_for_log


def test_redact_for_log_redacts_sensitive_keys() -> None:
    payload = {
        "path": "users/u1",
        "data": {"name": "Ann", "password": "pw", "auth": {"uid": "u1"}},
        "idToken": "JWT",
        "authToken": "T",
    }

    redacted = redact_for_log(payload)
    assert redacted["path"] == "users/u1"
    assert redacted["data"]["name"] == "Ann"
    assert redacted["data"]["password"] == "<redacted>"
    assert redacted["data"]["auth"] == {"uid": "u1"}
    assert redacted["idToken"] == "<redacted>"
    assert redacted["authToken"] == "<redacted>"


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]


def test_redact_for_log_summarizes_exceptions() -> None:
    assert redact_for_log(PermissionError("denied")) == "<PermissionError: denied>"
