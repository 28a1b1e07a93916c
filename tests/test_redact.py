from __future__ import annotations

from pyanalytics._redact import redact_for_log
from pyanalytics.models.traits import Traits


def test_redact_for_log_redacts_identity_values() -> None:
    payload = {
        "type": "identify",
        "profileId": "user@example.com",
        "traits": Traits().put_email("user@example.com").put_anonymous_id("anon-1"),
        "context": {"device": {"device_id": "ABC123", "advertisingId": "ad-1", "deviceBrand": "Google"}},
    }

    redacted = redact_for_log(payload)
    assert redacted["type"] == "identify"
    assert redacted["profileId"] == "<redacted>"
    assert redacted["traits"]["email"] == "<redacted>"
    assert redacted["traits"]["anonymousId"] == "<redacted>"
    assert redacted["context"]["device"]["device_id"] == "<redacted>"
    assert redacted["context"]["device"]["advertisingId"] == "<redacted>"
    assert redacted["context"]["device"]["deviceBrand"] == "Google"


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]
