"""Tests for event payloads."""

import time

from switchyard.events import CustomEvent, FeatureRequestEvent, IdentifyEvent
from switchyard.user import UserContext


def test_feature_event():
    event = FeatureRequestEvent(
        key="flag", user=UserContext(key="u1", country="de"), value="B", default="A", creation_date=5
    )
    assert event.to_dict() == {
        "kind": "feature",
        "creationDate": 5,
        "key": "flag",
        "user": {"key": "u1", "country": "DE"},
        "value": "B",
        "default": "A",
    }


def test_custom_event_without_data():
    event = CustomEvent(key="signup", user=UserContext(key="u1"), creation_date=1)
    assert event.to_dict() == {
        "kind": "custom",
        "creationDate": 1,
        "key": "signup",
        "user": {"key": "u1"},
    }


def test_identify_event():
    event = IdentifyEvent(key="u1", user=UserContext(key="u1"))
    assert event.kind == "identify"
    assert event.to_dict()["kind"] == "identify"


def test_creation_date_defaults_to_now():
    before = int(time.time() * 1000)
    event = IdentifyEvent(key="u1", user=UserContext(key="u1"))
    after = int(time.time() * 1000)
    assert before <= event.creation_date <= after
