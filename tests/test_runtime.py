import json

import pytest

from feta.decision import Decision, DecisionBuilder, Reason
from feta.errors import ConfigurationError, RequestError
from feta.runtime import DecisionRecord, Engine, Event

CONFIG = {
    "features": {
        "f1": {
            "enabled": True,
            "value_type": "int",
            "variants": {"a": 1, "b": 2},
            "default_variant": "a",
            "default_rule": {"distribution": {"a": 50, "b": 50}},
            "audience_rules": [{"name": "beta", "expression": "beta", "variant": "b"}],
        },
        "f2": {
            "enabled": False,
            "value_type": "string",
            "variants": {"on": "yes", "off": "no"},
            "default_variant": "off",
            "default_rule": {"variant": "on"},
        },
    }
}


@pytest.fixture
def events():
    return []


@pytest.fixture
def engine(events):
    eng = Engine(tracker=events.append)
    eng.init(json.dumps(CONFIG))
    return eng


def test_event_from_decision():
    decision = DecisionBuilder().variant("variant").value(1).audience("audience").success(Reason.MATCH)
    actual = Event.from_decision("feature", "user", decision)
    assert actual == Event(
        feature_key="feature",
        user_key="user",
        variant="variant",
        reason=Reason.MATCH,
        value=1,
        audience="audience",
    )


def test_decision_record_from_decision():
    err = RequestError("error")
    decision = Decision(hash=1, variant="variant", reason=Reason.MATCH, value=2, audience="audience", error=err)
    actual = DecisionRecord.from_decision(decision)
    assert actual == DecisionRecord(
        hash=1,
        variant="variant",
        reason=Reason.MATCH,
        value=2,
        audience="audience",
        error="Request error: error",
    )


def test_init_twice_and_bad_json_keeps_state(engine):
    engine.init(json.dumps(CONFIG))
    with pytest.raises(ConfigurationError):
        engine.init("{")
    record = engine.decide("f1", json.dumps({"user_key": "g"}))
    assert record.variant == "a"
    assert record.reason is Reason.SPLIT
    assert record.error is None


def test_decide_audience_and_tracks(engine, events):
    record = engine.decide("f1", json.dumps({"user_key": "d", "attributes": {"beta": True}}))
    assert (record.variant, record.value, record.reason, record.audience) == ("b", 2, Reason.MATCH, "beta")
    assert events == [Event("f1", "d", "b", Reason.MATCH, 2, "beta")]


def test_decide_disabled(engine):
    record = engine.decide("f2", json.dumps({"user_key": "u"}))
    assert record.reason is Reason.DISABLED
    assert record.variant == "off"
    assert record.value == "no"


def test_decide_unknown_feature(engine):
    record = engine.decide("nope", json.dumps({"user_key": "u"}))
    assert record.reason is Reason.ERROR
    assert record.error == "Request error: invalid feature: nope"


def test_decide_bad_context_is_error_record(engine, events):
    record = engine.decide("f1", "{")
    assert record.reason is Reason.ERROR
    assert record.hash == 0
    assert record.error.startswith("Request error: ")
    assert events == []


def test_decide_all_tracks_each_feature(engine, events):
    result = dict(engine.decide_all(json.dumps({"user_key": "g"})))
    assert set(result) == {"f1", "f2"}
    assert result["f1"].variant == "a"
    assert result["f2"].reason is Reason.DISABLED
    assert len(events) == 2


def test_decide_all_bad_context_raises(engine):
    with pytest.raises(RequestError):
        engine.decide_all("not json")


def test_uninitialised_engine_has_no_features():
    eng = Engine()
    assert eng.decide_all(json.dumps({"user_key": "g"})) == []
    assert eng.decide("f1", json.dumps({"user_key": "g"})).reason is Reason.ERROR