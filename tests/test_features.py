import pytest

from feta.config import Config
from feta.context import Context
from feta.decision import DecisionBuilder, Reason
from feta.errors import ConfigurationError, RequestError
from feta.features import Features


def _config_data():
    return {
        "features": {
            "f1": {
                "enabled": True,
                "value_type": "integer",
                "variants": {"a": 1, "b": 2},
                "default_variant": "a",
                "default_rule": {"distribution": {"a": 50, "b": 50}},
                "audience_rules": [
                    {"name": "beta", "expression": "beta", "variant": "b"}
                ],
            }
        }
    }


@pytest.fixture
def features():
    return Features.from_config(Config.from_dict(_config_data()))


def test_features_evaluate_success(features):
    actual = features.decide("f1", Context("g"))
    expected = DecisionBuilder().variant("a").value(1).success(Reason.SPLIT)
    expected.hash = actual.hash
    assert actual == expected


def test_features_evaluate_error(features):
    actual = features.decide("invalid", Context("g"))
    assert actual.hash != 0
    assert actual.reason is Reason.ERROR
    assert actual.value is None
    assert actual.error == RequestError("invalid feature: invalid")


def test_features_evaluate_all(features):
    actual = features.decide_all(Context("g"))
    expected = {"f1": DecisionBuilder().variant("a").value(1).success(Reason.SPLIT)}
    for key, decision in expected.items():
        decision.hash = actual[key].hash
    assert actual == expected


def test_features_audience_match(features):
    actual = features.decide("f1", Context("d", {"beta": True}))
    assert actual.variant == "b"
    assert actual.value == 2
    assert actual.reason is Reason.MATCH
    assert actual.audience == "beta"


def test_empty_features():
    empty = Features()
    assert len(empty) == 0
    assert empty.decide_all(Context("g")) == {}
    assert empty.decide("f1", Context("g")).reason is Reason.ERROR


def test_from_config_rejects_invalid_feature():
    data = _config_data()
    data["features"]["f1"]["default_variant"] = "missing"
    with pytest.raises(ConfigurationError):
        Features.from_config(Config.from_dict(data))


def test_contains_and_iter(features):
    assert "f1" in features
    assert "f2" not in features
    assert list(features) == ["f1"]