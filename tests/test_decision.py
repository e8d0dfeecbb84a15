import json

import pytest

from feta.decision import Decision, DecisionBuilder, Reason
from feta.errors import RequestError

ALL_REASONS = [
    (Reason.UNKNOWN, "unknown"),
    (Reason.DISABLED, "disabled"),
    (Reason.STATIC, "static"),
    (Reason.SPLIT, "split"),
    (Reason.MATCH, "match"),
    (Reason.MATCH_SPLIT, "match_split"),
    (Reason.ERROR, "error"),
]


@pytest.mark.parametrize("reason, expected", ALL_REASONS)
def test_reason_display(reason, expected):
    parsed = Reason(expected)
    assert parsed is reason
    assert str(parsed) == expected
    assert f"{parsed}" == expected


def test_reason_serialize():
    reasons = [DecisionBuilder().success(r).to_dict()["reason"] for r, _ in ALL_REASONS]
    actual = json.dumps(reasons, separators=(",", ":"))
    assert actual == '["unknown","disabled","static","split","match","match_split","error"]'


def test_reason_parse():
    assert Reason("match_split") is Reason.MATCH_SPLIT


def test_decision_builder_success():
    actual = (
        DecisionBuilder().hash(1).variant("var").value(True).audience("aud").success(Reason.MATCH)
    )
    assert actual == Decision(1, "var", Reason.MATCH, True, "aud", None)


def test_decision_builder_disabled():
    actual = DecisionBuilder().hash(1).variant("var").value(True).disabled()
    assert actual == Decision(1, "var", Reason.DISABLED, True, None, None)


def test_decision_builder_error():
    err = RequestError("")
    actual = DecisionBuilder().hash(1).variant("var").value(True).error(err)
    assert actual == Decision(1, "var", Reason.ERROR, True, None, RequestError(""))


def test_decision_builder_defaults():
    actual = DecisionBuilder().success(Reason.STATIC)
    assert actual == Decision(0, "", Reason.STATIC, None, None, None)


def test_decision_to_dict():
    decision = DecisionBuilder().hash(7).variant("v").value(2).error(RequestError("bad"))
    assert decision.to_dict() == {
        "hash": 7,
        "variant": "v",
        "reason": "error",
        "value": 2,
        "audience": None,
        "error": {"Request": "bad"},
    }