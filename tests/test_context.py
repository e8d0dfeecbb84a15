import json

import pytest

from feta.context import Context


def test_context_new():
    ctx = Context("key")
    assert ctx.user_key == "key"
    assert ctx.attributes is None


def test_context_from_json():
    ctx = Context.from_json('{"user_key":"d","attributes":{"beta": true}}')
    assert ctx == Context("d", {"beta": True})


def test_context_round_trip():
    ctx = Context("u", {"orders": 3, "tags": ["a"]})
    assert Context.from_json(json.dumps(ctx.to_dict())) == ctx


@pytest.mark.parametrize(
    "text",
    ["{", "[]", '{"attributes": {}}', '{"user_key": 1}', '{"user_key": "a", "attributes": 3}'],
)
def test_context_invalid(text):
    with pytest.raises(ValueError):
        Context.from_json(text)