import pytest

from feta.expression import (
    CompileError,
    EvaluationError,
    ExpressionError,
    compile_expression,
)


@pytest.mark.parametrize("source", ["+2", "", "a gt", "(a", "1 2", "a.", "a $ b", "and"])
def test_compile_errors(source):
    with pytest.raises(CompileError):
        compile_expression(source)


def test_identifier():
    program = compile_expression("b")
    assert program.run({"b": True}) is True
    assert program.run({"b": False}) is False
    assert program.run({}) is None


def test_comparison_keywords():
    program = compile_expression("orders gt 10")
    assert program.run({"orders": 11}) is True
    assert program.run({"orders": 10}) is False
    assert program.run({}) is False


def test_member_on_bool_fails():
    with pytest.raises(EvaluationError):
        compile_expression("true.a").run({})


def test_errors_share_base():
    with pytest.raises(ExpressionError) as compile_info:
        compile_expression("+2")
    assert isinstance(compile_info.value, CompileError)

    with pytest.raises(ExpressionError) as run_info:
        compile_expression("true.a").run({})
    assert isinstance(run_info.value, EvaluationError)


def test_nested_member_and_logic():
    program = compile_expression("user.country eq 'uk' and not blocked")
    assert program.run({"user": {"country": "uk"}, "blocked": False}) is True
    assert program.run({"user": {"country": "fr"}, "blocked": False}) is False
    assert program.run({"user": {"country": "uk"}, "blocked": True}) is False


def test_symbolic_operators_match_keywords():
    env = {"x": 5, "y": 7}
    for a, b in [("x < y", "x lt y"), ("x >= y", "x ge y"), ("x == 5 || y == 1", "x eq 5 or y eq 1")]:
        assert compile_expression(a).run(env) == compile_expression(b).run(env)


def test_membership():
    assert compile_expression("'b' in tags").run({"tags": ["a", "b"]}) is True
    assert compile_expression("'z' in tags").run({"tags": ["a", "b"]}) is False


def test_bool_not_equal_to_int():
    assert compile_expression("true eq 1").run() is False


def test_incompatible_comparison_fails():
    with pytest.raises(EvaluationError):
        compile_expression("'a' gt 1").run()


def test_division_by_zero_fails():
    with pytest.raises(EvaluationError):
        compile_expression("1 / 0").run()


def test_source_kept():
    assert compile_expression("beta").source == "beta"