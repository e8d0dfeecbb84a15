"""A small expression language for audience targeting."""

from __future__ import annotations

import re
from typing import Any, Callable, Mapping, Optional

Env = Mapping[str, Any]
_Node = Callable[[Env], Any]


class ExpressionError(Exception):
    """Base class for expression errors."""


class CompileError(ExpressionError):
    """The expression text is not valid."""


class EvaluationError(ExpressionError):
    """The expression failed while running."""


_LEXEME_RE = re.compile(
    r"""\s*(?:
        (?P<num>\d+\.\d+|\d+)
      | (?P<str>"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*')
      | (?P<name>[A-Za-z_][A-Za-z0-9_]*)
      | (?P<op>==|!=|<=|>=|&&|\|\||[<>!+\-*/%().,\[\]])
    )""",
    re.VERBOSE,
)
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\", '"': '"', "'": "'"}
_KEYWORDS = {"true", "false", "null", "and", "or", "not", "in",
             "eq", "ne", "gt", "ge", "lt", "le"}
_COMPARISONS = {
    "eq": "eq", "==": "eq", "ne": "ne", "!=": "ne",
    "gt": "gt", ">": "gt", "ge": "ge", ">=": "ge",
    "lt": "lt", "<": "lt", "le": "le", "<=": "le", "in": "in",
}


def _unescape(body: str) -> str:
    return re.sub(r"\\(.)", lambda m: _ESCAPES.get(m.group(1), m.group(1)), body)


def _lex(source: str) -> list[tuple[str, str]]:
    lexemes = []
    pos = 0
    while pos < len(source):
        if source[pos:].strip() == "":
            break
        match = _LEXEME_RE.match(source, pos)
        if not match:
            raise CompileError(f"unexpected character at {pos}: {source[pos:].lstrip()[:1]!r}")
        kind = match.lastgroup
        lexemes.append((kind, match.group(kind)))
        pos = match.end()
    return lexemes


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _equal(a: Any, b: Any) -> bool:
    if isinstance(a, bool) != isinstance(b, bool):
        return False
    return a == b


def _truth(v: Any) -> bool:
    if v is None:
        return False
    if isinstance(v, bool):
        return v
    raise EvaluationError(f"expected boolean, got {type(v).__name__}")


def _compare(op: str, a: Any, b: Any) -> bool:
    if op == "eq":
        return _equal(a, b)
    if op == "ne":
        return not _equal(a, b)
    if op == "in":
        if isinstance(b, str) and isinstance(a, str):
            return a in b
        if isinstance(b, (list, tuple)):
            return any(_equal(a, item) for item in b)
        if isinstance(b, Mapping):
            return a in b
        if b is None:
            return False
        raise EvaluationError(f"cannot test membership in {type(b).__name__}")
    if a is None or b is None:
        return False
    if not ((_is_number(a) and _is_number(b)) or (isinstance(a, str) and isinstance(b, str))):
        raise EvaluationError(f"cannot compare {type(a).__name__} and {type(b).__name__}")
    return {"gt": a > b, "ge": a >= b, "lt": a < b, "le": a <= b}[op]


def _arith(op: str, a: Any, b: Any) -> Any:
    if op == "+" and isinstance(a, str) and isinstance(b, str):
        return a + b
    if not (_is_number(a) and _is_number(b)):
        raise EvaluationError(f"operator {op} needs numbers")
    if op == "+":
        return a + b
    if op == "-":
        return a - b
    if op == "*":
        return a * b
    if b == 0:
        raise EvaluationError("division by zero")
    if op == "/":
        return a // b if isinstance(a, int) and isinstance(b, int) else a / b
    return a % b


def _member(obj: Any, name: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(name)
    raise EvaluationError(f"cannot access member {name!r} of {type(obj).__name__}")


def _index(obj: Any, key: Any) -> Any:
    if obj is None:
        return None
    if isinstance(obj, Mapping) and isinstance(key, str):
        return obj.get(key)
    if isinstance(obj, (list, tuple, str)) and isinstance(key, int) and not isinstance(key, bool):
        if -len(obj) <= key < len(obj):
            return obj[key]
        raise EvaluationError(f"index out of range: {key}")
    raise EvaluationError(f"cannot index {type(obj).__name__}")


class _Parser:
    def __init__(self, lexemes: list[tuple[str, str]]) -> None:
        self.lexemes = lexemes
        self.pos = 0

    def peek(self) -> Optional[tuple[str, str]]:
        return self.lexemes[self.pos] if self.pos < len(self.lexemes) else None

    def accept(self, *texts: str) -> Optional[str]:
        lexeme = self.peek()
        if lexeme and lexeme[0] in ("op", "name") and lexeme[1] in texts:
            self.pos += 1
            return lexeme[1]
        return None

    def expect(self, text: str) -> None:
        if not self.accept(text):
            raise CompileError(f"expected {text!r}")

    def parse(self) -> _Node:
        if not self.lexemes:
            raise CompileError("empty expression")
        node = self.parse_or()
        if self.peek() is not None:
            raise CompileError(f"unexpected input {self.peek()[1]!r}")
        return node

    def parse_or(self) -> _Node:
        left = self.parse_and()
        while self.accept("or", "||"):
            right = self.parse_and()
            left = (lambda l, r: lambda env: _truth(l(env)) or _truth(r(env)))(left, right)
        return left

    def parse_and(self) -> _Node:
        left = self.parse_not()
        while self.accept("and", "&&"):
            right = self.parse_not()
            left = (lambda l, r: lambda env: _truth(l(env)) and _truth(r(env)))(left, right)
        return left

    def parse_not(self) -> _Node:
        if self.accept("not", "!"):
            operand = self.parse_not()
            return lambda env: not _truth(operand(env))
        return self.parse_comparison()

    def parse_comparison(self) -> _Node:
        left = self.parse_additive()
        op = self.accept(*_COMPARISONS)
        if op is None:
            return left
        right = self.parse_additive()
        kind = _COMPARISONS[op]
        return lambda env: _compare(kind, left(env), right(env))

    def parse_additive(self) -> _Node:
        left = self.parse_multiplicative()
        while op := self.accept("+", "-"):
            right = self.parse_multiplicative()
            left = (lambda o, l, r: lambda env: _arith(o, l(env), r(env)))(op, left, right)
        return left

    def parse_multiplicative(self) -> _Node:
        left = self.parse_unary()
        while op := self.accept("*", "/", "%"):
            right = self.parse_unary()
            left = (lambda o, l, r: lambda env: _arith(o, l(env), r(env)))(op, left, right)
        return left

    def parse_unary(self) -> _Node:
        if self.accept("-"):
            operand = self.parse_unary()
            return lambda env: _arith("-", 0, operand(env))
        return self.parse_postfix()

    def parse_postfix(self) -> _Node:
        node = self.parse_primary()
        while True:
            if self.accept("."):
                lexeme = self.peek()
                if lexeme is None or lexeme[0] != "name":
                    raise CompileError("expected member name after '.'")
                self.pos += 1
                node = (lambda n, name: lambda env: _member(n(env), name))(node, lexeme[1])
            elif self.accept("["):
                key = self.parse_or()
                self.expect("]")
                node = (lambda n, k: lambda env: _index(n(env), k(env)))(node, key)
            else:
                return node

    def parse_primary(self) -> _Node:
        lexeme = self.peek()
        if lexeme is None:
            raise CompileError("unexpected end of expression")
        kind, text = lexeme
        self.pos += 1
        if kind == "num":
            value: Any = float(text) if "." in text else int(text)
            return lambda env: value
        if kind == "str":
            string = _unescape(text[1:-1])
            return lambda env: string
        if kind == "name":
            if text in ("true", "false", "null"):
                const = {"true": True, "false": False, "null": None}[text]
                return lambda env: const
            if text in _KEYWORDS:
                raise CompileError(f"unexpected keyword {text!r}")
            return lambda env: env.get(text)
        if text == "(":
            node = self.parse_or()
            self.expect(")")
            return node
        if text == "[":
            items: list[_Node] = []
            if not self.accept("]"):
                items.append(self.parse_or())
                while self.accept(","):
                    items.append(self.parse_or())
                self.expect("]")
            return lambda env: [item(env) for item in items]
        raise CompileError(f"unexpected input {text!r}")


class Program:
    """A compiled expression, ready to run against an environment."""

    def __init__(self, source: str, node: _Node) -> None:
        self.source = source
        self._node = node

    def __repr__(self) -> str:
        return f"Program({self.source!r})"

    def run(self, env: Optional[Env] = None) -> Any:
        """Evaluate the expression with the given variables."""
        try:
            return self._node(env if env is not None else {})
        except EvaluationError:
            raise
        except (TypeError, ValueError, OverflowError) as exc:
            raise EvaluationError(str(exc)) from exc


def compile_expression(source: str) -> Program:
    """Compile expression text into a program."""
    return Program(source, _Parser(_lex(source)).parse())