"""Targeting rules: audience expressions and percentage bucketing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Mapping, Optional

from feta.decision import Reason
from feta.errors import ConfigurationError, TargetingError
from feta.expression import ExpressionError, Program, compile_expression

_BUCKET_SPAN = 100
_MAX_PERCENTAGE = 255


@dataclass(frozen=True)
class Bucket:
    """A variant and the half-open range of hash values that map to it."""

    variant: str
    lower_bound: int
    upper_bound: int

    def contains(self, point: int) -> bool:
        return self.lower_bound <= point < self.upper_bound


@dataclass(frozen=True)
class Rule:
    """Decides whether it applies to a user and which variant they get."""

    buckets: tuple[Bucket, ...]
    reason: Reason
    program: Optional[Program] = None
    audience: Optional[str] = None

    def is_applicable(self, env: Optional[Mapping[str, Any]] = None) -> bool:
        """Run the audience expression, if any; a rule without one always applies."""
        if self.program is None:
            return True
        try:
            result = self.program.run(env if env is not None else {})
        except ExpressionError as exc:
            raise TargetingError(str(exc)) from exc
        return result is True

    def get_variant(self, hash_value: int) -> str:
        """Return the variant whose bucket holds the hash modulo 100."""
        point = hash_value % _BUCKET_SPAN
        for bucket in self.buckets:
            if bucket.contains(point):
                return bucket.variant
        raise ConfigurationError("invalid bucket configuration")

    def referenced_variants(self) -> Iterator[str]:
        """Yield the variants named by the rule's buckets, in order."""
        return (bucket.variant for bucket in self.buckets)


class RuleBuilder:
    """Collects variant percentages and an optional audience, then builds a rule."""

    def __init__(self) -> None:
        self._percentages: list[tuple[str, int]] = []
        self._audience: Optional[tuple[str, str]] = None

    def variant(self, variant: str, percentage: int) -> "RuleBuilder":
        """Add a variant that receives the given share of users."""
        if isinstance(percentage, bool) or not isinstance(percentage, int):
            raise TypeError(f"percentage must be an integer: {percentage!r}")
        if not 0 <= percentage <= _MAX_PERCENTAGE:
            raise ValueError(f"percentage out of range: {percentage}")
        self._percentages.append((variant, percentage))
        return self

    def audience(self, audience: str, expression: str) -> "RuleBuilder":
        """Restrict the rule to users for whom the expression is true."""
        self._audience = (audience, expression)
        return self

    def build(self) -> Rule:
        """Build the rule, checking that the percentages add up to 100."""
        buckets = []
        bound = 0
        for variant, percentage in self._percentages:
            buckets.append(Bucket(variant, bound, bound + percentage))
            bound += percentage

        if not buckets or bound != _BUCKET_SPAN:
            raise ConfigurationError("invalid variant configuration")

        reason = Reason.STATIC if len(buckets) == 1 else Reason.SPLIT

        if self._audience is None:
            return Rule(buckets=tuple(buckets), reason=reason)

        audience, expression = self._audience
        try:
            program = compile_expression(expression)
        except ExpressionError as exc:
            raise TargetingError(str(exc)) from exc

        reason = Reason.MATCH if reason is Reason.STATIC else Reason.MATCH_SPLIT
        return Rule(
            buckets=tuple(buckets),
            reason=reason,
            program=program,
            audience=audience,
        )