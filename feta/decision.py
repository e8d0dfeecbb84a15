"""Feature decisions and a builder for them."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from feta.errors import FetaError
from feta.value import FeatureValue


class Reason(str, Enum):
    """Why a decision came out the way it did."""

    UNKNOWN = "unknown"
    DISABLED = "disabled"
    STATIC = "static"
    SPLIT = "split"
    MATCH = "match"
    MATCH_SPLIT = "match_split"
    ERROR = "error"

    def __str__(self) -> str:
        return self.value


@dataclass
class Decision:
    """The result of evaluating a feature."""

    hash: int
    variant: str
    reason: Reason
    value: FeatureValue
    audience: Optional[str] = None
    error: Optional[FetaError] = None

    def to_dict(self) -> dict[str, Any]:
        """Return the decision as plain data suitable for JSON."""
        return {
            "hash": self.hash,
            "variant": self.variant,
            "reason": self.reason.value,
            "value": self.value,
            "audience": self.audience,
            "error": self.error.to_dict() if self.error is not None else None,
        }


class DecisionBuilder:
    """Collects the parts of a decision and finishes it with a reason."""

    def __init__(self) -> None:
        self._hash = 0
        self._variant: Optional[str] = None
        self._value: FeatureValue = None
        self._audience: Optional[str] = None

    def hash(self, value: int) -> "DecisionBuilder":
        self._hash = value
        return self

    def variant(self, variant: str) -> "DecisionBuilder":
        self._variant = variant
        return self

    def value(self, value: FeatureValue) -> "DecisionBuilder":
        self._value = value
        return self

    def audience(self, audience: str) -> "DecisionBuilder":
        self._audience = audience
        return self

    def disabled(self) -> Decision:
        """Finish the decision for a disabled feature."""
        return self._build(Reason.DISABLED)

    def success(self, reason: Reason) -> Decision:
        """Finish a successful decision with the given reason."""
        return self._build(reason)

    def error(self, err: FetaError) -> Decision:
        """Finish the decision as failed with the given error."""
        return self._build(Reason.ERROR, err)

    def _build(self, reason: Reason, err: Optional[FetaError] = None) -> Decision:
        return Decision(
            hash=self._hash,
            variant=self._variant or "",
            reason=reason,
            value=self._value,
            audience=self._audience,
            error=err,
        )