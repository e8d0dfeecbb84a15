"""A JSON-facing evaluation engine that reports tracking events."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable, Optional

from feta.config import Config
from feta.context import Context
from feta.decision import Decision, DecisionBuilder, Reason
from feta.errors import RequestError
from feta.features import Features
from feta.value import FeatureValue


@dataclass(frozen=True)
class Event:
    """A record of one feature evaluation for tracking."""

    feature_key: str
    user_key: str
    variant: str
    reason: Reason
    value: FeatureValue
    audience: Optional[str] = None

    @classmethod
    def from_decision(cls, feature_key: str, user_key: str, decision: Decision) -> "Event":
        """Build an event from a decision for the given feature and user."""
        return cls(
            feature_key=feature_key,
            user_key=user_key,
            variant=decision.variant,
            reason=decision.reason,
            value=decision.value,
            audience=decision.audience,
        )


@dataclass(frozen=True)
class DecisionRecord:
    """A decision with its error rendered as text."""

    hash: int
    variant: str
    reason: Reason
    value: FeatureValue
    audience: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def from_decision(cls, decision: Decision) -> "DecisionRecord":
        """Convert a decision, turning its error into its message text."""
        return cls(
            hash=decision.hash,
            variant=decision.variant,
            reason=decision.reason,
            value=decision.value,
            audience=decision.audience,
            error=str(decision.error) if decision.error is not None else None,
        )


Tracker = Callable[[Event], None]


class Engine:
    """Holds the current feature set and evaluates JSON requests against it."""

    def __init__(self, tracker: Optional[Tracker] = None) -> None:
        self._features = Features()
        self._lock = threading.Lock()
        self._tracker = tracker

    def _current(self) -> Features:
        with self._lock:
            return self._features

    def _track(self, event: Event) -> None:
        if self._tracker is not None:
            self._tracker(event)

    def init(self, config_json: str) -> None:
        """Replace the feature set from configuration JSON; on error the old set stays."""
        features = Features.from_config(Config.from_json(config_json))
        with self._lock:
            self._features = features

    def decide(self, feature_key: str, ctx_json: str) -> DecisionRecord:
        """Evaluate one feature for a context given as JSON."""
        try:
            ctx = Context.from_json(ctx_json)
        except ValueError as exc:
            return DecisionRecord.from_decision(DecisionBuilder().error(RequestError(str(exc))))

        decision = self._current().decide(feature_key, ctx)
        self._track(Event.from_decision(feature_key, ctx.user_key, decision))
        return DecisionRecord.from_decision(decision)

    def decide_all(self, ctx_json: str) -> list[tuple[str, DecisionRecord]]:
        """Evaluate every feature for a context given as JSON."""
        try:
            ctx = Context.from_json(ctx_json)
        except ValueError as exc:
            raise RequestError(str(exc)) from exc

        decisions = self._current().decide_all(ctx)
        for feature_key, decision in decisions.items():
            self._track(Event.from_decision(feature_key, ctx.user_key, decision))
        return [(key, DecisionRecord.from_decision(d)) for key, d in decisions.items()]