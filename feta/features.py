"""A collection of features, evaluated by name."""

from __future__ import annotations

from typing import Iterator, Mapping, Optional

from feta.config import Config
from feta.context import Context
from feta.decision import Decision, DecisionBuilder
from feta.errors import RequestError
from feta.feature import Feature
from feta.hashing import calculate


class Features:
    """Holds features by name and makes decisions for them."""

    def __init__(self, features: Optional[Mapping[str, Feature]] = None) -> None:
        self._features: dict[str, Feature] = dict(features or {})

    @classmethod
    def from_config(cls, cfg: Config) -> "Features":
        """Build every feature in the configuration, failing on the first invalid one."""
        return cls({name: Feature.from_config(name, feature) for name, feature in cfg.features.items()})

    def __len__(self) -> int:
        return len(self._features)

    def __contains__(self, name: object) -> bool:
        return name in self._features

    def __iter__(self) -> Iterator[str]:
        return iter(self._features)

    def decide(self, feature: str, ctx: Context) -> Decision:
        """Evaluate one feature; an unknown name gives an error decision."""
        found = self._features.get(feature)
        if found is not None:
            return found.decide(ctx)
        return (
            DecisionBuilder()
            .hash(calculate(feature, ctx.user_key))
            .error(RequestError(f"invalid feature: {feature}"))
        )

    def decide_all(self, ctx: Context) -> dict[str, Decision]:
        """Evaluate every feature for the context, keyed by feature name."""
        return {name: feature.decide(ctx) for name, feature in self._features.items()}