"""A single feature: its variants, its rules and how it decides for a user."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from feta.config import Bucketing, DistributionBucketing, FeatureConfig, VariantBucketing
from feta.context import Context
from feta.decision import Decision, DecisionBuilder
from feta.errors import ConfigurationError, FetaError
from feta.hashing import calculate
from feta.rule import Rule, RuleBuilder
from feta.value import FeatureValue, ValueType, has_type


@dataclass(frozen=True)
class Feature:
    """A validated feature, ready to make decisions."""

    name: str
    enabled: bool
    variants: dict[str, FeatureValue]
    default_variant: str
    default_value: FeatureValue
    rules: tuple[Rule, ...]

    @classmethod
    def from_config(cls, name: str, cfg: FeatureConfig) -> "Feature":
        """Build a feature from its configuration, validating it."""
        builder = (
            FeatureBuilder(cfg.value_type)
            .name(name)
            .enabled(cfg.enabled)
            .default_variant(cfg.default_variant)
            .default_rule(_rule_builder(cfg.default_rule.bucketing).build())
        )
        for variant, value in cfg.variants.items():
            builder.variant(variant, value)
        for rule in cfg.audience_rules:
            builder.audience_rule(
                _rule_builder(rule.bucketing).audience(rule.name, rule.expression).build()
            )
        return builder.build()

    def decide(self, ctx: Context) -> Decision:
        """Evaluate the feature for a context; failures are reported in the decision."""
        hash_value = calculate(self.name, ctx.user_key)
        builder = (
            DecisionBuilder()
            .variant(self.default_variant)
            .value(self.default_value)
            .hash(hash_value)
        )

        if not self.enabled:
            return builder.disabled()

        env = dict(ctx.attributes or {})

        for rule in self.rules:
            try:
                applicable = rule.is_applicable(env)
            except FetaError as exc:
                return builder.error(exc)
            if not applicable:
                continue

            variant = rule.get_variant(hash_value)
            if rule.audience is not None:
                builder.audience(rule.audience)
            if variant not in self.variants:
                return builder.error(
                    ConfigurationError(f"variant not defined: {variant}")
                )
            return builder.variant(variant).value(self.variants[variant]).success(rule.reason)

        return builder.error(ConfigurationError("no applicable rules defined"))


def _rule_builder(bucketing: Bucketing) -> RuleBuilder:
    builder = RuleBuilder()
    if isinstance(bucketing, VariantBucketing):
        builder.variant(bucketing.variant, 100)
    elif isinstance(bucketing, DistributionBucketing):
        for variant, percentage in bucketing.distribution.items():
            builder.variant(variant, percentage)
    return builder


class FeatureBuilder:
    """Collects the parts of a feature and validates them on build."""

    def __init__(self, value_type: ValueType) -> None:
        self._name: Optional[str] = None
        self._enabled = False
        self._value_type = value_type
        self._variants: dict[str, FeatureValue] = {}
        self._default_variant: Optional[str] = None
        self._rules: list[Rule] = []
        self._default_rule: Optional[Rule] = None

    def name(self, name: str) -> "FeatureBuilder":
        self._name = name
        return self

    def enabled(self, enabled: bool) -> "FeatureBuilder":
        self._enabled = enabled
        return self

    def variant(self, key: str, value: FeatureValue) -> "FeatureBuilder":
        self._variants[key] = value
        return self

    def default_variant(self, key: str) -> "FeatureBuilder":
        self._default_variant = key
        return self

    def default_rule(self, rule: Rule) -> "FeatureBuilder":
        self._default_rule = rule
        return self

    def audience_rule(self, rule: Rule) -> "FeatureBuilder":
        self._rules.append(rule)
        return self

    def build(self) -> Feature:
        """Validate the collected parts and return the feature."""
        if not all(has_type(value, self._value_type) for value in self._variants.values()):
            raise ConfigurationError(f"all variants must have type: {self._value_type}")

        if self._default_variant is None:
            raise ConfigurationError("default variant is required")
        if self._default_variant not in self._variants:
            raise ConfigurationError(
                f"default variant does not exist: {self._default_variant}"
            )
        default_value = self._variants[self._default_variant]

        if self._default_rule is None:
            raise ConfigurationError("default rule is required")
        if self._default_rule.program is not None:
            raise ConfigurationError("default rule must not have an expression")

        rules = (*self._rules, self._default_rule)
        for rule in rules:
            for variant in rule.referenced_variants():
                if variant not in self._variants:
                    raise ConfigurationError(f"rule uses undefined variant: {variant}")

        if self._name is None:
            raise ConfigurationError("feature name is required")

        return Feature(
            name=self._name,
            enabled=self._enabled,
            variants=dict(self._variants),
            default_variant=self._default_variant,
            default_value=default_value,
            rules=rules,
        )