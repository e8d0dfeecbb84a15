"""Configuration data for features, read from plain data or JSON."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping, Union

from feta.errors import ConfigurationError
from feta.value import FeatureValue, ValueType, check_value, parse_value_type

_MAX_PERCENTAGE = 255


@dataclass(frozen=True)
class VariantBucketing:
    """Every user gets the one named variant."""

    variant: str


@dataclass(frozen=True)
class DistributionBucketing:
    """Users are split between variants by percentage, in variant-name order."""

    distribution: dict[str, int]


Bucketing = Union[VariantBucketing, DistributionBucketing]


@dataclass(frozen=True)
class DefaultRule:
    """The rule that applies when no audience rule matches."""

    bucketing: Bucketing


@dataclass(frozen=True)
class AudienceRule:
    """A rule that applies to the users its expression selects."""

    name: str
    expression: str
    bucketing: Bucketing


def _require(data: Mapping[str, Any], key: str, kind: type, what: str) -> Any:
    if key not in data:
        raise ConfigurationError(f"{what}: missing field `{key}`")
    value = data[key]
    if kind is not bool and isinstance(value, bool) or not isinstance(value, kind):
        raise ConfigurationError(f"{what}: field `{key}` must be {kind.__name__}")
    return value


def _mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"{what} must be an object")
    return data


def _percentage(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"percentage for {name} must be an integer")
    if not 0 <= value <= _MAX_PERCENTAGE:
        raise ConfigurationError(f"percentage for {name} out of range: {value}")
    return value


def parse_bucketing(data: Mapping[str, Any]) -> Bucketing:
    """Read either a single `variant` or a `distribution` of percentages."""
    data = _mapping(data, "bucketing")
    if isinstance(data.get("variant"), str):
        return VariantBucketing(data["variant"])
    distribution = data.get("distribution")
    if isinstance(distribution, Mapping):
        parsed = {
            str(name): _percentage(str(name), pct)
            for name, pct in sorted(distribution.items())
        }
        return DistributionBucketing(parsed)
    raise ConfigurationError("bucketing requires a `variant` or a `distribution`")


def _parse_variants(data: Any) -> dict[str, FeatureValue]:
    variants = _mapping(data, "variants")
    parsed = {}
    for name, value in sorted(variants.items()):
        try:
            parsed[str(name)] = check_value(value)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"variant {name}: {exc}") from exc
    return parsed


def _parse_audience_rule(data: Any) -> AudienceRule:
    data = _mapping(data, "audience rule")
    return AudienceRule(
        name=_require(data, "name", str, "audience rule"),
        expression=_require(data, "expression", str, "audience rule"),
        bucketing=parse_bucketing(data),
    )


@dataclass(frozen=True)
class FeatureConfig:
    """The configuration of a single feature."""

    enabled: bool
    value_type: ValueType
    variants: dict[str, FeatureValue]
    default_variant: str
    default_rule: DefaultRule
    audience_rules: list[AudienceRule] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FeatureConfig":
        """Read a feature configuration from plain data."""
        data = _mapping(data, "feature")
        type_name = _require(data, "value_type", str, "feature")
        try:
            value_type = parse_value_type(type_name)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc
        if "variants" not in data:
            raise ConfigurationError("feature: missing field `variants`")
        if "default_rule" not in data:
            raise ConfigurationError("feature: missing field `default_rule`")
        rules = data.get("audience_rules", [])
        if not isinstance(rules, list):
            raise ConfigurationError("feature: field `audience_rules` must be a list")
        return cls(
            enabled=_require(data, "enabled", bool, "feature"),
            value_type=value_type,
            variants=_parse_variants(data["variants"]),
            default_variant=_require(data, "default_variant", str, "feature"),
            default_rule=DefaultRule(parse_bucketing(data["default_rule"])),
            audience_rules=[_parse_audience_rule(rule) for rule in rules],
        )


@dataclass(frozen=True)
class Config:
    """The configuration of all features, keyed and ordered by name."""

    features: dict[str, FeatureConfig]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Config":
        """Read the configuration from plain data."""
        data = _mapping(data, "configuration")
        features = _mapping(
            _require(data, "features", Mapping, "configuration"), "features"
        )
        return cls(
            {
                str(name): FeatureConfig.from_dict(feature)
                for name, feature in sorted(features.items())
            }
        )

    @classmethod
    def from_json(cls, text: str) -> "Config":
        """Parse the configuration from JSON text."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(str(exc)) from exc
        return cls.from_dict(data)