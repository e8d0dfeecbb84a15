# feta

Feature flag evaluation for Python. You define features in a configuration,
either as plain data or as JSON. Each feature has typed variants, optional
audience rules written as small expressions over user attributes, and a
default rule. A rule either picks one variant or splits users between
variants by percentage.

Users are placed into buckets by a 32-bit MurmurHash3 of the feature name
followed by the user key, taken modulo 100. The same user therefore always
gets the same variant of a feature.

The package has no runtime dependencies.

## Installation

```
pip install feta
```

## Configuration

```json
{
  "features": {
    "new_checkout": {
      "enabled": true,
      "value_type": "bool",
      "variants": {"on": true, "off": false},
      "default_variant": "off",
      "audience_rules": [
        {"name": "beta", "expression": "beta", "variant": "on"}
      ],
      "default_rule": {"distribution": {"on": 20, "off": 80}}
    }
  }
}
```

- `value_type` is one of `integer`/`int`, `float`, `boolean`/`bool` or
  `string`. Every variant must hold a value of that type. Variant values may
  be integers (64-bit range), floats, booleans, strings or `null`.
- A rule uses either `"variant": "<name>"` or a `"distribution"` that maps
  variant names to integer percentages. The percentages must add up to 100.
  Buckets are laid out in variant-name order.
- `audience_rules` is optional. Audience rules are tried in order, and the
  default rule applies when none of them match. The default rule has no
  expression.

`feta.config.Config.from_json(text)` and `Config.from_dict(data)` read a
configuration. `feta.config.FeatureConfig.from_dict` reads a single feature.
If the data is malformed, they raise `feta.errors.ConfigurationError`.

## Evaluating features

```python
from feta.config import Config
from feta.context import Context
from feta.features import Features

with open("features.json") as fh:
    config = Config.from_json(fh.read())
features = Features.from_config(config)

ctx = Context.from_dict({"user_key": "user-42", "attributes": {"beta": True}})
decision = features.decide("new_checkout", ctx)

print(decision.variant, decision.value, decision.reason)
print(decision.audience)  # "beta"
print(decision.to_dict())
```

`Features.from_config` validates every feature. It raises
`feta.errors.ConfigurationError` for an invalid feature, and
`feta.errors.TargetingError` for an audience expression that does not compile.

`Features.decide` returns a `feta.decision.Decision` and does not raise.
A decision carries `hash`, `variant`, `reason`, `value`, `audience` and
`error`. The failure cases are:

- **Unknown feature name.** `reason` is `Reason.ERROR`, `error` is a
  `RequestError`, `variant` is empty and `value` is `None`.
- **Audience expression fails at runtime.** `reason` is `Reason.ERROR`,
  `error` is a `TargetingError`, and the decision keeps the feature's default
  variant and value.
- **Disabled feature.** `reason` is `Reason.DISABLED`, and the decision
  holds the default variant and value.

`Features.decide_all(ctx)` returns a dictionary of decisions keyed by feature
name.

`Reason` has these values: `unknown`, `disabled`, `static` (a single-variant
rule), `split` (a percentage split), `match` (an audience rule with one
variant), `match_split` (an audience rule with a split) and `error`.

## Audience expressions

An audience rule applies only when its expression evaluates to exactly
`true`. Names in the expression refer to the context's `attributes`, and a
missing attribute evaluates to `null`. The language supports:

- literals: numbers, quoted strings, `true`, `false`, `null`, and lists such
  as `[1, 2]`
- comparisons: `eq`/`==`, `ne`/`!=`, `gt`/`>`, `ge`/`>=`, `lt`/`<`, `le`/`<=`
- membership: `in`, for a substring, a list element or a mapping key
- logic: `and`/`&&`, `or`/`||`, `not`/`!`, where `null` counts as false
- arithmetic: `+ - * / %`, and `+` also joins strings
- member access `a.b`, indexing `a[0]` and `a["key"]`, and parentheses

Examples are `orders gt 10`, `country in ["de", "fr"]` and
`plan.tier == "pro" and not trial`.

`feta.expression.compile_expression` gives a `Program`, which you run with
`Program.run(env)`. It raises `CompileError` or `EvaluationError`, and both
are subclasses of `ExpressionError`.

## Building features in code

```python
from feta.context import Context
from feta.feature import FeatureBuilder
from feta.rule import RuleBuilder
from feta.value import ValueType

feature = (
    FeatureBuilder(ValueType.INTEGER)
    .name("exp")
    .enabled(True)
    .variant("a", 1)
    .variant("b", 2)
    .default_variant("a")
    .audience_rule(RuleBuilder().variant("b", 100).audience("beta", "beta").build())
    .default_rule(RuleBuilder().variant("a", 50).variant("b", 50).build())
    .build()
)

decision = feature.decide(Context("user-42"))
```

`RuleBuilder.build` raises `ConfigurationError` when the percentages do not
sum to 100. It raises `TargetingError` when the expression does not compile.
`FeatureBuilder.build` raises `ConfigurationError` in these cases:

- the name is missing
- the default variant is missing or unknown
- the default rule is missing, or it has an expression
- a variant value has the wrong type
- a rule names an undefined variant

`feta.hashing.calculate(feature, user_key)` and `murmur3_32(data, seed)`
expose the hash used for bucketing.

## JSON engine

`feta.runtime.Engine` takes configuration and contexts as JSON strings. It
returns `DecisionRecord`s, which are decisions whose error has been turned
into its message text. You can give it a callback, which receives an `Event`
for every decision it makes:

```python
from feta.runtime import Engine

events = []
engine = Engine(events.append)
engine.init(config_json)
record = engine.decide("new_checkout", '{"user_key": "user-42"}')
pairs = engine.decide_all('{"user_key": "user-42"}')
```

The three methods behave as follows:

- **`init`** replaces the current feature set. If the new configuration is
  invalid, it raises and keeps the previous set.
- **`decide`** reports malformed context JSON as an error record.
- **`decide_all`** raises `RequestError` for malformed context JSON.
  Otherwise it returns a list of `(feature name, record)` pairs.

## What it does not do

feta is a library only. It has no command-line tool and no server. It does
not fetch or store configuration, so you pass it the data or JSON text
yourself. It does not send tracking events anywhere. Each `Event` is handed
to the callback you give to `Engine` and nowhere else.