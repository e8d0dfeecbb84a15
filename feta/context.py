"""The evaluation context: a user key and optional attributes."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Mapping, Optional


@dataclass
class Context:
    """Who a feature is being evaluated for."""

    user_key: str
    attributes: Optional[dict[str, Any]] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Context":
        """Build a context from plain data, validating its shape."""
        if not isinstance(data, Mapping):
            raise ValueError("context must be an object")
        user_key = data.get("user_key")
        if not isinstance(user_key, str):
            raise ValueError("context requires a string user_key")
        attributes = data.get("attributes")
        if attributes is not None:
            if not isinstance(attributes, Mapping):
                raise ValueError("context attributes must be an object")
            attributes = dict(attributes)
        return cls(user_key, attributes)

    @classmethod
    def from_json(cls, text: str) -> "Context":
        """Parse a context from JSON text."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(str(exc)) from exc
        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        """Return the context as plain data."""
        return {"user_key": self.user_key, "attributes": self.attributes}