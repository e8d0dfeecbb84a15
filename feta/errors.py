"""Errors raised and reported during feature evaluation."""

from __future__ import annotations


class FetaError(Exception):
    """Base class for feature evaluation errors."""

    kind = "Feta"
    label = "Feta error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.label}: {self.message}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FetaError):
            return NotImplemented
        return type(self) is type(other) and self.message == other.message

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.message))

    def to_dict(self) -> dict[str, str]:
        """Return the error as a single-key mapping of kind to message."""
        return {self.kind: self.message}


class ConfigurationError(FetaError):
    """The configuration is invalid or cannot be loaded."""

    kind = "Configuration"
    label = "Configuration error"


class RequestError(FetaError):
    """The request is invalid or cannot be processed."""

    kind = "Request"
    label = "Request error"


class TargetingError(FetaError):
    """Audience evaluation failed."""

    kind = "Targeting"
    label = "Targeting error"