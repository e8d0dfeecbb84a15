"""Feature flag evaluation with audience targeting and percentage rollouts."""

__version__ = "0.1.1"