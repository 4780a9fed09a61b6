"""dddcheck: flow spec validation and coverage reporting."""

__version__ = "0.3.0"
