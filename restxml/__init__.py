"""Declarative building blocks for XML-over-HTTP REST API clients."""

__version__ = "1.0.0"
