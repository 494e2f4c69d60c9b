"""Command-line management of Tiny Tiny RSS subscriptions."""

__version__ = "0.2.0"
