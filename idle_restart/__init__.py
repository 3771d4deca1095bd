"""Restart an idle game server during a nightly maintenance window."""

__version__ = "0.1.0"
