"""Themis notifier: uploads CI build reports to a Themis instance."""

__version__ = "0.1.0"
