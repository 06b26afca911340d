"""Hush - count-based bulk suppressions for static analysis results."""

__version__ = "0.1.0"
