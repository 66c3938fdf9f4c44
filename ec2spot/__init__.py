"""Concurrent EC2 spot price history fetcher."""

__version__ = "1.0.0"
