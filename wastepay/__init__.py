# wastepay/__init__.py
"""Garbage-collection fee management service."""

__version__ = "0.1.0"
