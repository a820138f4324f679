"""Rootline: intent resolution for shared family trees."""

__version__ = "0.1.0"
