"""Automatic internal linking engine for blog articles."""

__version__ = "1.0.0"
