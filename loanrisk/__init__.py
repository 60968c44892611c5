"""Oracle-backed loan risk assessment core."""

__version__ = "1.0.0"
