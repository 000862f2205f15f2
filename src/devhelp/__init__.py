"""Help lookups that prefer packages loaded in development mode."""

__version__ = "0.1.0"
