"""Access counter HTTP service backed by Redis."""

__version__ = "0.1.0"
