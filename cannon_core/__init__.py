"""Core update resolution for locally installed archives."""

__version__ = "0.1.0"

__all__ = ["__version__"]
