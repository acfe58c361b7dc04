"""Background product sync to an external catalog."""

__version__ = "0.1.0"
