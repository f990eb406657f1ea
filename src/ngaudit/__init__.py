"""ngaudit — check which Angular dependencies are ready for Ivy."""

__version__ = "0.3.0"
