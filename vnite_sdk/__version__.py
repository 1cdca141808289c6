"""Version information for the Vnite plugin SDK."""

__version__ = "1.0.0"
