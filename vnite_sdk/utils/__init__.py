"""Utility modules shared across the SDK."""
