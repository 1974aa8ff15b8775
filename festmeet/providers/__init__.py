"""Concrete adapters for external engines used by festmeet."""
