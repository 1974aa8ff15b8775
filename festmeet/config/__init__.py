"""Configuration module: exports Settings and load_config."""

from festmeet.config.loader import load_config
from festmeet.config.settings import Settings

__all__ = ["Settings", "load_config"]
