"""Configuration utilities for CodonCanvas."""
from .schema import DEFAULTS_PATH, ConfigSchema, load_config

__all__ = ["DEFAULTS_PATH", "ConfigSchema", "load_config"]
