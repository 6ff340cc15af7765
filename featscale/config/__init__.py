# featscale/config/__init__.py

"""
Configuration management for featscale.

This package handles loading configuration from files (TOML),
environment variables, and internal defaults, providing a unified
configuration object.
"""

from .models import FeatscaleConfig
from .loaders import load_configuration, scaler_params_for

__all__ = [
    "FeatscaleConfig",
    "load_configuration",
    "scaler_params_for",
]
