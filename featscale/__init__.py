# featscale/__init__.py

"""
featscale: feature scaling and normalization for ML preprocessing.
"""

from .version import __version__

__all__ = ["__version__"]
