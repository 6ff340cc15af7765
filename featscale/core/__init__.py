# featscale/core/__init__.py

"""
Core processing package for featscale.

Contains modules for:
- Data Handling (table I/O, column selection)
- Stateless Transforms (min-max, z-score, robust, log, L2, power)
- Fitted Scalers (train-only fitting, persistence)
- Diagnostics (feature statistics, recommendations, verification)
"""

from . import data_handler
from . import transforms
from . import scalers
from . import diagnostics

__all__ = [
    "data_handler",
    "transforms",
    "scalers",
    "diagnostics",
]
