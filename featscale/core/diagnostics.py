# featscale/core/diagnostics.py

"""
Feature statistics, scaler recommendations and checks of scaled output.

`describe_features` summarizes the distribution of each numeric column,
`recommend_method` turns one column's summary into a suggested scaler, and
`verify_scaling` checks the defining identity of a transform on its output
(min-max hits its bounds, standardized data has zero mean and unit variance,
and so on).
"""

import logging
import warnings
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd
from numpy.typing import ArrayLike, NDArray
from scipy import stats

logger = logging.getLogger(__name__)

SKEW_THRESHOLD = 1.0
OUTLIER_FENCE = 1.5  # Tukey fence, in IQRs beyond the quartiles

SCALING_METHODS: Dict[str, Dict[str, Any]] = {
    "standard": {
        "label": "Standard scaler",
        "description": "Centers features and scales to unit variance.",
        "handles_outliers": False,
        "requires_positive": False,
    },
    "minmax": {
        "label": "Min-Max scaler",
        "description": "Maps values into a fixed range, [0, 1] by default.",
        "handles_outliers": False,
        "requires_positive": False,
    },
    "maxabs": {
        "label": "MaxAbs scaler",
        "description": "Divides by the maximum absolute value; zeros stay zero.",
        "handles_outliers": False,
        "requires_positive": False,
    },
    "robust": {
        "label": "Robust scaler",
        "description": "Centers on the median and scales by the interquartile range.",
        "handles_outliers": True,
        "requires_positive": False,
    },
    "log": {
        "label": "Log transform",
        "description": "Compresses right-skewed magnitudes spanning orders of magnitude.",
        "handles_outliers": True,
        "requires_positive": True,
    },
    "l2": {
        "label": "Unit vector (L2) normalization",
        "description": "Rescales each sample to unit Euclidean length.",
        "handles_outliers": False,
        "requires_positive": False,
    },
    "power": {
        "label": "Power transform",
        "description": "Box-Cox / Yeo-Johnson transform towards a Gaussian shape.",
        "handles_outliers": True,
        "requires_positive": False,
    },
}

STATS_COLUMNS = [
    "count", "min", "max", "mean", "std", "median", "iqr",
    "skewness", "n_outliers", "has_non_positive",
]

# --- Statistics ---

def column_stats(values: ArrayLike) -> Dict[str, Any]:
    """Computes distribution statistics for one feature, ignoring NaNs."""
    arr = np.asarray(values, dtype=np.float64).ravel()
    arr = arr[~np.isnan(arr)]
    if arr.size == 0:
        return {
            "count": 0, "min": np.nan, "max": np.nan, "mean": np.nan, "std": np.nan,
            "median": np.nan, "iqr": np.nan, "skewness": np.nan, "n_outliers": 0,
            "has_non_positive": False,
        }
    q1, q3 = np.percentile(arr, [25, 75])
    iqr = q3 - q1
    lower, upper = q1 - OUTLIER_FENCE * iqr, q3 + OUTLIER_FENCE * iqr
    with warnings.catch_warnings():
        # Constant data makes skew undefined (precision loss warning)
        warnings.simplefilter("ignore", category=RuntimeWarning)
        skewness = float(stats.skew(arr)) if arr.size > 2 and np.ptp(arr) > 0 else 0.0
    return {
        "count": int(arr.size),
        "min": float(arr.min()),
        "max": float(arr.max()),
        "mean": float(arr.mean()),
        "std": float(arr.std()),
        "median": float(np.median(arr)),
        "iqr": float(iqr),
        "skewness": skewness,
        "n_outliers": int(np.sum((arr < lower) | (arr > upper))),
        "has_non_positive": bool(np.any(arr <= 0)),
    }


def describe_features(df: pd.DataFrame, columns: Optional[List[str]] = None) -> pd.DataFrame:
    """
    Summarizes each numeric column of a DataFrame.

    Args:
        df: Input table.
        columns: Columns to describe. Defaults to every numeric column.

    Returns:
        DataFrame indexed by column name with STATS_COLUMNS as columns.

    Raises:
        TypeError: If `df` is not a DataFrame.
    """
    if not isinstance(df, pd.DataFrame):
        raise TypeError("describe_features expects a Pandas DataFrame.")
    if columns is None:
        columns = df.select_dtypes(include=np.number).columns.tolist()
    rows = {col: column_stats(df[col].to_numpy(dtype=np.float64)) for col in columns}
    summary = pd.DataFrame.from_dict(rows, orient="index", columns=STATS_COLUMNS)
    summary.index.name = "column"
    logger.debug(f"Described {len(columns)} column(s).")
    return summary

# --- Recommendations ---

def recommend_method(stats_row: Dict[str, Any]) -> Tuple[str, str]:
    """
    Suggests a scaling method for one column from its `column_stats`.

    Returns:
        (method, reason)
    """
    skewness = stats_row.get("skewness", 0.0)
    if stats_row.get("count", 0) == 0:
        return "standard", "no valid values"
    if not np.isnan(skewness) and abs(skewness) > SKEW_THRESHOLD:
        has_non_positive = bool(stats_row.get("has_non_positive", True))
        if skewness > 0 and not has_non_positive:
            return "log", f"strong right skew ({skewness:.2f}) on strictly positive values"
        if has_non_positive:
            return "power", f"strong skew ({skewness:.2f}) with zero or negative values"
        # Left skew on positive data falls through to the outlier and range rules
    if stats_row.get("n_outliers", 0) > 0:
        return "robust", f"{stats_row['n_outliers']} outlier(s) beyond {OUTLIER_FENCE} IQR"
    if stats_row.get("min", -1.0) >= 0:
        return "minmax", "bounded non-negative values without outliers"
    return "standard", "roughly symmetric values without outliers"


def recommend_methods(summary: pd.DataFrame) -> pd.DataFrame:
    """Applies `recommend_method` to every row of a `describe_features` table."""
    records = {
        col: dict(zip(("method", "reason"), recommend_method(row.to_dict())))
        for col, row in summary.iterrows()
    }
    result = pd.DataFrame.from_dict(records, orient="index", columns=["method", "reason"])
    result.index.name = summary.index.name
    return result

# --- Verification ---

def check_minmax_bounds(
    scaled: NDArray[np.float64],
    feature_range: Tuple[float, float] = (0.0, 1.0),
    atol: float = 1e-6
) -> bool:
    """True if every non-constant column spans exactly `feature_range`."""
    lo, hi = feature_range
    arr = np.atleast_2d(np.asarray(scaled, dtype=np.float64).T).T
    col_min = np.nanmin(arr, axis=0)
    col_max = np.nanmax(arr, axis=0)
    constant = np.isclose(col_min, col_max, atol=atol)
    ok_min = np.isclose(col_min, lo, atol=atol)
    ok_max = np.isclose(col_max, hi, atol=atol) | constant
    return bool(np.all(ok_min & ok_max))

def check_standardized(scaled: NDArray[np.float64], atol: float = 1e-6) -> bool:
    """True if every column has zero mean and unit (or zero, for constant columns) std."""
    arr = np.atleast_2d(np.asarray(scaled, dtype=np.float64).T).T
    means = np.nanmean(arr, axis=0)
    stds = np.nanstd(arr, axis=0)
    std_ok = np.isclose(stds, 1.0, atol=atol) | np.isclose(stds, 0.0, atol=atol)
    return bool(np.all(np.isclose(means, 0.0, atol=atol)) and np.all(std_ok))

def check_robust_centered(scaled: NDArray[np.float64], atol: float = 1e-6) -> bool:
    """True if every column has zero median."""
    arr = np.atleast_2d(np.asarray(scaled, dtype=np.float64).T).T
    return bool(np.all(np.isclose(np.nanmedian(arr, axis=0), 0.0, atol=atol)))

def check_maxabs_bounds(scaled: NDArray[np.float64], atol: float = 1e-6) -> bool:
    """True if every non-zero column has maximum absolute value 1."""
    arr = np.atleast_2d(np.asarray(scaled, dtype=np.float64).T).T
    max_abs = np.nanmax(np.abs(arr), axis=0)
    return bool(np.all(np.isclose(max_abs, 1.0, atol=atol) | np.isclose(max_abs, 0.0, atol=atol)))

def check_unit_norm(scaled: NDArray[np.float64], axis: int = -1, atol: float = 1e-6) -> bool:
    """True if every non-zero vector along `axis` has unit Euclidean length."""
    norms = np.linalg.norm(np.asarray(scaled, dtype=np.float64), axis=axis)
    return bool(np.all(np.isclose(norms, 1.0, atol=atol) | np.isclose(norms, 0.0, atol=atol)))


def verify_scaling(
    original: ArrayLike,
    scaled: ArrayLike,
    method: str,
    atol: float = 1e-6,
    feature_range: Tuple[float, float] = (0.0, 1.0),
    power_standardized: bool = True
) -> Dict[str, bool]:
    """
    Checks the defining identities of a scaling method on its output.

    Args:
        original: Data before scaling (used for shape and NaN-pattern checks).
        scaled: Data after scaling.
        method: Scaling method name (see SCALING_METHODS).
        atol: Absolute tolerance for floating-point comparisons.
        feature_range: Target range, for 'minmax'.
        power_standardized: Whether a 'power' transform standardized its output.

    Returns:
        Mapping of check name to pass/fail.

    Raises:
        ValueError: If the method is unknown.
    """
    if method not in SCALING_METHODS:
        raise ValueError(f"Unknown scaling method '{method}'. Choose one of {', '.join(SCALING_METHODS)}.")
    original_arr = np.asarray(original, dtype=np.float64)
    scaled_arr = np.asarray(scaled, dtype=np.float64)
    # A 1D feature comes back from apply_scaling as a single column
    if original_arr.ndim == 1 and scaled_arr.ndim == 2 and scaled_arr.shape[1] == 1:
        original_arr = original_arr.reshape(-1, 1)

    shape_preserved = original_arr.shape == scaled_arr.shape
    results: Dict[str, bool] = {
        "shape_preserved": shape_preserved,
        "no_new_nans": shape_preserved and not bool(np.any(np.isnan(scaled_arr) & ~np.isnan(original_arr))),
    }
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", category=RuntimeWarning)
        if method == "minmax":
            results["range_bounds"] = check_minmax_bounds(scaled_arr, feature_range, atol)
        elif method == "standard":
            results["zero_mean_unit_variance"] = check_standardized(scaled_arr, atol)
        elif method == "robust":
            results["median_centered"] = check_robust_centered(scaled_arr, atol)
        elif method == "maxabs":
            results["max_abs_one"] = check_maxabs_bounds(scaled_arr, atol)
        elif method == "l2":
            results["unit_norm"] = check_unit_norm(scaled_arr, atol=atol)
        elif method == "power" and power_standardized:
            results["zero_mean_unit_variance"] = check_standardized(scaled_arr, atol=max(atol, 1e-4))
        # Log has no identity beyond shape; domain errors are raised at transform time
    failed = [name for name, ok in results.items() if not ok]
    if failed:
        logger.warning(f"Scaling verification for '{method}' failed checks: {failed}")
    else:
        logger.debug(f"Scaling verification for '{method}' passed: {list(results)}")
    return results
