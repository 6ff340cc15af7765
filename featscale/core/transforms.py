# featscale/core/transforms.py

"""
Closed-form scaling and normalization transforms.

Each function is stateless: statistics are computed from the array it is given
and applied to that same array. Use `featscale.core.scalers` when the statistics
must be learned on training data and re-applied to other data.

Inputs are 1D arrays (a single feature) or 2D arrays shaped
(n_samples, n_features). All column-wise transforms ignore NaNs when computing
statistics; NaNs propagate unchanged to the output.
"""

import logging
import math
import warnings
from typing import Literal, Optional, Tuple, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy import stats

logger = logging.getLogger(__name__)

PowerMethod = Literal['yeo-johnson', 'box-cox']

# --- Helpers ---

def _as_2d(x: ArrayLike) -> Tuple[NDArray[np.float64], bool]:
    """Returns a float64 2D view of the input and whether it was 1D."""
    arr = np.asarray(x, dtype=np.float64)
    if arr.ndim == 1:
        return arr.reshape(-1, 1), True
    if arr.ndim == 2:
        return arr, False
    raise ValueError(f"Input must be 1D or 2D (samples x features), got shape {arr.shape}")

def _restore(arr: NDArray[np.float64], was_1d: bool) -> NDArray[np.float64]:
    return arr.ravel() if was_1d else arr

def _safe_divisor(values: NDArray[np.float64]) -> NDArray[np.float64]:
    """Replaces zero (or NaN) scales with 1 so constant columns are left unscaled."""
    values = np.array(values, dtype=np.float64, copy=True)
    values[~np.isfinite(values) | (values == 0.0)] = 1.0
    return values

def _column_stat(func, arr: NDArray[np.float64], *args, **kwargs) -> NDArray[np.float64]:
    """Applies a nan-aware numpy reduction column-wise, silencing all-NaN warnings."""
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", category=RuntimeWarning)
        return func(arr, *args, axis=0, **kwargs)

# --- Min-Max Scaling ---

def minmax_scale(
    x: ArrayLike,
    feature_range: Tuple[float, float] = (0.0, 1.0)
) -> NDArray[np.float64]:
    """
    Rescales each feature linearly so its minimum maps to `feature_range[0]`
    and its maximum to `feature_range[1]`.

        x_scaled = (x - min(x)) / (max(x) - min(x)) * (hi - lo) + lo

    A constant feature maps to `lo`.

    Raises:
        ValueError: If the range is not increasing or the input is not 1D/2D.
    """
    lo, hi = feature_range
    if lo >= hi:
        raise ValueError(f"feature_range minimum must be smaller than maximum, got {feature_range}")
    arr, was_1d = _as_2d(x)
    data_min = _column_stat(np.nanmin, arr)
    data_max = _column_stat(np.nanmax, arr)
    data_range = _safe_divisor(data_max - data_min)
    scaled = (arr - data_min) / data_range * (hi - lo) + lo
    logger.debug(f"minmax_scale: min={data_min}, max={data_max}, range=({lo}, {hi})")
    return _restore(scaled, was_1d)

# --- Standardization (Z-score) ---

def standardize(x: ArrayLike, ddof: int = 0) -> NDArray[np.float64]:
    """
    Centers each feature to zero mean and scales it to unit standard deviation.

    `ddof=0` uses the population standard deviation, matching scikit-learn's
    StandardScaler. Features with zero variance are centered only.
    """
    arr, was_1d = _as_2d(x)
    mean = _column_stat(np.nanmean, arr)
    std = _column_stat(np.nanstd, arr, ddof=ddof)
    scaled = (arr - mean) / _safe_divisor(std)
    return _restore(scaled, was_1d)

# --- Robust Scaling ---

def robust_scale(
    x: ArrayLike,
    quantile_range: Tuple[float, float] = (25.0, 75.0)
) -> NDArray[np.float64]:
    """
    Centers each feature on its median and scales by its interquartile range.

    Median and quantiles are insensitive to the magnitude of values outside the
    quantile range, so an extreme outlier does not change how the bulk of the
    data is scaled.

    Raises:
        ValueError: If the quantile range is not 0 <= low < high <= 100.
    """
    q_min, q_max = quantile_range
    if not 0 <= q_min < q_max <= 100:
        raise ValueError(f"Invalid quantile_range {quantile_range}; need 0 <= low < high <= 100")
    arr, was_1d = _as_2d(x)
    median = _column_stat(np.nanmedian, arr)
    q_lo = _column_stat(np.nanpercentile, arr, q_min)
    q_hi = _column_stat(np.nanpercentile, arr, q_max)
    scaled = (arr - median) / _safe_divisor(q_hi - q_lo)
    return _restore(scaled, was_1d)

# --- MaxAbs Scaling ---

def maxabs_scale(x: ArrayLike) -> NDArray[np.float64]:
    """Scales each feature by its maximum absolute value into [-1, 1]. Zeros stay zero."""
    arr, was_1d = _as_2d(x)
    max_abs = _column_stat(np.nanmax, np.abs(arr))
    return _restore(arr / _safe_divisor(max_abs), was_1d)

# --- Log Transform ---

def log_transform(
    x: ArrayLike,
    base: Optional[float] = None,
    offset: float = 0.0
) -> NDArray[np.float64]:
    """
    Compresses right-skewed magnitudes with a logarithm: log_base(x + offset).

    Args:
        x: Input values (any shape accepted by NumPy; not restricted to 2D).
        base: Logarithm base. None uses the natural logarithm.
        offset: Constant added before taking the log. `offset=1` gives log1p,
                which keeps zeros at zero.

    Raises:
        ValueError: If any non-NaN `x + offset` is not strictly positive, or
                    the base is not positive and different from 1.
    """
    if base is not None and (base <= 0 or base == 1.0):
        raise ValueError(f"Logarithm base must be positive and not 1, got {base}")
    arr = np.asarray(x, dtype=np.float64)
    shifted = arr + offset
    finite = shifted[~np.isnan(shifted)]
    if finite.size and np.any(finite <= 0):
        n_bad = int(np.sum(finite <= 0))
        raise ValueError(
            f"Log transform requires strictly positive input; {n_bad} value(s) of x + offset "
            f"(offset={offset}) are <= 0. Increase the offset or use a power transform."
        )
    if offset == 1.0:
        result = np.log1p(arr)
    else:
        result = np.log(shifted)
    if base is not None:
        result = result / math.log(base)
    return result

def inverse_log_transform(
    y: ArrayLike,
    base: Optional[float] = None,
    offset: float = 0.0
) -> NDArray[np.float64]:
    """Inverse of `log_transform`: base ** y - offset."""
    arr = np.asarray(y, dtype=np.float64)
    if base is not None:
        arr = arr * math.log(base)
    if offset == 1.0:
        return np.expm1(arr)
    return np.exp(arr) - offset

# --- Unit Vector (L2) Normalization ---

def l2_normalize(x: ArrayLike, axis: int = -1) -> NDArray[np.float64]:
    """
    Rescales vectors to unit Euclidean length.

    For 2D input the default `axis=-1` normalizes each row (sample), as is usual
    for text and embedding features. A zero vector is returned unchanged. NaN
    entries are left out of the norm and stay NaN in the output.
    """
    arr = np.asarray(x, dtype=np.float64)
    if arr.ndim not in (1, 2):
        raise ValueError(f"Input must be 1D or 2D, got shape {arr.shape}")
    norms = np.sqrt(np.nansum(arr ** 2, axis=axis, keepdims=True))
    return arr / _safe_divisor(norms)

# --- Power Transforms ---

def _power_column(col: NDArray[np.float64], method: PowerMethod) -> Tuple[NDArray[np.float64], float]:
    out = np.full_like(col, np.nan)
    mask = ~np.isnan(col)
    values = col[mask]
    if values.size == 0:
        return out, float('nan')
    if np.ptp(values) == 0:
        # Lambda is undefined for constant data
        out[mask] = values
        return out, 1.0
    if method == 'box-cox':
        transformed, lmbda = stats.boxcox(values)
    else:
        transformed, lmbda = stats.yeojohnson(values)
    out[mask] = transformed
    return out, float(lmbda)

def power_transform(
    x: ArrayLike,
    method: PowerMethod = 'yeo-johnson',
    standardize: bool = True,
    return_lambdas: bool = False
) -> Union[NDArray[np.float64], Tuple[NDArray[np.float64], NDArray[np.float64]]]:
    """
    Applies a column-wise power transform to make features more Gaussian.

    The lambda of each column is estimated by maximum likelihood
    (`scipy.stats.boxcox` / `scipy.stats.yeojohnson`). Box-Cox is only defined
    for strictly positive data; Yeo-Johnson accepts any real values.

    Args:
        x: Input array, 1D or 2D (samples x features).
        method: 'yeo-johnson' (default) or 'box-cox'.
        standardize: If True, the transformed output is standardized to zero
                     mean and unit variance.
        return_lambdas: If True, also return the fitted lambda per column.

    Returns:
        The transformed array, or (transformed, lambdas) if `return_lambdas`.

    Raises:
        ValueError: For an unknown method, or Box-Cox on non-positive data.
    """
    if method not in ('yeo-johnson', 'box-cox'):
        raise ValueError(f"Unsupported power transform method '{method}'. Choose 'yeo-johnson' or 'box-cox'.")
    arr, was_1d = _as_2d(x)
    if method == 'box-cox':
        finite = arr[~np.isnan(arr)]
        if finite.size and np.any(finite <= 0):
            raise ValueError("Box-Cox transform requires strictly positive data; use 'yeo-johnson' instead.")

    out = np.empty_like(arr)
    lambdas = np.empty(arr.shape[1], dtype=np.float64)
    for j in range(arr.shape[1]):
        out[:, j], lambdas[j] = _power_column(arr[:, j], method)
    logger.debug(f"power_transform ({method}) lambdas: {lambdas}")

    if standardize:
        mean = _column_stat(np.nanmean, out)
        std = _column_stat(np.nanstd, out)
        out = (out - mean) / _safe_divisor(std)

    result = _restore(out, was_1d)
    if return_lambdas:
        return result, lambdas
    return result
