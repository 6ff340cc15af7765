# tests/test_transforms.py

"""
Tests for the stateless transforms in featscale.core.transforms.
"""

import pytest
import numpy as np
from numpy.testing import assert_allclose, assert_array_equal

from featscale.core.transforms import (
    minmax_scale,
    standardize,
    robust_scale,
    maxabs_scale,
    log_transform,
    inverse_log_transform,
    l2_normalize,
    power_transform,
)

# --- Test Fixtures ---

@pytest.fixture
def house_prices() -> np.ndarray:
    """Right-skewed prices with one luxury outlier."""
    return np.array([120_000, 150_000, 180_000, 210_000, 250_000, 320_000, 2_500_000], dtype=np.float64)

@pytest.fixture
def feature_table() -> np.ndarray:
    """Three features on very different scales."""
    rng = np.random.default_rng(123)
    return np.column_stack([
        rng.normal(loc=10, scale=2, size=60),
        rng.normal(loc=0, scale=0.1, size=60),
        rng.uniform(low=-5, high=5, size=60),
    ])

# --- Min-Max ---

def test_minmax_maps_min_to_zero_and_max_to_one(feature_table):
    scaled = minmax_scale(feature_table)
    assert scaled.shape == feature_table.shape and scaled.dtype == np.float64
    assert_allclose(scaled.min(axis=0), 0.0, atol=1e-12)
    assert_allclose(scaled.max(axis=0), 1.0, atol=1e-12)

def test_minmax_custom_range(house_prices):
    scaled = minmax_scale(house_prices, feature_range=(-1.0, 1.0))
    assert scaled.ndim == 1
    assert scaled[0] == pytest.approx(-1.0)
    assert scaled[-1] == pytest.approx(1.0)

def test_minmax_constant_column_maps_to_lower_bound():
    data = np.column_stack([np.full(5, 7.0), np.arange(5.0)])
    scaled = minmax_scale(data)
    assert_array_equal(scaled[:, 0], 0.0)
    assert_allclose(scaled[:, 1], [0.0, 0.25, 0.5, 0.75, 1.0])

def test_minmax_invalid_range():
    with pytest.raises(ValueError, match="feature_range"):
        minmax_scale([1.0, 2.0], feature_range=(1.0, 1.0))

def test_minmax_ignores_nan_for_statistics():
    scaled = minmax_scale(np.array([0.0, np.nan, 5.0, 10.0]))
    assert np.isnan(scaled[1])
    assert_allclose(scaled[[0, 2, 3]], [0.0, 0.5, 1.0])

# --- Standardization ---

def test_standardize_zero_mean_unit_variance(feature_table):
    scaled = standardize(feature_table)
    assert_allclose(scaled.mean(axis=0), 0.0, atol=1e-12)
    assert_allclose(scaled.std(axis=0), 1.0, atol=1e-12)

def test_standardize_zero_variance_is_centered_only():
    scaled = standardize(np.full(4, 3.0))
    assert_array_equal(scaled, 0.0)

def test_standardize_sample_std():
    data = np.array([1.0, 2.0, 3.0, 4.0])
    scaled = standardize(data, ddof=1)
    assert_allclose(scaled.std(ddof=1), 1.0)

# --- Robust ---

def test_robust_scale_centers_on_median(feature_table):
    scaled = robust_scale(feature_table)
    assert_allclose(np.median(scaled, axis=0), 0.0, atol=1e-12)

def test_robust_scale_ignores_outlier_magnitude():
    base = np.arange(1.0, 10.0)
    with_outlier = robust_scale(np.append(base, 100.0))
    with_huge_outlier = robust_scale(np.append(base, 1e6))
    assert_allclose(with_outlier[:-1], with_huge_outlier[:-1])

def test_robust_scale_known_values():
    # median 3, IQR 4 - 2 = 2
    scaled = robust_scale([1.0, 2.0, 3.0, 4.0, 5.0])
    assert_allclose(scaled, [-1.0, -0.5, 0.0, 0.5, 1.0])

@pytest.mark.parametrize("quantile_range", [(75.0, 25.0), (-1.0, 50.0), (10.0, 101.0)])
def test_robust_scale_invalid_quantiles(quantile_range):
    with pytest.raises(ValueError):
        robust_scale([1.0, 2.0, 3.0], quantile_range=quantile_range)

# --- MaxAbs ---

def test_maxabs_scale():
    scaled = maxabs_scale(np.array([[-4.0, 0.0], [2.0, 0.0], [1.0, 0.0]]))
    assert_allclose(scaled[:, 0], [-1.0, 0.5, 0.25])
    assert_array_equal(scaled[:, 1], 0.0)

# --- Log ---

def test_log_transform_base_10():
    assert_allclose(log_transform([1.0, 10.0, 1000.0], base=10), [0.0, 1.0, 3.0])

def test_log_transform_compresses_range(house_prices):
    logged = log_transform(house_prices)
    raw_ratio = house_prices.max() / house_prices.min()
    log_spread = logged.max() - logged.min()
    assert log_spread == pytest.approx(np.log(raw_ratio))

def test_log1p_keeps_zero_at_zero():
    result = log_transform(np.array([0.0, np.e - 1]), offset=1.0)
    assert_allclose(result, [0.0, 1.0])

@pytest.mark.parametrize("values", [[0.0, 1.0], [-3.0, 2.0]])
def test_log_transform_rejects_non_positive(values):
    with pytest.raises(ValueError, match="strictly positive"):
        log_transform(values)

def test_log_transform_invalid_base():
    with pytest.raises(ValueError, match="base"):
        log_transform([1.0, 2.0], base=1.0)

def test_inverse_log_transform_recovers_input(house_prices):
    restored = inverse_log_transform(log_transform(house_prices, base=2, offset=5.0), base=2, offset=5.0)
    assert_allclose(restored, house_prices, rtol=1e-10)

# --- L2 ---

def test_l2_normalize_rows_have_unit_norm(feature_table):
    normalized = l2_normalize(feature_table)
    assert_allclose(np.linalg.norm(normalized, axis=1), 1.0)

def test_l2_normalize_known_vector():
    assert_allclose(l2_normalize([3.0, 4.0]), [0.6, 0.8])

def test_l2_normalize_zero_row_unchanged():
    data = np.array([[0.0, 0.0], [1.0, 1.0]])
    normalized = l2_normalize(data)
    assert_array_equal(normalized[0], [0.0, 0.0])
    assert np.linalg.norm(normalized[1]) == pytest.approx(1.0)

def test_l2_normalize_columns():
    normalized = l2_normalize(np.array([[3.0, 1.0], [4.0, 0.0]]), axis=0)
    assert_allclose(np.linalg.norm(normalized, axis=0), 1.0)

def test_l2_normalize_skips_nan_in_norm():
    normalized = l2_normalize(np.array([[3.0, 4.0, np.nan], [3.0, 4.0, 0.0]]))
    assert_allclose(normalized[0, :2], [0.6, 0.8])
    assert np.isnan(normalized[0, 2])
    assert_allclose(normalized[1], [0.6, 0.8, 0.0])

def test_l2_normalize_all_nan_row_stays_nan():
    normalized = l2_normalize(np.array([[np.nan, np.nan], [1.0, 0.0]]))
    assert np.all(np.isnan(normalized[0]))
    assert_allclose(normalized[1], [1.0, 0.0])

# --- Power ---

def test_power_transform_yeo_johnson_handles_negatives():
    rng = np.random.default_rng(7)
    skewed = rng.exponential(scale=2.0, size=300) - 1.0
    transformed, lambdas = power_transform(skewed, return_lambdas=True)
    assert transformed.shape == skewed.shape
    assert lambdas.shape == (1,)
    assert transformed.mean() == pytest.approx(0.0, abs=1e-10)
    assert transformed.std() == pytest.approx(1.0, abs=1e-10)

def test_power_transform_box_cox_reduces_skew(house_prices):
    from scipy.stats import skew
    transformed = power_transform(house_prices, method='box-cox', standardize=False)
    assert abs(skew(transformed)) < abs(skew(house_prices))

def test_power_transform_box_cox_rejects_non_positive():
    with pytest.raises(ValueError, match="strictly positive"):
        power_transform([0.0, 1.0, 2.0], method='box-cox')

def test_power_transform_unknown_method():
    with pytest.raises(ValueError, match="Unsupported"):
        power_transform([1.0, 2.0], method='cube-root')  # type: ignore

def test_power_transform_constant_column():
    data = np.column_stack([np.full(10, 4.0), np.arange(1.0, 11.0)])
    transformed, lambdas = power_transform(data, return_lambdas=True)
    assert_array_equal(transformed[:, 0], 0.0)
    assert lambdas[0] == 1.0

# --- Shape handling ---

@pytest.mark.parametrize("func", [minmax_scale, standardize, robust_scale, maxabs_scale, power_transform, l2_normalize])
def test_transforms_reject_3d_input(func):
    with pytest.raises(ValueError, match="1D or 2D"):
        func(np.ones((2, 2, 2)))

# --- NaN handling ---

@pytest.fixture
def table_with_nan() -> np.ndarray:
    rng = np.random.default_rng(5)
    data = rng.uniform(low=1.0, high=10.0, size=(30, 3))
    data[4, 0] = np.nan
    return data

@pytest.mark.parametrize("func", [
    minmax_scale, standardize, robust_scale, maxabs_scale, log_transform, power_transform,
])
def test_column_transforms_ignore_nan(table_with_nan, func):
    """A NaN stays in place and does not change the statistics of its column."""
    out = func(table_with_nan)
    nan_mask = np.isnan(out)
    assert nan_mask[4, 0]
    assert nan_mask.sum() == 1
    clean_column = np.delete(table_with_nan[:, 0], 4)
    assert_allclose(np.delete(out[:, 0], 4), func(clean_column), rtol=1e-7, atol=1e-10)
    # Other columns are unaffected by the NaN
    assert_allclose(out[:, 1:], func(table_with_nan[:, 1:]), rtol=1e-7, atol=1e-10)

def test_l2_normalize_nan_rows_keep_unit_norm(table_with_nan):
    out = l2_normalize(table_with_nan)
    assert np.isnan(out[4, 0])
    assert np.sqrt(np.nansum(out[4] ** 2)) == pytest.approx(1.0)
    assert_allclose(np.linalg.norm(np.delete(out, 4, axis=0), axis=1), 1.0)
