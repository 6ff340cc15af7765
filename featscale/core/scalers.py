# featscale/core/scalers.py

"""
Fitted feature scalers.

Wraps scikit-learn transformers so that scaling statistics can be learned on
training data and re-applied, unchanged, to validation or production data.
Fitting a scaler on evaluation data leaks information from that data into the
model; `fit_transform_split` and the save/load helpers exist to make the
train-only fit the default path.
"""

import logging
import pickle
from pathlib import Path
from typing import Optional, Union, Literal, Dict, Any, List, Tuple

import joblib
import numpy as np
from numpy.typing import ArrayLike, NDArray
from sklearn.exceptions import NotFittedError
from sklearn.preprocessing import (
    FunctionTransformer,
    MaxAbsScaler,
    MinMaxScaler,
    Normalizer,
    PowerTransformer,
    RobustScaler,
    StandardScaler,
)
from sklearn.utils.validation import check_is_fitted

from featscale.version import __version__
from .transforms import log_transform, inverse_log_transform

logger = logging.getLogger(__name__)

ScalerName = Literal['standard', 'minmax', 'maxabs', 'robust', 'log', 'l2', 'power']
SCALER_TYPES: Tuple[str, ...] = ('standard', 'minmax', 'maxabs', 'robust', 'log', 'l2', 'power')

# Type alias for scaler instances
ScalerType = Union[
    StandardScaler, MinMaxScaler, MaxAbsScaler, RobustScaler,
    FunctionTransformer, Normalizer, PowerTransformer
]

# Transformers that learn nothing from the data and need no fit
_STATELESS_SCALERS = (FunctionTransformer, Normalizer)

_BUNDLE_MARKER = "featscale_scaler_bundle"

# --- Construction ---

def create_scaler(scaler_type: str, params: Optional[Dict[str, Any]] = None) -> ScalerType:
    """
    Builds an unfitted scaler of the given type.

    Args:
        scaler_type: One of SCALER_TYPES.
        params: Constructor keyword arguments. For 'log' these are `base` and
                `offset`; for 'power' `method` and `standardize`; other types
                take the matching scikit-learn constructor arguments.

    Raises:
        ValueError: If the scaler type is unknown or the parameters are invalid.
    """
    params = dict(params or {})
    try:
        if scaler_type == 'standard':
            return StandardScaler(**params)
        if scaler_type == 'minmax':
            if 'feature_range' in params:
                params['feature_range'] = tuple(params['feature_range'])
            return MinMaxScaler(**params)
        if scaler_type == 'maxabs':
            return MaxAbsScaler(**params)
        if scaler_type == 'robust':
            if 'quantile_range' in params:
                params['quantile_range'] = tuple(params['quantile_range'])
            return RobustScaler(**params)
        if scaler_type == 'log':
            log_kwargs = {'base': params.pop('base', None), 'offset': params.pop('offset', 0.0)}
            if params:
                raise ValueError(f"Unexpected parameters for log transform: {sorted(params)}")
            return FunctionTransformer(
                func=log_transform,
                inverse_func=inverse_log_transform,
                kw_args=log_kwargs,
                inv_kw_args=dict(log_kwargs),
                validate=False,
                check_inverse=False,
            )
        if scaler_type == 'l2':
            params.setdefault('norm', 'l2')
            return Normalizer(**params)
        if scaler_type == 'power':
            return PowerTransformer(**params)
    except TypeError as e:
        raise ValueError(f"Invalid parameters for '{scaler_type}' scaler: {e}") from e
    raise ValueError(f"Unsupported scaler_type: '{scaler_type}'. Choose one of {', '.join(SCALER_TYPES)}.")


def scaler_type_of(scaler: ScalerType) -> str:
    """Returns the featscale name of a scaler instance."""
    for name, cls in (
        ('standard', StandardScaler), ('minmax', MinMaxScaler), ('maxabs', MaxAbsScaler),
        ('robust', RobustScaler), ('log', FunctionTransformer), ('l2', Normalizer),
        ('power', PowerTransformer),
    ):
        if isinstance(scaler, cls):
            return name
    raise ValueError(f"Unrecognized scaler instance: {type(scaler).__name__}")


def _ensure_2d(features: ArrayLike) -> NDArray[np.float64]:
    features = np.asarray(features, dtype=np.float64)
    if features.ndim == 1:
        logger.debug("Input features are 1D. Reshaping to (n_samples, 1) for scaling.")
        return features.reshape(-1, 1)
    if features.ndim != 2:
        raise ValueError(f"Input features must be 1D or 2D (samples x features), got shape {features.shape}")
    return features


def _check_fitted(scaler: ScalerType):
    if isinstance(scaler, _STATELESS_SCALERS):
        return
    try:
        check_is_fitted(scaler)
    except NotFittedError as e:
        raise ValueError("Provided `scaler_instance` does not appear to be fitted.") from e

# --- Fitting and Application ---

def apply_scaling(
    features: ArrayLike,
    scaler_type: ScalerName = 'standard',
    scaler_params: Optional[Dict[str, Any]] = None,
    fit: bool = True,
    scaler_instance: Optional[ScalerType] = None
) -> Tuple[NDArray[np.float64], ScalerType]:
    """
    Applies feature scaling to the input feature array.

    Can either fit a new scaler or apply a pre-fitted one.

    Args:
        features: The input feature array. Expected shape: (n_samples, n_features);
                  1D input is treated as a single feature.
        scaler_type: The type of scaler to use (see SCALER_TYPES).
                     Ignored if `scaler_instance` is provided with `fit=False`.
        scaler_params: Optional dictionary of parameters to pass to the scaler constructor
                       (e.g., `{'with_mean': False}` for 'standard').
        fit: If True (default), fit a new scaler to the data before transforming.
             If False, `scaler_instance` must be provided and pre-fitted.
        scaler_instance: Optional pre-fitted scaler instance (e.g., from a previous fit
                         or `load_scaler`).

    Returns:
        A tuple containing:
        - scaled_features (NDArray[np.float64]): The scaled feature array.
        - fitted_scaler (ScalerType): The scaler instance used.

    Raises:
        ValueError: If parameters are invalid (e.g., `fit=False` without `scaler_instance`),
                    the input violates the scaler's domain (e.g., log of negative values),
                    or the feature count differs from the one the scaler was fitted on.
    """
    features = _ensure_2d(features)
    logger.info(f"Applying feature scaling: type={scaler_type if fit else 'provided'}, fit={fit}")

    if fit:
        if scaler_instance is not None:
            logger.warning("`scaler_instance` provided but `fit=True`. Ignoring provided instance and fitting a new scaler.")
        logger.debug(f"Fitting new '{scaler_type}' scaler with params: {scaler_params}")
        current_scaler = create_scaler(scaler_type, scaler_params)
        try:
            scaled_features = current_scaler.fit_transform(features)
        except ValueError as e:
            logger.error(f"Error fitting/transforming with {scaler_type} scaler: {e}")
            raise
    else:
        if scaler_instance is None:
            raise ValueError("`scaler_instance` must be provided when `fit=False`.")
        logger.debug("Applying pre-fitted scaler.")
        current_scaler = scaler_instance
        _check_fitted(current_scaler)
        try:
            scaled_features = current_scaler.transform(features)
        except ValueError as e:
            logger.error(f"Error applying pre-fitted scaler: {e}")
            raise

    return np.asarray(scaled_features, dtype=np.float64), current_scaler


def fit_transform_split(
    train: ArrayLike,
    test: ArrayLike,
    scaler_type: ScalerName = 'standard',
    scaler_params: Optional[Dict[str, Any]] = None
) -> Tuple[NDArray[np.float64], NDArray[np.float64], ScalerType]:
    """
    Fits a scaler on the training split only and applies it to both splits.

    The test split never contributes to the learned statistics, so scaled test
    values can fall outside the range seen during training (e.g., below 0 for
    min-max scaling).

    Returns:
        (train_scaled, test_scaled, fitted_scaler)

    Raises:
        ValueError: If the splits have different numbers of features.
    """
    train_2d = _ensure_2d(train)
    test_2d = _ensure_2d(test)
    if train_2d.shape[1] != test_2d.shape[1]:
        raise ValueError(
            f"Train and test must have the same number of features, got {train_2d.shape[1]} and {test_2d.shape[1]}"
        )
    train_scaled, scaler = apply_scaling(train_2d, scaler_type=scaler_type, scaler_params=scaler_params, fit=True)
    test_scaled, _ = apply_scaling(test_2d, fit=False, scaler_instance=scaler)
    logger.info(f"Fitted '{scaler_type}' scaler on {train_2d.shape[0]} training rows; applied to {test_2d.shape[0]} test rows.")
    return train_scaled, test_scaled, scaler


def inverse_scaling(scaled: ArrayLike, scaler: ScalerType) -> NDArray[np.float64]:
    """
    Maps scaled values back to original units using a fitted scaler.

    Raises:
        ValueError: If the scaler is not fitted or has no inverse (L2 normalization
                    discards each vector's length).
    """
    if isinstance(scaler, Normalizer):
        raise ValueError("L2 normalization is not invertible: the original vector norms are not stored.")
    _check_fitted(scaler)
    restored = scaler.inverse_transform(_ensure_2d(scaled))
    return np.asarray(restored, dtype=np.float64)

# --- Persistence ---

def save_scaler(
    scaler: ScalerType,
    path: Union[str, Path],
    columns: Optional[List[str]] = None,
    metadata: Optional[Dict[str, Any]] = None
) -> Path:
    """
    Saves a fitted scaler, the columns it was fitted on and any extra metadata
    to a joblib file.

    Returns:
        The resolved path written to.
    """
    _check_fitted(scaler)
    fpath = Path(path).resolve()
    fpath.parent.mkdir(parents=True, exist_ok=True)
    bundle = {
        _BUNDLE_MARKER: True,
        'featscale_version': __version__,
        'scaler_type': scaler_type_of(scaler),
        'columns': list(columns) if columns is not None else None,
        'metadata': dict(metadata or {}),
        'scaler': scaler,
    }
    joblib.dump(bundle, fpath)
    logger.info(f"Saved '{bundle['scaler_type']}' scaler to {fpath}")
    return fpath


def load_scaler(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Loads a scaler bundle written by `save_scaler`.

    Returns:
        Dict with keys 'scaler', 'scaler_type', 'columns', 'metadata' and
        'featscale_version'.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not a featscale scaler bundle.
    """
    fpath = Path(path)
    if not fpath.is_file():
        raise FileNotFoundError(f"Scaler file not found: {fpath}")
    try:
        bundle = joblib.load(fpath)
    except (EOFError, OSError, ValueError, KeyError, IndexError, pickle.UnpicklingError) as e:
        raise ValueError(f"Could not load scaler from {fpath}: {e}") from e
    if not isinstance(bundle, dict) or not bundle.get(_BUNDLE_MARKER) or 'scaler' not in bundle:
        raise ValueError(f"File {fpath} is not a featscale scaler bundle.")
    if bundle.get('featscale_version') != __version__:
        logger.warning(
            f"Scaler was saved with featscale {bundle.get('featscale_version')}, running {__version__}."
        )
    logger.debug(f"Loaded '{bundle['scaler_type']}' scaler from {fpath} (columns={bundle.get('columns')})")
    return bundle

# --- Convenience Wrappers ---

def standard_scale(
    features: ArrayLike,
    with_mean: bool = True,
    with_std: bool = True
) -> Tuple[NDArray[np.float64], StandardScaler]:
    """Applies StandardScaler."""
    params = {'with_mean': with_mean, 'with_std': with_std}
    return apply_scaling(features, scaler_type='standard', scaler_params=params)  # type: ignore

def minmax_scale(
    features: ArrayLike,
    feature_range: Tuple[float, float] = (0, 1)
) -> Tuple[NDArray[np.float64], MinMaxScaler]:
    """Applies MinMaxScaler."""
    params = {'feature_range': feature_range}
    return apply_scaling(features, scaler_type='minmax', scaler_params=params)  # type: ignore

def robust_scale(
    features: ArrayLike,
    with_centering: bool = True,
    with_scaling: bool = True,
    quantile_range: Tuple[float, float] = (25.0, 75.0)
) -> Tuple[NDArray[np.float64], RobustScaler]:
    """Applies RobustScaler."""
    params = {'with_centering': with_centering, 'with_scaling': with_scaling, 'quantile_range': quantile_range}
    return apply_scaling(features, scaler_type='robust', scaler_params=params)  # type: ignore
