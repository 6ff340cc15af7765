# tests/test_config.py

"""
Tests for configuration models and loading.
"""

import pytest
from pathlib import Path
from pydantic import ValidationError

from featscale.config import FeatscaleConfig, load_configuration, scaler_params_for
from featscale.config.loaders import _get_config_from_env, _deep_merge_dicts
from featscale.config.models import MinMaxScalerParams, RobustScalerParams, LogTransformParams


def _load(*files: Path) -> FeatscaleConfig:
    return load_configuration(config_files=list(files), disable_project_config=True, disable_user_config=True)


def test_defaults():
    config = FeatscaleConfig()
    assert config.defaults.default_output_format == "csv"
    assert config.parameters.scaling.minmax.feature_range == (0.0, 1.0)
    assert config.parameters.scaling.power.method == "yeo-johnson"
    assert config.logging.log_file_enabled is False

def test_load_from_file(tmp_path: Path):
    cfg_file = tmp_path / "featscale.toml"
    cfg_file.write_text(
        "[parameters.scaling.minmax]\nfeature_range = [-1.0, 1.0]\n"
        "[parameters.scaling.log]\noffset = 1.0\nbase = 10.0\n"
    )
    config = _load(cfg_file)
    assert config.parameters.scaling.minmax.feature_range == (-1.0, 1.0)
    assert config.parameters.scaling.log.offset == 1.0
    assert config.parameters.scaling.log.base == 10.0

def test_later_files_override_earlier(tmp_path: Path):
    first = tmp_path / "first.toml"
    second = tmp_path / "second.toml"
    first.write_text("[defaults]\ndefault_output_format = 'json'\nfloat_precision = 3\n")
    second.write_text("[defaults]\ndefault_output_format = 'npz'\n")
    config = _load(first, second)
    assert config.defaults.default_output_format == "npz"
    assert config.defaults.float_precision == 3

def test_env_overrides_file(tmp_path: Path, monkeypatch):
    cfg_file = tmp_path / "featscale.toml"
    cfg_file.write_text("[parameters.scaling.log]\noffset = 2.0\n")
    monkeypatch.setenv("FEATSCALE_PARAMETERS__SCALING__LOG__OFFSET", "1")
    monkeypatch.setenv("FEATSCALE_LOGGING__LOG_FILE_ENABLED", "true")
    config = _load(cfg_file)
    assert config.parameters.scaling.log.offset == 1.0
    assert config.logging.log_file_enabled is True

def test_env_parsing():
    env = {
        "FEATSCALE_DEFAULTS__FLOAT_PRECISION": "4",
        "FEATSCALE_PARAMETERS__VERIFY_TOLERANCE": "1e-3",
        "FEATSCALE_DEFAULTS__DEFAULT_OUTPUT_FORMAT": "json",
        "OTHER_VAR": "ignored",
    }
    parsed = _get_config_from_env(env)
    assert parsed == {
        "defaults": {"float_precision": 4, "default_output_format": "json"},
        "parameters": {"verify_tolerance": 1e-3},
    }

def test_deep_merge():
    merged = _deep_merge_dicts({"a": {"x": 1, "y": 2}, "b": 1}, {"a": {"y": 3}})
    assert merged == {"a": {"x": 1, "y": 3}, "b": 1}

def test_invalid_file_falls_back_to_defaults(tmp_path: Path):
    cfg_file = tmp_path / "bad.toml"
    cfg_file.write_text("[parameters.scaling.minmax]\nfeature_range = [1.0, 0.0]\n")
    config = _load(cfg_file)
    assert config.parameters.scaling.minmax.feature_range == (0.0, 1.0)

def test_malformed_toml_is_skipped(tmp_path: Path):
    cfg_file = tmp_path / "broken.toml"
    cfg_file.write_text("[defaults\nfloat_precision = 3\n")
    assert _load(cfg_file) == FeatscaleConfig()

@pytest.mark.parametrize("model, kwargs", [
    (MinMaxScalerParams, {"feature_range": (2.0, 2.0)}),
    (RobustScalerParams, {"quantile_range": (90.0, 10.0)}),
    (LogTransformParams, {"base": 1.0}),
    (LogTransformParams, {"base": -2.0}),
])
def test_param_validation(model, kwargs):
    with pytest.raises(ValidationError):
        model(**kwargs)

def test_log_level_normalized():
    config = FeatscaleConfig(logging={"log_level_file": "info"})
    assert config.logging.log_level_file == "INFO"

def test_scaler_params_for():
    config = FeatscaleConfig()
    assert scaler_params_for(config, "minmax") == {"feature_range": (0.0, 1.0), "clip": False}
    assert scaler_params_for(config, "power") == {"method": "yeo-johnson", "standardize": True}
    assert scaler_params_for(config, "l2") == {}
    assert scaler_params_for(config, "maxabs") == {}
