# featscale/config/models.py

"""
Pydantic models for defining the structure and validation of the featscale configuration (featscale.toml).
Uses Pydantic V2 syntax.
"""

from pathlib import Path
from typing import Optional, Tuple, Union, Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator, ConfigDict

# --- Helper Functions ---

def _resolve_path(path: Union[str, Path]) -> Path:
    """Resolves and expands user paths."""
    return Path(path).expanduser().resolve()

# --- Model Definitions ---

class DefaultsConfig(BaseModel):
    """Default processing parameters."""
    default_output_format: Literal['csv', 'json', 'npz'] = Field("csv", description="Format used when an output path has no extension.")
    float_precision: Optional[int] = Field(None, ge=0, le=17, description="Decimal places when writing CSV (None keeps full precision).")

class PathsConfig(BaseModel):
    """Configuration for file paths used by featscale."""
    log_directory: Path = Field(default=Path("./featscale_logs"), description="Directory for log files.")

    @field_validator('log_directory', mode='before')
    @classmethod
    def resolve_paths_before_validation(cls, value: Any) -> Path:
        """Resolves paths before Pydantic validates them."""
        if isinstance(value, (str, Path)):
            return _resolve_path(value)
        return value

class StandardScalerParams(BaseModel):
    """Parameters for standard scaling."""
    with_mean: bool = True
    with_std: bool = True

class MinMaxScalerParams(BaseModel):
    """Parameters for min-max scaling."""
    feature_range: Tuple[float, float] = (0.0, 1.0)
    clip: bool = Field(False, description="Clip transformed values of unseen data to feature_range.")

    @field_validator('feature_range')
    @classmethod
    def check_range(cls, value: Tuple[float, float]) -> Tuple[float, float]:
        if value[0] >= value[1]:
            raise ValueError(f"feature_range minimum must be smaller than maximum, got {value}")
        return value

class RobustScalerParams(BaseModel):
    """Parameters for robust (median/IQR) scaling."""
    with_centering: bool = True
    with_scaling: bool = True
    quantile_range: Tuple[float, float] = (25.0, 75.0)

    @model_validator(mode='after')
    def check_quantiles(self) -> 'RobustScalerParams':
        q_min, q_max = self.quantile_range
        if not 0 <= q_min < q_max <= 100:
            raise ValueError(f"Invalid quantile_range {self.quantile_range}; need 0 <= low < high <= 100")
        return self

class LogTransformParams(BaseModel):
    """Parameters for the log transform."""
    base: Optional[float] = Field(None, gt=0, description="Logarithm base; None means natural log.")
    offset: float = Field(0.0, description="Constant added before taking the log (1.0 gives log1p).")

    @field_validator('base')
    @classmethod
    def check_base(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and value == 1.0:
            raise ValueError("Logarithm base cannot be 1.")
        return value

class PowerTransformParams(BaseModel):
    """Parameters for Box-Cox / Yeo-Johnson power transforms."""
    method: Literal['yeo-johnson', 'box-cox'] = 'yeo-johnson'
    standardize: bool = True

class ScalingParams(BaseModel):
    """Container for different scaling method parameters."""
    standard: StandardScalerParams = Field(default_factory=StandardScalerParams)
    minmax: MinMaxScalerParams = Field(default_factory=MinMaxScalerParams)
    robust: RobustScalerParams = Field(default_factory=RobustScalerParams)
    log: LogTransformParams = Field(default_factory=LogTransformParams)
    power: PowerTransformParams = Field(default_factory=PowerTransformParams)

class ParametersConfig(BaseModel):
    """Centralized parameters for reusable components."""
    scaling: ScalingParams = Field(default_factory=ScalingParams)
    verify_tolerance: float = Field(1e-6, gt=0, description="Absolute tolerance used by --verify checks.")

class LoggingConfig(BaseModel):
    """Logging configuration settings."""
    log_file_enabled: bool = Field(False, description="Enable/disable persistent file logging.")
    log_filename_template: str = Field("featscale_run_{timestamp:%Y%m%d_%H%M%S}.log", description="Naming pattern for log files.")
    log_level_file: str = Field("DEBUG", description="Minimum level for file logs (DEBUG, INFO, WARNING, ERROR, CRITICAL).")
    log_format: str = Field("%(asctime)s [%(levelname)-8s] %(name)-30s - %(message)s (%(filename)s:%(lineno)d)", description="Format string for file log entries.")

    @field_validator('log_level_file')
    @classmethod
    def check_log_level(cls, value: str) -> str:
        """Validate log level strings."""
        allowed_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in allowed_levels:
            raise ValueError(f"Invalid log level '{value}'. Must be one of {allowed_levels}")
        return upper_value

class FeatscaleConfig(BaseModel):
    """Root configuration model for featscale."""
    model_config = ConfigDict(
        extra='ignore',
        validate_assignment=True
    )

    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    parameters: ParametersConfig = Field(default_factory=ParametersConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
