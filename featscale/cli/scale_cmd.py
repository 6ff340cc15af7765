# featscale/cli/scale_cmd.py

"""
CLI commands that fit, apply and invert feature scalers on tabular files.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import click
import numpy as np
import pandas as pd

from featscale.config import FeatscaleConfig, scaler_params_for
from featscale.core.data_handler import read_data, save_data, to_frame, select_numeric_columns
from featscale.core.diagnostics import verify_scaling
from featscale.core.scalers import (
    SCALER_TYPES, apply_scaling, inverse_scaling, save_scaler, load_scaler,
)
from .base_cmd import get_config, handle_command_errors

logger = logging.getLogger(__name__)

# --- Helpers ---

def _build_params(
    base: Dict[str, Any],
    method: str,
    feature_range: Optional[Tuple[float, float]],
    quantile_range: Optional[Tuple[float, float]],
    log_base: Optional[float],
    log_offset: Optional[float],
    power_method: Optional[str],
) -> Dict[str, Any]:
    """
    Overlays CLI options on the configured parameters for `method`.

    Options that belong to another method are ignored with a warning.
    """
    params = dict(base)
    given = {
        '--feature-range': ('minmax', feature_range),
        '--quantile-range': ('robust', quantile_range),
        '--log-base': ('log', log_base),
        '--log-offset': ('log', log_offset),
        '--power-method': ('power', power_method),
    }
    ignored = [opt for opt, (owner, value) in given.items() if value not in (None, ()) and owner != method]
    if ignored:
        logger.warning(f"Ignoring option(s) {', '.join(ignored)}: not used by the '{method}' scaler.")
    if method == 'minmax' and feature_range is not None:
        params['feature_range'] = tuple(feature_range)
    elif method == 'robust' and quantile_range is not None:
        params['quantile_range'] = tuple(quantile_range)
    elif method == 'log':
        if log_base is not None:
            params['base'] = log_base
        if log_offset is not None:
            params['offset'] = log_offset
    elif method == 'power' and power_method is not None:
        params['method'] = power_method
    return params


def _scaled_table(df: pd.DataFrame, columns: List[str], scaled: np.ndarray) -> pd.DataFrame:
    """Returns a copy of `df` with `columns` replaced by the scaled values."""
    result = df.copy()
    for idx, col in enumerate(columns):
        result[col] = scaled[:, idx]
    return result


def _load_table(input_file: Path) -> pd.DataFrame:
    return to_frame(read_data(input_file))


def _resolve_output(output: str, config: FeatscaleConfig) -> Path:
    """Adds the configured default extension to an output path that has none."""
    output_path = Path(output)
    if not output_path.suffix:
        output_path = output_path.with_suffix(f".{config.defaults.default_output_format}")
    return output_path

# --- scale ---

@click.command("scale")
@click.argument("method", type=click.Choice(SCALER_TYPES))
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.option("-o", "--output", type=click.Path(dir_okay=False, resolve_path=True), required=True,
              help="Output file for the scaled table (.csv, .json or .npz).")
@click.option("-c", "--column", "columns", multiple=True,
              help="Column to scale. Can be repeated. Defaults to all numeric columns.")
@click.option("--save-scaler", "scaler_output", type=click.Path(dir_okay=False, resolve_path=True), default=None,
              help="Save the fitted scaler here so it can be applied to other data with 'featscale apply'.")
@click.option("--feature-range", nargs=2, type=float, default=None,
              help="Target range for minmax, e.g. --feature-range -1 1.")
@click.option("--quantile-range", nargs=2, type=float, default=None,
              help="Quantile range for robust scaling, e.g. --quantile-range 10 90.")
@click.option("--log-base", type=float, default=None, help="Logarithm base for log (default: natural log).")
@click.option("--log-offset", type=float, default=None, help="Constant added before the log (1 gives log1p).")
@click.option("--power-method", type=click.Choice(['yeo-johnson', 'box-cox']), default=None,
              help="Power transform variant.")
@click.option("--verify", is_flag=True, default=False,
              help="Check the defining identities of the method on the scaled output.")
@click.pass_context
@handle_command_errors("scaling")
def scale_cmd(
    ctx,
    method: str,
    input_file: str,
    output: str,
    columns: Tuple[str, ...],
    scaler_output: Optional[str],
    feature_range: Optional[Tuple[float, float]],
    quantile_range: Optional[Tuple[float, float]],
    log_base: Optional[float],
    log_offset: Optional[float],
    power_method: Optional[str],
    verify: bool,
):
    """Fit METHOD on INPUT_FILE and write the scaled table."""
    config = get_config(ctx)
    input_path = Path(input_file)
    output_path = _resolve_output(output, config)

    params = _build_params(
        scaler_params_for(config, method), method,
        feature_range, quantile_range, log_base, log_offset, power_method,
    )
    logger.info(f"Scaling '{input_path.name}' with '{method}' (params={params})")

    df = _load_table(input_path)
    selected = select_numeric_columns(df, list(columns))
    values = df[selected].to_numpy(dtype=np.float64)

    scaled, scaler = apply_scaling(values, scaler_type=method, scaler_params=params)
    save_data(_scaled_table(df, selected, scaled), output_path,
              float_precision=config.defaults.float_precision)

    if scaler_output:
        save_scaler_path = save_scaler(
            scaler, scaler_output, columns=selected,
            metadata={'method': method, 'params': params, 'fitted_on': str(input_path)},
        )
        click.echo(f"Saved fitted scaler to '{save_scaler_path}'.")

    click.echo(f"Scaled {len(selected)} column(s) of '{input_path.name}' with '{method}' -> '{output_path.name}'.")

    if verify:
        checks = verify_scaling(
            values, scaled, method,
            atol=config.parameters.verify_tolerance,
            feature_range=tuple(params.get('feature_range', (0.0, 1.0))),
            power_standardized=params.get('standardize', True),
        )
        for name, ok in checks.items():
            click.echo(f"  {'PASS' if ok else 'FAIL'}  {name}")
        if not all(checks.values()):
            click.echo("Warning: some verification checks failed.", err=True)


# --- apply ---

@click.command("apply")
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.option("-s", "--scaler", "scaler_file", type=click.Path(exists=True, dir_okay=False, resolve_path=True),
              required=True, help="Scaler file written by 'featscale scale --save-scaler'.")
@click.option("-o", "--output", type=click.Path(dir_okay=False, resolve_path=True), required=True,
              help="Output file for the scaled table.")
@click.pass_context
@handle_command_errors("scaler application")
def apply_cmd(ctx, input_file: str, scaler_file: str, output: str):
    """Apply a previously fitted scaler to INPUT_FILE without refitting."""
    config = get_config(ctx)
    input_path = Path(input_file)
    output_path = _resolve_output(output, config)

    bundle = load_scaler(scaler_file)
    df = _load_table(input_path)
    selected = select_numeric_columns(df, bundle.get('columns'))
    values = df[selected].to_numpy(dtype=np.float64)

    scaled, _ = apply_scaling(values, fit=False, scaler_instance=bundle['scaler'])
    save_data(_scaled_table(df, selected, scaled), output_path,
              float_precision=config.defaults.float_precision)
    click.echo(f"Applied '{bundle['scaler_type']}' scaler to {len(selected)} column(s) of "
               f"'{input_path.name}' -> '{output_path.name}'.")

# --- inverse ---

@click.command("inverse")
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.option("-s", "--scaler", "scaler_file", type=click.Path(exists=True, dir_okay=False, resolve_path=True),
              required=True, help="Scaler file used to produce INPUT_FILE.")
@click.option("-o", "--output", type=click.Path(dir_okay=False, resolve_path=True), required=True,
              help="Output file for the table in original units.")
@click.pass_context
@handle_command_errors("inverse scaling")
def inverse_cmd(ctx, input_file: str, scaler_file: str, output: str):
    """Map scaled values in INPUT_FILE back to their original units."""
    config = get_config(ctx)
    input_path = Path(input_file)
    output_path = _resolve_output(output, config)

    bundle = load_scaler(scaler_file)
    df = _load_table(input_path)
    selected = select_numeric_columns(df, bundle.get('columns'))
    restored = inverse_scaling(df[selected].to_numpy(dtype=np.float64), bundle['scaler'])
    save_data(_scaled_table(df, selected, restored), output_path,
              float_precision=config.defaults.float_precision)
    click.echo(f"Inverted '{bundle['scaler_type']}' scaling on {len(selected)} column(s) -> '{output_path.name}'.")
