# featscale/cli/inspect_cmd.py

"""
CLI commands for looking at feature distributions: summary statistics with a
recommended scaler per column, and before/after histograms.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Tuple

import click
import numpy as np
from tabulate import tabulate

from featscale.config import scaler_params_for
from featscale.core.data_handler import read_data, to_frame, select_numeric_columns
from featscale.core.diagnostics import describe_features, recommend_methods
from featscale.core.scalers import SCALER_TYPES, apply_scaling
from featscale.utils.visualizations import plot_scaling_comparison
from .base_cmd import get_config, handle_command_errors

logger = logging.getLogger(__name__)

# Columns shown in the table view; the JSON view carries every statistic
_TABLE_COLUMNS = ["count", "min", "max", "mean", "std", "median", "iqr", "skewness", "n_outliers", "method"]


@click.command("inspect")
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.option("-c", "--column", "columns", multiple=True,
              help="Column to inspect. Can be repeated. Defaults to all numeric columns.")
@click.option("--format", "output_format", type=click.Choice(["table", "json"]), default="table", show_default=True,
              help="Output format.")
@click.pass_context
@handle_command_errors("inspection")
def inspect_cmd(ctx, input_file: str, columns: Tuple[str, ...], output_format: str):
    """Summarize numeric columns of INPUT_FILE and recommend a scaler for each."""
    input_path = Path(input_file)
    df = to_frame(read_data(input_path))
    selected = select_numeric_columns(df, list(columns))

    summary = describe_features(df, selected)
    report = summary.join(recommend_methods(summary))

    if output_format == "json":
        records = {
            col: {key: (None if isinstance(val, float) and np.isnan(val) else val)
                  for key, val in row.items()}
            for col, row in report.to_dict(orient="index").items()
        }
        click.echo(json.dumps(records, indent=2, default=lambda x: x.item() if hasattr(x, "item") else str(x)))
    else:
        click.echo(tabulate(report[_TABLE_COLUMNS], headers="keys", floatfmt=".4g"))
        for col, reason in report["reason"].items():
            click.echo(f"  {col}: {report.at[col, 'method']} ({reason})")


@click.command("plot")
@click.argument("method", type=click.Choice(SCALER_TYPES))
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.option("-o", "--output", type=click.Path(dir_okay=False, resolve_path=True), required=True,
              help="Image file for the comparison plot (e.g., price.png).")
@click.option("-c", "--column", default=None, help="Column to plot. Defaults to the first numeric column.")
@click.option("--bins", type=click.IntRange(min=1), default=30, show_default=True, help="Histogram bins.")
@click.pass_context
@handle_command_errors("plotting")
def plot_cmd(ctx, method: str, input_file: str, output: str, column: Optional[str], bins: int):
    """Plot histograms of one column of INPUT_FILE before and after METHOD."""
    config = get_config(ctx)
    input_path = Path(input_file)
    df = to_frame(read_data(input_path))
    selected = select_numeric_columns(df, [column] if column else None)[0]

    values = df[selected].to_numpy(dtype=np.float64)
    # One column is treated as a single vector for L2
    if method == 'l2':
        scaled, _ = apply_scaling(values.reshape(1, -1), scaler_type='l2')
    else:
        scaled, _ = apply_scaling(values, scaler_type=method, scaler_params=scaler_params_for(config, method))

    saved = plot_scaling_comparison(values, scaled.ravel(), selected, method, output, bins=bins)
    click.echo(f"Saved '{method}' comparison plot for '{selected}' to '{saved.name}'.")
