# featscale/utils/visualizations.py

"""
Plots comparing feature distributions before and after scaling, using Matplotlib.
"""

import logging
from pathlib import Path
from typing import Union

import matplotlib
matplotlib.use("Agg")  # Headless backend; plots are only written to files
import matplotlib.pyplot as plt
import numpy as np
from numpy.typing import ArrayLike

logger = logging.getLogger(__name__)


def plot_scaling_comparison(
    original: ArrayLike,
    scaled: ArrayLike,
    column: str,
    method: str,
    output_file: Union[str, Path],
    bins: int = 30
) -> Path:
    """
    Saves side-by-side histograms of one feature before and after scaling.

    Scaling changes the axis, not the shape, for linear methods (min-max,
    standard, robust); log and power transforms change the shape as well.

    Args:
        original: Feature values before scaling (1D).
        scaled: Feature values after scaling (1D, same length).
        column: Feature name, used in titles.
        method: Scaling method name, used in titles.
        output_file: Image path (e.g., 'price_minmax.png').
        bins: Number of histogram bins.

    Returns:
        The path the figure was saved to.

    Raises:
        ValueError: If either input is empty after dropping NaNs, or bins < 1.
    """
    if bins < 1:
        raise ValueError(f"bins must be >= 1, got {bins}")
    before = np.asarray(original, dtype=np.float64).ravel()
    after = np.asarray(scaled, dtype=np.float64).ravel()
    before = before[~np.isnan(before)]
    after = after[~np.isnan(after)]
    if before.size == 0 or after.size == 0:
        raise ValueError(f"No valid values to plot for column '{column}'.")

    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info(f"Generating scaling comparison plot for '{column}' ({method}): {output_path}")

    fig, (ax_before, ax_after) = plt.subplots(1, 2, figsize=(11, 4))
    try:
        ax_before.hist(before, bins=bins, color="tab:gray", alpha=0.85)
        ax_before.set_title(f"{column}: original")
        ax_before.set_xlabel("value")
        ax_before.set_ylabel("count")

        ax_after.hist(after, bins=bins, color="tab:blue", alpha=0.85)
        ax_after.set_title(f"{column}: {method}")
        ax_after.set_xlabel("scaled value")

        for ax in (ax_before, ax_after):
            ax.grid(True, alpha=0.3, linestyle="--")
        fig.tight_layout()
        fig.savefig(output_path, dpi=150, bbox_inches="tight")
        logger.info(f"Scaling comparison plot saved to {output_path}")
    finally:
        plt.close(fig)
    return output_path
