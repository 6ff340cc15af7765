# featscale/cli/main.py

"""
Main entry point for the featscale CLI application.
Uses Click for command-line interface handling.
"""

import logging

import click

from featscale.version import __version__
from featscale.config import FeatscaleConfig
from .base_cmd import ConfigGroup, verbose_option, quiet_option, config_option
from .scale_cmd import scale_cmd, apply_cmd, inverse_cmd
from .inspect_cmd import inspect_cmd, plot_cmd

logger = logging.getLogger(__name__)

CONTEXT_SETTINGS = dict(help_option_names=['-h', '--help'])


@click.group(context_settings=CONTEXT_SETTINGS, cls=ConfigGroup)
@click.version_option(__version__, '-V', '--version', package_name='featscale', prog_name='featscale')
@verbose_option
@quiet_option
@config_option
@click.pass_context
def main_cli(ctx, verbose: int, quiet: bool, config_files):
    """
    featscale: feature scaling and normalization for ML preprocessing.

    Fit a scaler on training data with 'scale --save-scaler', then reuse it on
    validation or production data with 'apply' so no statistics leak from
    data the model is evaluated on.

    Configuration is loaded from:
    Defaults -> --config files -> ./featscale.toml -> ~/.config/featscale/featscale.toml -> Env Vars

    Use -v for verbose output, -vv for debug output, -q for quiet mode.
    """
    config: FeatscaleConfig = ctx.obj['config']
    logger.debug(f"featscale CLI group invoked (default output format: {config.defaults.default_output_format}).")


main_cli.add_command(scale_cmd)
main_cli.add_command(apply_cmd)
main_cli.add_command(inverse_cmd)
main_cli.add_command(inspect_cmd)
main_cli.add_command(plot_cmd)

cli = main_cli

if __name__ == "__main__":
    cli()
