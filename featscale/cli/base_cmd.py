# featscale/cli/base_cmd.py

"""
Base setup for CLI commands: configuration loading, logging initialization
and the error translation shared by all commands.
"""

import functools
import logging
import sys
from pathlib import Path

import click

from featscale.config import load_configuration, FeatscaleConfig
from featscale.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


class ConfigGroup(click.Group):
    """
    A custom Click Group that loads configuration and sets up logging before
    invoking the group or its subcommands. Passes the config via the context
    object (ctx.obj['config']).
    """
    def invoke(self, ctx: click.Context):
        """
        Sets up config and logging, then dispatches. Setup failures exit with
        code 1; exceptions raised by commands propagate to Click.
        """
        if ctx.obj is None:
            ctx.obj = {}

        try:
            if 'config' not in ctx.obj:
                config_files = [Path(p) for p in ctx.params.get('config_files') or ()]
                config = load_configuration(config_files=config_files)
                ctx.obj['config'] = config

                verbosity = -1 if ctx.params.get('quiet') else ctx.params.get('verbose', 0)
                setup_logging(config, verbosity)
                logger.debug("Logging setup complete in ConfigGroup.")
            else:
                logger.debug("Configuration already loaded in context.")
        except click.exceptions.Exit:
            raise
        except Exception as e:
            error_logger = logging.getLogger("featscale.error")
            error_logger.critical(f"Critical error during CLI setup: {e!r}", exc_info=True)
            # Logging may not be usable yet
            print(f"CRITICAL SETUP ERROR: {e!r}", file=sys.stderr)
            ctx.exit(1)

        return super().invoke(ctx)


def get_config(ctx: click.Context) -> FeatscaleConfig:
    """Returns the config stored on the context, loading defaults if a command runs standalone."""
    obj = ctx.find_object(dict)
    if obj is None or 'config' not in obj:
        logger.debug("No configuration in context; using defaults.")
        return FeatscaleConfig()
    return obj['config']


def handle_command_errors(action: str):
    """
    Decorator translating core exceptions into Click errors.

    FileNotFoundError and ValueError become usage errors (exit code 2);
    anything else is logged with its traceback and aborts (exit code 1).
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except click.ClickException:
                raise
            except click.exceptions.Exit:
                raise
            except FileNotFoundError as e:
                raise click.UsageError(f"File not found during {action}: {e}")
            except ValueError as e:
                raise click.UsageError(f"Error during {action}: {e}")
            except Exception as e:
                logger.error(f"An unexpected error occurred during {action}: {e}", exc_info=True)
                click.echo(f"Error: unexpected failure during {action}: {e}", err=True)
                raise click.Abort()
        return wrapper
    return decorator


# --- Common CLI Options ---
verbose_option = click.option(
    '-v', '--verbose',
    count=True,
    help="Increase verbosity level (-v for INFO, -vv for DEBUG)."
)
quiet_option = click.option(
    '-q', '--quiet',
    is_flag=True,
    default=False,
    help="Suppress all console output except critical errors."
)
config_option = click.option(
    '--config', 'config_files',
    multiple=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Extra TOML config file(s), applied below project/user config and env vars. Can be repeated."
)
