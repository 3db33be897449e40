"""
Common CLI utilities and decorators for consistent command behavior.
"""

import logging
import sys
import click
from functools import wraps
from typing import Any, Dict

from .config import load_config
from .exceptions import BatchToolError, CatalogError, InvalidConfiguration, UnregisteredProvider
from .exit_codes import (
    INTERRUPTED,
    get_exit_code_for_exception, CommandError, ConfigError
)
from .services import CatalogService

logger = logging.getLogger(__name__)


def get_state(ctx: click.Context) -> Dict[str, Any]:
    """Shared state stored on the root context."""
    root = ctx.find_root()
    if root.obj is None:
        root.obj = {}
    return root.obj


def get_service(ctx: click.Context, quiet: bool = False, initialize: bool = True) -> CatalogService:
    """
    Get the process-wide CatalogService, initializing it on first use.

    Cache and fetch failures are reported and the command continues with
    whatever catalog is available (possibly empty). An unknown provider or
    an unusable setting is a configuration error and aborts the command.
    """
    state = get_state(ctx)
    service = state.get('service')
    if service is not None:
        return service

    config = state.get('config')
    if config is None:
        config = load_config(state.get('config_path'))
        state['config'] = config

    service = CatalogService(config, registry=state.get('registry'))
    state['service'] = service

    if not initialize:
        return service

    try:
        service.initialize(flush=state.get('flush', False))
    except (UnregisteredProvider, InvalidConfiguration) as e:
        if quiet:
            logger.debug(str(e))
            return service
        raise ConfigError(str(e)) from e
    except CatalogError as e:
        if quiet:
            logger.debug(f"Could not load repository metadata: {e}")
        else:
            logger.error(f"Could not load repository metadata: {e}")

    return service


def handle_errors(func):
    """
    Decorator that provides standard CLI error handling:
    - CommandError subclasses exit with their own code
    - batch-tool errors exit with the mapped code
    - Ctrl+C exits with 130
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            click.echo("Interrupted by user", err=True)
            sys.exit(INTERRUPTED)
        except click.ClickException:
            raise
        except (CommandError, BatchToolError) as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(get_exit_code_for_exception(e))

    return wrapper


common_options = {
    'format': click.option('-f', '--format', 'output_format',
                           type=click.Choice(['text', 'table', 'json', 'jsonl', 'csv', 'tsv', 'yaml']),
                           help='Output format (default: text, or from BATCHTOOL_FORMAT env)'),
    'fields': click.option('--fields',
                           help='Comma-separated list of fields to include (for CSV/TSV)'),
    'verbose': click.option('-v', '--verbose', is_flag=True,
                            help='Expand labels referenced in the given filters'),
}


def add_common_options(*option_names):
    """
    Decorator to add common options to a command.

    Example:
        @add_common_options('format', 'fields')
        def my_command(output_format, fields):
            ...
    """
    def decorator(func):
        for name in reversed(option_names):
            if name in common_options:
                func = common_options[name](func)
        return func
    return decorator
