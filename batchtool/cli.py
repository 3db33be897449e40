#!/usr/bin/env python3

import click

from batchtool.config import load_config, configure_logging, get_setting
from batchtool.cli_utils import get_state

from batchtool.commands.labels import labels_cmd
from batchtool.commands.repos import repos_cmd
from batchtool.commands.catalog import catalog_cmd
from batchtool.commands.config import config_cmd


@click.group()
@click.version_option(package_name='batch-tool')
@click.option('--config', 'config_path', type=click.Path(dir_okay=False),
              help='Configuration file (JSON, TOML or YAML)')
@click.option('--flush', is_flag=True, help='Ignore the cached catalog and refetch it')
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, config_path, flush, debug):
    """batch-tool - Select repositories by name and label for batch operations.

    Repository metadata is fetched from the configured SCM provider and
    cached locally. Filters combine repository names and labels:

        ~label   select every repository carrying a label
        !name    skip a repository (or !~label to skip a label)
        +name    force a repository in, even if skipped elsewhere
    """
    state = get_state(ctx)
    state.setdefault('config_path', config_path)
    state['flush'] = flush or state.get('flush', False)

    if state.get('config') is None:
        state['config'] = load_config(config_path)

    config = state['config']
    level = 'DEBUG' if debug else get_setting(config, 'logging.level', 'WARNING')
    configure_logging(level, get_setting(config, 'logging.format', '%(levelname)s: %(message)s'))


cli.add_command(labels_cmd)
cli.add_command(repos_cmd)
cli.add_command(catalog_cmd)
cli.add_command(config_cmd)


def main():
    cli()

if __name__ == "__main__":
    main()
