"""
Catalog management commands for batch-tool.

Refreshes, flushes and inspects the cached repository catalog.
"""

import json

import click

from ..cli_utils import get_service, get_state, handle_errors
from ..completion import shell_complete_filters
from ..config import load_config
from ..exit_codes import CommandError, NO_REPOS_FOUND
from ..infra import CatalogCache, resolve_cache_path
from ..render import render_repository_table


@click.group('catalog')
def catalog_cmd():
    """Manage the cached repository catalog."""
    pass


@catalog_cmd.command('refresh')
@click.pass_context
@handle_errors
def refresh_catalog(ctx):
    """Fetch repositories from the provider and rewrite the cache."""
    service = get_service(ctx, initialize=False)
    service.refresh()

    click.echo(f"Fetched {len(service.catalog)} repositories into {service.cache.path}")


@catalog_cmd.command('flush')
@click.pass_context
@handle_errors
def flush_catalog(ctx):
    """Delete the cached catalog so the next command refetches."""
    state = get_state(ctx)
    config = state.get('config') or load_config(state.get('config_path'))
    cache = CatalogCache.from_config(config)
    cache.flush()
    click.echo(f"Removed {cache.path}")


@catalog_cmd.command('path')
@click.pass_context
def cache_path(ctx):
    """Print the resolved cache file path."""
    state = get_state(ctx)
    config = state.get('config') or load_config(state.get('config_path'))
    click.echo(str(resolve_cache_path(config)))


@catalog_cmd.command('show')
@click.argument('name', shell_complete=shell_complete_filters)
@click.option('--json', 'as_json', is_flag=True, help='Output as JSON')
@click.pass_context
@handle_errors
def show_repository(ctx, name, as_json):
    """Show the catalog entry for a repository (qualified or bare name)."""
    service = get_service(ctx)
    repo = service.get_repository(name)
    if repo is None:
        raise CommandError(f"Repository {name} is not in the catalog", NO_REPOS_FOUND)

    if as_json:
        click.echo(json.dumps({'key': repo.qualified_name, **repo.to_dict()}, ensure_ascii=False))
    else:
        render_repository_table([repo])
