import click
import json

from ..cli_utils import get_state
from ..config import load_config, get_config_path


@click.group("config")
def config_cmd():
    """Configuration inspection commands."""
    pass


@config_cmd.command("show")
@click.option("--pretty", is_flag=True, help="Display as formatted JSON instead of single-line JSON")
@click.pass_context
def show_config(ctx, pretty):
    """Show the current configuration with all merges applied.

    By default, outputs single-line JSON.
    Use --pretty for human-readable formatted output.
    """
    state = get_state(ctx)
    config = state.get('config') or load_config(state.get('config_path'))

    if pretty:
        click.echo(json.dumps(config, indent=2, ensure_ascii=False))
    else:
        click.echo(json.dumps(config, ensure_ascii=False))


@config_cmd.command("path")
@click.pass_context
def show_config_path(ctx):
    """Show the config file path being used."""
    path = get_config_path(get_state(ctx).get('config_path'))
    click.echo(json.dumps({"config_path": str(path) if path else None}))
