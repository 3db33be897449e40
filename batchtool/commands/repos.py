"""
Repos command for batch-tool.

Prints the repositories selected by a filter expression.
"""

import click

from ..cli_utils import get_service, handle_errors, add_common_options
from ..completion import shell_complete_filters
from ..exit_codes import NoReposFoundError
from ..format_utils import format_output, get_format_from_env
from ..render import render_repository_table


def selection_records(service, names):
    """Catalog metadata for each selected name; unknown names carry only the key."""
    for name in names:
        repo = service.get_repository(name)
        record = {'key': name}
        if repo is not None:
            record.update(repo.to_dict())
        yield record


@click.command('repos')
@click.argument('filters', nargs=-1, required=True, shell_complete=shell_complete_filters)
@add_common_options('format', 'fields')
@click.pass_context
@handle_errors
def repos_cmd(ctx, filters, output_format, fields):
    """
    List the repositories selected by FILTERS.

    Filters are repository names or labels, optionally marked:
    ~label selects a label, !name skips, +name forces inclusion.

    Examples:

        batch-tool repos ~all

        batch-tool repos ~frontend !mobile-app --format json
    """
    service = get_service(ctx)
    names = service.select(filters)

    if not names:
        raise NoReposFoundError("No repositories match the given filters")

    output_format = output_format or get_format_from_env('text')

    if output_format == 'text':
        for name in names:
            click.echo(name)
    elif output_format == 'table':
        known = [repo for repo in map(service.get_repository, names) if repo is not None]
        render_repository_table(known, title=f"Selected repositories ({len(names)})")
    else:
        field_list = fields.split(',') if fields else None
        for line in format_output(selection_records(service, names), output_format, field_list):
            click.echo(line)
