"""
Labels command for batch-tool.

Inspects repository labels and shows which repositories a filter selects.
"""

import click

from ..cli_utils import get_service, handle_errors, add_common_options
from ..completion import shell_complete_filters
from ..render import print_labels, print_set, console


@click.command('labels')
@click.argument('filters', nargs=-1, shell_complete=shell_complete_filters)
@add_common_options('verbose')
@click.pass_context
@handle_errors
def labels_cmd(ctx, filters, verbose):
    """
    Inspect repository labels and test filters.

    With no arguments, every label is listed with its repositories.
    Otherwise the filters are shown in set notation together with the
    repositories they match.

    Examples:

        batch-tool labels

        batch-tool labels ~frontend !mobile-app +deprecated-app

        batch-tool labels -v ~backend
    """
    service = get_service(ctx)

    if filters:
        print_set(service, filters, verbose=verbose)
    else:
        console.print("Available labels:", markup=False, highlight=False)
        print_labels(service)
