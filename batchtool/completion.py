"""
Shell completion for filter arguments.

Suggests label names (with the label marker) and repository names from the
currently-known catalog.
"""

from typing import Iterable, List

import click
from click.shell_completion import CompletionItem

from .services import CatalogService


def _label_suggestions(label: str, incomplete: str, service: CatalogService) -> List[str]:
    token = service.markers.label
    if incomplete and (token + label).startswith(incomplete):
        # Input already starts with the marker: keep it in front
        return [token + label]
    if service.markers.clean(incomplete) in label:
        return [label + token]
    return []


def complete_filters(service: CatalogService, incomplete: str, extra: Iterable[str] = ()) -> List[str]:
    """
    Suggestions for a partially typed filter argument.

    Args:
        service: Catalog service holding the labels and repositories
        incomplete: Text typed so far
        extra: Additional fixed suggestions

    Returns:
        Sorted, de-duplicated suggestions
    """
    suggestions = set(extra)

    for label in service.labels:
        suggestions.update(_label_suggestions(label, incomplete, service))

    # Repository names only make sense when no label marker was typed
    if not (service.markers.label and service.markers.label in incomplete):
        cleaned = service.markers.clean(incomplete)
        suggestions.update(name for name in service.catalog if cleaned in name)

    return sorted(suggestions)


def shell_complete_filters(ctx: click.Context, param: click.Parameter, incomplete: str) -> List[CompletionItem]:
    """click ``shell_complete`` callback for filter arguments."""
    from .cli_utils import get_service

    service = get_service(ctx, quiet=True)
    return [CompletionItem(value) for value in complete_filters(service, incomplete)]
