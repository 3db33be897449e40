"""
Domain layer for batch-tool.

Contains pure domain objects with no I/O or side effects:
- Repository: A repository as listed by an SCM provider
- PullRequest: A pull request plus the options used to open/merge it
- FilterToken / Markers: Parsed filter arguments
- Label / LabelGroup: Named repository sets and their set notation
"""

from .repository import Repository, qualify
from .pull_request import PullRequest, PROptions, PRMergeOptions, Capabilities, validate_pr_options
from .filters import FilterToken, Markers, Bucket, evaluate, with_unwanted
from .label import Label, LabelGroup

__all__ = [
    'Repository',
    'qualify',
    'PullRequest',
    'PROptions',
    'PRMergeOptions',
    'Capabilities',
    'validate_pr_options',
    'FilterToken',
    'Markers',
    'Bucket',
    'evaluate',
    'with_unwanted',
    'Label',
    'LabelGroup',
]
